"""
Core settings and environment variables for the Chennai Civic Network API.
Uses pydantic-settings for type-safe environment variable loading.
"""

from pathlib import Path
from pydantic_settings import BaseSettings
from typing import Optional


# Bundled ward boundary data lives next to the app package
DATA_DIR = Path(__file__).resolve().parents[2] / "data"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Create a .env file in the root directory to configure these.
    """
    
    # Application
    APP_NAME: str = "Chennai Civic Network API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    
    # CORS - comma-separated origins, "*" allows any frontend
    CORS_ORIGINS: str = "*"
    
    # Firebase/Firestore
    FIREBASE_PROJECT_ID: Optional[str] = None
    FIREBASE_CREDENTIALS_PATH: Optional[str] = None  # Path to service account JSON
    REPORTS_COLLECTION: str = "reports"
    
    # In-memory store for local development without Firebase credentials
    USE_MOCK_DB: bool = False
    
    # Ward boundaries (GeoJSON FeatureCollection) and ward -> department table
    WARD_GEOJSON_PATH: str = str(DATA_DIR / "wards.geojson")
    WARD_ZONES_PATH: str = str(DATA_DIR / "ward_zones.json")
    
    # Serviceable area (Chennai city limits)
    SERVICE_AREA_NORTH: float = 13.2544
    SERVICE_AREA_SOUTH: float = 12.8345
    SERVICE_AREA_EAST: float = 80.3474
    SERVICE_AREA_WEST: float = 80.0955
    
    # Listing
    DEFAULT_LIST_LIMIT: int = 50
    DEFAULT_WARD_LIST_LIMIT: int = 100
    MAX_TEXT_LENGTH: int = 500
    
    # Bearer token verification (tokens are issued elsewhere)
    JWT_SECRET: str = "change-me-in-production"
    JWT_ALGORITHM: str = "HS256"
    
    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "allow"


# Global settings instance
settings = Settings()
