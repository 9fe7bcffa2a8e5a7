"""
Pydantic base models for API responses.

Every endpoint answers with the same envelope:
    {"success": bool, "message": optional str, ...payload}
"""

from pydantic import BaseModel
from typing import Optional


class BaseResponse(BaseModel):
    """
    Base response model for API responses.
    All API responses extend this for consistency.
    """
    success: bool = True
    message: Optional[str] = None


class HealthResponse(BaseResponse):
    timestamp: str
    version: str
