"""
Coordinate validation against the serviceable bounding box.
"""

from dataclasses import dataclass

from app.core.settings import Settings


@dataclass(frozen=True)
class BoundingBox:
    """Rectangular lat/lng region considered serviceable (edges inclusive)."""
    north: float
    south: float
    east: float
    west: float

    @classmethod
    def from_settings(cls, settings: Settings) -> "BoundingBox":
        return cls(
            north=settings.SERVICE_AREA_NORTH,
            south=settings.SERVICE_AREA_SOUTH,
            east=settings.SERVICE_AREA_EAST,
            west=settings.SERVICE_AREA_WEST,
        )


CHENNAI_BOUNDS = BoundingBox(north=13.2544, south=12.8345, east=80.3474, west=80.0955)


class CoordinateValidator:
    """Rejects coordinates outside the service area."""

    def __init__(self, bounds: BoundingBox = CHENNAI_BOUNDS):
        self.bounds = bounds

    def validate(self, latitude: float, longitude: float) -> bool:
        b = self.bounds
        return b.south <= latitude <= b.north and b.west <= longitude <= b.east
