"""
Ward resolution - maps a reported coordinate to the responsible department.

Ward boundaries come from a GeoJSON FeatureCollection whose features carry
the ward number in the "Name" property. A separate JSON table maps ward
numbers to department (zone) names. Both are loaded once at startup and
never mutated afterwards, so a single WardResolver is shared by all requests.

OVERLAP POLICY:
- Polygons are tested in the order they appear in the feature collection
- The first polygon containing the point wins
- Overlapping boundaries are therefore resolved by file order
"""

import json
import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

from shapely.geometry import MultiPolygon, Point, Polygon
from shapely.geometry.base import BaseGeometry
from shapely.prepared import PreparedGeometry, prep

logger = logging.getLogger(__name__)

UNASSIGNED = "Unassigned"


@dataclass(frozen=True)
class WardPolygon:
    """
    A named ward region.

    Only outer rings are kept; holes are ignored. Points on the boundary
    count as inside.
    """
    ward_id: str
    geometry: BaseGeometry
    _prepared: PreparedGeometry = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "_prepared", prep(self.geometry))

    def contains(self, latitude: float, longitude: float) -> bool:
        # GeoJSON axis order: x = longitude, y = latitude
        return self._prepared.covers(Point(longitude, latitude))


@dataclass(frozen=True)
class WardMap:
    """Immutable ward polygons plus the ward number -> department table."""
    polygons: Tuple[WardPolygon, ...]
    ward_names: Mapping[str, str]

    def departments(self) -> List[str]:
        """Distinct department names, sorted."""
        return sorted(set(self.ward_names.values()))


def _outer_polygon(ring: List[Any]) -> Polygon:
    vertices = []
    for vertex in ring:
        x, y = vertex[0], vertex[1]
        vertices.append((float(x), float(y)))
    return Polygon(vertices)


def outer_geometry(geometry: Dict) -> Optional[BaseGeometry]:
    """
    Build a shapely geometry from the outer ring(s) of a GeoJSON geometry.

    Returns None for non-polygonal or empty geometries. Malformed vertices
    raise TypeError, ValueError or IndexError.
    """
    geometry_type = geometry.get("type")
    coordinates = geometry.get("coordinates") or []

    if geometry_type == "Polygon":
        members = [coordinates]
    elif geometry_type == "MultiPolygon":
        members = coordinates
    else:
        return None

    polygons = [_outer_polygon(member[0]) for member in members if member and member[0]]
    if not polygons:
        return None
    if len(polygons) == 1:
        return polygons[0]
    return MultiPolygon(polygons)


def build_ward_map(geojson: Dict, ward_names: Dict[str, str]) -> WardMap:
    """
    Build a WardMap from an already-parsed FeatureCollection and name table.

    Features without a ward number or without a usable ring are skipped.
    """
    polygons = []
    for index, feature in enumerate(geojson.get("features", [])):
        properties = feature.get("properties") or {}
        name = properties.get("Name")
        if name is None or not str(name).strip():
            logger.warning(f"Skipping ward feature #{index}: missing 'Name' property")
            continue

        try:
            geometry = outer_geometry(feature.get("geometry") or {})
        except (TypeError, ValueError, IndexError) as e:
            logger.warning(f"Skipping ward feature '{name}': malformed ring ({e})")
            continue

        if geometry is None or geometry.is_empty:
            logger.warning(f"Skipping ward feature '{name}': no polygon ring")
            continue

        polygons.append(WardPolygon(ward_id=str(name).strip(), geometry=geometry))

    names = {str(k).strip(): v for k, v in ward_names.items()}
    return WardMap(polygons=tuple(polygons), ward_names=MappingProxyType(names))


def load_ward_map(geojson_path: str, zones_path: str) -> WardMap:
    """Load ward polygons and the ward -> department table from disk."""
    with open(geojson_path, "r", encoding="utf-8") as f:
        geojson = json.load(f)
    with open(zones_path, "r", encoding="utf-8") as f:
        ward_names = json.load(f)

    ward_map = build_ward_map(geojson, ward_names)
    logger.info(
        f"Loaded {len(ward_map.polygons)} ward polygons and "
        f"{len(ward_map.ward_names)} ward-zone mappings"
    )
    return ward_map


class WardResolver:
    """
    Point-in-polygon matcher over the ward map.

    Linear in the number of wards per call. It runs once per report
    creation, never per query.
    """

    def __init__(self, ward_map: WardMap):
        self.ward_map = ward_map

    def resolve(self, latitude: float, longitude: float) -> str:
        """
        Return the department responsible for the point.
        
        Falls back to "Ward <id>" when the ward has no department mapping
        and to "Unassigned" when no polygon contains the point.
        """
        for polygon in self.ward_map.polygons:
            if polygon.contains(latitude, longitude):
                return self.ward_map.ward_names.get(polygon.ward_id) or f"Ward {polygon.ward_id}"
        return UNASSIGNED
