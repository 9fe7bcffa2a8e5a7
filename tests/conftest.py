"""
Pytest configuration and fixtures.
"""

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.services.coordinate_validator import CoordinateValidator
from app.services.report_service import ReportService, get_report_service
from app.services.report_store import InMemoryReportStore
from app.services.ward_resolver import WardResolver, build_ward_map


def square(west, south, east, north):
    return [[[west, south], [east, south], [east, north], [west, north], [west, south]]]


SAMPLE_GEOJSON = {
    "type": "FeatureCollection",
    "features": [
        {
            "type": "Feature",
            "properties": {"Name": "12"},
            "geometry": {"type": "Polygon", "coordinates": square(80.20, 13.08, 80.22, 13.10)},
        },
        {
            "type": "Feature",
            "properties": {"Name": "13"},
            "geometry": {"type": "Polygon", "coordinates": square(80.26, 13.06, 80.28, 13.09)},
        },
        {
            "type": "Feature",
            "properties": {"Name": "40"},
            "geometry": {"type": "Polygon", "coordinates": square(80.23, 13.00, 80.25, 13.02)},
        },
    ],
}

SAMPLE_WARD_NAMES = {
    "12": "Zone 4 - Anna Nagar",
    "13": "Zone 9 - Teynampet",
    "14": "Zone 9 - Teynampet",
}

# Inside ward 12 / ward 13 / unmapped ward 40 / no ward, all within city limits
ANNA_NAGAR_POINT = (13.09, 80.21)
TEYNAMPET_POINT = (13.0827, 80.2707)
UNMAPPED_WARD_POINT = (13.01, 80.24)
NO_WARD_POINT = (12.90, 80.15)


@pytest.fixture
def ward_map():
    return build_ward_map(SAMPLE_GEOJSON, SAMPLE_WARD_NAMES)


@pytest.fixture
def store():
    return InMemoryReportStore()


@pytest.fixture
def report_service(store, ward_map):
    return ReportService(
        store=store,
        ward_resolver=WardResolver(ward_map),
        coordinate_validator=CoordinateValidator(),
    )


@pytest.fixture
def client(report_service):
    app.dependency_overrides[get_report_service] = lambda: report_service
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def sample_report_payload():
    latitude, longitude = ANNA_NAGAR_POINT
    return {
        "title": "Pothole near bus stop",
        "issue_type": "roads",
        "description": "Deep pothole on the left lane.",
        "latitude": latitude,
        "longitude": longitude,
        "image_url": "https://example.com/pothole.jpg",
        "user_id": "citizen-42",
    }
