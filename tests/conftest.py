"""
Pytest Fixtures for FUJIALIGN Testing.

Shared sites, dates and a scripted provider for unit and integration tests.
All dates are Asia/Tokyo civil dates; instants are UTC.
"""

from datetime import date, datetime, timezone

import pytest

from fujialign.types import GeoCoordinate, ObservationSite
from services.alignment import AlignmentSearchEngine
from tests.fixtures import MockProvider

# 2025-02-18 JST: sunrise window 2025-02-17T19:00Z - 23:00Z
SEARCH_DAY = date(2025, 2, 18)
SOLAR_TRANSIT = datetime(2025, 2, 18, 2, 40, tzinfo=timezone.utc)


def utc(*args: int) -> datetime:
    """Build an aware UTC datetime."""
    return datetime(*args, tzinfo=timezone.utc)


@pytest.fixture
def east_site() -> ObservationSite:
    """Site that sees the summit to the east-southeast (sunrise side)."""
    return ObservationSite(
        id="tanukiko",
        coordinate=GeoCoordinate(35.3336, 138.5719, 650.0),
        name="Lake Tanuki",
        azimuth_to_target=125.0,
        elevation_to_target=1.5,
        distance_to_target_m=100_000.0,
    )


@pytest.fixture
def west_site() -> ObservationSite:
    """Site that sees the summit to the west (sunset side)."""
    return ObservationSite(
        id="maihama",
        coordinate=GeoCoordinate(35.6325, 139.8833, 3.0),
        azimuth_to_target=250.0,
        elevation_to_target=4.0,
        distance_to_target_m=15_000.0,
    )


@pytest.fixture
def south_site() -> ObservationSite:
    """Site whose summit bearing is outside both sun bands."""
    return ObservationSite(
        id="southface",
        coordinate=GeoCoordinate(35.6, 138.8, 900.0),
        azimuth_to_target=200.0,
        elevation_to_target=3.0,
        distance_to_target_m=30_000.0,
    )


@pytest.fixture
def mock_provider() -> MockProvider:
    """Provider whose transit lookup always returns SOLAR_TRANSIT."""
    return MockProvider(transit_instant=SOLAR_TRANSIT)


@pytest.fixture
def engine(mock_provider: MockProvider) -> AlignmentSearchEngine:
    """Engine with default configuration over the mock provider."""
    return AlignmentSearchEngine(mock_provider)
