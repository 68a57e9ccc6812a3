"""
FUJIALIGN Test Fixtures Package.

Provides mock implementations of external collaborators for testing.

Available fixtures:
- MockProvider: Scripted celestial position provider
- UnloadableProvider: Provider whose ephemeris never loads

Usage:
    from tests.fixtures import MockProvider

    def test_scan():
        provider = MockProvider(transit_instant=noon_utc)
        provider.set_position(CelestialBody.SUN, instant, 125.03, 1.5)
"""

from tests.fixtures.mock_provider import (
    BELOW_HORIZON,
    MockProvider,
    UnloadableProvider,
)

__all__ = [
    "BELOW_HORIZON",
    "MockProvider",
    "UnloadableProvider",
]
