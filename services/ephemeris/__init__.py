"""
FUJIALIGN Ephemeris Service

Provides Sun and Moon positions using the Skyfield library.
"""

from .skyfield_service import (
    SkyfieldProvider,
    get_provider,
)

__all__ = [
    "SkyfieldProvider",
    "get_provider",
]
