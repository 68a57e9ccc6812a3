"""
FUJIALIGN - Diamond and Pearl Fuji Alignment Engine

Finds the instants at which the Sun ("Diamond") or Moon ("Pearl") sits on
a mountain summit as seen from a photography site, with accuracy and
quality ratings for shoot planning.

Architecture:
    - fujialign: shared types, configuration, exceptions, logging, CLI
    - services.geodesy: site-to-summit geometry
    - services.ephemeris: Sun/Moon positions (Skyfield)
    - services.alignment: search windows, alignment engine, scoring, batches
"""

__version__ = "0.1.0"

# Version tuple for programmatic comparison
VERSION_INFO = (0, 1, 0)

# Core exceptions (import base class for convenience)
from fujialign.exceptions import FujiAlignError

# Core types (import commonly used types for convenience)
from fujialign.types import (
    FUJI_SUMMIT,
    Accuracy,
    CelestialBody,
    EventPhase,
    EventType,
    FujiEvent,
    GeoCoordinate,
    ObservationSite,
    SubType,
)

__all__ = [
    "__version__",
    "VERSION_INFO",
    "FujiAlignError",
    "FUJI_SUMMIT",
    "Accuracy",
    "CelestialBody",
    "EventPhase",
    "EventType",
    "FujiEvent",
    "GeoCoordinate",
    "ObservationSite",
    "SubType",
]
