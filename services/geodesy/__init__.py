"""
FUJIALIGN Geodesy Service

Great-circle geometry between observation sites and the target summit.
"""

from .geodesic import (
    EARTH_RADIUS_M,
    angular_difference,
    bearing,
    compute_site_geometry,
    distance,
    elevation_angle,
    ensure_site_geometry,
)

__all__ = [
    "EARTH_RADIUS_M",
    "angular_difference",
    "bearing",
    "compute_site_geometry",
    "distance",
    "elevation_angle",
    "ensure_site_geometry",
]
