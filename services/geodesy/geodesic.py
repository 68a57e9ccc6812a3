"""
FUJIALIGN Geodesic Calculator

Spherical-earth geometry between two geographic points:
- Forward azimuth (initial great-circle bearing)
- Great-circle distance (haversine)
- Apparent elevation angle of a distant point, corrected for Earth
  curvature and terrestrial refraction
- Shortest angular difference between two azimuths

All functions are pure.
"""

import logging
import math
from typing import Optional

from fujialign.types import (
    FUJI_SUMMIT,
    GeoCoordinate,
    ObservationSite,
    TargetSummit,
)

logger = logging.getLogger("fujialign.services.geodesy")

EARTH_RADIUS_M = 6_371_000.0
DEFAULT_EYE_HEIGHT_M = 1.7
# Fraction of the curvature drop cancelled by terrestrial refraction
DEFAULT_REFRACTION_COEFFICIENT = 0.13


def bearing(origin: GeoCoordinate, target: GeoCoordinate) -> float:
    """Initial bearing from origin to target.

    Args:
        origin: Starting point
        target: Destination point

    Returns:
        Degrees clockwise from true north, in [0, 360)
    """
    lat1 = math.radians(origin.latitude)
    lat2 = math.radians(target.latitude)
    delta_lon = math.radians(target.longitude - origin.longitude)

    y = math.sin(delta_lon) * math.cos(lat2)
    x = (
        math.cos(lat1) * math.sin(lat2)
        - math.sin(lat1) * math.cos(lat2) * math.cos(delta_lon)
    )
    return math.degrees(math.atan2(y, x)) % 360.0


def distance(origin: GeoCoordinate, target: GeoCoordinate) -> float:
    """Great-circle distance in meters (haversine formula)."""
    lat1 = math.radians(origin.latitude)
    lat2 = math.radians(target.latitude)
    dlat = lat2 - lat1
    dlon = math.radians(target.longitude - origin.longitude)

    a = (
        math.sin(dlat / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_M * c


def elevation_angle(
    origin: GeoCoordinate,
    target: GeoCoordinate,
    eye_height_m: float = DEFAULT_EYE_HEIGHT_M,
    refraction_coefficient: float = DEFAULT_REFRACTION_COEFFICIENT,
) -> float:
    """Apparent elevation angle of target as seen from origin.

    The target's height above the observer's eye is reduced by the
    curvature drop d^2 / 2R, minus the part of that drop that refraction
    lifts back. Negative results mean the target sits below the apparent
    horizontal; they are not clamped.

    Args:
        origin: Observer ground position (elevation_m is ground level)
        target: Observed point (elevation_m is the summit height)
        eye_height_m: Observer eye height above the ground
        refraction_coefficient: Fraction of curvature drop cancelled by refraction

    Returns:
        Elevation angle in degrees
    """
    dist = distance(origin, target)

    observer_height = origin.elevation_m + eye_height_m
    height_diff = target.elevation_m - observer_height

    curvature_drop = dist ** 2 / (2 * EARTH_RADIUS_M)
    refraction_lift = refraction_coefficient * curvature_drop
    net_drop = curvature_drop - refraction_lift
    apparent_vertical = height_diff - net_drop

    angle = math.degrees(math.atan2(apparent_vertical, dist))

    logger.debug(
        "Elevation angle: distance=%.0fm height_diff=%.1fm curvature=%.3fm "
        "refraction=%.3fm net_drop=%.3fm -> %.4f°",
        dist, height_diff, curvature_drop, refraction_lift, net_drop, angle,
    )
    return angle


def angular_difference(a: float, b: float) -> float:
    """Shortest angle between two azimuths, in [0, 180]. Symmetric."""
    diff = abs(a - b) % 360.0
    return min(diff, 360.0 - diff)


def compute_site_geometry(
    site_id: str,
    coordinate: GeoCoordinate,
    name: str = "",
    target: Optional[TargetSummit] = None,
) -> ObservationSite:
    """Build an ObservationSite with its bearing, elevation and distance to target.

    Args:
        site_id: Site identifier
        coordinate: Site position
        name: Display name
        target: Summit to aim at (defaults to Mount Fuji)

    Returns:
        ObservationSite with all precomputed fields populated
    """
    coordinate.validate(site_id=site_id)
    summit = (target or FUJI_SUMMIT).coordinate
    return ObservationSite(
        id=site_id,
        coordinate=coordinate,
        name=name,
        azimuth_to_target=bearing(coordinate, summit),
        elevation_to_target=elevation_angle(coordinate, summit),
        distance_to_target_m=distance(coordinate, summit),
    )


def ensure_site_geometry(
    site: ObservationSite, target: Optional[TargetSummit] = None
) -> ObservationSite:
    """Return the site unchanged if its geometry is present, else recompute it."""
    if site.has_geometry:
        return site
    logger.debug("Recomputing target geometry for site %s", site.id)
    return compute_site_geometry(site.id, site.coordinate, site.name, target)
