"""
FUJIALIGN Services Package

Service modules of the alignment engine, organized by function.

Geometry
--------
- services.geodesy: Bearing, great-circle distance and refraction-corrected
  elevation angle between two points; site geometry toward the summit

Ephemeris
---------
- services.ephemeris: Sun and Moon topocentric positions and meridian
  transits (Skyfield)

Alignment
---------
- services.alignment: Search windows and feasibility gates, the
  alignment search engine, accuracy/quality scoring, and the
  multi-site batch calculator

Usage:

    from services.alignment import AlignmentSearchEngine
    from services.ephemeris import SkyfieldProvider
    from services.geodesy import compute_site_geometry

    site = compute_site_geometry("maihama", GeoCoordinate(35.6325, 139.8833, 3.0))
    engine = AlignmentSearchEngine(SkyfieldProvider())
    events = engine.find_diamond(site, date(2025, 2, 18))
"""

__version__ = "0.1.0"
