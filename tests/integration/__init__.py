"""
FUJIALIGN Integration Tests

Integration tests that run the Skyfield provider and the alignment engine
against a real JPL ephemeris.

Setup:
    The first run downloads de421.bsp. Point FUJIALIGN_EPHEMERIS_DIR at a
    directory that already holds it to skip the download.

Running:
    FUJIALIGN_EPHEMERIS_TESTS=1 pytest tests/integration/ -v

Markers:
    @pytest.mark.ephemeris  - Tests requiring the JPL kernel
"""
