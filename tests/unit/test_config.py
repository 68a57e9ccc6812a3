"""
Unit tests for FUJIALIGN configuration system.

Tests configuration loading, validation, and environment variable overrides.
"""

import os
import tempfile
from pathlib import Path

from pydantic import ValidationError
import pytest
import yaml

from fujialign.config import (
    CalendarConfig,
    EphemerisConfig,
    FujiAlignConfig,
    SearchConfig,
    TargetConfig,
    WindowConfig,
    get_config_paths,
    load_config,
)
from fujialign.exceptions import ConfigurationError


@pytest.fixture(autouse=True)
def isolated_cwd(monkeypatch, tmp_path):
    """Keep auto-discovery away from any fujialign.yaml in the repo or home."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(
        "fujialign.config.get_config_paths", lambda: [tmp_path / "fujialign.yaml"]
    )


class TestTargetConfig:
    """Tests for TargetConfig model."""

    def test_default_values(self) -> None:
        """Test TargetConfig defaults to the Fuji summit."""
        config = TargetConfig()
        assert config.name == "Mount Fuji"
        assert config.latitude == 35.3628
        assert config.longitude == 138.730781
        assert config.elevation_m == 3776.0

    def test_latitude_range(self) -> None:
        """Test latitude validation (-90 to 90)."""
        TargetConfig(latitude=90.0)
        TargetConfig(latitude=-90.0)
        with pytest.raises(ValueError):
            TargetConfig(latitude=91.0)

    def test_longitude_range(self) -> None:
        """Test longitude validation (-180 to 180)."""
        TargetConfig(longitude=180.0)
        with pytest.raises(ValueError):
            TargetConfig(longitude=-180.5)

    def test_to_summit(self) -> None:
        """Test conversion to a TargetSummit."""
        summit = TargetConfig(name="Tsukuba", latitude=36.2, longitude=140.1,
                              elevation_m=877.0).to_summit()
        assert summit.name == "Tsukuba"
        assert summit.coordinate.latitude == 36.2
        assert summit.elevation_m == 877.0


class TestSearchConfig:
    """Tests for SearchConfig model."""

    def test_default_values(self) -> None:
        """Test SearchConfig carries the standard tolerances."""
        config = SearchConfig()
        assert config.azimuth_tolerance_deg == 0.05
        assert config.elevation_tolerance_deg == 1.0
        assert config.search_interval_seconds == 10.0
        assert config.min_visibility_altitude_deg == -2.0
        assert config.moon_min_illumination == 0.1
        assert config.illumination_gate == "after_selection"

    def test_immutable(self) -> None:
        """Test configuration cannot be changed after construction."""
        config = SearchConfig()
        with pytest.raises(ValidationError):
            config.azimuth_tolerance_deg = 1.0  # type: ignore[misc]

    @pytest.mark.parametrize("kwargs", [
        {"azimuth_tolerance_deg": 0.0},
        {"elevation_tolerance_deg": -1.0},
        {"search_interval_seconds": 0.0},
        {"min_visibility_altitude_deg": -91.0},
        {"moon_min_illumination": 1.5},
        {"illumination_gate": "sometimes"},
    ])
    def test_invalid_values(self, kwargs) -> None:
        """Test out-of-range values raise ValueError."""
        with pytest.raises(ValueError):
            SearchConfig(**kwargs)


class TestWindowConfig:
    """Tests for WindowConfig model."""

    def test_default_values(self) -> None:
        """Test default clock windows and bearing bands."""
        config = WindowConfig()
        assert (config.sunrise_start_hour, config.sunrise_end_hour) == (4.0, 8.0)
        assert (config.sunset_start_hour, config.sunset_end_hour) == (16.0, 20.0)
        assert (config.sunrise_azimuth_min, config.sunrise_azimuth_max) == (70.0, 130.0)
        assert (config.sunset_azimuth_min, config.sunset_azimuth_max) == (230.0, 280.0)
        assert config.moonset_azimuth_max == 180.0

    def test_window_order(self) -> None:
        """Test a window must start before it ends."""
        with pytest.raises(ValueError):
            WindowConfig(sunrise_start_hour=8.0, sunrise_end_hour=4.0)
        with pytest.raises(ValueError):
            WindowConfig(sunset_end_hour=25.0)

    def test_band_order(self) -> None:
        """Test bearing bands must be ordered and within [0, 360]."""
        with pytest.raises(ValueError):
            WindowConfig(sunset_azimuth_min=300.0)
        with pytest.raises(ValueError):
            WindowConfig(moonset_azimuth_max=400.0)


class TestCalendarConfig:
    """Tests for CalendarConfig model."""

    def test_default_timezone(self) -> None:
        """Test the default civil calendar is Japan Standard Time."""
        config = CalendarConfig()
        assert config.timezone == "Asia/Tokyo"
        assert config.tz.zone == "Asia/Tokyo"

    def test_unknown_timezone(self) -> None:
        """Test an unknown IANA zone is rejected."""
        with pytest.raises(ValueError):
            CalendarConfig(timezone="Mars/Olympus_Mons")


class TestFujiAlignConfig:
    """Tests for the root configuration object."""

    def test_default_configuration(self) -> None:
        """Test all sections get defaults."""
        config = FujiAlignConfig()
        assert isinstance(config.target, TargetConfig)
        assert isinstance(config.search, SearchConfig)
        assert isinstance(config.windows, WindowConfig)
        assert isinstance(config.calendar, CalendarConfig)
        assert isinstance(config.ephemeris, EphemerisConfig)
        assert config.ephemeris.kernel == "de421.bsp"
        assert config.log_level == "INFO"
        assert config.log_file is None

    def test_log_level_options(self) -> None:
        """Test only standard log levels are accepted."""
        for level in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
            assert FujiAlignConfig(log_level=level).log_level == level
        with pytest.raises(ValueError):
            FujiAlignConfig(log_level="VERBOSE")

    def test_model_dump(self) -> None:
        """Test conversion to nested plain dicts."""
        data = FujiAlignConfig().model_dump()
        assert data["search"]["azimuth_tolerance_deg"] == 0.05
        assert data["calendar"]["timezone"] == "Asia/Tokyo"


class TestConfigPaths:
    """Tests for config file discovery."""

    def test_get_config_paths_returns_list(self, monkeypatch) -> None:
        """Test the real discovery list includes cwd, home and /etc."""
        monkeypatch.undo()
        paths = get_config_paths()
        assert isinstance(paths, list)
        assert Path.cwd() / "fujialign.yaml" in paths
        assert Path.home() / ".config" / "fujialign" / "config.yaml" in paths
        assert Path("/etc/fujialign/config.yaml") in paths


class TestLoadConfig:
    """Tests for configuration loading."""

    def test_load_default_config(self) -> None:
        """Test loading config with no file returns defaults."""
        config = load_config()
        assert isinstance(config, FujiAlignConfig)
        assert config.search.azimuth_tolerance_deg == 0.05

    def test_load_from_yaml_file(self) -> None:
        """Test loading config from YAML file."""
        config_data = {
            "search": {"azimuth_tolerance_deg": 0.08, "illumination_gate": "during_selection"},
            "calendar": {"timezone": "UTC"},
            "log_level": "DEBUG",
        }

        with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
            yaml.dump(config_data, f)
            temp_path = f.name

        try:
            config = load_config(temp_path)
            assert config.search.azimuth_tolerance_deg == 0.08
            assert config.search.illumination_gate == "during_selection"
            assert config.calendar.timezone == "UTC"
            assert config.log_level == "DEBUG"
            # Defaults still applied
            assert config.search.elevation_tolerance_deg == 1.0
        finally:
            os.unlink(temp_path)

    def test_auto_discovered_file(self, tmp_path) -> None:
        """Test a fujialign.yaml in a discovery path is picked up."""
        (tmp_path / "fujialign.yaml").write_text("search:\n  search_interval_seconds: 5\n")
        assert load_config().search.search_interval_seconds == 5

    def test_empty_file_gives_defaults(self, tmp_path) -> None:
        """Test an empty YAML document is treated as no settings."""
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(path) == FujiAlignConfig()

    def test_load_nonexistent_file_raises_error(self) -> None:
        """Test loading nonexistent file raises ConfigurationError."""
        with pytest.raises(ConfigurationError) as exc_info:
            load_config("/nonexistent/path/config.yaml")
        assert "not found" in str(exc_info.value)

    def test_load_invalid_yaml_raises_error(self) -> None:
        """Test loading invalid YAML raises ConfigurationError."""
        with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
            f.write("invalid: yaml: content: [")
            temp_path = f.name

        try:
            with pytest.raises(ConfigurationError) as exc_info:
                load_config(temp_path)
            assert "Invalid YAML" in str(exc_info.value)
        finally:
            os.unlink(temp_path)

    @pytest.mark.parametrize("config_data", [
        {"target": {"latitude": 999.0}},
        {"search": {"unknown_key": 1}},
        {"search": "not a mapping"},
        {"calendar": {"timezone": "Nowhere/Special"}},
    ])
    def test_load_invalid_config_raises_error(self, tmp_path, config_data) -> None:
        """Test invalid config values raise ConfigurationError."""
        path = tmp_path / "bad.yaml"
        path.write_text(yaml.dump(config_data))

        with pytest.raises(ConfigurationError) as exc_info:
            load_config(path)
        assert "validation failed" in str(exc_info.value)
        assert exc_info.value.config_file == str(path)


class TestEnvironmentOverrides:
    """Tests for environment variable overrides."""

    def test_env_override_float(self, monkeypatch) -> None:
        """Test environment variable overrides float values."""
        monkeypatch.setenv("FUJIALIGN_SEARCH__AZIMUTH_TOLERANCE_DEG", "0.08")
        assert load_config().search.azimuth_tolerance_deg == 0.08

    def test_env_override_string(self, monkeypatch) -> None:
        """Test environment variable overrides string values."""
        monkeypatch.setenv("FUJIALIGN_CALENDAR__TIMEZONE", "UTC")
        monkeypatch.setenv("FUJIALIGN_SEARCH__ILLUMINATION_GATE", "during_selection")
        config = load_config()
        assert config.calendar.timezone == "UTC"
        assert config.search.illumination_gate == "during_selection"

    def test_env_override_top_level(self, monkeypatch) -> None:
        """Test top-level keys drop the section from the variable name."""
        monkeypatch.setenv("FUJIALIGN_LOG_LEVEL", "WARNING")
        assert load_config().log_level == "WARNING"

    def test_env_override_with_file(self, monkeypatch, tmp_path) -> None:
        """Test environment variables override file values."""
        path = tmp_path / "config.yaml"
        path.write_text(yaml.dump({"target": {"name": "File Peak", "latitude": 36.0}}))
        monkeypatch.setenv("FUJIALIGN_TARGET__NAME", "Env Peak")

        config = load_config(path)

        # Environment should override file, other file values survive
        assert config.target.name == "Env Peak"
        assert config.target.latitude == 36.0

    def test_env_override_bad_number(self, monkeypatch) -> None:
        """Test an unparsable number raises ConfigurationError."""
        monkeypatch.setenv("FUJIALIGN_SEARCH__SEARCH_INTERVAL_SECONDS", "ten")
        with pytest.raises(ConfigurationError) as exc_info:
            load_config()
        assert "validation failed" in str(exc_info.value)

    def test_env_override_invalid_value(self, monkeypatch) -> None:
        """Test an out-of-range override fails validation."""
        monkeypatch.setenv("FUJIALIGN_SEARCH__MOON_MIN_ILLUMINATION", "2.0")
        with pytest.raises(ConfigurationError):
            load_config()

    def test_unrelated_prefixed_variable_is_ignored(self, monkeypatch) -> None:
        """Test a FUJIALIGN_ variable that names no setting is not an error."""
        monkeypatch.setenv("FUJIALIGN_EPHEMERIS_TESTS", "1")
        assert load_config().ephemeris.kernel == "de421.bsp"


class TestConfigIntegration:
    """Integration tests for configuration system."""

    def test_full_config_roundtrip(self, tmp_path) -> None:
        """Test creating, saving, and loading a full configuration."""
        original = FujiAlignConfig(
            target=TargetConfig(name="Tsukuba", latitude=36.2, longitude=140.1),
            search=SearchConfig(azimuth_tolerance_deg=0.08),
            calendar=CalendarConfig(timezone="UTC"),
            log_level="DEBUG",
        )
        path = tmp_path / "roundtrip.yaml"
        path.write_text(yaml.dump(original.model_dump()))

        loaded = load_config(path)
        assert loaded == original
        assert loaded.target.to_summit().name == "Tsukuba"
        assert loaded.search.azimuth_tolerance_deg == 0.08
