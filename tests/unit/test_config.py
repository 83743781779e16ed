"""Unit tests for configuration management."""

import pytest
from pathlib import Path

from startup_gate.config.defaults import get_default_settings
from startup_gate.config.loader import ConfigLoader, load_settings
from startup_gate.config.validation import ConfigValidator
from startup_gate.errors import ConfigurationError


class TestDefaultSettings:
    """Test suite for default settings."""

    def test_default_timings(self) -> None:
        """Defaults match the production startup timings."""
        settings = get_default_settings()
        assert settings.timing.startup_timeout == 30.0
        assert settings.timing.consolidation_window == 2.0
        assert settings.timing.first_run_grace == 5.0
        assert settings.timing.permission_cooldown == 259200.0
        assert settings.timing.temporary_url_delay == 2.0

    def test_store_id_derived_from_app_id(self) -> None:
        settings = get_default_settings()
        assert settings.platform.store_id == f"id{settings.platform.app_id}"


class TestConfigLoader:
    """Test suite for configuration loader."""

    def test_config_loader_creation(self) -> None:
        loader = ConfigLoader.create()
        assert isinstance(loader.config_dir, Path)

    def test_missing_file_uses_defaults(self, tmp_path) -> None:
        settings = ConfigLoader.create(tmp_path).load()
        assert settings == get_default_settings()

    def test_file_overrides_defaults(self, tmp_path) -> None:
        (tmp_path / "startup.yaml").write_text(
            "timing:\n"
            "  startup_timeout: 10\n"
            "platform:\n"
            "  locale: DE\n"
        )

        settings = ConfigLoader.create(tmp_path).load()

        assert settings.timing.startup_timeout == 10
        assert settings.platform.locale == "DE"
        # Other defaults should remain
        assert settings.timing.consolidation_window == 2.0
        assert settings.platform.os_name == "iOS"

    def test_logging_section_loaded(self, tmp_path) -> None:
        (tmp_path / "startup.yaml").write_text("logging:\n  level: DEBUG\n  format_json: true\n")

        settings = ConfigLoader.create(tmp_path).load()

        assert settings.logging.level == "DEBUG"
        assert settings.logging.format_json is True
        assert settings.logging.include_caller is False

    def test_explicit_overrides_beat_file(self, tmp_path) -> None:
        (tmp_path / "startup.yaml").write_text("timing:\n  startup_timeout: 10\n")

        settings = load_settings(tmp_path, {"timing": {"startup_timeout": 1.5}})

        assert settings.timing.startup_timeout == 1.5

    def test_empty_file_is_ignored(self, tmp_path) -> None:
        (tmp_path / "startup.yaml").write_text("")
        assert ConfigLoader.create(tmp_path).merge_config()["timing"]["startup_timeout"] == 30.0

    def test_non_mapping_file_rejected(self, tmp_path) -> None:
        (tmp_path / "startup.yaml").write_text("- just\n- a list\n")
        with pytest.raises(ConfigurationError):
            ConfigLoader.create(tmp_path).load()

    def test_invalid_values_rejected(self, tmp_path) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            load_settings(tmp_path, {"timing": {"startup_timeout": 0}})
        assert any("timing.startup_timeout" in err for err in exc_info.value.errors)

    def test_unknown_key_rejected(self, tmp_path) -> None:
        with pytest.raises(ConfigurationError):
            load_settings(tmp_path, {"timing": {"no_such_timer": 3}})

    def test_shipped_config_file_loads(self) -> None:
        settings = load_settings()
        assert settings.platform.bundle_id == "com.saclingappplus.FishScalePlus"


class TestConfigValidator:
    """Test suite for configuration validation."""

    def test_valid_timing_params(self) -> None:
        assert ConfigValidator.validate_timing_params({"startup_timeout": 30, "first_run_grace": 0.5}) == []

    @pytest.mark.parametrize("value", [0, -1, "30", None, True])
    def test_invalid_timing_values(self, value) -> None:
        errors = ConfigValidator.validate_timing_params({"startup_timeout": value})
        assert len(errors) == 1
        assert errors[0].field == "timing.startup_timeout"

    def test_invalid_endpoint_url(self) -> None:
        errors = ConfigValidator.validate_endpoint_params({"resolver_url": "config.php"})
        assert len(errors) == 1
        assert errors[0].field == "endpoints.resolver_url"

    def test_invalid_port(self) -> None:
        errors = ConfigValidator.validate_endpoint_params({"connectivity_port": 70000})
        assert [e.field for e in errors] == ["endpoints.connectivity_port"]

    @pytest.mark.parametrize("params, field", [
        ({"level": "VERBOSE"}, "logging.level"),
        ({"level": 10}, "logging.level"),
        ({"format_json": "yes"}, "logging.format_json"),
    ])
    def test_invalid_logging_params(self, params, field) -> None:
        errors = ConfigValidator.validate_logging_params(params)
        assert [e.field for e in errors] == [field]

    def test_lowercase_level_accepted(self) -> None:
        assert ConfigValidator.validate_logging_params({"level": "debug", "format_json": True}) == []

    def test_validate_config_collects_all_sections(self) -> None:
        errors = ConfigValidator.validate_config({
            "timing": {"startup_timeout": -5},
            "endpoints": {"checkpoint_database_url": "ftp://db.example"},
        })
        assert {e.field for e in errors} == {"timing.startup_timeout", "endpoints.checkpoint_database_url"}
