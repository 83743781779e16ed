"""Configuration validation utilities."""

from dataclasses import dataclass
from typing import Any
from urllib.parse import urlparse

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class ValidationError:
    """Represents a configuration validation error."""
    field: str
    message: str
    value: Any


class ConfigValidator:
    """Validates configuration parameters."""

    @staticmethod
    def validate_timing_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate timing parameters: every duration must be a positive number."""
        errors = []

        for field_name, value in params.items():
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
                errors.append(ValidationError(
                    field=f"timing.{field_name}",
                    message="Must be a positive number of seconds",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_endpoint_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate endpoint parameters."""
        errors = []

        for field_name in ("attribution_base_url", "resolver_url", "checkpoint_database_url"):
            if field_name in params:
                value = params[field_name]
                parsed = urlparse(value) if isinstance(value, str) else None
                if parsed is None or parsed.scheme not in ("http", "https") or not parsed.netloc:
                    errors.append(ValidationError(
                        field=f"endpoints.{field_name}",
                        message="Must be an absolute http(s) URL",
                        value=value
                    ))

        if "connectivity_port" in params:
            value = params["connectivity_port"]
            if not isinstance(value, int) or not 0 < value < 65536:
                errors.append(ValidationError(
                    field="endpoints.connectivity_port",
                    message="Must be a valid TCP port",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_logging_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate logging parameters."""
        errors = []

        level = params.get("level", "INFO")
        if not isinstance(level, str) or level.upper() not in LOG_LEVELS:
            errors.append(ValidationError(
                field="logging.level",
                message=f"Must be one of {', '.join(LOG_LEVELS)}",
                value=level
            ))

        for field_name in ("format_json", "include_caller"):
            if field_name in params and not isinstance(params[field_name], bool):
                errors.append(ValidationError(
                    field=f"logging.{field_name}",
                    message="Must be true or false",
                    value=params[field_name]
                ))

        return errors

    @staticmethod
    def validate_config(config: dict[str, Any]) -> list[ValidationError]:
        """Validate complete configuration."""
        errors = []

        if "timing" in config:
            errors.extend(ConfigValidator.validate_timing_params(config["timing"]))

        if "endpoints" in config:
            errors.extend(ConfigValidator.validate_endpoint_params(config["endpoints"]))

        if "logging" in config:
            errors.extend(ConfigValidator.validate_logging_params(config["logging"]))

        return errors
