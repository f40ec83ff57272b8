"""Configuration validation utilities."""

from dataclasses import dataclass
from typing import Any

MAX_SAMPLE_RATE = 1_000_000.0       # 1 MHz
MAX_SAMPLES_PER_CYCLE = 100_000

EXPORT_SHAPES = ("measurement", "impedance", "points")
OUTPUT_MODES = ("http", "console", "csv", "stdout")
CIRCUITS = ("simple", "medium", "complex")


@dataclass(frozen=True)
class ValidationError:
    """Represents a configuration validation error."""
    field: str
    message: str
    value: Any


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class ConfigValidator:
    """Validates configuration parameters."""

    @staticmethod
    def validate_acquisition_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate acquisition parameters."""
        errors = []

        if "sample_rate" in params:
            value = params["sample_rate"]
            if not _is_number(value) or value <= 0:
                errors.append(ValidationError(
                    field="sample_rate",
                    message="Must be greater than 0",
                    value=value
                ))
            elif value > MAX_SAMPLE_RATE:
                errors.append(ValidationError(
                    field="sample_rate",
                    message="Exceeds reasonable limit (1MHz)",
                    value=value
                ))

        if "samples_per_cycle" in params:
            value = params["samples_per_cycle"]
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                errors.append(ValidationError(
                    field="samples_per_cycle",
                    message="Must be a positive integer",
                    value=value
                ))
            elif value > MAX_SAMPLES_PER_CYCLE:
                errors.append(ValidationError(
                    field="samples_per_cycle",
                    message="Exceeds reasonable limit (100k)",
                    value=value
                ))

        if "interval_seconds" in params:
            value = params["interval_seconds"]
            if not _is_number(value) or value <= 0:
                errors.append(ValidationError(
                    field="interval_seconds",
                    message="Must be a positive number",
                    value=value
                ))

        if "queue_capacity" in params:
            value = params["queue_capacity"]
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                errors.append(ValidationError(
                    field="queue_capacity",
                    message="Must be a positive integer",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_impedance_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate impedance calculation parameters."""
        errors = []

        if "current_floor" in params:
            value = params["current_floor"]
            if not _is_number(value) or value < 0:
                errors.append(ValidationError(
                    field="current_floor",
                    message="Must be a non-negative number",
                    value=value
                ))

        if "max_drift_ms" in params:
            value = params["max_drift_ms"]
            if not _is_number(value) or value < 0:
                errors.append(ValidationError(
                    field="max_drift_ms",
                    message="Must be a non-negative number",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_pipeline_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate pipeline parameters."""
        errors = []

        if "export_shape" in params and params["export_shape"] not in EXPORT_SHAPES:
            errors.append(ValidationError(
                field="export_shape",
                message=f"Must be one of {', '.join(EXPORT_SHAPES)}",
                value=params["export_shape"]
            ))

        if "max_consecutive_failures" in params:
            value = params["max_consecutive_failures"]
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                errors.append(ValidationError(
                    field="max_consecutive_failures",
                    message="Must be a positive integer",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_synthesis_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate circuit-model synthesis parameters."""
        errors = []

        if "circuit" in params and params["circuit"] not in CIRCUITS:
            errors.append(ValidationError(
                field="circuit",
                message=f"Must be one of {', '.join(CIRCUITS)}",
                value=params["circuit"]
            ))

        for name in ("num_points", "batch_size", "spectra_count"):
            if name in params:
                value = params[name]
                if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                    errors.append(ValidationError(
                        field=name,
                        message="Must be a positive integer",
                        value=value
                    ))

        return errors

    @staticmethod
    def validate_output_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate output parameters."""
        errors = []

        if "mode" in params and params["mode"] not in OUTPUT_MODES:
            errors.append(ValidationError(
                field="mode",
                message=f"Must be one of {', '.join(OUTPUT_MODES)}",
                value=params["mode"]
            ))

        if "target_url" in params:
            value = params["target_url"]
            if not isinstance(value, str) or not value:
                errors.append(ValidationError(
                    field="target_url",
                    message="Target URL cannot be empty",
                    value=value
                ))

        if "timeout_seconds" in params:
            value = params["timeout_seconds"]
            if not _is_number(value) or value <= 0:
                errors.append(ValidationError(
                    field="timeout_seconds",
                    message="Must be a positive number",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_config(config: dict[str, Any]) -> list[ValidationError]:
        """Validate complete configuration."""
        errors = []

        if "acquisition" in config:
            errors.extend(ConfigValidator.validate_acquisition_params(config["acquisition"]))

        if "impedance" in config:
            errors.extend(ConfigValidator.validate_impedance_params(config["impedance"]))

        if "pipeline" in config:
            errors.extend(ConfigValidator.validate_pipeline_params(config["pipeline"]))

        if "synthesis" in config:
            errors.extend(ConfigValidator.validate_synthesis_params(config["synthesis"]))

        if "output" in config:
            errors.extend(ConfigValidator.validate_output_params(config["output"]))

        return errors
