"""Unit tests for configuration management."""

import pytest
from pathlib import Path

from eis_app.config.defaults import OutputParams, get_default_config
from eis_app.config.delivery import DeliveryMethod, delivery_config_from_output
from eis_app.config.loader import ConfigLoader
from eis_app.config.validation import ConfigValidator
from eis_app.errors import ConfigurationError

PROFILES_YAML = """
profiles:
  bench:
    acquisition:
      sample_rate: 2048.0
    output:
      mode: csv
"""


@pytest.fixture
def config_dir(tmp_path: Path) -> Path:
    (tmp_path / "eis.yaml").write_text(PROFILES_YAML)
    return tmp_path


class TestDefaultConfig:
    """Test suite for default configuration."""

    def test_default_config_creation(self) -> None:
        config = get_default_config()
        assert config.acquisition.sample_rate == 1000.0
        assert config.acquisition.queue_capacity == 10
        assert config.impedance.current_floor == 1e-10
        assert config.impedance.max_drift_ms == 100.0
        assert config.pipeline.max_consecutive_failures == 3
        assert config.output.mode == "console"


class TestConfigLoader:
    """Test suite for configuration loader."""

    def test_config_loader_creation(self) -> None:
        loader = ConfigLoader.create()
        assert isinstance(loader.config_dir, Path)

    def test_shipped_profiles_load(self) -> None:
        loader = ConfigLoader.create()
        config = loader.load("smoke")
        assert config.acquisition.seed == 7
        assert config.output.mode == "stdout"

    def test_merge_config_defaults_only(self, config_dir: Path) -> None:
        loader = ConfigLoader.create(config_dir)
        config = loader.merge_config()

        assert config["acquisition"]["sample_rate"] == 1000.0
        assert config["output"]["mode"] == "console"

    def test_unknown_profile_rejected(self, config_dir: Path) -> None:
        loader = ConfigLoader.create(config_dir)

        with pytest.raises(ConfigurationError) as exc_info:
            loader.merge_config("missing")

        assert exc_info.value.field == "profile"
        assert exc_info.value.value == "missing"

    def test_profile_overrides_defaults(self, config_dir: Path) -> None:
        loader = ConfigLoader.create(config_dir)
        config = loader.merge_config("bench")

        assert config["acquisition"]["sample_rate"] == 2048.0
        # Other defaults should remain
        assert config["acquisition"]["samples_per_cycle"] == 1000
        assert config["output"]["mode"] == "csv"

    def test_explicit_overrides_win(self, config_dir: Path) -> None:
        loader = ConfigLoader.create(config_dir)
        config = loader.merge_config("bench", {"acquisition": {"sample_rate": 500.0}})

        assert config["acquisition"]["sample_rate"] == 500.0
        assert config["output"]["mode"] == "csv"

    def test_missing_profiles_file(self, tmp_path: Path) -> None:
        loader = ConfigLoader.create(tmp_path)

        with pytest.raises(ConfigurationError):
            loader.load_profile_config("bench")

    def test_no_profile_needs_no_file(self, tmp_path: Path) -> None:
        loader = ConfigLoader.create(tmp_path)
        assert loader.merge_config(None) == loader.merge_config()

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        (tmp_path / "eis.yaml").write_text("profiles: [unclosed\n")
        loader = ConfigLoader.create(tmp_path)

        with pytest.raises(ConfigurationError):
            loader.load_profile_config("bench")

    def test_load_typed_config(self, config_dir: Path) -> None:
        config = ConfigLoader.create(config_dir).load("bench")
        assert config.acquisition.sample_rate == 2048.0

    def test_unknown_key_rejected(self, config_dir: Path) -> None:
        loader = ConfigLoader.create(config_dir)
        with pytest.raises(ConfigurationError):
            loader.load(overrides={"acquisition": {"bogus": 1}})


class TestConfigValidator:
    """Test suite for configuration validation."""

    def test_defaults_are_valid(self) -> None:
        config = ConfigLoader.create().merge_config()
        assert ConfigValidator.validate_config(config) == []

    @pytest.mark.parametrize("rate", [0, -1.0, "fast", 2_000_000.0])
    def test_invalid_sample_rate(self, rate) -> None:
        errors = ConfigValidator.validate_acquisition_params({"sample_rate": rate})
        assert [e.field for e in errors] == ["sample_rate"]

    def test_invalid_samples_per_cycle(self) -> None:
        errors = ConfigValidator.validate_acquisition_params({"samples_per_cycle": 0})
        assert errors[0].field == "samples_per_cycle"

    def test_bool_is_not_an_integer(self) -> None:
        errors = ConfigValidator.validate_acquisition_params({"queue_capacity": True})
        assert errors[0].field == "queue_capacity"

    def test_negative_drift(self) -> None:
        errors = ConfigValidator.validate_impedance_params({"max_drift_ms": -1})
        assert errors[0].field == "max_drift_ms"

    def test_unknown_choices(self) -> None:
        errors = ConfigValidator.validate_config({
            "pipeline": {"export_shape": "xml"},
            "synthesis": {"circuit": "exotic"},
            "output": {"mode": "fax"},
        })
        assert {e.field for e in errors} == {"export_shape", "circuit", "mode"}


class TestDeliveryFromOutput:

    def test_http_mode(self) -> None:
        config = delivery_config_from_output(OutputParams(mode="http", target_url="http://lab:8080/z"))

        destination = config.destinations[0]
        assert destination.method == DeliveryMethod.HTTP_POST
        assert destination.config.url == "http://lab:8080/z"

    def test_csv_mode(self) -> None:
        output = OutputParams(mode="csv", output_dir="out")
        destination = delivery_config_from_output(output).destinations[0]

        assert destination.method == DeliveryMethod.FILE_OUTPUT
        assert destination.config.format == "csv"
        assert destination.config.output_dir == "out"

    def test_console_mode_writes_json(self) -> None:
        destination = delivery_config_from_output(get_default_config().output).destinations[0]
        assert destination.method == DeliveryMethod.FILE_OUTPUT
        assert destination.config.format == "json"

    def test_stdout_mode(self) -> None:
        output = OutputParams(mode="stdout")
        assert delivery_config_from_output(output).destinations[0].method == DeliveryMethod.STDOUT
