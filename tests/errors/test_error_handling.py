"""
Error handling tests for the impedance pipeline.

Covers the error classification system and how pipeline stages surface
malformed data instead of converting it to defaults.
"""

import math

import pytest

from eis_app.delivery.base import DeliveryPermanentError, DeliveryRetryableError
from eis_app.errors import (
    AcquisitionError,
    ComputationError,
    ConfigurationError,
    DeliveryError,
    InvalidImpedanceValue,
    InvalidLength,
    InvalidSampleRate,
    InvalidTimestamp,
    LoaderError,
    MismatchedLength,
    MismatchedSampleRate,
    NegativeFrequency,
    NonFiniteValue,
    SignalQualityError,
    SystemFailureError,
    TimestampDrift,
)


class TestErrorClassification:
    """Error hierarchy and carried context."""

    def test_signal_quality_error_hierarchy(self):
        base_error = SignalQualityError("base error")
        assert base_error.recoverable is True
        assert base_error.context == {}
        assert base_error.field is None
        assert base_error.index is None

        for error_type in (InvalidLength, InvalidTimestamp, NonFiniteValue,
                           NegativeFrequency, MismatchedLength, MismatchedSampleRate,
                           TimestampDrift, LoaderError, InvalidSampleRate):
            error = error_type("problem")
            assert isinstance(error, SignalQualityError)
            assert error.kind == error_type.__name__

    def test_system_failure_error_hierarchy(self):
        computation_error = ComputationError("twiddle failed", operation="fft", index=3)
        assert computation_error.recoverable is False
        assert computation_error.operation == "fft"
        assert computation_error.index == 3

        impedance_error = InvalidImpedanceValue("nan", index=7)
        assert isinstance(impedance_error, SystemFailureError)
        assert impedance_error.field == "impedance"
        assert impedance_error.index == 7

        config_error = ConfigurationError("bad rate", field="sample_rate", value=0)
        assert config_error.kind == "ConfigurationError"
        assert config_error.value == 0

        acquisition_error = AcquisitionError("no data", source="file")
        assert acquisition_error.source == "file"

    def test_delivery_errors_are_system_failures(self):
        assert issubclass(DeliveryRetryableError, DeliveryError)
        assert issubclass(DeliveryPermanentError, SystemFailureError)

        error = DeliveryPermanentError("HTTP 400", delivery_method="http_post", status_code=400)
        assert error.status_code == 400
        assert error.recoverable is False

    def test_value_carrying_errors(self):
        drift = TimestampDrift("too far", field="timestamp", drift_seconds=0.2, max_drift_seconds=0.1)
        assert drift.drift_seconds == 0.2
        assert drift.max_drift_seconds == 0.1

        rate = InvalidSampleRate("zero", sample_rate=0.0)
        assert rate.sample_rate == 0.0

        loader = LoaderError("bad row", path="v.csv", line=12)
        assert loader.path == "v.csv"
        assert loader.line == 12

    def test_to_dict(self):
        error = NonFiniteValue("NaN value found at index 3", field="values", index=3)
        assert error.to_dict() == {
            "kind": "NonFiniteValue",
            "field": "values",
            "index": 3,
            "message": "NaN value found at index 3",
        }


class TestErrorSurfacing:
    """Stages raise the first violation rather than patching data."""

    def test_transform_never_returns_partial_spectrum(self, processor, make_signal):
        with pytest.raises(NonFiniteValue) as exc_info:
            processor.transform(make_signal([1.0, 2.0, math.inf, math.nan]))
        assert exc_info.value.index == 2

    def test_calculator_surfaces_first_signal_error(self, calculator, make_signal):
        with pytest.raises(InvalidLength):
            calculator.compute_impedance(make_signal([]), make_signal([]))

    def test_current_validated_even_when_voltage_is_valid(self, calculator, make_signal):
        with pytest.raises(InvalidTimestamp):
            calculator.compute_impedance(make_signal([1.0, 2.0]), make_signal([1.0, 2.0], timestamp=None))
