"""
Signal quality error classifications for the impedance pipeline.

These exceptions describe malformed or incompatible measurement data. They are
raised by the validator, the transform engine and the impedance calculator,
and are normally logged and skipped by the pipeline rather than escalated.
"""

from typing import Any, Optional


class SignalQualityError(Exception):
    """Base class for measurement data issues that can be handled gracefully."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        index: Optional[int] = None,
        context: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.field = field
        self.index = index
        self.context = context or {}
        self.recoverable = True

    @property
    def kind(self) -> str:
        """Name of the violation, e.g. ``NonFiniteValue``."""
        return type(self).__name__

    def to_dict(self) -> dict[str, Any]:
        """Structured form used in log records."""
        return {
            "kind": self.kind,
            "field": self.field,
            "index": self.index,
            "message": str(self),
        }


class InvalidLength(SignalQualityError):
    """A required sequence is empty or paired sequences differ in length."""


class InvalidSampleRate(SignalQualityError):
    """Sample rate is zero, negative or not a number."""

    def __init__(self, message: str, sample_rate: Optional[float] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.sample_rate = sample_rate


class InvalidTimestamp(SignalQualityError):
    """Timestamp is missing or set to the zero/epoch sentinel."""


class NonFiniteValue(SignalQualityError):
    """A numeric value is NaN or infinite."""


class NegativeFrequency(SignalQualityError):
    """A negative bin was found where only non-negative bins are allowed."""


class MismatchedLength(SignalQualityError):
    """Voltage and current sequences have different lengths."""

    def __init__(self, message: str, voltage_length: Optional[int] = None,
                 current_length: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.voltage_length = voltage_length
        self.current_length = current_length


class MismatchedSampleRate(SignalQualityError):
    """Voltage and current were sampled at different rates."""

    def __init__(self, message: str, voltage_rate: Optional[float] = None,
                 current_rate: Optional[float] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.voltage_rate = voltage_rate
        self.current_rate = current_rate


class TimestampDrift(SignalQualityError):
    """Voltage and current timestamps are too far apart to form a pair."""

    def __init__(self, message: str, drift_seconds: Optional[float] = None,
                 max_drift_seconds: Optional[float] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.drift_seconds = drift_seconds
        self.max_drift_seconds = max_drift_seconds


class LoaderError(SignalQualityError):
    """Input file exists but its rows are not in the expected format."""

    def __init__(self, message: str, path: Optional[str] = None,
                 line: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.path = path
        self.line = line
