"""
System failure error classifications for unrecoverable errors.

These exceptions represent failures that are not explained by a single bad
measurement: broken numeric invariants, persistent misconfiguration and
transport failures.
"""

from typing import Any, Optional


class SystemFailureError(Exception):
    """Base class for unrecoverable system failures."""

    def __init__(self, message: str, context: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = False

    @property
    def kind(self) -> str:
        return type(self).__name__


class ComputationError(SystemFailureError):
    """Numeric invariant broken inside the transform engine."""

    def __init__(self, message: str, operation: Optional[str] = None,
                 index: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.operation = operation
        self.index = index


class InvalidImpedanceValue(SystemFailureError):
    """Division produced NaN/Inf despite the near-zero current guard."""

    def __init__(self, message: str, field: str = "impedance",
                 index: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.field = field
        self.index = index


class ConfigurationError(SystemFailureError):
    """Configuration is invalid or a misconfiguration keeps failing cycles."""

    def __init__(self, message: str, field: Optional[str] = None,
                 value: Any = None, **kwargs):
        super().__init__(message, **kwargs)
        self.field = field
        self.value = value


class DeliveryError(SystemFailureError):
    """Measurement delivery system failures."""

    def __init__(self, message: str, delivery_method: Optional[str] = None,
                 status_code: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.delivery_method = delivery_method
        self.status_code = status_code


class AcquisitionError(SystemFailureError):
    """Sample producer could not be started or has no data to emit."""

    def __init__(self, message: str, source: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.source = source
