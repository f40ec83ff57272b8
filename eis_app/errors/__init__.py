"""
Error classification system for the impedance pipeline.

This module provides the structured exception hierarchy used by the
validator, the spectral engine, the impedance calculator and the
surrounding acquisition and delivery layers.
"""

from .signal_quality import (
    SignalQualityError,
    InvalidLength,
    InvalidSampleRate,
    InvalidTimestamp,
    NonFiniteValue,
    NegativeFrequency,
    MismatchedLength,
    MismatchedSampleRate,
    TimestampDrift,
    LoaderError,
)
from .system_failures import (
    SystemFailureError,
    ComputationError,
    InvalidImpedanceValue,
    ConfigurationError,
    DeliveryError,
    AcquisitionError,
)

__all__ = [
    # Signal Quality Errors
    "SignalQualityError",
    "InvalidLength",
    "InvalidSampleRate",
    "InvalidTimestamp",
    "NonFiniteValue",
    "NegativeFrequency",
    "MismatchedLength",
    "MismatchedSampleRate",
    "TimestampDrift",
    "LoaderError",
    # System Failures
    "SystemFailureError",
    "ComputationError",
    "InvalidImpedanceValue",
    "ConfigurationError",
    "DeliveryError",
    "AcquisitionError",
]
