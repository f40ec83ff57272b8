"""
Signal validation for time-domain samples, spectra and impedance data.

Every stage of the pipeline assumes well-formed input; the checks here are
what make that assumption safe. Validation is pure inspection: it either
returns None or raises the first violation found, scanning in ascending
index order.
"""

import math
from abc import ABC, abstractmethod
from typing import Iterable

from ..errors import (
    InvalidLength,
    InvalidSampleRate,
    InvalidTimestamp,
    MismatchedLength,
    MismatchedSampleRate,
    NegativeFrequency,
    NonFiniteValue,
    TimestampDrift,
)
from ..utils.time import is_zero_timestamp, timestamp_drift_seconds
from .models import ComplexSpectrum, ImpedanceSpectrum, RealSignal

DEFAULT_MAX_DRIFT_SECONDS = 0.1


class SignalValidator(ABC):
    """Validation capability injected into the engine and the calculator."""

    @abstractmethod
    def validate_real(self, signal: RealSignal) -> None:
        """Validate a time-domain signal."""

    @abstractmethod
    def validate_complex(
        self,
        spectrum: ComplexSpectrum,
        allow_negative_frequencies: bool = True
    ) -> None:
        """Validate a frequency-domain spectrum."""

    @abstractmethod
    def validate_impedance(self, spectrum: ImpedanceSpectrum) -> None:
        """Validate an impedance spectrum."""


class DefaultSignalValidator(SignalValidator):
    """Validates measurement data against the pipeline invariants."""

    def validate_real(self, signal: RealSignal) -> None:
        """
        Validate a time-domain signal.

        Args:
            signal: Samples to check

        Raises:
            InvalidLength: No samples
            InvalidSampleRate: Sample rate not strictly positive
            InvalidTimestamp: Timestamp is the zero sentinel
            NonFiniteValue: A sample is NaN or infinite
        """
        if signal.is_empty():
            raise InvalidLength("signal values cannot be empty", field="values")

        _check_sample_rate(signal.sample_rate)
        _check_timestamp(signal.timestamp)
        _check_finite_reals(signal.values, "values")

    def validate_complex(
        self,
        spectrum: ComplexSpectrum,
        allow_negative_frequencies: bool = True
    ) -> None:
        """
        Validate a frequency-domain spectrum.

        Args:
            spectrum: Spectrum to check
            allow_negative_frequencies: False for half spectra, where every
                bin must be non-negative

        Raises:
            InvalidLength: Empty sequences or values/frequencies mismatch
            InvalidTimestamp: Timestamp is the zero sentinel
            NonFiniteValue: NaN/Inf value (either component) or bin
            NegativeFrequency: Negative bin when negatives are not allowed
        """
        if spectrum.is_empty():
            raise InvalidLength("complex spectrum values cannot be empty", field="values")

        if len(spectrum.frequencies) == 0:
            raise InvalidLength("frequencies cannot be empty", field="frequencies")

        if len(spectrum.values) != len(spectrum.frequencies):
            raise InvalidLength(
                f"values and frequencies must have the same length "
                f"({len(spectrum.values)} != {len(spectrum.frequencies)})",
                field="frequencies"
            )

        _check_timestamp(spectrum.timestamp)
        _check_finite_complex(spectrum.values, "values")
        _check_finite_reals(spectrum.frequencies, "frequencies")

        if not allow_negative_frequencies:
            _check_non_negative(spectrum.frequencies, "frequencies")

    def validate_impedance(self, spectrum: ImpedanceSpectrum) -> None:
        """
        Validate an impedance spectrum.

        Magnitude and phase are optional; when populated they must match the
        impedance length and be finite.
        """
        if spectrum.is_empty():
            raise InvalidLength("impedance values cannot be empty", field="impedance")

        n = len(spectrum.impedance)

        if len(spectrum.frequencies) == 0:
            raise InvalidLength("frequencies cannot be empty", field="frequencies")

        if len(spectrum.frequencies) != n:
            raise InvalidLength(
                "impedance and frequencies must have the same length", field="frequencies"
            )

        if spectrum.magnitude and len(spectrum.magnitude) != n:
            raise InvalidLength("magnitude length must match impedance length", field="magnitude")

        if spectrum.phase and len(spectrum.phase) != n:
            raise InvalidLength("phase length must match impedance length", field="phase")

        _check_timestamp(spectrum.timestamp)
        _check_finite_complex(spectrum.impedance, "impedance")
        _check_finite_reals(spectrum.frequencies, "frequencies")
        _check_finite_reals(spectrum.magnitude, "magnitude")
        _check_finite_reals(spectrum.phase, "phase")


def validate_signals_match(
    voltage: RealSignal,
    current: RealSignal,
    max_drift_seconds: float = DEFAULT_MAX_DRIFT_SECONDS
) -> None:
    """
    Check that a voltage and current signal can be paired.

    Args:
        voltage: Voltage samples
        current: Current samples
        max_drift_seconds: Largest accepted timestamp difference

    Raises:
        MismatchedLength: Sample counts differ
        MismatchedSampleRate: Sample rates differ
        TimestampDrift: Timestamps differ by more than max_drift_seconds
    """
    if len(voltage.values) != len(current.values):
        raise MismatchedLength(
            f"voltage and current signals must have the same length "
            f"({len(voltage.values)} != {len(current.values)})",
            field="values",
            voltage_length=len(voltage.values),
            current_length=len(current.values)
        )

    if voltage.sample_rate != current.sample_rate:
        raise MismatchedSampleRate(
            f"voltage and current signals must have the same sample rate "
            f"({voltage.sample_rate} != {current.sample_rate})",
            field="sample_rate",
            voltage_rate=voltage.sample_rate,
            current_rate=current.sample_rate
        )

    _check_timestamp(voltage.timestamp)
    _check_timestamp(current.timestamp)

    drift = timestamp_drift_seconds(voltage.timestamp, current.timestamp)
    if drift > max_drift_seconds:
        raise TimestampDrift(
            f"voltage and current timestamps differ by {drift * 1000:.1f}ms "
            f"(limit {max_drift_seconds * 1000:.1f}ms)",
            field="timestamp",
            drift_seconds=drift,
            max_drift_seconds=max_drift_seconds
        )


def _check_sample_rate(sample_rate: float) -> None:
    if not (isinstance(sample_rate, (int, float)) and math.isfinite(sample_rate) and sample_rate > 0):
        raise InvalidSampleRate(
            f"sample rate must be greater than 0, got {sample_rate}",
            field="sample_rate",
            sample_rate=sample_rate
        )


def _check_timestamp(timestamp) -> None:
    if is_zero_timestamp(timestamp):
        raise InvalidTimestamp("timestamp cannot be zero", field="timestamp")


def _check_finite_reals(values: Iterable[float], field_name: str) -> None:
    for i, value in enumerate(values):
        if math.isnan(value):
            raise NonFiniteValue(f"NaN {field_name} value found at index {i}", field=field_name, index=i)
        if math.isinf(value):
            raise NonFiniteValue(f"infinite {field_name} value found at index {i}", field=field_name, index=i)


def _check_finite_complex(values: Iterable[complex], field_name: str) -> None:
    for i, value in enumerate(values):
        if math.isnan(value.real) or math.isnan(value.imag):
            raise NonFiniteValue(f"NaN complex {field_name} value found at index {i}", field=field_name, index=i)
        if math.isinf(value.real) or math.isinf(value.imag):
            raise NonFiniteValue(
                f"infinite complex {field_name} value found at index {i}", field=field_name, index=i
            )


def _check_non_negative(frequencies: Iterable[float], field_name: str) -> None:
    for i, freq in enumerate(frequencies):
        if freq < 0:
            raise NegativeFrequency(f"negative frequency found at index {i}", field=field_name, index=i)
