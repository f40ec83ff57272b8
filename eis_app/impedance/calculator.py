"""
Impedance calculation for EIS measurements.

Computes Z(f) = U(f) / I(f) bin by bin from the half spectra of a voltage
and current signal pair, then derives magnitude and phase. The calculator
holds only its injected collaborators and thresholds; every call is a pure
function of its inputs.
"""

import math
from abc import ABC, abstractmethod
from typing import Optional

import structlog

from ..data.models import (
    ComplexSpectrum,
    EISMeasurement,
    ImpedancePoint,
    ImpedanceSpectrum,
    RealSignal,
)
from ..data.validators import (
    DEFAULT_MAX_DRIFT_SECONDS,
    DefaultSignalValidator,
    SignalValidator,
    validate_signals_match,
)
from ..errors import InvalidImpedanceValue, MismatchedLength
from ..spectral.transform import FFTProcessor, SpectralTransformer

logger = structlog.get_logger(__name__)

# Currents below this magnitude yield Z = 0 instead of a division blow-up
DEFAULT_CURRENT_FLOOR = 1e-10


class ImpedanceCalculator(ABC):
    """Impedance capability used by the measurement pipeline."""

    @abstractmethod
    def validate_pair(self, voltage: RealSignal, current: RealSignal) -> None:
        """Check that two signals can be combined into one measurement."""

    @abstractmethod
    def compute_impedance(self, voltage: RealSignal, current: RealSignal) -> ImpedanceSpectrum:
        """Impedance spectrum of one voltage/current pair."""

    @abstractmethod
    def process_measurement(self, voltage: RealSignal, current: RealSignal) -> EISMeasurement:
        """Impedance spectrum together with both half spectra."""


class DefaultImpedanceCalculator(ImpedanceCalculator):
    """Impedance calculator built on an injected transformer and validator."""

    def __init__(
        self,
        transformer: Optional[SpectralTransformer] = None,
        validator: Optional[SignalValidator] = None,
        current_floor: float = DEFAULT_CURRENT_FLOOR,
        max_drift_seconds: float = DEFAULT_MAX_DRIFT_SECONDS,
    ) -> None:
        self.validator = validator or DefaultSignalValidator()
        self.transformer = transformer or FFTProcessor(self.validator)
        self.current_floor = current_floor
        self.max_drift_seconds = max_drift_seconds

    def validate_pair(self, voltage: RealSignal, current: RealSignal) -> None:
        """
        Validate each signal, then their compatibility.

        Raises:
            SignalQualityError: First violation found
        """
        self.validator.validate_real(voltage)
        self.validator.validate_real(current)
        validate_signals_match(voltage, current, self.max_drift_seconds)

    def compute_impedance(self, voltage: RealSignal, current: RealSignal) -> ImpedanceSpectrum:
        """
        Compute the impedance spectrum of a voltage/current pair.

        Args:
            voltage: Voltage samples
            current: Current samples, same length and rate as voltage

        Returns:
            Validated impedance spectrum stamped with the voltage timestamp

        Raises:
            SignalQualityError: Invalid or incompatible inputs
            InvalidImpedanceValue: Division produced NaN/Inf
            ComputationError: Transform invariant broken
        """
        return self.process_measurement(voltage, current).impedance

    def process_measurement(self, voltage: RealSignal, current: RealSignal) -> EISMeasurement:
        """
        Run the full calculation and keep the intermediate half spectra.

        Returns:
            Measurement with voltage and current half spectra and impedance
        """
        self.validate_pair(voltage, current)

        voltage_half = self.transformer.extract_half_spectrum(self.transformer.transform(voltage))
        current_half = self.transformer.extract_half_spectrum(self.transformer.transform(current))

        if len(voltage_half.values) != len(current_half.values):
            raise MismatchedLength(
                "voltage and current half spectra must have the same length",
                field="values",
                voltage_length=len(voltage_half.values),
                current_length=len(current_half.values)
            )

        impedance = self.divide_spectra(voltage_half, current_half)
        magnitude = [abs(z) for z in impedance]
        phase = [math.atan2(z.imag, z.real) for z in impedance]

        spectrum = ImpedanceSpectrum(
            timestamp=voltage.timestamp,
            impedance=impedance,
            frequencies=voltage_half.frequencies,
            magnitude=magnitude,
            phase=phase,
        )
        self.validator.validate_impedance(spectrum)

        logger.debug(
            "Computed impedance spectrum",
            bins=len(impedance),
            sample_rate=voltage.sample_rate,
            zeroed_bins=sum(1 for z in impedance if z == 0)
        )

        return EISMeasurement(voltage=voltage_half, current=current_half, impedance=spectrum)

    def divide_spectra(self, voltage: ComplexSpectrum, current: ComplexSpectrum) -> list[complex]:
        """
        Element-wise U/I with the near-zero current guard.

        Raises:
            InvalidImpedanceValue: A quotient is NaN or infinite
        """
        impedance = []
        for i, (u, c) in enumerate(zip(voltage.values, current.values)):
            if abs(c) < self.current_floor:
                impedance.append(0j)
                continue

            z = u / c
            if not (math.isfinite(z.real) and math.isfinite(z.imag)):
                raise InvalidImpedanceValue(
                    f"invalid impedance value at frequency index {i}", index=i
                )
            impedance.append(z)

        return impedance

    @staticmethod
    def to_points(spectrum: ImpedanceSpectrum) -> list[ImpedancePoint]:
        """Impedance as (frequency, real, imag) triples."""
        return [
            ImpedancePoint.from_complex(freq, z)
            for freq, z in zip(spectrum.frequencies, spectrum.impedance)
        ]
