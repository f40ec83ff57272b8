"""
Canonical data models for impedance measurements.

This module defines immutable data structures that represent one measurement
cycle as it moves through the pipeline: raw time-domain samples, their
frequency-domain spectra, and the resulting impedance spectrum.
"""

import math
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Optional, Sequence


def _freeze(values: Sequence) -> tuple:
    return values if isinstance(values, tuple) else tuple(values)


@dataclass(frozen=True)
class RealSignal:
    """Time-domain samples in acquisition order."""
    timestamp: Optional[datetime]      # Acquisition time of the first sample
    values: tuple[float, ...]          # Sample values, insertion order = time order
    sample_rate: float                 # Hz

    def __post_init__(self):
        object.__setattr__(self, "values", _freeze(self.values))

    def __len__(self) -> int:
        return len(self.values)

    def is_empty(self) -> bool:
        """True if the signal contains no samples."""
        return len(self.values) == 0

    def duration(self) -> float:
        """Signal duration in seconds, 0 when undefined."""
        if self.sample_rate <= 0 or not self.values:
            return 0.0
        return len(self.values) / self.sample_rate


@dataclass(frozen=True)
class ComplexSpectrum:
    """Frequency-domain representation with one bin label per value."""
    timestamp: Optional[datetime]
    values: tuple[complex, ...]
    frequencies: tuple[float, ...]     # Hz, may be negative in a full spectrum

    def __post_init__(self):
        object.__setattr__(self, "values", _freeze(self.values))
        object.__setattr__(self, "frequencies", _freeze(self.frequencies))

    def __len__(self) -> int:
        return len(self.values)

    def is_empty(self) -> bool:
        return len(self.values) == 0


@dataclass(frozen=True)
class ImpedanceSpectrum:
    """Complex impedance Z(f) with derived magnitude and phase (radians)."""
    timestamp: Optional[datetime]
    impedance: tuple[complex, ...]
    frequencies: tuple[float, ...]
    magnitude: tuple[float, ...] = field(default_factory=tuple)
    phase: tuple[float, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "impedance", _freeze(self.impedance))
        object.__setattr__(self, "frequencies", _freeze(self.frequencies))
        object.__setattr__(self, "magnitude", _freeze(self.magnitude))
        object.__setattr__(self, "phase", _freeze(self.phase))

    def __len__(self) -> int:
        return len(self.impedance)

    def is_empty(self) -> bool:
        return len(self.impedance) == 0

    def magnitude_phase(self) -> tuple[tuple[float, ...], tuple[float, ...]]:
        """Recompute (|Z|, atan2(Im, Re)) from the impedance values."""
        magnitude = tuple(abs(z) for z in self.impedance)
        phase = tuple(math.atan2(z.imag, z.real) for z in self.impedance)
        return magnitude, phase

    def with_magnitude_phase(self) -> "ImpedanceSpectrum":
        """Copy of this spectrum with magnitude and phase populated."""
        magnitude, phase = self.magnitude_phase()
        return replace(self, magnitude=magnitude, phase=phase)


@dataclass(frozen=True)
class EISMeasurement:
    """Impedance spectrum packaged with the two half-spectra it came from."""
    voltage: ComplexSpectrum
    current: ComplexSpectrum
    impedance: ImpedanceSpectrum


@dataclass(frozen=True)
class ImpedancePoint:
    """Single impedance value with its frequency."""
    frequency: float
    real: float
    imag: float

    @classmethod
    def from_complex(cls, frequency: float, z: complex) -> "ImpedancePoint":
        return cls(frequency=frequency, real=z.real, imag=z.imag)


@dataclass(frozen=True)
class ImpedanceBatchItem:
    """Impedance spectrum tagged with its position in a sequence."""
    spectrum: ImpedanceSpectrum
    iteration: int


@dataclass(frozen=True)
class ImpedanceBatch:
    """Group of spectra sent to a consumer in one request."""
    batch_id: str
    timestamp: datetime
    spectra: tuple[ImpedanceBatchItem, ...]

    def __post_init__(self):
        object.__setattr__(self, "spectra", _freeze(self.spectra))
