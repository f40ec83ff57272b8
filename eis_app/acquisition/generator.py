"""
Synthetic excitation and response signals.

The voltage is a multi-sine excitation on a DC offset. The current is the
response of a simplified R(RC) cell to that excitation, so the impedance
computed from a generated pair looks like a real EIS sweep.
"""

import math
import random
from datetime import datetime
from typing import Optional

from ..data.models import RealSignal
from ..errors import InvalidLength, InvalidSampleRate
from ..utils.time import utc_now

EXCITATION_FREQUENCIES = (1.0, 5.0, 10.0, 25.0, 50.0, 100.0, 250.0, 500.0)
EXCITATION_AMPLITUDES = (0.2, 0.15, 0.12, 0.1, 0.08, 0.06, 0.04, 0.02)

VOLTAGE_DC = 1.0
VOLTAGE_NOISE = 0.01
CURRENT_DC = 0.05
CURRENT_NOISE = 0.005


def cell_response(frequency: float) -> tuple[float, float]:
    """(|Z| in ohms, phase shift in radians) of the simulated cell."""
    magnitude = 10.0 + 20.0 / (1.0 + frequency / 10.0)
    phase_shift = math.atan(frequency / 50.0) * 0.5
    return magnitude, phase_shift


class SyntheticSignalGenerator:
    """Generates voltage/current sample windows for simulation and tests."""

    def __init__(self, seed: Optional[int] = None):
        self._rng = random.Random(seed)

    def generate_voltage(
        self,
        sample_rate: float,
        samples: int,
        timestamp: Optional[datetime] = None
    ) -> RealSignal:
        _check_arguments(sample_rate, samples)

        values = []
        for i in range(samples):
            t = i / sample_rate
            signal = sum(
                amplitude * math.sin(2 * math.pi * freq * t)
                for freq, amplitude in zip(EXCITATION_FREQUENCIES, EXCITATION_AMPLITUDES)
            )
            values.append(VOLTAGE_DC + signal + VOLTAGE_NOISE * (self._rng.random() - 0.5))

        return RealSignal(timestamp=timestamp or utc_now(), values=values, sample_rate=sample_rate)

    def generate_current(
        self,
        sample_rate: float,
        samples: int,
        timestamp: Optional[datetime] = None
    ) -> RealSignal:
        _check_arguments(sample_rate, samples)

        components = []
        for freq, amplitude in zip(EXCITATION_FREQUENCIES, EXCITATION_AMPLITUDES):
            magnitude, phase_shift = cell_response(freq)
            components.append((freq, amplitude / magnitude, phase_shift))

        values = []
        for i in range(samples):
            t = i / sample_rate
            signal = sum(
                amplitude * math.sin(2 * math.pi * freq * t - phase_shift)
                for freq, amplitude, phase_shift in components
            )
            values.append(CURRENT_DC + signal + CURRENT_NOISE * (self._rng.random() - 0.5))

        return RealSignal(timestamp=timestamp or utc_now(), values=values, sample_rate=sample_rate)

    def generate_pair(self, sample_rate: float, samples: int) -> tuple[RealSignal, RealSignal]:
        """Voltage and current sharing one acquisition timestamp."""
        timestamp = utc_now()
        return (
            self.generate_voltage(sample_rate, samples, timestamp),
            self.generate_current(sample_rate, samples, timestamp),
        )


def _check_arguments(sample_rate: float, samples: int) -> None:
    if not math.isfinite(sample_rate) or sample_rate <= 0:
        raise InvalidSampleRate(
            f"Sample rate must be positive, got {sample_rate}",
            sample_rate=sample_rate,
            field="sample_rate",
        )
    if samples <= 0:
        raise InvalidLength(
            f"Samples per window must be positive, got {samples}",
            field="samples",
        )
