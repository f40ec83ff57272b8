"""Closed-form circuit-model impedance synthesis.

Generates spectra for an R_s + (R_ct || CPE) equivalent circuit whose charge
transfer resistance grows with every spectrum, simulating a degrading cell.
This path does not use the FFT engine.
"""

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..data.models import ImpedanceSpectrum
from ..errors import ConfigurationError, InvalidLength
from ..utils.time import utc_now


@dataclass(frozen=True)
class CircuitParameters:
    """Parameters of the R_s + (R_ct || CPE) model."""
    rs: float            # Solution resistance (constant)
    rct_initial: float   # Initial charge transfer resistance
    rct_growth: float    # R_ct growth per spectrum
    q: float             # CPE coefficient
    n: float             # CPE exponent


CIRCUIT_PRESETS: dict[str, CircuitParameters] = {
    "simple": CircuitParameters(rs=10.0, rct_initial=20.0, rct_growth=8.0, q=1e-5, n=0.85),
    "medium": CircuitParameters(rs=15.0, rct_initial=50.0, rct_growth=12.0, q=5e-6, n=0.75),
    "complex": CircuitParameters(rs=8.0, rct_initial=80.0, rct_growth=20.0, q=2e-6, n=0.65),
}


def get_circuit_parameters(circuit: str) -> CircuitParameters:
    """Preset parameters by name."""
    try:
        return CIRCUIT_PRESETS[circuit]
    except KeyError:
        raise ConfigurationError(
            f"Unknown circuit preset: {circuit}", field="circuit", value=circuit
        ) from None


def log_frequencies(num_points: int, log_start: float = 5.0, log_end: float = -2.0) -> list[float]:
    """
    Logarithmically spaced frequencies from 10**log_start to 10**log_end.

    The default sweep runs from 100 kHz down to 10 mHz.
    """
    if num_points <= 0:
        raise InvalidLength("number of frequency points must be greater than 0", field="frequencies")

    if num_points == 1:
        return [10.0 ** log_start]

    step = (log_end - log_start) / (num_points - 1)
    return [10.0 ** (log_start + i * step) for i in range(num_points)]


def circuit_impedance(frequency: float, rct: float, params: CircuitParameters) -> complex:
    """Z = R_s + (R_ct * Z_cpe) / (R_ct + Z_cpe) with Z_cpe = 1 / (Q * (jw)^n)."""
    w = 2.0 * math.pi * frequency
    z_cpe = 1.0 / (params.q * (1j * w) ** params.n)
    z_parallel = (rct * z_cpe) / (rct + z_cpe)
    return params.rs + z_parallel


class EISSpectrumGenerator:
    """Generates successive circuit-model spectra.

    The spectrum counter belongs to the instance; two generators never share
    progress.
    """

    def __init__(self, num_points: int = 50, log_start: float = 5.0, log_end: float = -2.0):
        self.frequencies = log_frequencies(num_points, log_start, log_end)
        self._spectrum_counter = 0

    @property
    def current_spectrum(self) -> int:
        return self._spectrum_counter

    def reset(self) -> None:
        self._spectrum_counter = 0

    def generate_spectrum(self, params: CircuitParameters,
                          timestamp: Optional[datetime] = None) -> ImpedanceSpectrum:
        """Next spectrum in the sequence; advances the counter."""
        rct = params.rct_initial + self._spectrum_counter * params.rct_growth
        impedance = [circuit_impedance(freq, rct, params) for freq in self.frequencies]

        spectrum = ImpedanceSpectrum(
            timestamp=timestamp or utc_now(),
            impedance=impedance,
            frequencies=self.frequencies,
        ).with_magnitude_phase()

        self._spectrum_counter += 1
        return spectrum
