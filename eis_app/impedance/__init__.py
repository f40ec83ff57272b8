"""Impedance calculation and circuit-model synthesis"""

from .calculator import DefaultImpedanceCalculator, ImpedanceCalculator
from .circuit import (
    CIRCUIT_PRESETS,
    CircuitParameters,
    EISSpectrumGenerator,
    get_circuit_parameters,
    log_frequencies,
)

__all__ = [
    "ImpedanceCalculator",
    "DefaultImpedanceCalculator",
    "CircuitParameters",
    "CIRCUIT_PRESETS",
    "EISSpectrumGenerator",
    "get_circuit_parameters",
    "log_frequencies",
]
