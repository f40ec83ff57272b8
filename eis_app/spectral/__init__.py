"""Spectral transform engine for time-domain measurement signals"""

from .transform import (
    FFTProcessor,
    SpectralTransformer,
    compute_fft,
    direct_dft,
    generate_frequencies,
)

__all__ = [
    "SpectralTransformer",
    "FFTProcessor",
    "compute_fft",
    "direct_dft",
    "generate_frequencies",
]
