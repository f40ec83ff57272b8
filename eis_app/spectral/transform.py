"""
Spectral transform engine.

Converts real-valued sample sequences into complex spectra with a
mixed-radix recursive FFT: even lengths split into radix-2 butterflies,
odd lengths greater than one fall back to a direct DFT. All functions are
pure and hold no state between calls, so one processor instance can be
shared across threads.
"""

import cmath
import math
from abc import ABC, abstractmethod
from typing import Optional, Sequence

import structlog

from ..data.models import ComplexSpectrum, RealSignal
from ..data.validators import DefaultSignalValidator, SignalValidator
from ..errors import ComputationError, InvalidLength, InvalidSampleRate

logger = structlog.get_logger(__name__)

TWO_PI = 2.0 * math.pi


class SpectralTransformer(ABC):
    """Transform capability injected into the impedance calculator."""

    @abstractmethod
    def transform(self, signal: RealSignal) -> ComplexSpectrum:
        """Full spectrum of a time-domain signal."""

    @abstractmethod
    def extract_half_spectrum(self, spectrum: ComplexSpectrum) -> ComplexSpectrum:
        """First half of a full spectrum."""


class FFTProcessor(SpectralTransformer):
    """FFT processing with input and output validation."""

    def __init__(self, validator: Optional[SignalValidator] = None) -> None:
        self.validator = validator or DefaultSignalValidator()

    def transform(self, signal: RealSignal) -> ComplexSpectrum:
        """
        Compute the full spectrum of a signal.

        Args:
            signal: Validated or unvalidated time-domain samples

        Returns:
            Spectrum with one value and one frequency bin per input sample;
            the back half of the bins is labelled with negative frequencies

        Raises:
            SignalQualityError: Input or output fails validation
            ComputationError: A twiddle factor could not be computed
        """
        self.validator.validate_real(signal)

        lifted = [complex(value, 0.0) for value in signal.values]
        values = compute_fft(lifted)
        frequencies = generate_frequencies(len(values), signal.sample_rate)

        spectrum = ComplexSpectrum(
            timestamp=signal.timestamp,
            values=values,
            frequencies=frequencies,
        )
        self.validator.validate_complex(spectrum, allow_negative_frequencies=True)

        logger.debug(
            "Computed spectrum",
            bins=len(values),
            sample_rate=signal.sample_rate
        )
        return spectrum

    def extract_half_spectrum(self, spectrum: ComplexSpectrum) -> ComplexSpectrum:
        """
        Keep the first ``max(1, n // 2)`` bins of a full spectrum.

        The cut is positional. For odd lengths the bin at index ``n // 2`` is
        dropped even though its frequency label is non-negative; consumers
        rely on this bin count.
        """
        self.validator.validate_complex(spectrum, allow_negative_frequencies=True)

        half = max(1, len(spectrum.values) // 2)
        result = ComplexSpectrum(
            timestamp=spectrum.timestamp,
            values=spectrum.values[:half],
            frequencies=spectrum.frequencies[:half],
        )
        self.validator.validate_complex(result, allow_negative_frequencies=False)
        return result


def compute_fft(values: Sequence[complex]) -> list[complex]:
    """
    Discrete Fourier transform by mixed-radix recursion.

    Args:
        values: Complex input sequence

    Returns:
        Transformed sequence of the same length

    Raises:
        InvalidLength: Empty input
        ComputationError: Non-finite twiddle angle
    """
    n = len(values)
    if n == 0:
        raise InvalidLength("signal length must be greater than 0", field="values")

    if n == 1:
        return [values[0]]

    if n % 2 != 0:
        return direct_dft(values)

    half = n // 2
    even = compute_fft(values[0::2])
    odd = compute_fft(values[1::2])

    # butterflies write straight into the even/odd buffers
    for k in range(half):
        angle = -TWO_PI * k / n
        if not math.isfinite(angle):
            raise ComputationError(
                f"invalid twiddle angle at k={k}", operation="fft", index=k
            )
        t = cmath.exp(complex(0.0, angle)) * odd[k]
        e = even[k]
        even[k] = e + t
        odd[k] = e - t

    even.extend(odd)
    return even


def direct_dft(values: Sequence[complex]) -> list[complex]:
    """
    Direct O(n²) DFT used for odd-length subproblems.

    Raises:
        InvalidLength: Empty input
        ComputationError: Non-finite twiddle angle
    """
    n = len(values)
    if n == 0:
        raise InvalidLength("signal length must be greater than 0", field="values")

    result = []
    for k in range(n):
        total = 0j
        for j, x in enumerate(values):
            angle = -TWO_PI * k * j / n
            if not math.isfinite(angle):
                raise ComputationError(
                    f"invalid twiddle angle at k={k}, j={j}", operation="dft", index=k
                )
            total += x * cmath.exp(complex(0.0, angle))
        result.append(total)

    return result


def generate_frequencies(n: int, sample_rate: float) -> list[float]:
    """
    Frequency label for every FFT output index.

    Index ``i < (n + 1) // 2`` maps to ``i * fs / n``; later indices map to
    ``(i - n) * fs / n``. For even n this is the ``i < n // 2`` split; for odd
    n the middle index stays non-negative and a single sample is the DC bin.

    Raises:
        InvalidLength: n is not positive
        InvalidSampleRate: sample_rate is not positive
    """
    if n <= 0:
        raise InvalidLength("signal length must be greater than 0", field="frequencies")

    if not sample_rate > 0:
        raise InvalidSampleRate(
            "sample rate must be greater than 0", field="sample_rate", sample_rate=sample_rate
        )

    positive = (n + 1) // 2
    return [
        (i if i < positive else i - n) * sample_rate / n
        for i in range(n)
    ]
