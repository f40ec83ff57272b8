"""Pytest configuration and shared fixtures."""

import math
from datetime import datetime, timezone
from typing import Callable, Optional, Sequence

import pytest

from eis_app.data.models import RealSignal
from eis_app.data.validators import DefaultSignalValidator
from eis_app.impedance.calculator import DefaultImpedanceCalculator
from eis_app.logging.config import configure_logging
from eis_app.spectral.transform import FFTProcessor

MEASUREMENT_TIME = datetime(2024, 5, 1, 12, 0, 0, 123456, tzinfo=timezone.utc)


@pytest.fixture(scope="session", autouse=True)
def _route_logs_to_stderr():
    """Route structlog output to stderr, as the CLI does, so stdout carries only payloads."""
    configure_logging(level="DEBUG")


@pytest.fixture
def measurement_time() -> datetime:
    """Fixed, non-zero acquisition timestamp."""
    return MEASUREMENT_TIME


@pytest.fixture
def make_signal() -> Callable[..., RealSignal]:
    """Factory for real signals with sensible defaults."""
    def _make(
        values: Sequence[float],
        sample_rate: float = 4.0,
        timestamp: Optional[datetime] = MEASUREMENT_TIME
    ) -> RealSignal:
        return RealSignal(timestamp=timestamp, values=values, sample_rate=sample_rate)

    return _make


@pytest.fixture
def sine_pair(make_signal):
    """Voltage/current pair of 64 samples: current lags voltage by a quarter period."""
    n = 64
    rate = 64.0
    voltage = [2.0 * math.sin(2 * math.pi * 4 * i / n) for i in range(n)]
    current = [0.5 * math.sin(2 * math.pi * 4 * i / n - math.pi / 2) for i in range(n)]
    return make_signal(voltage, rate), make_signal(current, rate)


@pytest.fixture
def validator() -> DefaultSignalValidator:
    return DefaultSignalValidator()


@pytest.fixture
def processor(validator) -> FFTProcessor:
    return FFTProcessor(validator)


@pytest.fixture
def calculator(processor, validator) -> DefaultImpedanceCalculator:
    return DefaultImpedanceCalculator(transformer=processor, validator=validator)


@pytest.fixture
def signal_csv(tmp_path):
    """Writer for ``timestamp,time_offset,value`` signal files."""
    def _write(name: str, values: Sequence[float], sample_rate: float = 4.0,
               start: datetime = MEASUREMENT_TIME) -> str:
        lines = ["timestamp,time_offset,value"]
        for i, value in enumerate(values):
            offset = i / sample_rate
            ts = start.timestamp() + offset
            stamp = datetime.fromtimestamp(ts, tz=timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f") + "000Z"
            lines.append(f"{stamp},{offset},{value}")
        path = tmp_path / name
        path.write_text("\n".join(lines) + "\n")
        return str(path)

    return _write
