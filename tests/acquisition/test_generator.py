"""Tests for synthetic excitation/response signals."""

import math

import pytest

from eis_app.acquisition.generator import (
    CURRENT_DC,
    VOLTAGE_DC,
    SyntheticSignalGenerator,
    cell_response,
)
from eis_app.errors import InvalidLength, InvalidSampleRate


def test_same_seed_same_samples(measurement_time):
    a = SyntheticSignalGenerator(seed=42).generate_voltage(1000.0, 100, measurement_time)
    b = SyntheticSignalGenerator(seed=42).generate_voltage(1000.0, 100, measurement_time)
    assert a == b


def test_different_seed_different_noise(measurement_time):
    a = SyntheticSignalGenerator(seed=1).generate_current(1000.0, 100, measurement_time)
    b = SyntheticSignalGenerator(seed=2).generate_current(1000.0, 100, measurement_time)
    assert a.values != b.values


def test_signal_shape(validator):
    voltage = SyntheticSignalGenerator(seed=0).generate_voltage(1000.0, 250)

    assert len(voltage) == 250
    assert voltage.sample_rate == 1000.0
    validator.validate_real(voltage)


def test_dc_offsets():
    # One full second so every excitation sine completes whole periods
    generator = SyntheticSignalGenerator(seed=3)
    voltage = generator.generate_voltage(1000.0, 1000)
    current = generator.generate_current(1000.0, 1000)

    assert sum(voltage.values) / len(voltage) == pytest.approx(VOLTAGE_DC, abs=1e-3)
    assert sum(current.values) / len(current) == pytest.approx(CURRENT_DC, abs=1e-3)


def test_pair_shares_timestamp():
    voltage, current = SyntheticSignalGenerator(seed=5).generate_pair(500.0, 64)
    assert voltage.timestamp == current.timestamp
    assert voltage.timestamp is not None


def test_cell_response_decreases_with_frequency():
    low, _ = cell_response(1.0)
    high, _ = cell_response(500.0)
    assert low > high > 10.0
    assert cell_response(0.0) == (30.0, 0.0)
    assert cell_response(50.0)[1] == pytest.approx(math.pi / 8)


@pytest.mark.parametrize("rate", [0.0, -10.0, math.nan, math.inf])
def test_invalid_sample_rate(rate):
    with pytest.raises(InvalidSampleRate):
        SyntheticSignalGenerator().generate_voltage(rate, 10)


def test_invalid_sample_count():
    with pytest.raises(InvalidLength):
        SyntheticSignalGenerator().generate_current(1000.0, 0)
