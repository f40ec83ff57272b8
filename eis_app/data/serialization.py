"""
Wire encoding for spectra and impedance measurements.

Consumers expect every complex number as a ``{"real": x, "imag": y}`` object
aligned index-for-index with its frequency array, and every timestamp as an
RFC-3339 string with nanosecond precision. Native complex formatting is
never used on the wire.
"""

from typing import Any

import orjson

from ..errors import LoaderError
from ..utils.time import format_rfc3339_nano, parse_rfc3339_nano
from .models import (
    ComplexSpectrum,
    EISMeasurement,
    ImpedanceBatch,
    ImpedancePoint,
    ImpedanceSpectrum,
)


def complex_to_wire(value: complex) -> dict[str, float]:
    """Encode a complex value as a real/imag pair."""
    return {"real": value.real, "imag": value.imag}


def complex_from_wire(payload: dict[str, Any]) -> complex:
    """Decode a real/imag pair."""
    return complex(float(payload["real"]), float(payload["imag"]))


def _timestamp(ts) -> Any:
    return format_rfc3339_nano(ts) if ts is not None else None


def spectrum_to_dict(spectrum: ComplexSpectrum) -> dict[str, Any]:
    return {
        "timestamp": _timestamp(spectrum.timestamp),
        "values": [complex_to_wire(v) for v in spectrum.values],
        "frequencies": list(spectrum.frequencies),
    }


def impedance_to_dict(spectrum: ImpedanceSpectrum) -> dict[str, Any]:
    return {
        "timestamp": _timestamp(spectrum.timestamp),
        "impedance": [complex_to_wire(z) for z in spectrum.impedance],
        "frequencies": list(spectrum.frequencies),
        "magnitude": list(spectrum.magnitude),
        "phase": list(spectrum.phase),
    }


def measurement_to_dict(measurement: EISMeasurement) -> dict[str, Any]:
    """Paired voltage/current/impedance export shape."""
    return {
        "voltage": spectrum_to_dict(measurement.voltage),
        "current": spectrum_to_dict(measurement.current),
        "impedance": impedance_to_dict(measurement.impedance),
    }


def points_to_dict(points: list[ImpedancePoint]) -> list[dict[str, float]]:
    """Impedance-with-frequency triples export shape."""
    return [
        {"frequency": p.frequency, "real": p.real, "imag": p.imag}
        for p in points
    ]


def batch_to_dict(batch: ImpedanceBatch) -> dict[str, Any]:
    return {
        "batch_id": batch.batch_id,
        "timestamp": _timestamp(batch.timestamp),
        "spectra": [
            {**impedance_to_dict(item.spectrum), "iteration": item.iteration}
            for item in batch.spectra
        ],
    }


def spectrum_from_dict(payload: dict[str, Any]) -> ComplexSpectrum:
    """
    Decode a spectrum from its wire shape.

    Raises:
        LoaderError: Missing fields or malformed values
    """
    try:
        return ComplexSpectrum(
            timestamp=_parse_timestamp(payload.get("timestamp")),
            values=[complex_from_wire(v) for v in payload["values"]],
            frequencies=[float(f) for f in payload["frequencies"]],
        )
    except (KeyError, TypeError, ValueError) as e:
        raise LoaderError(f"Malformed spectrum payload: {e}") from e


def impedance_from_dict(payload: dict[str, Any]) -> ImpedanceSpectrum:
    """
    Decode an impedance spectrum from its wire shape.

    Raises:
        LoaderError: Missing fields or malformed values
    """
    try:
        return ImpedanceSpectrum(
            timestamp=_parse_timestamp(payload.get("timestamp")),
            impedance=[complex_from_wire(z) for z in payload["impedance"]],
            frequencies=[float(f) for f in payload["frequencies"]],
            magnitude=[float(m) for m in payload.get("magnitude") or []],
            phase=[float(p) for p in payload.get("phase") or []],
        )
    except (KeyError, TypeError, ValueError) as e:
        raise LoaderError(f"Malformed impedance payload: {e}") from e


def measurement_from_dict(payload: dict[str, Any]) -> EISMeasurement:
    try:
        return EISMeasurement(
            voltage=spectrum_from_dict(payload["voltage"]),
            current=spectrum_from_dict(payload["current"]),
            impedance=impedance_from_dict(payload["impedance"]),
        )
    except KeyError as e:
        raise LoaderError(f"Malformed measurement payload: missing {e}") from e


def _parse_timestamp(value: Any):
    if value is None:
        return None
    return parse_rfc3339_nano(value)


def dumps(payload: Any, indent: bool = False) -> bytes:
    """Serialize a wire payload with orjson."""
    option = orjson.OPT_INDENT_2 if indent else 0
    return orjson.dumps(payload, option=option)


def loads(raw: bytes | str) -> Any:
    """
    Parse a JSON document.

    Raises:
        LoaderError: Invalid JSON
    """
    try:
        return orjson.loads(raw)
    except orjson.JSONDecodeError as e:
        raise LoaderError(f"Invalid JSON: {e}") from e
