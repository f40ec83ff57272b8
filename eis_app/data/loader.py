"""
CSV ingestion for recorded signals and impedance spectra.

Signal files hold one sample per row as ``timestamp,time_offset,value`` with a
header line. Rows are grouped into one-second chunks (``int(sample_rate)``
rows each); the first row of every chunk stamps the resulting signal.
Impedance files hold ``Frequency_Hz,Z_real,Z_imag,Spectrum_Number`` rows.
"""

import csv
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional, Union

import structlog

from ..errors import LoaderError, SignalQualityError
from ..utils.time import parse_rfc3339_nano, timestamp_drift_seconds
from .models import ImpedanceBatchItem, ImpedanceSpectrum, RealSignal
from .validators import DefaultSignalValidator, SignalValidator, validate_signals_match

logger = structlog.get_logger(__name__)

PathLike = Union[str, Path]


class CSVSignalLoader:
    """Loads voltage/current signals and impedance spectra from CSV files."""

    def __init__(self, validator: Optional[SignalValidator] = None):
        self.validator = validator or DefaultSignalValidator()

    def load_signals(self, path: PathLike, sample_rate: float) -> list[RealSignal]:
        """
        Load a signal file as consecutive one-second signals.

        Args:
            path: CSV file with a header and ``timestamp,time_offset,value`` rows
            sample_rate: Sample rate of the recording in Hz

        Returns:
            Validated signals in file order

        Raises:
            LoaderError: File unreadable or rows malformed
            SignalQualityError: A chunk fails validation
        """
        rows = self._read_rows(path)

        if len(rows) < 2:
            raise LoaderError(
                "CSV file must have at least header and one data row", path=str(path)
            )

        chunk_size = int(sample_rate)
        if chunk_size <= 0:
            raise LoaderError(
                f"sample rate {sample_rate} gives an empty chunk size", path=str(path)
            )

        data_rows = rows[1:]
        signals = []

        for start in range(0, len(data_rows), chunk_size):
            chunk = data_rows[start:start + chunk_size]
            # +2: header line and 1-based numbering
            signal = self._parse_chunk(chunk, sample_rate, str(path), first_line=start + 2)
            self.validator.validate_real(signal)
            signals.append(signal)

        logger.info(
            "Loaded signals from CSV",
            path=str(path),
            samples=len(data_rows),
            signals=len(signals)
        )
        return signals

    def load_pair(
        self,
        voltage_path: PathLike,
        current_path: PathLike,
        sample_rate: float
    ) -> tuple[list[RealSignal], list[RealSignal]]:
        """
        Load matching voltage and current recordings.

        Raises:
            LoaderError: Files hold a different number of signals
            SignalQualityError: A pair is not compatible
        """
        voltage_signals = self.load_signals(voltage_path, sample_rate)
        current_signals = self.load_signals(current_path, sample_rate)

        if len(voltage_signals) != len(current_signals):
            raise LoaderError(
                f"voltage and current must have same number of signals: "
                f"got {len(voltage_signals)} voltage, {len(current_signals)} current"
            )

        for i, (voltage, current) in enumerate(zip(voltage_signals, current_signals)):
            try:
                validate_signals_match(voltage, current)
            except SignalQualityError as e:
                e.context.setdefault("pair_index", i)
                raise

        return voltage_signals, current_signals

    def load_impedance(self, path: PathLike) -> list[ImpedanceBatchItem]:
        """
        Load impedance spectra grouped by spectrum number.

        Returns:
            One batch item per spectrum number, ordered by number
        """
        rows = self._read_rows(path)
        if len(rows) < 2:
            raise LoaderError(
                "CSV file must have at least header and one data row", path=str(path)
            )

        header = [h.strip() for h in rows[0]]
        try:
            freq_col = header.index("Frequency_Hz")
            real_col = header.index("Z_real")
            imag_col = header.index("Z_imag")
            number_col = header.index("Spectrum_Number")
        except ValueError as e:
            raise LoaderError(f"Missing impedance column: {e}", path=str(path)) from e

        grouped: dict[int, list[tuple[float, complex]]] = {}
        for line, record in enumerate(rows[1:], start=2):
            try:
                number = int(float(record[number_col]))
                freq = float(record[freq_col])
                z = complex(float(record[real_col]), float(record[imag_col]))
            except (IndexError, ValueError) as e:
                raise LoaderError(
                    f"Invalid impedance row: {e}", path=str(path), line=line
                ) from e
            grouped.setdefault(number, []).append((freq, z))

        timestamp = _file_timestamp(path)
        items = []
        for number in sorted(grouped):
            points = grouped[number]
            spectrum = ImpedanceSpectrum(
                timestamp=timestamp,
                impedance=[z for _, z in points],
                frequencies=[f for f, _ in points],
            ).with_magnitude_phase()
            self.validator.validate_impedance(spectrum)
            items.append(ImpedanceBatchItem(spectrum=spectrum, iteration=number))

        logger.info("Loaded impedance spectra from CSV", path=str(path), spectra=len(items))
        return items

    def _read_rows(self, path: PathLike) -> list[list[str]]:
        try:
            with open(path, newline="") as f:
                return [row for row in csv.reader(f) if row]
        except OSError as e:
            raise LoaderError(f"failed to open {path}: {e}", path=str(path)) from e
        except csv.Error as e:
            raise LoaderError(f"failed to read CSV: {e}", path=str(path)) from e

    def _parse_chunk(
        self,
        records: list[list[str]],
        sample_rate: float,
        path: str,
        first_line: int
    ) -> RealSignal:
        values = []
        timestamp = None

        for offset, record in enumerate(records):
            line = first_line + offset
            if len(record) < 3:
                raise LoaderError(
                    "record must have at least 3 columns", path=path, line=line
                )

            if offset == 0:
                try:
                    timestamp = parse_rfc3339_nano(record[0])
                except ValueError as e:
                    raise LoaderError(
                        f"invalid timestamp format: {e}", path=path, line=line
                    ) from e

            try:
                values.append(float(record[2]))
            except ValueError as e:
                raise LoaderError(f"invalid value: {e}", path=path, line=line) from e

        return RealSignal(timestamp=timestamp, values=values, sample_rate=sample_rate)


def describe_files(voltage_path: PathLike, current_path: PathLike) -> dict[str, Any]:
    """
    Summarize a pair of signal files without building signals.

    Returns:
        Sample counts, file names and, when both files have data, the
        recording duration and the sample rate it implies
    """
    loader = CSVSignalLoader()
    voltage_rows = loader._read_rows(voltage_path)
    current_rows = loader._read_rows(current_path)

    info: dict[str, Any] = {
        "voltage_samples": max(len(voltage_rows) - 1, 0),
        "current_samples": max(len(current_rows) - 1, 0),
        "voltage_file": str(voltage_path),
        "current_file": str(current_path),
    }

    if len(voltage_rows) > 1 and len(current_rows) > 1:
        try:
            first = parse_rfc3339_nano(voltage_rows[1][0])
            last = parse_rfc3339_nano(voltage_rows[-1][0])
        except (ValueError, IndexError):
            return info

        duration = timestamp_drift_seconds(last, first)
        info["duration_seconds"] = duration
        if duration > 0:
            info["estimated_sample_rate"] = (len(voltage_rows) - 1) / duration

    return info


def _file_timestamp(path: PathLike) -> datetime:
    return datetime.fromtimestamp(Path(path).stat().st_mtime, tz=timezone.utc)
