"""File-based measurement delivery mechanism."""

from datetime import datetime
from pathlib import Path
from typing import Any

import orjson

from ..config.delivery import FileDeliveryConfig
from ..data.serialization import dumps
from .base import (
    BaseSender,
    DeliveryPermanentError,
    DeliveryResult,
    DeliveryRetryableError,
    DeliveryStatus,
)

FILE_PREFIX = "eis_measurement"


class FileSender(BaseSender):
    """Writes each payload to its own JSON or CSV file."""

    def __init__(self, name: str, config: FileDeliveryConfig):
        super().__init__(name, config)
        self.config: FileDeliveryConfig = config

        if config.format not in ["json", "csv"]:
            raise DeliveryPermanentError(f"Unsupported format: {config.format}")

        self.output_dir = Path(config.output_dir) / config.format
        if config.create_dirs:
            self.output_dir.mkdir(parents=True, exist_ok=True)

        self._file_counter = 0

    def send(self, payload: Any, data_type: str) -> DeliveryResult:
        """Write a payload to the next numbered file."""
        self._file_counter += 1
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        file_path = self.output_dir / f"{FILE_PREFIX}_{timestamp}_{self._file_counter:03d}.{self.config.format}"

        try:
            if self.config.format == "json":
                file_path.write_bytes(dumps(payload, indent=self.config.indent))
            else:
                file_path.write_text(self._format_csv(payload))

        except OSError as e:
            self.logger.warning("Measurement file write failed", output_path=str(file_path), error=str(e))
            raise DeliveryRetryableError(f"File system error: {str(e)}") from e

        except orjson.JSONEncodeError as e:
            self.logger.error("Measurement JSON encoding failed", error=str(e))
            raise DeliveryPermanentError(f"JSON encoding error: {str(e)}") from e

        self.logger.info("Measurement written to file", output_path=str(file_path), data_type=data_type)
        return DeliveryResult(status=DeliveryStatus.SUCCESS, message=f"Written to {file_path}")

    def _format_csv(self, payload: Any) -> str:
        lines = ["frequency,real,imag"]
        for point in _points_from_payload(payload):
            lines.append(f"{point['frequency']:.6g},{point['real']:.6f},{point['imag']:.6f}")
        return "\n".join(lines) + "\n"

    def health_check(self) -> bool:
        """Check if the output directory is writable."""
        try:
            test_file = self.output_dir / ".health_check_test"
            test_file.write_text("test")
            test_file.unlink()
            return True

        except OSError as e:
            self.logger.warning("Health check failed", error=str(e))
            return False


def _points_from_payload(payload: Any) -> list[dict[str, float]]:
    """Frequency/real/imag rows from any of the export shapes."""
    if isinstance(payload, list):
        return payload

    if isinstance(payload, dict):
        spectrum = payload.get("impedance", payload)
        if isinstance(spectrum, dict) and "frequencies" in spectrum:
            return [
                {"frequency": freq, "real": z["real"], "imag": z["imag"]}
                for freq, z in zip(spectrum["frequencies"], spectrum["impedance"])
            ]

    raise DeliveryPermanentError("Payload has no impedance data for CSV output")
