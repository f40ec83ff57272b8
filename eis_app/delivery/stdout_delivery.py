"""Standard output measurement delivery mechanism."""

import sys
from typing import Any

from ..config.delivery import StdoutDeliveryConfig
from ..data.serialization import dumps
from .base import (
    BaseSender,
    DeliveryPermanentError,
    DeliveryResult,
    DeliveryRetryableError,
    DeliveryStatus,
)


class StdoutSender(BaseSender):
    """Prints each payload as one JSON document."""

    def __init__(self, name: str, config: StdoutDeliveryConfig):
        super().__init__(name, config)
        self.config: StdoutDeliveryConfig = config

    def send(self, payload: Any, data_type: str) -> DeliveryResult:
        try:
            output = dumps(payload, indent=self.config.indent).decode("utf-8")
        except TypeError as e:
            raise DeliveryPermanentError(f"JSON encoding error: {str(e)}") from e

        try:
            print(output, file=sys.stdout, flush=True)
        except OSError as e:
            self.logger.warning("Stdout write failed", error=str(e))
            raise DeliveryRetryableError(f"Stdout write error: {str(e)}") from e

        self.logger.debug("Measurement printed to stdout", data_type=data_type)
        return DeliveryResult(status=DeliveryStatus.SUCCESS, message="Printed to stdout")

    def health_check(self) -> bool:
        """Check if stdout is available."""
        try:
            return sys.stdout.writable()
        except (OSError, ValueError):
            return False
