"""
Measurement delivery module.

Ships serialized measurements and impedance batches to HTTP endpoints,
JSON/CSV files or stdout.
"""

import structlog

from ..config.delivery import DeliveryConfig, DeliveryMethod
from .base import (
    BaseSender,
    DeliveryPermanentError,
    DeliveryResult,
    DeliveryRetryableError,
    DeliveryStatus,
    MeasurementDeliveryError,
)
from .file_delivery import FileSender
from .http_delivery import HttpSender
from .stdout_delivery import StdoutSender

logger = structlog.get_logger(__name__)


def build_senders(delivery_config: DeliveryConfig) -> dict[str, BaseSender]:
    """Instantiate one sender per enabled destination."""
    senders: dict[str, BaseSender] = {}
    if not delivery_config.enabled:
        return senders

    for destination in delivery_config.destinations:
        if not destination.enabled:
            continue

        try:
            if destination.method == DeliveryMethod.HTTP_POST:
                sender: BaseSender = HttpSender(destination.name, destination.config)
            elif destination.method == DeliveryMethod.FILE_OUTPUT:
                sender = FileSender(destination.name, destination.config)
            elif destination.method == DeliveryMethod.STDOUT:
                sender = StdoutSender(destination.name, destination.config)
            else:
                logger.warning("Unsupported delivery method", method=str(destination.method))
                continue

        except (MeasurementDeliveryError, OSError) as e:
            logger.error("Failed to initialize sender", destination=destination.name, error=str(e))
            continue

        senders[destination.name] = sender
        logger.info("Initialized sender", destination=destination.name)

    return senders


__all__ = [
    "BaseSender",
    "DeliveryPermanentError",
    "DeliveryResult",
    "DeliveryRetryableError",
    "DeliveryStatus",
    "MeasurementDeliveryError",
    "FileSender",
    "HttpSender",
    "StdoutSender",
    "build_senders",
]
