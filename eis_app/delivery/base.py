"""Base classes for measurement delivery mechanisms."""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

from ..errors import DeliveryError
from ..logging.config import get_delivery_logger


class DeliveryStatus(Enum):
    """Measurement delivery status."""
    SUCCESS = "success"
    FAILED = "failed"
    DEAD_LETTER = "dead_letter"


@dataclass
class DeliveryResult:
    """Result of a delivery attempt."""
    status: DeliveryStatus
    message: Optional[str] = None
    attempt_count: int = 1
    delivery_time_ms: Optional[int] = None
    error: Optional[Exception] = None


class MeasurementDeliveryError(DeliveryError):
    """Base exception for measurement delivery errors."""
    pass


class DeliveryRetryableError(MeasurementDeliveryError):
    """Retryable delivery error."""
    pass


class DeliveryPermanentError(MeasurementDeliveryError):
    """Permanent delivery error that should not be retried."""
    pass


class BaseSender(ABC):
    """Base class for measurement senders."""

    def __init__(self, name: str, config: Any):
        self.name = name
        self.config = config
        self.logger = get_delivery_logger(__name__, name)
        self._delivery_count = 0
        self._error_count = 0

    @abstractmethod
    def send(self, payload: Any, data_type: str) -> DeliveryResult:
        """
        Deliver one wire payload.

        Args:
            payload: JSON-ready payload (dict or list)
            data_type: Payload kind, e.g. ``EIS-Measurement``

        Returns:
            Result of the attempt

        Raises:
            DeliveryRetryableError: Transient failure
            DeliveryPermanentError: Failure that will not go away on retry
        """
        pass

    @abstractmethod
    def health_check(self) -> bool:
        """Check if delivery mechanism is healthy."""
        pass

    def send_with_retry(
        self,
        payload: Any,
        data_type: str,
        max_retries: int = 0,
        retry_delay: float = 1
    ) -> DeliveryResult:
        """
        Deliver a payload with retry logic.

        Args:
            payload: JSON-ready payload
            data_type: Payload kind
            max_retries: Maximum number of retry attempts
            retry_delay: Delay between retries in seconds

        Returns:
            Final delivery result
        """
        return self._retry(lambda: self.send(payload, data_type), max_retries, retry_delay)

    def _retry(
        self,
        attempt_fn: Callable[[], DeliveryResult],
        max_retries: int,
        retry_delay: float
    ) -> DeliveryResult:
        attempt = 0
        last_error: Optional[Exception] = None

        while attempt <= max_retries:
            try:
                start_time = time.time()
                result = attempt_fn()
                delivery_time = int((time.time() - start_time) * 1000)

                if result.status == DeliveryStatus.SUCCESS:
                    result.delivery_time_ms = delivery_time
                    result.attempt_count = attempt + 1
                    self._delivery_count += 1
                    return result

                last_error = result.error

            except DeliveryPermanentError as e:
                # Don't retry permanent errors
                self._error_count += 1
                return DeliveryResult(
                    status=DeliveryStatus.FAILED,
                    message=f"Permanent error: {str(e)}",
                    attempt_count=attempt + 1,
                    error=e
                )

            except DeliveryRetryableError as e:
                last_error = e

            except Exception as e:
                # Unknown error - treat as retryable
                self.logger.warning("Unexpected delivery error", error_type=type(e).__name__, error=str(e))
                last_error = e

            attempt += 1

            if attempt <= max_retries:
                self.logger.warning(
                    "Delivery attempt failed, retrying",
                    attempt=attempt,
                    retry_delay=retry_delay,
                    error=str(last_error)
                )
                time.sleep(retry_delay)

        self._error_count += 1
        return DeliveryResult(
            status=DeliveryStatus.DEAD_LETTER if max_retries > 0 else DeliveryStatus.FAILED,
            message=f"Delivery failed after {attempt} attempt(s): {str(last_error)}",
            attempt_count=attempt,
            error=last_error
        )

    def get_stats(self) -> dict[str, Any]:
        """Get delivery statistics."""
        return {
            "name": self.name,
            "delivery_count": self._delivery_count,
            "error_count": self._error_count,
            "success_rate": (
                self._delivery_count / (self._delivery_count + self._error_count)
                if (self._delivery_count + self._error_count) > 0 else 0.0
            )
        }
