"""HTTP POST measurement delivery mechanism."""

import socket
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.parse import urlparse
from urllib.request import Request, urlopen

import orjson

from ..config.delivery import HttpDeliveryConfig
from ..data.serialization import dumps
from .base import (
    BaseSender,
    DeliveryPermanentError,
    DeliveryResult,
    DeliveryRetryableError,
    DeliveryStatus,
)

ACCEPTED_STATUS_CODES = (200, 202)


class HttpSender(BaseSender):
    """HTTP POST sender with health tracking."""

    def __init__(self, name: str, config: HttpDeliveryConfig):
        super().__init__(name, config)
        self.config: HttpDeliveryConfig = config
        self.healthy = True

        # Validate URL
        parsed = urlparse(config.url)
        if not parsed.scheme or not parsed.netloc:
            raise DeliveryPermanentError(f"Invalid URL: {config.url}")

    def send(self, payload: Any, data_type: str) -> DeliveryResult:
        """POST a payload to the configured URL."""
        return self._post(self.config.url, payload, data_type)

    def send_batch(self, payload: dict[str, Any]) -> DeliveryResult:
        """POST an impedance batch to the batch endpoint."""
        return self._post(self.config.url + self.config.batch_suffix, payload, "Impedance-Batch")

    def send_batch_with_retry(
        self,
        payload: dict[str, Any],
        max_retries: int = 0,
        retry_delay: float = 1
    ) -> DeliveryResult:
        """POST an impedance batch with the same retry policy as ``send_with_retry``."""
        return self._retry(lambda: self.send_batch(payload), max_retries, retry_delay)

    def _post(self, url: str, payload: Any, data_type: str) -> DeliveryResult:
        try:
            data = dumps(payload)
        except orjson.JSONEncodeError as e:
            self.healthy = False
            self.logger.error("Payload JSON encoding failed", data_type=data_type, error=str(e))
            raise DeliveryPermanentError(f"JSON encoding error: {str(e)}") from e

        headers = {
            'Content-Type': 'application/json',
            'Content-Length': str(len(data)),
            'User-Agent': 'eis-app/0.1',
            'X-Data-Type': data_type,
        }
        if self.config.headers:
            headers.update(self.config.headers)

        req = Request(url, data=data, headers=headers, method=self.config.method)

        try:
            with urlopen(req, timeout=self.config.timeout_seconds) as response:
                response_code = response.getcode()
                response_data = response.read().decode('utf-8', errors='replace')

        except HTTPError as e:
            self.healthy = False
            self.logger.warning(
                "Measurement delivery HTTP error",
                url=url,
                error_code=e.code,
                error_reason=str(e.reason)
            )
            if e.code >= 500:
                raise DeliveryRetryableError(f"HTTP {e.code}: {e.reason}", delivery_method="http_post", status_code=e.code) from e
            raise DeliveryPermanentError(f"HTTP {e.code}: {e.reason}", delivery_method="http_post", status_code=e.code) from e

        except (OSError, URLError, socket.timeout) as e:
            # Network errors are retryable
            self.healthy = False
            self.logger.warning("Measurement delivery network error", url=url, error=str(e))
            raise DeliveryRetryableError(f"Network error: {str(e)}") from e

        if response_code not in ACCEPTED_STATUS_CODES:
            self.healthy = False
            self.logger.warning(
                "Measurement delivery rejected",
                url=url,
                response_code=response_code,
                response_data=response_data[:200]
            )
            raise DeliveryPermanentError(
                f"Invalid HTTP response {response_code}: {response_data[:200]}",
                delivery_method="http_post",
                status_code=response_code
            )

        self.healthy = True
        self.logger.info(
            "Measurement delivered",
            url=url,
            data_type=data_type,
            response_code=response_code
        )
        return DeliveryResult(
            status=DeliveryStatus.SUCCESS,
            message=f"HTTP {response_code}: {response_data[:100]}"
        )

    def health_check(self) -> bool:
        """Health as observed by the most recent request."""
        return self.healthy
