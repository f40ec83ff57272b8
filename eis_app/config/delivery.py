"""Configuration for measurement delivery mechanisms."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from .defaults import OutputParams


class DeliveryMethod(Enum):
    """Supported measurement delivery methods."""
    HTTP_POST = "http_post"
    FILE_OUTPUT = "file_output"
    STDOUT = "stdout"


@dataclass(frozen=True)
class HttpDeliveryConfig:
    """Configuration for HTTP POST delivery."""
    url: str
    method: str = "POST"
    headers: Optional[dict[str, str]] = None
    timeout_seconds: int = 10
    batch_suffix: str = "/batch"


@dataclass(frozen=True)
class FileDeliveryConfig:
    """Configuration for file-based delivery."""
    output_dir: str = "output"
    format: str = "json"  # json, csv
    create_dirs: bool = True
    indent: bool = True


@dataclass(frozen=True)
class StdoutDeliveryConfig:
    """Configuration for stdout delivery."""
    indent: bool = False


@dataclass(frozen=True)
class DeliveryDestination:
    """Single measurement delivery destination."""
    name: str
    method: DeliveryMethod
    config: Any  # HttpDeliveryConfig | FileDeliveryConfig | StdoutDeliveryConfig
    enabled: bool = True


@dataclass(frozen=True)
class DeliveryConfig:
    """Complete delivery configuration."""
    destinations: list[DeliveryDestination] = field(default_factory=list)
    enabled: bool = True

    # Error handling
    retry_attempts: int = 0
    retry_delay_seconds: int = 1


def create_http_destination(
    name: str,
    url: str,
    headers: Optional[dict[str, str]] = None,
    enabled: bool = True,
    **kwargs
) -> DeliveryDestination:
    """Create HTTP delivery destination."""
    return DeliveryDestination(
        name=name,
        method=DeliveryMethod.HTTP_POST,
        config=HttpDeliveryConfig(
            url=url,
            headers=headers or {},
            **kwargs
        ),
        enabled=enabled
    )


def create_file_destination(
    name: str,
    output_dir: str = "output",
    format: str = "json",
    enabled: bool = True,
    **kwargs
) -> DeliveryDestination:
    """Create file delivery destination."""
    return DeliveryDestination(
        name=name,
        method=DeliveryMethod.FILE_OUTPUT,
        config=FileDeliveryConfig(
            output_dir=output_dir,
            format=format,
            **kwargs
        ),
        enabled=enabled
    )


def delivery_config_from_output(output: OutputParams) -> DeliveryConfig:
    """
    Translate the output mode into delivery destinations.

    ``http`` posts to the target URL, ``console`` writes JSON files,
    ``csv`` writes frequency/real/imag CSV files, ``stdout`` prints JSON.
    """
    if output.mode == "http":
        destination = create_http_destination(
            "http", output.target_url, timeout_seconds=output.timeout_seconds
        )
    elif output.mode == "csv":
        destination = create_file_destination("csv", output.output_dir, format="csv")
    elif output.mode == "stdout":
        destination = DeliveryDestination(
            name="stdout", method=DeliveryMethod.STDOUT, config=StdoutDeliveryConfig()
        )
    else:
        destination = create_file_destination("console", output.output_dir, format="json")

    return DeliveryConfig(
        destinations=[destination],
        retry_attempts=output.retry_attempts,
        retry_delay_seconds=output.retry_delay_seconds,
    )
