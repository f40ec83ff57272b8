"""
Centralized logging configuration for the EIS impedance processor.

This module provides standardized logging configuration using structlog
for all components. Acquisition, pipeline and delivery code log through the
loggers returned here so every record carries the same key/value layout.
"""
import logging
import sys
from typing import Any, Optional

import structlog
from structlog.types import FilteringBoundLogger


def configure_logging(
    level: str = "INFO",
    format_json: bool = False,
    include_timestamp: bool = True,
    include_caller: bool = False,
    extra_processors: Optional[list] = None
) -> None:
    """
    Configure structlog for the entire application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_json: If True, output JSON format; otherwise human-readable
        include_timestamp: Include timestamp in log output
        include_caller: Include caller information (filename, line number)
        extra_processors: Additional structlog processors to include
    """
    log_level = getattr(logging, level.upper())

    # structlog handles formatting, stdlib only routes the records
    logging.basicConfig(
        level=log_level,
        stream=sys.stderr,
        format="%(message)s"
    )

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if include_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))

    if include_caller:
        processors.append(structlog.processors.CallsiteParameterAdder(
            parameters=[structlog.processors.CallsiteParameter.FILENAME,
                        structlog.processors.CallsiteParameter.LINENO]
        ))

    if extra_processors:
        processors.extend(extra_processors)

    if format_json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> FilteringBoundLogger:
    """
    Get a configured structlog logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger instance
    """
    return structlog.get_logger(name)


def get_pipeline_logger(name: str) -> FilteringBoundLogger:
    """Logger bound to the measurement pipeline subsystem."""
    return get_logger(name).bind(subsystem="pipeline")


def get_acquisition_logger(name: str) -> FilteringBoundLogger:
    """Logger bound to the sample acquisition subsystem."""
    return get_logger(name).bind(subsystem="acquisition")


def get_delivery_logger(name: str, delivery_name: str) -> FilteringBoundLogger:
    """Logger bound to one delivery destination."""
    return get_logger(name).bind(subsystem="delivery", delivery_name=delivery_name)


def log_cycle_result(
    logger: FilteringBoundLogger,
    cycle: int,
    status: str,
    reason: Optional[str] = None,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Log the outcome of one measurement cycle with standardized format.

    Args:
        logger: Structlog logger instance
        cycle: Sequence number of the cycle
        status: "processed", "skipped" or "failed"
        reason: Why the cycle was skipped or failed
        context: Additional context data
    """
    bound_logger = logger.bind(cycle=cycle, cycle_status=status)

    if reason:
        bound_logger = bound_logger.bind(reason=reason)

    if context:
        bound_logger = bound_logger.bind(**context)

    if status == "processed":
        bound_logger.info("Measurement cycle processed")
    elif status == "skipped":
        bound_logger.warning("Measurement cycle skipped")
    else:
        bound_logger.error("Measurement cycle failed")
