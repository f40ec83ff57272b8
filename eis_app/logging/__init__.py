"""
Logging configuration and utilities for the EIS impedance processor.
"""
from .config import configure_logging, get_logger

__all__ = ["configure_logging", "get_logger"]
