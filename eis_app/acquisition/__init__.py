"""
Signal acquisition module.

Synthetic signal generation and bounded-queue receivers that feed the
measurement pipeline.
"""

from .generator import SyntheticSignalGenerator
from .receiver import FileReceiver, SignalReceiver, SyntheticReceiver

__all__ = [
    "SyntheticSignalGenerator",
    "SignalReceiver",
    "SyntheticReceiver",
    "FileReceiver",
]
