"""
Bounded-queue signal receivers.

A receiver owns one producer thread and two bounded queues, one for voltage
and one for current. The producer never blocks: when a queue is full the new
signal is dropped with a warning. The consumer side pairs signals without
waiting, so a voltage signal whose current counterpart is not yet available
is discarded.
"""

import threading
from abc import ABC, abstractmethod
from pathlib import Path
from queue import Empty, Full, Queue
from typing import Optional, Sequence, Union

from ..data.loader import CSVSignalLoader, describe_files
from ..data.models import RealSignal
from ..data.validators import DefaultSignalValidator, SignalValidator
from ..errors import AcquisitionError, SignalQualityError
from ..logging.config import get_acquisition_logger
from .generator import SyntheticSignalGenerator

DEFAULT_QUEUE_CAPACITY = 10
DEFAULT_INTERVAL_SECONDS = 1.0

SignalPair = tuple[RealSignal, RealSignal]


def _offer_queue(queue: Queue, item: RealSignal) -> bool:
    """Non-blocking put; False when the queue is full and the item was dropped."""
    try:
        queue.put_nowait(item)
    except Full:
        return False
    return True


class SignalReceiver(ABC):
    """Base receiver: producer thread feeding two bounded queues."""

    def __init__(
        self,
        capacity: int = DEFAULT_QUEUE_CAPACITY,
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
        validator: Optional[SignalValidator] = None
    ):
        if capacity <= 0:
            raise AcquisitionError(f"Queue capacity must be positive, got {capacity}", source=type(self).__name__)

        self.capacity = capacity
        self.interval_seconds = interval_seconds
        self.validator = validator or DefaultSignalValidator()
        self.voltage_queue: Queue = Queue(maxsize=capacity)
        self.current_queue: Queue = Queue(maxsize=capacity)
        self.logger = get_acquisition_logger(__name__).bind(receiver=type(self).__name__)

        self._stop_event = threading.Event()
        self._exhausted = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self.dropped_count = 0
        self.discarded_count = 0

    @abstractmethod
    def next_pair(self) -> Optional[SignalPair]:
        """Produce the next voltage/current pair, or None when the source is exhausted."""
        pass

    def offer(self, voltage: RealSignal, current: RealSignal) -> None:
        """Enqueue a pair, dropping whichever signal does not fit."""
        # Current goes first so a voltage seen by poll_pair already has its partner queued
        if not _offer_queue(self.current_queue, current):
            self.dropped_count += 1
            self.logger.warning("Current queue full, dropping signal", capacity=self.capacity)

        if not _offer_queue(self.voltage_queue, voltage):
            self.dropped_count += 1
            self.logger.warning("Voltage queue full, dropping signal", capacity=self.capacity)

    def poll_pair(self) -> Optional[SignalPair]:
        """
        Take one voltage/current pair without blocking.

        Returns None when no voltage is queued. When a voltage signal is
        available but its current is not, the voltage is discarded.
        """
        try:
            voltage = self.voltage_queue.get_nowait()
        except Empty:
            return None

        try:
            current = self.current_queue.get_nowait()
        except Empty:
            self.discarded_count += 1
            self.logger.warning("No current signal available, discarding voltage",
                                timestamp=str(voltage.timestamp))
            return None

        return voltage, current

    def start(self) -> None:
        """Start the producer thread."""
        if self._thread is not None and self._thread.is_alive():
            return

        self._stop_event.clear()
        self._exhausted.clear()
        self._thread = threading.Thread(target=self._run, name=type(self).__name__, daemon=True)
        self._thread.start()
        self.logger.info("Receiver started", interval_seconds=self.interval_seconds, capacity=self.capacity)

    def stop(self, timeout: Optional[float] = None) -> None:
        """Signal the producer to stop and wait for it."""
        self._stop_event.set()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout)
        self.logger.info("Receiver stopped", dropped=self.dropped_count, discarded=self.discarded_count)

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def exhausted(self) -> bool:
        """True once the source has nothing more to produce."""
        return self._exhausted.is_set()

    def is_drained(self) -> bool:
        """True when the source is exhausted and no voltage is left to pair."""
        return self.exhausted and self.voltage_queue.empty()

    def _run(self) -> None:
        while not self._stop_event.wait(self.interval_seconds):
            pair = self.next_pair()
            if pair is None:
                self._exhausted.set()
                self.logger.info("Signal source exhausted")
                return

            voltage, current = pair
            try:
                self.validator.validate_real(voltage)
                self.validator.validate_real(current)
            except SignalQualityError as e:
                self.logger.warning("Invalid signal from source, skipping",
                                    error_type=e.kind, error=str(e), field=e.field, index=e.index)
                continue

            self.offer(voltage, current)
            self.logger.debug("Signal pair queued", samples=len(voltage), timestamp=str(voltage.timestamp))


class SyntheticReceiver(SignalReceiver):
    """Receiver that synthesizes one signal pair per interval until stopped."""

    def __init__(
        self,
        sample_rate: float,
        samples_per_cycle: int,
        generator: Optional[SyntheticSignalGenerator] = None,
        **kwargs
    ):
        super().__init__(**kwargs)
        self.sample_rate = sample_rate
        self.samples_per_cycle = samples_per_cycle
        self.generator = generator or SyntheticSignalGenerator()

    def next_pair(self) -> Optional[SignalPair]:
        try:
            return self.generator.generate_pair(self.sample_rate, self.samples_per_cycle)
        except SignalQualityError as e:
            # Bad generator arguments will not fix themselves
            self.logger.error("Signal generation failed", error_type=e.kind, error=str(e))
            return None


class FileReceiver(SignalReceiver):
    """Receiver that replays pre-loaded signal pairs, one per interval."""

    def __init__(
        self,
        voltage_signals: Sequence[RealSignal],
        current_signals: Sequence[RealSignal],
        **kwargs
    ):
        super().__init__(**kwargs)
        if not voltage_signals:
            raise AcquisitionError("No signals loaded", source="file")
        if len(voltage_signals) != len(current_signals):
            raise AcquisitionError(
                f"Voltage/current signal counts differ: {len(voltage_signals)} vs {len(current_signals)}",
                source="file",
            )

        self._pairs = list(zip(voltage_signals, current_signals))
        self._index = 0

    @classmethod
    def from_files(
        cls,
        voltage_path: Union[str, Path],
        current_path: Union[str, Path],
        sample_rate: float,
        loader: Optional[CSVSignalLoader] = None,
        **kwargs
    ) -> "FileReceiver":
        """Load both CSV files and build a receiver over their signal pairs."""
        loader = loader or CSVSignalLoader()
        voltage_signals, current_signals = loader.load_pair(voltage_path, current_path, sample_rate)

        receiver = cls(voltage_signals, current_signals, **kwargs)
        receiver.logger.info("Loaded signal pairs from files",
                             pairs=len(voltage_signals), **describe_files(voltage_path, current_path))
        return receiver

    @property
    def total_pairs(self) -> int:
        return len(self._pairs)

    def next_pair(self) -> Optional[SignalPair]:
        if self._index >= len(self._pairs):
            return None

        pair = self._pairs[self._index]
        self._index += 1
        self.logger.info("Replaying signal pair", pair=self._index, total=len(self._pairs),
                         progress_pct=round(100.0 * self._index / len(self._pairs), 1))
        return pair
