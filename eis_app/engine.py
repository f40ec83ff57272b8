"""
Measurement pipeline coordinator.

Pairs voltage/current signals from a receiver, runs the impedance calculator
on each pair, and hands the exported result to every configured sender:

Receiver → Validator → FFT → Half spectrum → Z = U / I → Senders

Signal quality problems skip a single cycle. A sample rate that keeps failing
is treated as a configuration fault and stops the pipeline.
"""

import threading
from datetime import datetime
from pathlib import Path
from typing import Any, Optional, TextIO, Union

import structlog

from .acquisition.receiver import SignalReceiver
from .data.models import EISMeasurement, ImpedanceBatch, ImpedanceBatchItem, RealSignal
from .data.serialization import (
    batch_to_dict,
    impedance_to_dict,
    measurement_to_dict,
    points_to_dict,
)
from .delivery.base import BaseSender, DeliveryStatus
from .delivery.http_delivery import HttpSender
from .errors import (
    ConfigurationError,
    InvalidSampleRate,
    SignalQualityError,
    SystemFailureError,
)
from .impedance.calculator import DefaultImpedanceCalculator, ImpedanceCalculator
from .impedance.circuit import CircuitParameters, EISSpectrumGenerator
from .logging.config import get_pipeline_logger, log_cycle_result
from .utils.time import utc_now

logger = structlog.get_logger(__name__)

EXPORT_DATA_TYPES = {
    "measurement": "EIS-Measurement",
    "impedance": "Impedance-Data",
    "points": "EIS-Points",
}


class MeasurementPipeline:
    """
    Consumer side of the acquisition loop.

    Owns its counters; nothing is shared between pipeline instances.
    """

    def __init__(
        self,
        calculator: Optional[ImpedanceCalculator] = None,
        senders: Optional[dict[str, BaseSender]] = None,
        export_shape: str = "measurement",
        max_consecutive_failures: int = 3,
        retry_attempts: int = 0,
        retry_delay_seconds: float = 1
    ) -> None:
        if export_shape not in EXPORT_DATA_TYPES:
            raise ConfigurationError(
                f"Unknown export shape: {export_shape}", field="export_shape", value=export_shape
            )

        self.calculator = calculator or DefaultImpedanceCalculator()
        self.senders = senders or {}
        self.export_shape = export_shape
        self.max_consecutive_failures = max_consecutive_failures
        self.retry_attempts = retry_attempts
        self.retry_delay_seconds = retry_delay_seconds
        self.logger = get_pipeline_logger(__name__)

        self._cycle = 0
        self._consecutive_rate_failures = 0
        self._processed = 0
        self._skipped = 0
        self._failed = 0
        self._delivered = 0
        self._delivery_failures = 0

    def process_cycle(self, voltage: RealSignal, current: RealSignal) -> Optional[EISMeasurement]:
        """
        Process one voltage/current pair end to end.

        Returns:
            The measurement, or None when the cycle was skipped

        Raises:
            ConfigurationError: The sample rate failed validation on too many
                consecutive cycles
        """
        self._cycle += 1

        try:
            measurement = self.calculator.process_measurement(voltage, current)

        except InvalidSampleRate as e:
            self._skipped += 1
            self._consecutive_rate_failures += 1
            log_cycle_result(self.logger, self._cycle, "skipped", reason=str(e), context={
                "error_type": e.kind,
                "sample_rate": e.sample_rate,
                "consecutive_failures": self._consecutive_rate_failures,
            })
            if self._consecutive_rate_failures >= self.max_consecutive_failures:
                raise ConfigurationError(
                    f"Sample rate rejected on {self._consecutive_rate_failures} consecutive cycles",
                    field="sample_rate",
                    value=e.sample_rate,
                ) from e
            return None

        except SignalQualityError as e:
            self._skipped += 1
            self._consecutive_rate_failures = 0
            log_cycle_result(self.logger, self._cycle, "skipped", reason=str(e), context={
                "error_type": e.kind,
                "field": e.field,
                "index": e.index,
                **e.context,
            })
            return None

        except SystemFailureError as e:
            self._failed += 1
            self._consecutive_rate_failures = 0
            log_cycle_result(self.logger, self._cycle, "failed", reason=str(e), context={
                "error_type": e.kind,
                **e.context,
            })
            return None

        self._consecutive_rate_failures = 0
        self._processed += 1

        payload = self.build_payload(measurement)
        self.deliver(payload, EXPORT_DATA_TYPES[self.export_shape])

        log_cycle_result(self.logger, self._cycle, "processed", context={
            "bins": len(measurement.impedance),
            "sample_rate": voltage.sample_rate,
        })
        return measurement

    def build_payload(self, measurement: EISMeasurement) -> Any:
        """Wire payload in the configured export shape."""
        if self.export_shape == "impedance":
            return impedance_to_dict(measurement.impedance)
        if self.export_shape == "points":
            return points_to_dict(DefaultImpedanceCalculator.to_points(measurement.impedance))
        return measurement_to_dict(measurement)

    def deliver(self, payload: Any, data_type: str) -> int:
        """Send a payload to every sender; returns the number of successes."""
        delivered = 0
        for name, sender in self.senders.items():
            result = sender.send_with_retry(
                payload,
                data_type,
                max_retries=self.retry_attempts,
                retry_delay=self.retry_delay_seconds
            )
            if result.status == DeliveryStatus.SUCCESS:
                delivered += 1
                self._delivered += 1
            else:
                self._delivery_failures += 1
                self.logger.error(
                    "Measurement delivery failed",
                    destination=name,
                    status=result.status.value,
                    message=result.message,
                    attempts=result.attempt_count
                )
                if not sender.health_check():
                    self.logger.warning("Sender is unhealthy", destination=name)
        return delivered

    def run(
        self,
        receiver: SignalReceiver,
        stop_event: Optional[threading.Event] = None,
        poll_interval: float = 0.05
    ) -> None:
        """
        Consume pairs from a receiver until stopped or the source is drained.

        The stop event is checked once per poll; a pair that is being
        processed always runs to completion.
        """
        stop_event = stop_event or threading.Event()
        if not receiver.is_running:
            receiver.start()

        self.logger.info("Measurement pipeline started", export_shape=self.export_shape,
                         senders=list(self.senders))
        try:
            while not stop_event.is_set():
                pair = receiver.poll_pair()
                if pair is None:
                    if receiver.is_drained():
                        self.logger.info("Receiver drained, stopping pipeline")
                        break
                    stop_event.wait(poll_interval)
                    continue

                self.process_cycle(*pair)
        finally:
            receiver.stop()
            self.logger.info("Measurement pipeline stopped", **self.stats())

    def stats(self) -> dict[str, int]:
        """Cycle and delivery counters."""
        return {
            "cycles": self._cycle,
            "processed": self._processed,
            "skipped": self._skipped,
            "failed": self._failed,
            "delivered": self._delivered,
            "delivery_failures": self._delivery_failures,
        }


def make_batch(items: list[ImpedanceBatchItem], timestamp: Optional[datetime] = None) -> ImpedanceBatch:
    """Wrap spectra in a batch with a ``batch_<unix>_<count>`` id."""
    timestamp = timestamp or utc_now()
    return ImpedanceBatch(
        batch_id=f"batch_{int(timestamp.timestamp())}_{len(items)}",
        timestamp=timestamp,
        spectra=items,
    )


def deliver_impedance_batch(
    batch: ImpedanceBatch,
    senders: dict[str, BaseSender],
    retry_attempts: int = 0,
    retry_delay_seconds: float = 1
) -> int:
    """
    Deliver a batch of impedance spectra.

    HTTP senders receive the whole batch in one request. Other senders get
    one frequency/real/imag payload per spectrum.

    Returns:
        Number of successful deliveries
    """
    delivered = 0
    for name, sender in senders.items():
        if isinstance(sender, HttpSender):
            result = sender.send_batch_with_retry(
                batch_to_dict(batch),
                max_retries=retry_attempts,
                retry_delay=retry_delay_seconds
            )
            if result.status == DeliveryStatus.SUCCESS:
                delivered += 1
            else:
                logger.error("Batch delivery failed", destination=name, batch_id=batch.batch_id,
                             status=result.status.value, message=result.message)
            continue

        for item in batch.spectra:
            points = DefaultImpedanceCalculator.to_points(item.spectrum)
            result = sender.send_with_retry(
                points_to_dict(points),
                EXPORT_DATA_TYPES["points"],
                max_retries=retry_attempts,
                retry_delay=retry_delay_seconds
            )
            if result.status == DeliveryStatus.SUCCESS:
                delivered += 1
            else:
                logger.error("Spectrum delivery failed", destination=name,
                             iteration=item.iteration, message=result.message)

    logger.info("Delivered impedance batch", batch_id=batch.batch_id,
                spectra=len(batch.spectra), deliveries=delivered)
    return delivered


class SynthesisRunner:
    """Generates circuit-model spectra in batches and delivers them."""

    def __init__(
        self,
        params: CircuitParameters,
        senders: Optional[dict[str, BaseSender]] = None,
        generator: Optional[EISSpectrumGenerator] = None,
        batch_size: int = 10,
        spectra_count: int = 5,
        record_path: Optional[Union[str, Path]] = None,
        retry_attempts: int = 0,
        retry_delay_seconds: float = 1
    ) -> None:
        self.params = params
        self.senders = senders or {}
        self.generator = generator or EISSpectrumGenerator()
        self.batch_size = batch_size
        self.spectra_count = spectra_count
        self.record_path = Path(record_path) if record_path else None
        self.retry_attempts = retry_attempts
        self.retry_delay_seconds = retry_delay_seconds
        self.logger = get_pipeline_logger(__name__).bind(mode="synthesis")

    def next_batch(self) -> Optional[ImpedanceBatch]:
        """Up to ``batch_size`` further spectra, or None once all were generated."""
        items = []
        while len(items) < self.batch_size and self.generator.current_spectrum < self.spectra_count:
            iteration = self.generator.current_spectrum
            items.append(ImpedanceBatchItem(
                spectrum=self.generator.generate_spectrum(self.params),
                iteration=iteration,
            ))

        if not items:
            return None
        return make_batch(items)

    def run(
        self,
        stop_event: Optional[threading.Event] = None,
        interval_seconds: float = 1.0
    ) -> list[ImpedanceBatch]:
        """Emit one batch per interval until all spectra are generated or stopped."""
        stop_event = stop_event or threading.Event()
        batches: list[ImpedanceBatch] = []

        record_file: Optional[TextIO] = None
        if self.record_path is not None:
            record_file = self.record_path.open("w", encoding="utf-8")
            record_file.write("Z_real,Z_imag,Spectrum_Number,Frequency_Hz\n")

        try:
            while True:
                batch = self.next_batch()
                if batch is None:
                    self.logger.info("Generated all spectra", spectra=self.spectra_count)
                    break

                if record_file is not None:
                    _record_batch(record_file, batch)

                self.logger.info(
                    "Generated spectrum batch",
                    batch_id=batch.batch_id,
                    first_iteration=batch.spectra[0].iteration,
                    last_iteration=batch.spectra[-1].iteration
                )
                deliver_impedance_batch(batch, self.senders, self.retry_attempts, self.retry_delay_seconds)
                batches.append(batch)

                if self.generator.current_spectrum >= self.spectra_count:
                    self.logger.info("Generated all spectra", spectra=self.spectra_count)
                    break

                if stop_event.wait(interval_seconds):
                    self.logger.info("Synthesis stopped", batches=len(batches))
                    break
        finally:
            if record_file is not None:
                record_file.close()

        return batches


def _record_batch(record_file: TextIO, batch: ImpedanceBatch) -> None:
    for item in batch.spectra:
        for z, freq in zip(item.spectrum.impedance, item.spectrum.frequencies):
            record_file.write(f"{z.real:.12e},{z.imag:.12e},{item.iteration},{freq:.12e}\n")
    record_file.flush()
