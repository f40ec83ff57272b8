"""
Command line front end.

    eis-app run                 synthetic (or --file) signals through the pipeline
    eis-app synthesize          circuit-model spectra in batches
    eis-app replay-impedance    impedance spectra from CSV to the senders
"""

import argparse
import signal
import sys
import threading
from pathlib import Path
from typing import Any, Optional

import structlog

from .acquisition.generator import SyntheticSignalGenerator
from .acquisition.receiver import FileReceiver, SyntheticReceiver
from .config.defaults import DefaultConfig
from .config.delivery import delivery_config_from_output
from .config.loader import ConfigLoader
from .config.validation import CIRCUITS, EXPORT_SHAPES, OUTPUT_MODES, ConfigValidator
from .data.loader import CSVSignalLoader
from .delivery import BaseSender, build_senders
from .engine import MeasurementPipeline, SynthesisRunner, deliver_impedance_batch, make_batch
from .errors import ConfigurationError, SignalQualityError, SystemFailureError
from .impedance.calculator import DefaultImpedanceCalculator
from .impedance.circuit import EISSpectrumGenerator, get_circuit_parameters
from .logging.config import configure_logging

logger = structlog.get_logger(__name__)

EXIT_OK = 0
EXIT_INVALID_CONFIG = 1
EXIT_FAILURE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="eis-app", description="EIS impedance processor")
    parser.add_argument("--profile", help="Named profile from config/eis.yaml")
    parser.add_argument("--config-dir", type=Path, help="Directory holding eis.yaml")
    parser.add_argument("--log-level", default="INFO", help="DEBUG, INFO, WARNING or ERROR")
    parser.add_argument("--json-logs", action="store_true", help="Emit JSON log records")

    output = argparse.ArgumentParser(add_help=False)
    output.add_argument("--output", choices=OUTPUT_MODES, help="Where results go")
    output.add_argument("--target", help="Target URL for http output")
    output.add_argument("--output-dir", help="Directory for console/csv output files")

    subparsers = parser.add_subparsers(dest="command", required=True)

    run = subparsers.add_parser("run", parents=[output], help="Process voltage/current signals")
    run.add_argument("--rate", type=float, help="Sample rate in Hz")
    run.add_argument("--samples", type=int, help="Samples per signal")
    run.add_argument("--interval", type=float, help="Seconds between signal pairs")
    run.add_argument("--seed", type=int, help="Noise seed for synthetic signals")
    run.add_argument("--export", choices=EXPORT_SHAPES, help="Payload shape sent to the output")
    run.add_argument("--file", action="store_true", help="Replay CSV recordings instead of synthesizing")
    run.add_argument("--voltage", type=Path, help="Voltage recording (timestamp,time_offset,value)")
    run.add_argument("--current", type=Path, help="Current recording (timestamp,time_offset,value)")

    synthesize = subparsers.add_parser("synthesize", parents=[output], help="Generate circuit-model spectra")
    synthesize.add_argument("--circuit", choices=CIRCUITS, help="Equivalent circuit preset")
    synthesize.add_argument("--spectra", type=int, help="Number of spectra to generate")
    synthesize.add_argument("--batch-size", type=int, help="Spectra per batch")
    synthesize.add_argument("--interval", type=float, default=1.0, help="Seconds between batches")
    synthesize.add_argument("--record", type=Path, help="Also write every spectrum to this CSV file")

    replay = subparsers.add_parser("replay-impedance", parents=[output], help="Send impedance spectra from CSV")
    replay.add_argument("impedance_csv", type=Path, help="Frequency_Hz,Z_real,Z_imag,Spectrum_Number file")

    return parser


def overrides_from_args(args: argparse.Namespace) -> dict[str, Any]:
    """CLI flags as a configuration override dictionary."""
    mapping = {
        "acquisition": {
            "sample_rate": getattr(args, "rate", None),
            "samples_per_cycle": getattr(args, "samples", None),
            "interval_seconds": getattr(args, "interval", None) if args.command == "run" else None,
            "seed": getattr(args, "seed", None),
        },
        "pipeline": {"export_shape": getattr(args, "export", None)},
        "synthesis": {
            "circuit": getattr(args, "circuit", None),
            "spectra_count": getattr(args, "spectra", None),
            "batch_size": getattr(args, "batch_size", None),
        },
        "output": {
            "mode": args.output,
            "target_url": args.target,
            "output_dir": args.output_dir,
        },
    }

    overrides: dict[str, Any] = {}
    for section, values in mapping.items():
        present = {key: value for key, value in values.items() if value is not None}
        if present:
            overrides[section] = present
    return overrides


def load_config(args: argparse.Namespace) -> Optional[DefaultConfig]:
    """Merged and validated configuration, or None when validation fails."""
    loader = ConfigLoader.create(args.config_dir)
    merged = loader.merge_config(args.profile, overrides_from_args(args))

    errors = ConfigValidator.validate_config(merged)
    if errors:
        for error in errors:
            logger.error("Invalid configuration", field=error.field, message=error.message, value=error.value)
        return None

    return loader.load(args.profile, overrides_from_args(args))


def install_stop_handlers(stop_event: threading.Event) -> None:
    """SIGINT/SIGTERM request a graceful stop."""
    def handler(signum, frame):
        logger.info("Shutdown signal received", signal=signal.Signals(signum).name)
        stop_event.set()

    signal.signal(signal.SIGINT, handler)
    signal.signal(signal.SIGTERM, handler)


def _senders(config: DefaultConfig) -> dict[str, BaseSender]:
    return build_senders(delivery_config_from_output(config.output))


def cmd_run(config: DefaultConfig, args: argparse.Namespace, stop_event: threading.Event) -> int:
    acquisition = config.acquisition
    receiver_options = {
        "capacity": acquisition.queue_capacity,
        "interval_seconds": acquisition.interval_seconds,
    }

    if args.file:
        if args.voltage is None or args.current is None:
            raise ConfigurationError("--file needs both --voltage and --current", field="file", value=True)
        receiver = FileReceiver.from_files(
            args.voltage, args.current, acquisition.sample_rate, CSVSignalLoader(), **receiver_options
        )
    else:
        receiver = SyntheticReceiver(
            acquisition.sample_rate,
            acquisition.samples_per_cycle,
            SyntheticSignalGenerator(acquisition.seed),
            **receiver_options
        )

    calculator = DefaultImpedanceCalculator(
        current_floor=config.impedance.current_floor,
        max_drift_seconds=config.impedance.max_drift_ms / 1000.0,
    )
    pipeline = MeasurementPipeline(
        calculator,
        _senders(config),
        export_shape=config.pipeline.export_shape,
        max_consecutive_failures=config.pipeline.max_consecutive_failures,
        retry_attempts=config.output.retry_attempts,
        retry_delay_seconds=config.output.retry_delay_seconds,
    )

    logger.info(
        "Starting measurement run",
        source="file" if args.file else "synthetic",
        sample_rate=acquisition.sample_rate,
        samples_per_cycle=acquisition.samples_per_cycle,
        output=config.output.mode
    )
    pipeline.run(receiver, stop_event, config.pipeline.poll_interval_seconds)
    return EXIT_OK


def cmd_synthesize(config: DefaultConfig, args: argparse.Namespace, stop_event: threading.Event) -> int:
    synthesis = config.synthesis
    params = get_circuit_parameters(synthesis.circuit)

    logger.info(
        "Starting circuit synthesis",
        circuit=synthesis.circuit,
        spectra=synthesis.spectra_count,
        rs=params.rs,
        rct_initial=params.rct_initial,
        q=params.q,
        n=params.n
    )
    runner = SynthesisRunner(
        params,
        _senders(config),
        EISSpectrumGenerator(synthesis.num_points, synthesis.log_start, synthesis.log_end),
        batch_size=synthesis.batch_size,
        spectra_count=synthesis.spectra_count,
        record_path=args.record,
        retry_attempts=config.output.retry_attempts,
        retry_delay_seconds=config.output.retry_delay_seconds,
    )
    runner.run(stop_event, args.interval)
    return EXIT_OK


def cmd_replay_impedance(config: DefaultConfig, args: argparse.Namespace, stop_event: threading.Event) -> int:
    items = CSVSignalLoader().load_impedance(args.impedance_csv)
    logger.info("Loaded impedance spectra", path=str(args.impedance_csv), spectra=len(items))

    batch = make_batch(items)
    deliver_impedance_batch(
        batch,
        _senders(config),
        retry_attempts=config.output.retry_attempts,
        retry_delay_seconds=config.output.retry_delay_seconds,
    )
    return EXIT_OK


COMMANDS = {
    "run": cmd_run,
    "synthesize": cmd_synthesize,
    "replay-impedance": cmd_replay_impedance,
}


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(level=args.log_level, format_json=args.json_logs)

    try:
        config = load_config(args)
        if config is None:
            return EXIT_INVALID_CONFIG

        stop_event = threading.Event()
        install_stop_handlers(stop_event)
        return COMMANDS[args.command](config, args, stop_event)

    except ConfigurationError as e:
        logger.error("Configuration failure", error=str(e), field=e.field, value=e.value)
        return EXIT_FAILURE

    except (SignalQualityError, SystemFailureError) as e:
        logger.error("Command failed", error_type=e.kind, error=str(e))
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
