"""Default configuration parameters for the impedance processor."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class AcquisitionParams:
    """Sample acquisition parameters."""
    sample_rate: float = 1000.0         # Hz
    samples_per_cycle: int = 1000       # Samples per emitted signal
    interval_seconds: float = 1.0       # Producer tick
    queue_capacity: int = 10            # Per-channel bounded queue size
    seed: Optional[int] = None          # Noise seed for synthetic signals


@dataclass(frozen=True)
class ImpedanceParams:
    """Impedance calculation parameters."""
    current_floor: float = 1e-10        # |I| below this yields Z = 0
    max_drift_ms: float = 100.0         # Voltage/current timestamp tolerance


@dataclass(frozen=True)
class PipelineParams:
    """Measurement pipeline parameters."""
    export_shape: str = "measurement"   # measurement, impedance, points
    max_consecutive_failures: int = 3   # Sample-rate failures before escalation
    poll_interval_seconds: float = 0.05


@dataclass(frozen=True)
class SynthesisParams:
    """Circuit-model synthesis parameters."""
    num_points: int = 50
    log_start: float = 5.0              # 100 kHz
    log_end: float = -2.0               # 10 mHz
    batch_size: int = 10
    spectra_count: int = 5
    circuit: str = "simple"             # simple, medium, complex


@dataclass(frozen=True)
class OutputParams:
    """Output and delivery parameters."""
    mode: str = "console"               # http, console, csv, stdout
    target_url: str = "http://localhost:8080/eis-data"
    output_dir: str = "output"
    timeout_seconds: int = 10
    retry_attempts: int = 0
    retry_delay_seconds: int = 1


@dataclass(frozen=True)
class DefaultConfig:
    """Complete default configuration."""
    acquisition: AcquisitionParams
    impedance: ImpedanceParams
    pipeline: PipelineParams
    synthesis: SynthesisParams
    output: OutputParams


def get_default_config() -> DefaultConfig:
    """Get the default configuration instance."""
    return DefaultConfig(
        acquisition=AcquisitionParams(),
        impedance=ImpedanceParams(),
        pipeline=PipelineParams(),
        synthesis=SynthesisParams(),
        output=OutputParams(),
    )


def config_from_dict(data: dict) -> DefaultConfig:
    """Build a typed configuration from a merged config dictionary."""
    return DefaultConfig(
        acquisition=AcquisitionParams(**data.get("acquisition", {})),
        impedance=ImpedanceParams(**data.get("impedance", {})),
        pipeline=PipelineParams(**data.get("pipeline", {})),
        synthesis=SynthesisParams(**data.get("synthesis", {})),
        output=OutputParams(**data.get("output", {})),
    )
