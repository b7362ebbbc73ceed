"""Configuration loading helpers for the bandwidth probe."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple
import yaml


DEFAULT_CONFIG_NAME = "config.yaml"


@dataclass
class ResponderConfig:
    enabled: bool = True
    host: str = "127.0.0.1"
    port: int = 8080
    read_buffer_size: int = 8192
    filler_byte: int = 1
    startup_delay: float = 0.5


@dataclass
class ProbeConfig:
    # Unset target fields fall back to the local responder's bound address.
    target_host: Optional[str] = None
    target_port: Optional[int] = None
    payload_sizes: List[int] = field(default_factory=lambda: [1024, 10 * 1024, 100 * 1024])
    iterations: int = 5
    iteration_delay: float = 0.1
    read_buffer_size: int = 8192


@dataclass
class OverheadConfig:
    payload_sizes: List[int] = field(default_factory=lambda: [1024, 10 * 1024])
    base_cost_bytes: int = 25 * 1024 * 1024
    upload_factor: float = 10.0
    response_factor: int = 10
    download_factor: float = 0.04


@dataclass
class LoggingConfig:
    level: str = "INFO"
    log_file: Optional[str] = None


@dataclass
class AppConfig:
    root_dir: Path
    responder: ResponderConfig
    probe: ProbeConfig
    overhead: OverheadConfig
    logging: LoggingConfig

    @property
    def log_path(self) -> Optional[Path]:
        if not self.logging.log_file:
            return None
        return (self.root_dir / self.logging.log_file).resolve()

    def target_address(self, fallback: Optional[Tuple[str, int]] = None) -> Tuple[str, int]:
        """Resolve where probes connect, preferring explicit probe settings."""

        if self.probe.target_host is not None and self.probe.target_port is not None:
            return self.probe.target_host, self.probe.target_port
        if fallback is None:
            raise ValueError("Probe target is not configured and no local responder is running")
        host = self.probe.target_host or fallback[0]
        port = self.probe.target_port if self.probe.target_port is not None else fallback[1]
        return host, port


def _validate(config: AppConfig) -> None:
    if config.probe.iterations < 1:
        raise ValueError("probe.iterations must be at least 1")
    if config.probe.iteration_delay < 0 or config.responder.startup_delay < 0:
        raise ValueError("Delays cannot be negative")
    if config.probe.read_buffer_size <= 0 or config.responder.read_buffer_size <= 0:
        raise ValueError("Read buffer sizes must be positive")
    if not 0 <= config.responder.filler_byte <= 255:
        raise ValueError("responder.filler_byte must fit in a single byte")
    for size in [*config.probe.payload_sizes, *config.overhead.payload_sizes]:
        if size < 0:
            raise ValueError(f"Payload sizes cannot be negative (got {size})")
    if not config.responder.enabled and (
        config.probe.target_host is None or config.probe.target_port is None
    ):
        raise ValueError(
            "probe.target_host and probe.target_port are required when the responder is disabled"
        )


def default_config(root_dir: Optional[Path] = None) -> AppConfig:
    return AppConfig(
        root_dir=root_dir or Path.cwd(),
        responder=ResponderConfig(),
        probe=ProbeConfig(),
        overhead=OverheadConfig(),
        logging=LoggingConfig(),
    )


def load_config(path: Optional[str] = None) -> AppConfig:
    """Load application configuration from a YAML file.

    An explicit path must exist. Without one, ``config.yaml`` in the working
    directory is used when present and built-in defaults otherwise.
    """

    if path:
        source_path = Path(path)
        if not source_path.exists():
            raise FileNotFoundError(f"Missing configuration file at {source_path}")
    else:
        source_path = Path.cwd() / DEFAULT_CONFIG_NAME
        if not source_path.exists():
            return default_config()

    root_dir = source_path.resolve().parent
    with source_path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}

    config = AppConfig(
        root_dir=root_dir,
        responder=ResponderConfig(**data.get("responder", {})),
        probe=ProbeConfig(**data.get("probe", {})),
        overhead=OverheadConfig(**data.get("overhead", {})),
        logging=LoggingConfig(**data.get("logging", {})),
    )
    _validate(config)
    return config
