"""Application bootstrap helpers."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Callable, List, Optional

from .config import AppConfig, load_config
from .logging_setup import configure_logging
from .measurements.manager import MeasurementManager
from .measurements.models import ProbeOutcome
from .report import outcome_lines, overhead_report, transfer_heading
from .responder import EchoResponder

__version__ = "0.1.0"


class ApplicationContext:
    """Holds the components for one measurement session."""

    def __init__(self, config: AppConfig, log_level: Optional[str] = None):
        self.config = config
        configure_logging(config, log_level)
        self.responder = (
            EchoResponder.from_config(config.responder) if config.responder.enabled else None
        )
        self.measurements = MeasurementManager(config)

    async def run(self, emit: Callable[[str], None] = print) -> List[ProbeOutcome]:
        """Start the responder, probe every payload size, print both reports."""

        fallback = None
        if self.responder is not None:
            await self.responder.start()
            fallback = self.responder.address
        try:
            if self.responder is not None:
                await asyncio.sleep(self.config.responder.startup_delay)
            address = self.config.target_address(fallback)

            for line in transfer_heading():
                emit(line)

            def print_outcome(outcome: ProbeOutcome) -> None:
                for line in outcome_lines(outcome):
                    emit(line)

            outcomes = await self.measurements.run_transfers(address, on_outcome=print_outcome)
            for line in overhead_report(self.measurements.run_overhead()):
                emit(line)
            return outcomes
        finally:
            if self.responder is not None:
                await self.responder.stop()


def bootstrap(config_path: Optional[str] = None, log_level: Optional[str] = None) -> ApplicationContext:
    """Load configuration and wire dependencies."""

    config_file = Path(config_path).resolve() if config_path else None
    config = load_config(str(config_file)) if config_file else load_config()
    return ApplicationContext(config, log_level)
