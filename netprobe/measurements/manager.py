"""Measurement orchestration across the configured payload sizes."""

from __future__ import annotations

import logging
from typing import Callable, List, Optional

from ..config import AppConfig
from .models import OverheadEstimate, ProbeOutcome
from .overhead_runner import run_overhead_simulation
from .transfer_runner import Address, ProbeError, TransferProber

LOGGER = logging.getLogger(__name__)


class MeasurementManager:
    def __init__(self, config: AppConfig):
        self.config = config

    async def run_transfer(self, address: Address, payload_size: int) -> ProbeOutcome:
        prober = TransferProber.from_config(self.config.probe, address)
        try:
            result = await prober.measure(payload_size, self.config.probe.iterations)
        except ProbeError as exc:
            LOGGER.error("Error measuring transfer of %d bytes: %s", payload_size, exc)
            return ProbeOutcome(payload_size=payload_size, error=exc)

        LOGGER.info(
            "Measured %d byte payload x%d (sent %d / received %d in %.3fs)",
            payload_size,
            result.iterations,
            result.bytes_sent,
            result.bytes_received,
            result.elapsed_seconds,
        )
        return ProbeOutcome(payload_size=payload_size, result=result)

    async def run_transfers(
        self,
        address: Address,
        payload_sizes: Optional[List[int]] = None,
        on_outcome: Optional[Callable[[ProbeOutcome], None]] = None,
    ) -> List[ProbeOutcome]:
        """Probe each size in turn, handing every outcome to ``on_outcome`` as it completes."""
        sizes = self.config.probe.payload_sizes if payload_sizes is None else payload_sizes
        outcomes = []
        for size in sizes:
            outcome = await self.run_transfer(address, size)
            if on_outcome is not None:
                on_outcome(outcome)
            outcomes.append(outcome)
        return outcomes

    def run_overhead(self) -> List[OverheadEstimate]:
        return run_overhead_simulation(self.config.overhead)
