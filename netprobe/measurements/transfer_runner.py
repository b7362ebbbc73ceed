"""Transfer probe: timed connect/write/read cycles against a responder.

Each iteration opens a fresh TCP connection, writes one zero-filled payload,
reads a single response buffer and closes. Iterations run strictly one after
another so the elapsed time is a plain sum of the per-connection cycles and
the inter-iteration delays.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Optional, Tuple

from ..config import ProbeConfig
from .models import TransferMeasurementResult

LOGGER = logging.getLogger(__name__)

Address = Tuple[str, int]


class ProbeError(Exception):
    """A probe run aborted before completing all iterations."""

    def __init__(
        self,
        message: str,
        address: Address,
        iteration: int,
        bytes_sent: int = 0,
        bytes_received: int = 0,
    ):
        super().__init__(message)
        self.address = address
        self.iteration = iteration
        self.bytes_sent = bytes_sent
        self.bytes_received = bytes_received


class ProbeConnectionError(ProbeError):
    """The target could not be connected to."""


class ProbeIOError(ProbeError):
    """A write or read on an established connection failed."""

    def __init__(self, message: str, address: Address, iteration: int, phase: str, **totals):
        super().__init__(message, address, iteration, **totals)
        self.phase = phase


class TransferProber:
    """Measure upload/download volume and rate against one address."""

    def __init__(
        self,
        address: Address,
        iteration_delay: float = 0.1,
        read_buffer_size: int = 8192,
    ):
        self.address = address
        self.iteration_delay = iteration_delay
        self.read_buffer_size = read_buffer_size

    @classmethod
    def from_config(cls, config: ProbeConfig, address: Address) -> "TransferProber":
        return cls(
            address,
            iteration_delay=config.iteration_delay,
            read_buffer_size=config.read_buffer_size,
        )

    async def _open(self, iteration: int, sent: int, received: int):
        host, port = self.address
        try:
            return await asyncio.open_connection(host, port)
        except OSError as exc:
            raise ProbeConnectionError(
                f"Failed to connect to {host}:{port}: {exc}",
                self.address,
                iteration,
                bytes_sent=sent,
                bytes_received=received,
            ) from exc

    async def _exchange(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
        payload: bytes,
        iteration: int,
        sent: int,
        received: int,
    ) -> int:
        totals = {"bytes_sent": sent, "bytes_received": received}
        try:
            writer.write(payload)
            await writer.drain()
            # Half-close so an empty payload reads as EOF on the responder side.
            if writer.can_write_eof():
                writer.write_eof()
        except OSError as exc:
            raise ProbeIOError(
                f"Write to {self.address[0]}:{self.address[1]} failed: {exc}",
                self.address, iteration, "write", **totals,
            ) from exc

        try:
            response = await reader.read(self.read_buffer_size)
        except OSError as exc:
            raise ProbeIOError(
                f"Read from {self.address[0]}:{self.address[1]} failed: {exc}",
                self.address, iteration, "read", **totals,
            ) from exc
        return len(response)

    @staticmethod
    async def _close(writer: asyncio.StreamWriter) -> None:
        writer.close()
        try:
            await writer.wait_closed()
        except OSError as exc:
            LOGGER.debug(f"Ignoring error while closing probe connection: {exc}")

    async def measure(self, payload_size: int, iterations: int) -> TransferMeasurementResult:
        if iterations < 1:
            raise ValueError("iterations must be at least 1")
        if payload_size < 0:
            raise ValueError("payload_size cannot be negative")

        total_sent = 0
        total_received = 0
        start_time = time.perf_counter()

        for iteration in range(iterations):
            reader, writer = await self._open(iteration, total_sent, total_received)
            try:
                payload = bytes(payload_size)
                received = await self._exchange(
                    reader, writer, payload, iteration, total_sent, total_received
                )
            finally:
                await self._close(writer)
            total_received += received
            total_sent += len(payload)
            LOGGER.debug(
                "Iteration %d/%d: sent %d bytes, received %d bytes",
                iteration + 1, iterations, len(payload), received,
            )

            await asyncio.sleep(self.iteration_delay)

        elapsed = time.perf_counter() - start_time
        return TransferMeasurementResult.from_totals(
            payload_size=payload_size,
            iterations=iterations,
            bytes_sent=total_sent,
            bytes_received=total_received,
            elapsed_seconds=elapsed,
        )


async def measure_transfer(
    address: Address,
    payload_size: int,
    iterations: int,
    config: Optional[ProbeConfig] = None,
) -> TransferMeasurementResult:
    """Run one probe against ``address`` with optional probe settings."""

    prober = TransferProber.from_config(config or ProbeConfig(), address)
    return await prober.measure(payload_size, iterations)
