"""Shared dataclasses for measurements."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .transfer_runner import ProbeError


@dataclass(frozen=True)
class TransferMeasurementResult:
    payload_size: int
    iterations: int
    bytes_sent: int
    bytes_received: int
    elapsed_seconds: float
    upload_rate: float
    download_rate: float
    ratio: float

    @classmethod
    def from_totals(
        cls,
        payload_size: int,
        iterations: int,
        bytes_sent: int,
        bytes_received: int,
        elapsed_seconds: float,
    ) -> "TransferMeasurementResult":
        if elapsed_seconds > 0:
            upload_rate = bytes_sent / elapsed_seconds
            download_rate = bytes_received / elapsed_seconds
        else:
            upload_rate = download_rate = 0.0
        ratio = bytes_received / bytes_sent if bytes_sent > 0 else 0.0
        return cls(
            payload_size=payload_size,
            iterations=iterations,
            bytes_sent=bytes_sent,
            bytes_received=bytes_received,
            elapsed_seconds=elapsed_seconds,
            upload_rate=upload_rate,
            download_rate=download_rate,
            ratio=ratio,
        )


@dataclass(frozen=True)
class OverheadEstimate:
    request_size: int
    response_size: int
    upload_total: int
    download_total: int
    upload_ratio: float
    download_ratio: float


@dataclass(frozen=True)
class ProbeOutcome:
    payload_size: int
    result: Optional[TransferMeasurementResult] = None
    error: Optional[ProbeError] = None

    @property
    def ok(self) -> bool:
        return self.result is not None
