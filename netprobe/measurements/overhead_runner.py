"""Simulated MPC-style communication overhead.

The numbers are derived from fixed constants only: a base cost paid on every
upload, a multiplier applied to the request size for the upload side, an
assumed response size, and a multiplier applied to that response for the
download side. Nothing is sent over the network.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from ..config import OverheadConfig
from .models import OverheadEstimate

LOGGER = logging.getLogger(__name__)


def estimate_overhead(request_size: int, config: OverheadConfig) -> OverheadEstimate:
    if request_size < 0:
        raise ValueError("request_size cannot be negative")

    upload_total = config.base_cost_bytes + int(request_size * config.upload_factor)
    response_size = request_size * config.response_factor
    download_total = int(response_size * config.download_factor)

    return OverheadEstimate(
        request_size=request_size,
        response_size=response_size,
        upload_total=upload_total,
        download_total=download_total,
        upload_ratio=upload_total / request_size if request_size else 0.0,
        download_ratio=download_total / response_size if response_size else 0.0,
    )


def run_overhead_simulation(config: OverheadConfig, sizes: Optional[Iterable[int]] = None) -> List[OverheadEstimate]:
    estimates = []
    for size in config.payload_sizes if sizes is None else sizes:
        estimate = estimate_overhead(size, config)
        LOGGER.debug(
            "Overhead for %d byte request: upload %d, download %d",
            size, estimate.upload_total, estimate.download_total,
        )
        estimates.append(estimate)
    return estimates
