"""Console reports for transfer measurements and overhead estimates."""

from __future__ import annotations

from typing import Iterable, List

from .formatting import format_bytes, format_duration, format_rate
from .measurements.models import OverheadEstimate, ProbeOutcome, TransferMeasurementResult


def _heading(title: str) -> List[str]:
    return [title, "=" * len(title), ""]


def transfer_lines(result: TransferMeasurementResult) -> List[str]:
    return [
        f"  Sent: {format_bytes(result.bytes_sent)}",
        f"  Received: {format_bytes(result.bytes_received)}",
        f"  Time: {format_duration(result.elapsed_seconds)}",
        f"  Upload: {format_rate(result.upload_rate)}",
        f"  Download: {format_rate(result.download_rate)}",
        f"  Ratio (received/sent): {result.ratio:.2f}",
    ]


def transfer_heading() -> List[str]:
    return _heading("Network Transfer Test")


def outcome_lines(outcome: ProbeOutcome) -> List[str]:
    # Failed sizes only get their heading here; the error goes to the log.
    lines = [f"Testing with {format_bytes(outcome.payload_size)} payload"]
    if outcome.ok:
        lines.extend(transfer_lines(outcome.result))
    lines.append("")
    return lines


def transfer_report(outcomes: Iterable[ProbeOutcome]) -> List[str]:
    lines = transfer_heading()
    for outcome in outcomes:
        lines.extend(outcome_lines(outcome))
    return lines


def overhead_lines(estimate: OverheadEstimate) -> List[str]:
    return [
        f"  Simulated request size: {format_bytes(estimate.request_size)}",
        f"  Simulated response size: {format_bytes(estimate.response_size)}",
        f"  Estimated MPC upload overhead: {format_bytes(estimate.upload_total)}",
        f"  Estimated MPC download overhead: {format_bytes(estimate.download_total)}",
        f"  Overhead ratio: {estimate.upload_ratio:.2f}x upload, "
        f"{estimate.download_ratio:.2f}x download",
    ]


def overhead_report(estimates: Iterable[OverheadEstimate]) -> List[str]:
    lines = _heading("MPC Communication Simulation")
    for estimate in estimates:
        lines.append(f"Testing with {format_bytes(estimate.request_size)} payload")
        lines.extend(overhead_lines(estimate))
        lines.append("")
    return lines
