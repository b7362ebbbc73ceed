"""Human-readable formatting for byte counts, rates and durations."""

from __future__ import annotations

KIB = 1024
MIB = 1024 * KIB
GIB = 1024 * MIB


def format_bytes(num_bytes: int) -> str:
    if num_bytes < KIB:
        return f"{num_bytes} B"
    if num_bytes < MIB:
        return f"{num_bytes / KIB:.2f} KB"
    if num_bytes < GIB:
        return f"{num_bytes / MIB:.2f} MB"
    return f"{num_bytes / GIB:.2f} GB"


def format_rate(bytes_per_sec: float) -> str:
    if bytes_per_sec < KIB:
        return f"{bytes_per_sec:.2f} B/s"
    if bytes_per_sec < MIB:
        return f"{bytes_per_sec / KIB:.2f} KB/s"
    if bytes_per_sec < GIB:
        return f"{bytes_per_sec / MIB:.2f} MB/s"
    return f"{bytes_per_sec / GIB:.2f} GB/s"


def format_duration(seconds: float) -> str:
    """Render a duration with the largest unit that keeps it above one."""

    if seconds >= 1:
        return f"{seconds:.2f}s"
    if seconds >= 1e-3:
        return f"{seconds * 1e3:.2f}ms"
    if seconds >= 1e-6:
        return f"{seconds * 1e6:.2f}µs"
    return f"{seconds * 1e9:.2f}ns"
