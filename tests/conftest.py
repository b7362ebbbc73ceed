import socket

import pytest

from netprobe.config import OverheadConfig, ProbeConfig


@pytest.fixture
def closed_port():
    """A loopback port that nothing listens on."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        port = sock.getsockname()[1]
    return port


@pytest.fixture
def fast_probe_config():
    return ProbeConfig(payload_sizes=[1024, 2048], iterations=3, iteration_delay=0.0)


@pytest.fixture
def overhead_config():
    return OverheadConfig()
