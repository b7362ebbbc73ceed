"""Tests for per-size probe orchestration and failure isolation."""

import asyncio

from netprobe.config import default_config
from netprobe.measurements.manager import MeasurementManager
from netprobe.measurements.transfer_runner import ProbeConnectionError
from netprobe.responder import EchoResponder


def _manager(probe_config):
    config = default_config()
    config.probe = probe_config
    return MeasurementManager(config)


class TestMeasurementManager:

    def test_runs_every_configured_size(self, fast_probe_config):
        async def scenario():
            responder = EchoResponder(port=0)
            await responder.start()
            try:
                return await _manager(fast_probe_config).run_transfers(responder.address)
            finally:
                await responder.stop()

        outcomes = asyncio.run(scenario())
        assert [o.payload_size for o in outcomes] == [1024, 2048]
        assert all(o.ok for o in outcomes)
        assert outcomes[0].result.bytes_sent == 3 * 1024
        assert outcomes[1].result.bytes_received == 3 * 1024

    def test_failed_size_does_not_stop_the_rest(self, fast_probe_config, closed_port):
        manager = _manager(fast_probe_config)
        outcomes = asyncio.run(manager.run_transfers(("127.0.0.1", closed_port), [10, 20, 30]))
        assert [o.payload_size for o in outcomes] == [10, 20, 30]
        assert not any(o.ok for o in outcomes)
        assert all(isinstance(o.error, ProbeConnectionError) for o in outcomes)

    def test_overhead_uses_overhead_sizes(self, fast_probe_config):
        estimates = _manager(fast_probe_config).run_overhead()
        assert [e.request_size for e in estimates] == [1024, 10240]


def test_each_outcome_is_reported_before_the_next_size_runs(fast_probe_config):
    async def scenario():
        responder = EchoResponder(port=0)
        await responder.start()
        seen = []
        try:
            await _manager(fast_probe_config).run_transfers(
                responder.address,
                on_outcome=lambda outcome: seen.append(
                    (outcome.payload_size, responder.connections_accepted)
                ),
            )
        finally:
            await responder.stop()
        return seen

    assert asyncio.run(scenario()) == [(1024, 3), (2048, 6)]
