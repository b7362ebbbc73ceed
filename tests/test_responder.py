"""Tests for the mock responder's single-shot exchange and lifecycle."""

import asyncio
import errno
import logging
import socket
import struct

import pytest

from netprobe.config import ResponderConfig
from netprobe.responder import EchoResponder


async def _exchange(address, payload):
    reader, writer = await asyncio.open_connection(*address)
    writer.write(payload)
    await writer.drain()
    writer.write_eof()
    response = await reader.read(65536)
    writer.close()
    await writer.wait_closed()
    return response


def _with_responder(coro_fn, **kwargs):
    async def scenario():
        responder = EchoResponder(host="127.0.0.1", port=0, **kwargs)
        await responder.start()
        try:
            return await coro_fn(responder)
        finally:
            await responder.stop()

    return asyncio.run(scenario())


class TestEchoResponder:

    def test_replies_with_half_length_filler(self):
        async def scenario(responder):
            return await _exchange(responder.address, b"\xff" * 100)

        assert _with_responder(scenario) == b"\x01" * 50

    def test_odd_length_rounds_down(self):
        async def scenario(responder):
            return await _exchange(responder.address, b"abcdefg")

        assert _with_responder(scenario) == b"\x01" * 3

    def test_custom_filler_byte(self):
        async def scenario(responder):
            return await _exchange(responder.address, b"xxxx")

        assert _with_responder(scenario, filler_byte=0x2A) == b"**"

    def test_reads_at_most_one_buffer(self):
        async def scenario(responder):
            return await _exchange(responder.address, b"z" * 100)

        assert _with_responder(scenario, read_buffer_size=16) == b"\x01" * 8

    def test_empty_request_gets_no_reply(self):
        async def scenario(responder):
            response = await _exchange(responder.address, b"")
            return response, responder.get_status()

        response, status = _with_responder(scenario)
        assert response == b""
        assert status["responses_sent"] == 0
        assert status["connections_accepted"] == 1

    def test_connections_are_independent(self):
        async def scenario(responder):
            return await asyncio.gather(
                *[_exchange(responder.address, b"a" * size) for size in (2, 4, 6, 8)]
            )

        assert [len(r) for r in _with_responder(scenario)] == [1, 2, 3, 4]

    def test_status_and_stop(self):
        async def scenario():
            responder = EchoResponder.from_config(ResponderConfig(port=0))
            await responder.start()
            host, port = responder.address
            running = responder.get_status()
            await responder.stop()
            return host, port, running, responder.is_running

        host, port, running, still_running = asyncio.run(scenario())
        assert host == "127.0.0.1"
        assert port != 0
        assert running["running"] is True
        assert running["port"] == port
        assert still_running is False

    def test_bind_conflict_raises(self):
        async def scenario():
            first = EchoResponder(port=0)
            await first.start()
            try:
                second = EchoResponder(port=first.address[1])
                with pytest.raises(OSError):
                    await second.start()
                assert not second.is_running
            finally:
                await first.stop()

        asyncio.run(scenario())


class TestResponderFailures:

    def test_accept_failure_ends_the_accept_loop(self, monkeypatch, caplog):
        async def scenario():
            loop = asyncio.get_running_loop()

            async def failing_accept(sock):
                raise OSError(errno.EMFILE, "Too many open files")

            monkeypatch.setattr(loop, "sock_accept", failing_accept)
            responder = EchoResponder(port=0)
            await responder.start()
            for _ in range(100):
                if not responder.is_running:
                    break
                await asyncio.sleep(0.01)
            running = responder.is_running
            status = responder.get_status()
            await responder.stop()
            return running, status

        with caplog.at_level(logging.ERROR, logger="netprobe.responder"):
            running, status = asyncio.run(scenario())
        assert running is False
        assert status["running"] is False
        assert status["connections_accepted"] == 0
        assert any("Accept failed" in record.getMessage() for record in caplog.records)

    def test_reset_connection_does_not_affect_the_next_one(self, caplog):
        async def scenario(responder):
            aborted = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
            aborted.connect(responder.address)
            for _ in range(100):
                if responder.connections_accepted == 1:
                    break
                await asyncio.sleep(0.01)
            # Linger with a zero timeout makes close() send a reset.
            aborted.setsockopt(socket.SOL_SOCKET, socket.SO_LINGER, struct.pack("ii", 1, 0))
            aborted.close()

            for _ in range(100):
                if not responder._handlers:
                    break
                await asyncio.sleep(0.01)
            response = await _exchange(responder.address, b"q" * 10)
            for _ in range(100):
                if responder.get_status()["responses_sent"] == 1:
                    break
                await asyncio.sleep(0.01)
            return response, responder.get_status()

        with caplog.at_level(logging.WARNING, logger="netprobe.responder"):
            response, status = _with_responder(scenario)
        assert response == b"\x01" * 5
        assert status["running"] is True
        assert status["connections_accepted"] == 2
        assert status["responses_sent"] == 1
        assert any(
            record.name == "netprobe.responder" and record.levelno >= logging.WARNING
            for record in caplog.records
        )
