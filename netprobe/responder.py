"""Local mock responder used as the probe target.

Protocol:
- Client connects and writes an arbitrary payload
- Responder reads once, up to one buffer's worth of bytes
- Responder answers with half as many filler bytes, then closes
"""

from __future__ import annotations

import asyncio
import errno
import logging
import socket
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Set, Tuple

from .config import ResponderConfig

LOGGER = logging.getLogger(__name__)


class EchoResponder:
    """
    Single-shot request/response listener on the running event loop.
    Each accepted connection is served by its own task; the responder keeps
    no state shared between connections apart from counters.
    """

    BACKLOG = 128

    def __init__(
        self,
        host: str = "127.0.0.1",
        port: int = 8080,
        read_buffer_size: int = 8192,
        filler_byte: int = 1,
    ):
        self.host = host
        self.port = port
        self.read_buffer_size = read_buffer_size
        self.filler_byte = filler_byte
        self._server_socket: Optional[socket.socket] = None
        self._accept_task: Optional[asyncio.Task] = None
        self._handlers: Set[asyncio.Task] = set()
        self._connections_accepted = 0
        self._responses_sent = 0
        self._start_time: Optional[datetime] = None

    @classmethod
    def from_config(cls, config: ResponderConfig) -> "EchoResponder":
        return cls(
            host=config.host,
            port=config.port,
            read_buffer_size=config.read_buffer_size,
            filler_byte=config.filler_byte,
        )

    @property
    def is_running(self) -> bool:
        """Check if the accept loop is alive."""
        return self._accept_task is not None and not self._accept_task.done()

    @property
    def address(self) -> Tuple[str, int]:
        """Bound address; resolves port 0 to the port actually chosen."""
        if self._server_socket is None:
            return self.host, self.port
        host, port = self._server_socket.getsockname()[:2]
        return host, port

    @property
    def connections_accepted(self) -> int:
        return self._connections_accepted

    @property
    def uptime_seconds(self) -> float:
        if self._start_time is None or not self.is_running:
            return 0.0
        return (datetime.now(timezone.utc) - self._start_time).total_seconds()

    async def _handle_client(self, client_socket: socket.socket, address: tuple) -> None:
        """Serve exactly one request on an accepted connection."""
        try:
            reader, writer = await asyncio.open_connection(sock=client_socket)
        except OSError as e:
            LOGGER.error(f"Failed to set up stream for {address}: {e}")
            client_socket.close()
            return

        try:
            data = await reader.read(self.read_buffer_size)
            if not data:
                LOGGER.warning(f"Client {address} closed without sending data")
                return
            response = bytes([self.filler_byte]) * (len(data) // 2)
            writer.write(response)
            await writer.drain()
            self._responses_sent += 1
            LOGGER.debug(f"Answered {address}: read {len(data)} bytes, wrote {len(response)} bytes")
        except OSError as e:
            LOGGER.error(f"Socket error handling client {address}: {e}")
        finally:
            writer.close()
            try:
                await writer.wait_closed()
            except OSError as e:
                LOGGER.debug(f"Error closing connection from {address}: {e}")

    async def _server_loop(self) -> None:
        """Accept connections until cancelled; an accept failure ends the loop."""
        loop = asyncio.get_running_loop()
        host, port = self.address
        LOGGER.info(f"Mock responder listening on {host}:{port}")

        while True:
            try:
                client_socket, address = await loop.sock_accept(self._server_socket)
            except OSError as e:
                LOGGER.error(f"Accept failed, responder loop stopping: {e}")
                raise
            self._connections_accepted += 1
            LOGGER.debug(f"New connection from {address}")
            task = asyncio.create_task(self._handle_client(client_socket, address))
            self._handlers.add(task)
            task.add_done_callback(self._handlers.discard)

    async def start(self) -> None:
        """Bind the listener and launch the accept loop in the background.

        Raises ``OSError`` when the address cannot be bound.
        """
        if self.is_running:
            LOGGER.warning("Mock responder already running")
            return

        server_socket = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            server_socket.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            server_socket.bind((self.host, self.port))
            server_socket.listen(self.BACKLOG)
            server_socket.setblocking(False)
        except OSError as e:
            server_socket.close()
            if e.errno == errno.EADDRINUSE:
                LOGGER.error(f"Port {self.port} is already in use")
            elif e.errno == errno.EACCES:
                LOGGER.error(f"Permission denied when trying to bind to port {self.port}")
            else:
                LOGGER.error(f"Failed to start responder: {e}")
            raise

        self._server_socket = server_socket
        self._start_time = datetime.now(timezone.utc)
        self._accept_task = asyncio.create_task(self._server_loop())

    async def stop(self) -> None:
        """Cancel the accept loop and any live handlers, then close the listener."""
        tasks = list(self._handlers)
        if self._accept_task is not None:
            tasks.append(self._accept_task)
        for task in tasks:
            task.cancel()
        results = await asyncio.gather(*tasks, return_exceptions=True)
        for result in results:
            if isinstance(result, Exception):
                LOGGER.debug(f"Responder task ended with {result!r}")

        if self._server_socket is not None:
            self._server_socket.close()
            self._server_socket = None
        self._accept_task = None
        self._start_time = None
        LOGGER.info("Mock responder stopped")

    def get_status(self) -> Dict[str, Any]:
        host, port = self.address
        return {
            "running": self.is_running,
            "host": host,
            "port": port,
            "uptime_seconds": self.uptime_seconds,
            "connections_accepted": self._connections_accepted,
            "responses_sent": self._responses_sent,
        }
