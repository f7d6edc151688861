"""
TCP client - asyncio stream socket wrapper

Enables making TCP requests to a single server and awaiting the full reply.
Like UDP, the stream has no end-of-message marker, so reads end after a quiet
period (or when the peer closes the connection).
"""

import asyncio
import logging
from typing import List, Optional, Union

from ..errors import ConnectFailed, QueryTimeout, TransportClosed
from .quiet_period import QuietPeriod

logger = logging.getLogger(__name__)

DEFAULT_END_DELAY = 0.5


class _StreamProtocol(asyncio.Protocol):
    """Forwards socket events to the owning TCPClient"""

    def __init__(self, client: 'TCPClient'):
        self._client = client

    def data_received(self, data: bytes):
        self._client._on_data(data)

    def eof_received(self):
        self._client._on_eof()
        return False  # Let the transport close itself

    def connection_lost(self, exc: Optional[Exception]):
        self._client._on_closed(exc)

    def pause_writing(self):
        self._client._can_write.clear()

    def resume_writing(self):
        self._client._can_write.set()


class TCPClient:
    """
    Stream client for a single server.

    Usage:
        client = TCPClient(timeout=3.0)
        await client.connect("hosthpc.com", 28910)
        reply = await client.request(message)
        client.close()
    """

    def __init__(self, timeout: Optional[float] = None):
        """
        Args:
            timeout: Inactivity timeout in seconds for connects and reads
                (None to wait forever)
        """
        self.timeout = timeout
        self.host: Optional[str] = None
        self.port: Optional[int] = None

        self._transport: Optional[asyncio.Transport] = None
        self._connected = False
        self._closed = False
        self._eof = False
        self._can_write: Optional[asyncio.Event] = None
        self._collector: Optional[QuietPeriod] = None
        self._idle_handle: Optional[asyncio.TimerHandle] = None
        # Data that arrived while nobody was reading
        self._backlog: List[bytes] = []

    @property
    def connected(self) -> bool:
        return self._connected

    def set_timeout(self, timeout: Optional[float]) -> 'TCPClient':
        """Set the inactivity timeout in seconds"""
        self.timeout = timeout
        return self

    async def connect(self, host: str, port: int) -> 'TCPClient':
        """Connect to host:port.

        Raises:
            ConnectFailed: the connection was refused or the host is unknown
            QueryTimeout: the connection did not complete within the timeout
        """
        if self._closed:
            raise TransportClosed("TCP client is closed")

        loop = asyncio.get_running_loop()
        self._can_write = asyncio.Event()
        self._can_write.set()

        logger.debug(f"Connecting to {host}:{port}")
        try:
            self._transport, _ = await asyncio.wait_for(
                loop.create_connection(lambda: _StreamProtocol(self), host, port),
                self.timeout,
            )
        except asyncio.TimeoutError:
            raise QueryTimeout(f"Connection to {host}:{port} timed out") from None
        except OSError as e:
            raise ConnectFailed(f"Failed to connect to {host}:{port}: {e}") from e

        self.host = host
        self.port = port
        self._connected = True
        logger.info(f"Connected to {host}:{port}")
        return self

    def close(self) -> 'TCPClient':
        """Close the connection. A pending read fails with TransportClosed."""
        if self._closed:
            return self
        self._closed = True
        self._connected = False
        if self._transport:
            self._transport.close()
        self._cancel_idle_timer()
        if self._collector:
            self._collector.fail(TransportClosed("TCP socket closed"))
        logger.debug(f"Closed connection to {self.host}:{self.port}")
        return self

    async def write(self, data: Union[bytes, str]):
        """Write data to the socket, waiting if the write buffer is full"""
        if not self._connected or self._closed:
            raise TransportClosed("Cannot write: TCP client is not connected")

        if isinstance(data, str):
            data = data.encode('latin-1')

        await self._can_write.wait()
        if not self._connected:
            raise TransportClosed("Connection lost while writing")
        self._transport.write(data)
        logger.debug(f"Sent {len(data)} bytes to {self.host}:{self.port}")

    async def read(self, end_delay: float = DEFAULT_END_DELAY) -> bytes:
        """Read all data until end_delay passes without any arriving.

        Ends early if the peer closes the connection.

        Raises:
            TransportClosed: the client was closed during the read
            QueryTimeout: no data arrived within the inactivity timeout
        """
        if self._closed:
            raise TransportClosed("Cannot read: TCP client is closed")
        if self._transport is None:
            raise TransportClosed("Cannot read: TCP client is not connected")
        if self._collector:
            raise RuntimeError("TCPClient.read() is already in progress")

        collector = QuietPeriod(end_delay)
        for chunk in self._backlog:
            collector.feed(chunk)
        self._backlog.clear()

        if self._eof or not self._connected:
            collector.finish()
        else:
            self._collector = collector
            self._restart_idle_timer()

        try:
            groups = await collector.wait()
        finally:
            self._collector = None
            self._cancel_idle_timer()

        data = b''.join(groups.get(None, []))
        logger.debug(f"Read {len(data)} bytes from {self.host}:{self.port}")
        return data

    async def request(self, data: Union[bytes, str], end_delay: float = DEFAULT_END_DELAY) -> bytes:
        """Convenience method that combines write() and read()"""
        await self.write(data)
        return await self.read(end_delay)

    def _restart_idle_timer(self):
        self._cancel_idle_timer()
        if self.timeout is not None and self._collector:
            loop = asyncio.get_running_loop()
            self._idle_handle = loop.call_later(self.timeout, self._on_idle)

    def _cancel_idle_timer(self):
        if self._idle_handle:
            self._idle_handle.cancel()
            self._idle_handle = None

    def _on_idle(self):
        self._idle_handle = None
        if self._collector:
            self._collector.fail(QueryTimeout(f"Connection to {self.host}:{self.port} timed out"))

    def _on_data(self, data: bytes):
        if self._collector:
            self._collector.feed(data)
            self._restart_idle_timer()
        else:
            self._backlog.append(data)

    def _on_eof(self):
        self._eof = True
        if self._collector:
            self._collector.finish()

    def _on_closed(self, exc: Optional[Exception]):
        self._connected = False
        self._cancel_idle_timer()
        if self._can_write:
            self._can_write.set()  # Wake writers so they see the lost connection
        if not self._collector:
            return
        if exc:
            self._collector.fail(TransportClosed(f"Connection lost: {exc}"))
        elif self._closed:
            self._collector.fail(TransportClosed("TCP socket closed"))
        else:
            self._collector.finish()

    async def __aenter__(self) -> 'TCPClient':
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
