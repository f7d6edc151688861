"""
UDP client - asyncio datagram socket wrapper

UDP is fire-and-forget with no acknowledgement built in. There is no guarantee
that data received answers anything we sent, that every destination answers,
or that an answer fits in one datagram.
"""

import asyncio
import logging
from typing import Dict, List, Optional, Tuple, Union

from ..errors import QueryTimeout, TransportClosed
from ..models.server import UDPResponse
from .quiet_period import QuietPeriod

logger = logging.getLogger(__name__)

DEFAULT_END_DELAY = 0.5
DEFAULT_TIMEOUT = 1.0

Address = Tuple[str, int]


class _DatagramProtocol(asyncio.DatagramProtocol):
    """Forwards socket events to the owning UDPClient"""

    def __init__(self, client: 'UDPClient'):
        self._client = client

    def datagram_received(self, data: bytes, addr):
        self._client._on_datagram(data, addr)

    def error_received(self, exc: Exception):
        # ICMP errors for a single destination; other replies may still arrive
        logger.warning(f"UDP socket error: {exc}")

    def connection_lost(self, exc: Optional[Exception]):
        self._client._on_closed(exc)


class UDPClient:
    """
    Datagram client that can talk to many servers over one socket.

    Usage:
        async with UDPClient() as client:
            await client.write("1.2.3.4", 2302, "\\\\")
            await client.write("5.6.7.8", 2302, "\\\\")
            replies = await client.read_all(0.5)
    """

    def __init__(self):
        self._transport: Optional[asyncio.DatagramTransport] = None
        self._closed = False
        self._pending_reads: List[asyncio.Future] = []
        self._collectors: List[QuietPeriod] = []
        # Datagrams that arrived while nobody was reading
        self._backlog: List[Tuple[bytes, Address]] = []

    @property
    def is_open(self) -> bool:
        return self._transport is not None and not self._closed

    @property
    def local_address(self) -> Optional[Address]:
        if not self._transport:
            return None
        return self._transport.get_extra_info('sockname')[:2]

    async def open(self, local_addr: Optional[Address] = None) -> 'UDPClient':
        """Bind the underlying socket (done on first write if not called)"""
        if self._closed:
            raise TransportClosed("UDP client is closed")
        if self._transport:
            return self

        loop = asyncio.get_running_loop()
        self._transport, _ = await loop.create_datagram_endpoint(
            lambda: _DatagramProtocol(self),
            local_addr=local_addr or ('0.0.0.0', 0),
        )
        logger.debug(f"UDP socket bound to {self.local_address}")
        return self

    def close(self) -> 'UDPClient':
        """Close the socket. Pending reads fail with TransportClosed."""
        if self._closed:
            return self
        self._closed = True
        if self._transport:
            self._transport.close()
        self._fail_pending(TransportClosed("UDP socket closed"))
        self._backlog.clear()
        return self

    async def write(self, ip: str, port: int, message: Union[bytes, str]) -> int:
        """Send message to ip:port. Returns number of bytes sent."""
        if self._closed:
            raise TransportClosed("Cannot write: UDP client is closed")
        if not self._transport:
            await self.open()

        if isinstance(message, str):
            message = message.encode('latin-1')
        self._transport.sendto(message, (ip, port))
        logger.debug(f"Sent {len(message)} bytes to {ip}:{port}")
        return len(message)

    async def read(self, timeout: float = DEFAULT_TIMEOUT) -> UDPResponse:
        """Read the first datagram to arrive from anyone.

        Raises:
            QueryTimeout: nothing arrived within timeout
        """
        self._ensure_readable()

        if self._backlog:
            data, addr = self._backlog.pop(0)
            return UDPResponse(addr[0], addr[1], data)

        future = asyncio.get_running_loop().create_future()
        self._pending_reads.append(future)
        try:
            return await asyncio.wait_for(future, timeout)
        except asyncio.TimeoutError:
            raise QueryTimeout(f"No UDP data received within {timeout}s") from None
        finally:
            if future in self._pending_reads:
                self._pending_reads.remove(future)

    async def read_all(self, end_delay: float = DEFAULT_END_DELAY) -> Optional[Dict[str, UDPResponse]]:
        """Read everything that arrives until end_delay passes without data.

        Useful after write() was called for several servers. Datagrams are
        grouped by sender; each sender's datagrams are concatenated in arrival
        order.

        Returns:
            Dict keyed by "ip:port", or None if nothing arrived
        """
        self._ensure_readable()

        collector = QuietPeriod(end_delay)
        for data, addr in self._backlog:
            collector.feed(data, addr)
        self._backlog.clear()

        self._collectors.append(collector)
        try:
            groups = await collector.wait()
        finally:
            if collector in self._collectors:
                self._collectors.remove(collector)

        if not groups:
            return None

        responses = {}
        for (address, port), chunks in groups.items():
            response = UDPResponse(address, port, b''.join(chunks))
            responses[response.key] = response
        logger.debug(f"Collected UDP replies from {len(responses)} sender(s)")
        return responses

    async def request(self, ip: str, port: int, message: Union[bytes, str],
                      timeout: float = DEFAULT_TIMEOUT) -> UDPResponse:
        """Convenience method that combines write() and read()"""
        await self.write(ip, port, message)
        return await self.read(timeout)

    def _ensure_readable(self):
        if self._closed:
            raise TransportClosed("Cannot read: UDP client is closed")
        if not self._transport:
            raise TransportClosed("Cannot read: UDP socket is not open")

    def _on_datagram(self, data: bytes, addr):
        addr = (addr[0], addr[1])
        logger.debug(f"Received {len(data)} bytes from {addr[0]}:{addr[1]}")

        delivered = False
        for future in self._pending_reads:
            if not future.done():
                future.set_result(UDPResponse(addr[0], addr[1], data))
                delivered = True
        self._pending_reads.clear()

        for collector in self._collectors:
            # An expired collector may not have been removed yet
            if not collector.done:
                collector.feed(data, addr)
                delivered = True

        if not delivered:
            self._backlog.append((data, addr))

    def _on_closed(self, exc: Optional[Exception]):
        self._closed = True
        if exc:
            self._fail_pending(TransportClosed(f"UDP socket lost: {exc}"))
        else:
            self._fail_pending(TransportClosed("UDP socket closed"))

    def _fail_pending(self, exc: Exception):
        for future in self._pending_reads:
            if not future.done():
                future.set_exception(exc)
        self._pending_reads.clear()
        for collector in self._collectors:
            collector.fail(exc)

    async def __aenter__(self) -> 'UDPClient':
        return await self.open()

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
