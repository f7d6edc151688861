"""
Tests for the UDP client against mock game servers
"""

import asyncio

import pytest

from haloquery.connection import QuietPeriod, UDPClient
from haloquery.errors import QueryTimeout, TransportClosed
from haloquery.testing import MockGameServer, ReplyScenario


class TestUDPRead:
    """Test single datagram reads"""

    def test_request_returns_reply(self):
        """request() writes then returns the first reply"""
        async def scenario():
            async with MockGameServer(ReplyScenario.single(b'\\hostname\\x')) as server:
                async with UDPClient() as client:
                    reply = await client.request(*server.address, '\\')
                return reply, server

        reply, server = asyncio.run(scenario())
        assert reply.data == b'\\hostname\\x'
        assert reply.port == server.port
        assert server.requests[0][0] == b'\\'

    def test_read_timeout(self):
        """No reply within the timeout raises QueryTimeout"""
        async def scenario():
            async with MockGameServer(ReplyScenario()) as server:
                async with UDPClient() as client:
                    await client.write(*server.address, b'\\')
                    await client.read(timeout=0.05)

        with pytest.raises(QueryTimeout):
            asyncio.run(scenario())

    def test_unsolicited_data_kept_for_next_read(self):
        """Datagrams arriving between reads are not lost"""
        async def scenario():
            async with MockGameServer(ReplyScenario.single(b'early')) as server:
                async with UDPClient() as client:
                    await client.write(*server.address, b'\\')
                    await asyncio.sleep(0.05)
                    return await client.read(timeout=0.05)

        assert asyncio.run(scenario()).data == b'early'


class TestUDPReadAll:
    """Test quiet period reads across many servers"""

    def test_multi_datagram_reply(self):
        """Chunks at 0, 50 and 80ms with a 100ms end delay form one reply"""
        scenario_chunks = (ReplyScenario()
                           .add_chunk(b'\\hostname\\A')
                           .add_chunk(b'\\gamever\\1', delay=0.05)
                           .add_chunk(b'\\mapname\\b', delay=0.03))

        async def scenario():
            loop = asyncio.get_running_loop()
            async with MockGameServer(scenario_chunks) as server:
                async with UDPClient() as client:
                    await client.write(*server.address, b'\\')
                    start = loop.time()
                    replies = await client.read_all(0.1)
                    return replies, loop.time() - start, server

        replies, elapsed, server = asyncio.run(scenario())
        key = f"127.0.0.1:{server.port}"
        assert list(replies) == [key]
        assert replies[key].data == b'\\hostname\\A\\gamever\\1\\mapname\\b'
        assert 0.15 <= elapsed < 0.6

    def test_replies_grouped_by_sender(self):
        """Each server's datagrams are kept separately"""
        async def scenario():
            async with MockGameServer(ReplyScenario.single(b'one')) as first, \
                    MockGameServer(ReplyScenario.single(b'two')) as second:
                async with UDPClient() as client:
                    await client.write(*first.address, b'\\')
                    await client.write(*second.address, b'\\')
                    replies = await client.read_all(0.1)
                return replies, first, second

        replies, first, second = asyncio.run(scenario())
        assert replies[f"127.0.0.1:{first.port}"].data == b'one'
        assert replies[f"127.0.0.1:{second.port}"].data == b'two'

    def test_no_replies(self):
        """read_all returns None when nobody answers"""
        async def scenario():
            async with MockGameServer(ReplyScenario()) as server:
                async with UDPClient() as client:
                    await client.write(*server.address, b'\\')
                    return await client.read_all(0.05)

        assert asyncio.run(scenario()) is None

    def test_late_datagram_kept_for_next_read(self):
        """Data reaching an expired collector goes to the next read instead"""
        async def scenario():
            client = UDPClient()
            await client.open(('127.0.0.1', 0))
            expired = QuietPeriod(0.01)
            await expired.wait()

            # Expired but not yet removed, as between expiry and read_all returning
            client._collectors.append(expired)
            client._on_datagram(b'late', ('10.0.0.1', 2302))
            client._collectors.remove(expired)

            reply = await client.read(timeout=0.05)
            client.close()
            return reply

        reply = asyncio.run(scenario())
        assert reply.data == b'late'
        assert reply.key == '10.0.0.1:2302'

    def test_close_fails_read_all(self):
        """Closing the client rejects a pending read_all"""
        async def scenario():
            client = UDPClient()
            await client.open(('127.0.0.1', 0))
            pending = asyncio.ensure_future(client.read_all(5.0))
            await asyncio.sleep(0.02)
            client.close()
            await pending

        with pytest.raises(TransportClosed):
            asyncio.run(scenario())


class TestUDPLifecycle:
    """Test socket open and close handling"""

    def test_write_opens_socket(self):
        async def scenario():
            client = UDPClient()
            assert not client.is_open
            await client.write('127.0.0.1', 9, b'\\')
            is_open = client.is_open
            client.close()
            return is_open, client.is_open

        assert asyncio.run(scenario()) == (True, False)

    def test_write_after_close(self):
        async def scenario():
            client = UDPClient()
            client.close()
            await client.write('127.0.0.1', 9, b'\\')

        with pytest.raises(TransportClosed):
            asyncio.run(scenario())

    def test_read_before_open(self):
        async def scenario():
            await UDPClient().read_all(0.01)

        with pytest.raises(TransportClosed):
            asyncio.run(scenario())


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
