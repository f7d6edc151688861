"""
Tests for quiet period aggregation
"""

import asyncio

import pytest

from haloquery.connection import QuietPeriod
from haloquery.errors import TransportClosed


class TestQuietPeriod:
    """Test the debounce timer and chunk grouping"""

    def test_expires_empty(self):
        """With no data, wait resolves with no groups after the delay"""
        async def scenario():
            loop = asyncio.get_running_loop()
            start = loop.time()
            groups = await QuietPeriod(0.05).wait()
            return groups, loop.time() - start

        groups, elapsed = asyncio.run(scenario())
        assert groups == {}
        assert elapsed >= 0.04

    def test_each_chunk_restarts_timer(self):
        """Chunks at 0, 50 and 80ms with a 100ms delay end at about 180ms"""
        async def scenario():
            loop = asyncio.get_running_loop()
            start = loop.time()
            collector = QuietPeriod(0.1)
            collector.feed(b'a')
            loop.call_later(0.05, collector.feed, b'b')
            loop.call_later(0.08, collector.feed, b'c')
            groups = await collector.wait()
            return groups, loop.time() - start

        groups, elapsed = asyncio.run(scenario())
        assert groups == {None: [b'a', b'b', b'c']}
        assert 0.17 <= elapsed < 0.5

    def test_groups_by_key(self):
        """Chunks are grouped by key, in first-arrival order"""
        async def scenario():
            collector = QuietPeriod(0.02)
            collector.feed(b'1', ('10.0.0.2', 2302))
            collector.feed(b'2', ('10.0.0.1', 2302))
            collector.feed(b'3', ('10.0.0.2', 2302))
            return await collector.wait()

        groups = asyncio.run(scenario())
        assert list(groups) == [('10.0.0.2', 2302), ('10.0.0.1', 2302)]
        assert groups[('10.0.0.2', 2302)] == [b'1', b'3']

    def test_finish_resolves_immediately(self):
        """finish() doesn't wait for the timer"""
        async def scenario():
            loop = asyncio.get_running_loop()
            start = loop.time()
            collector = QuietPeriod(5.0)
            collector.feed(b'x')
            loop.call_soon(collector.finish)
            groups = await collector.wait()
            return groups, loop.time() - start

        groups, elapsed = asyncio.run(scenario())
        assert groups == {None: [b'x']}
        assert elapsed < 1.0

    def test_fail_rejects_wait(self):
        """fail() surfaces the error to the waiter"""
        async def scenario():
            collector = QuietPeriod(5.0)
            asyncio.get_running_loop().call_soon(collector.fail, TransportClosed("gone"))
            await collector.wait()

        with pytest.raises(TransportClosed):
            asyncio.run(scenario())

    def test_feed_after_done_ignored(self):
        """Data after resolution is dropped"""
        async def scenario():
            collector = QuietPeriod(0.01)
            groups = await collector.wait()
            collector.feed(b'late')
            return collector.done, groups

        done, groups = asyncio.run(scenario())
        assert done
        assert groups == {}


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
