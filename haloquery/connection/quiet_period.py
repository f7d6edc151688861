"""
Quiet period aggregation

Neither UDP nor TCP tells us when a multi-part reply is over, and it's
non-trivial (sometimes impossible) to tell from the data itself. Instead we
collect everything that arrives and call it done once nothing new has arrived
for a fixed delay.
"""

import asyncio
import logging
from typing import Dict, Hashable, List, Optional

logger = logging.getLogger(__name__)

Groups = Dict[Optional[Hashable], List[bytes]]


class QuietPeriod:
    """Debounced collector of data chunks

    The timer starts on creation and restarts every time a chunk is fed in.
    When it finally expires, wait() resolves with the chunks grouped by key in
    first-arrival order. Stream readers use a single None key, datagram readers
    group by sender.

    Must be created inside a running event loop.
    """

    def __init__(self, delay: float, loop: Optional[asyncio.AbstractEventLoop] = None):
        self.delay = delay
        self._loop = loop or asyncio.get_running_loop()
        self._groups: Groups = {}
        self._future: asyncio.Future = self._loop.create_future()
        self._handle = self._loop.call_later(delay, self._expire)

    @property
    def done(self) -> bool:
        return self._future.done()

    def feed(self, data: bytes, key: Optional[Hashable] = None):
        """Add a chunk and restart the timer"""
        if self.done:
            return
        self._groups.setdefault(key, []).append(data)
        self._handle.cancel()
        self._handle = self._loop.call_later(self.delay, self._expire)

    def finish(self):
        """Resolve now with whatever has been collected"""
        self._handle.cancel()
        if not self.done:
            self._future.set_result(self._groups)

    def fail(self, exc: BaseException):
        """Reject the pending wait"""
        self._handle.cancel()
        if not self.done:
            self._future.set_exception(exc)

    def _expire(self):
        if not self.done:
            logger.debug(f"Quiet for {self.delay}s, collected {len(self._groups)} group(s)")
            self._future.set_result(self._groups)

    async def wait(self) -> Groups:
        """Wait for the quiet period to elapse"""
        try:
            return await self._future
        finally:
            self._handle.cancel()
