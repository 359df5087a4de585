"""In-memory stand-in for the redis.asyncio client calls the RPC bus makes."""

from typing import Callable, Dict, List, Optional, Tuple

import pytest
from redis.exceptions import ResponseError


class FakeRedis:
    """
    Keeps streams as lists of ``(entry_id, fields)``.

    ``responders`` maps a stream name to a callable run on every XADD to that
    stream, which lets a test play the remote service.
    """

    def __init__(self):
        self.streams: Dict[str, List[Tuple[str, Dict[str, str]]]] = {}
        self.expiries: Dict[str, int] = {}
        self.acks: List[Tuple[str, str, str]] = []
        self.deleted: List[str] = []
        self.groups: Dict[str, str] = {}
        self.pending_batches: List[List[Tuple[str, Dict[str, str]]]] = []
        self.responders: Dict[str, Callable[["FakeRedis", Dict[str, str]], None]] = {}
        self.on_idle: Optional[Callable[[], None]] = None
        self.xadd_error: Optional[Exception] = None
        self.last_xread_block: Optional[int] = None
        self.closed = False
        self._counter = 0

    async def ping(self):
        return True

    async def aclose(self):
        self.closed = True

    async def xadd(self, name, fields):
        if self.xadd_error is not None:
            raise self.xadd_error
        self._counter += 1
        entry_id = f"{self._counter}-0"
        self.streams.setdefault(name, []).append((entry_id, dict(fields)))
        responder = self.responders.get(name)
        if responder is not None:
            responder(self, dict(fields))
        return entry_id

    async def expire(self, name, seconds):
        self.expiries[name] = seconds
        return True

    async def delete(self, *names):
        for name in names:
            self.deleted.append(name)
            self.streams.pop(name, None)
        return len(names)

    async def xread(self, streams, count=None, block=None):
        self.last_xread_block = block
        result = []
        for name in streams:
            entries = self.streams.get(name, [])[:count]
            if entries:
                result.append([name, entries])
        return result

    async def xgroup_create(self, name, groupname, id="$", mkstream=False):
        if self.groups.get(name) == groupname:
            raise ResponseError("BUSYGROUP Consumer Group name already exists")
        self.groups[name] = groupname
        self.streams.setdefault(name, [])
        return True

    async def xreadgroup(self, groupname, consumername, streams, count=None, block=None):
        if self.pending_batches:
            batch = self.pending_batches.pop(0)
            (name,) = streams
            return [[name, batch]]
        if self.on_idle is not None:
            self.on_idle()
        return []

    async def xack(self, name, groupname, *ids):
        for entry_id in ids:
            self.acks.append((name, groupname, entry_id))
        return len(ids)


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()
