"""
Shared fixtures.

FakeStreamRedis is a manual-clock stand-in for the stream commands, used
where tests need to move time (TTL expiry) or stall a command. It replies
the way the production client does (decode_responses=False: raw bytes).
Parsing and transaction behaviour is covered against fakeredis, which runs
replies through redis-py's own parser.
"""
from datetime import timedelta
from typing import Dict, List, Optional, Tuple

import fakeredis
import pytest
from fastapi.testclient import TestClient
from redis.exceptions import ResponseError

from app.core.dependencies import get_log_store, get_timestamp_ms
from app.core.rate_limit import limiter
from app.main import app
from app.services.log_store import LogStore


def _text(value) -> str:
    return value.decode() if isinstance(value, bytes) else str(value)


def _raw(value) -> bytes:
    return value if isinstance(value, bytes) else str(value).encode()


def _parse_id(value) -> Tuple[int, int]:
    millis, _, seq = _text(value).partition("-")
    return int(millis), int(seq or 0)


class FakePipeline:
    """MULTI/EXEC over FakeStreamRedis: queued commands run together on execute"""

    def __init__(self, redis):
        self._redis = redis
        self._commands = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        self._commands = []

    def xadd(self, *args, **kwargs):
        self._commands.append(("xadd", args, kwargs))
        return self

    def expire(self, *args, **kwargs):
        self._commands.append(("expire", args, kwargs))
        return self

    async def execute(self, raise_on_error=True):
        # Transport failures happen before EXEC is applied
        self._redis._check()
        commands, self._commands = self._commands, []
        results = []
        for name, args, kwargs in commands:
            try:
                results.append(await getattr(self._redis, name)(*args, **kwargs))
            except ResponseError as e:
                results.append(e)
        if raise_on_error:
            for index, result in enumerate(results, start=1):
                if isinstance(result, ResponseError):
                    raise ResponseError(
                        f"Command # {index} ({commands[index - 1][0].upper()}) "
                        f"of pipeline caused error: {result}"
                    )
        return results


class FakeStreamRedis:
    """
    Minimal async fake of XADD / EXPIRE / XRANGE / PING with a manual clock.

    Mirrors Redis behaviour the store relies on: explicit ids must grow,
    EXPIRE on a missing key is a no-op, expired keys read as absent.
    """

    pipeline_class = FakePipeline

    def __init__(self):
        self.now = 0.0
        self.streams: Dict[str, List[Tuple[Tuple[int, int], Dict[bytes, bytes]]]] = {}
        self.expires_at: Dict[str, float] = {}
        self.fail_with: Optional[Exception] = None
        self.closed = False
        self.close_calls = 0

    def advance(self, seconds: float):
        self.now += seconds

    def ttl(self, name: str) -> Optional[float]:
        self._purge(name)
        if name not in self.expires_at:
            return None
        return self.expires_at[name] - self.now

    def _purge(self, name: str):
        deadline = self.expires_at.get(name)
        if deadline is not None and deadline <= self.now:
            self.streams.pop(name, None)
            self.expires_at.pop(name, None)

    def _check(self):
        if self.fail_with is not None:
            raise self.fail_with

    def pipeline(self, transaction=True):
        return self.pipeline_class(self)

    async def xadd(self, name, fields, id="*"):
        self._check()
        self._purge(name)
        parsed = _parse_id(id)
        stream = self.streams.get(name, [])
        if parsed == (0, 0):
            raise ResponseError("The ID specified in XADD must be greater than 0-0")
        if stream and parsed <= stream[-1][0]:
            raise ResponseError(
                "The ID specified in XADD is equal or smaller than the target stream top item"
            )
        stream.append((parsed, {_raw(k): _raw(v) for k, v in fields.items()}))
        self.streams[name] = stream
        return _raw(id)

    async def expire(self, name, time):
        self._check()
        self._purge(name)
        if name not in self.streams:
            return False
        seconds = time.total_seconds() if isinstance(time, timedelta) else time
        self.expires_at[name] = self.now + seconds
        return True

    async def xrange(self, name, min="-", max="+", count=None):
        self._check()
        self._purge(name)
        low = (0, 0) if min == "-" else _parse_id(min)
        entries = []
        for entry_id, fields in self.streams.get(name, []):
            if entry_id < low:
                continue
            if max != "+" and entry_id > _parse_id(max):
                break
            entries.append((f"{entry_id[0]}-{entry_id[1]}".encode(), dict(fields)))
        return entries

    async def ping(self):
        self._check()
        return True

    async def aclose(self):
        self.closed = True
        self.close_calls += 1


class FakeClock:
    """Deterministic source for server-assigned append timestamps"""

    def __init__(self, start: int = 1000, step: int = 1):
        self.value = start
        self.step = step

    def __call__(self) -> int:
        current = self.value
        self.value += self.step
        return current


@pytest.fixture
def fake_redis():
    return FakeStreamRedis()


@pytest.fixture
def log_store(fake_redis):
    return LogStore(fake_redis, ttl=timedelta(hours=1))


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def client(log_store, clock):
    """Create test client over the in-memory store"""
    limiter.reset()
    app.dependency_overrides[get_log_store] = lambda: log_store
    app.dependency_overrides[get_timestamp_ms] = clock
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def redis_client():
    """fakeredis client configured like create_redis_client (raw replies)"""
    return fakeredis.FakeAsyncRedis(server=fakeredis.FakeServer(), decode_responses=False)


@pytest.fixture
def redis_log_store(redis_client):
    return LogStore(redis_client, ttl=timedelta(hours=1))
