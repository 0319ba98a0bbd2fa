import asyncio
import json
from types import SimpleNamespace
from unittest.mock import AsyncMock

import aiohttp
import httpx
import pytest
import pytest_asyncio

# ============================================================================
# Fakes
# ============================================================================


class FakeWebSocket:
    """Stand-in for aiohttp.ClientWebSocketResponse driven by the test."""

    def __init__(self) -> None:
        self.sent: list[str] = []
        self.closed = False
        self.close_code: int | None = None
        self._inbox: asyncio.Queue = asyncio.Queue()

    def feed_text(self, data) -> None:
        if not isinstance(data, str):
            data = json.dumps(data)
        self._inbox.put_nowait(SimpleNamespace(type=aiohttp.WSMsgType.TEXT, data=data))

    def feed_close(self, code: int = 1006) -> None:
        self.close_code = code
        self._inbox.put_nowait(SimpleNamespace(type=aiohttp.WSMsgType.CLOSED, data=None))

    async def receive(self):
        return await self._inbox.get()

    async def send_str(self, data: str) -> None:
        self.sent.append(data)

    async def close(self) -> None:
        self.closed = True

    def exception(self):
        return None

    @property
    def sent_json(self) -> list:
        return [json.loads(data) for data in self.sent]


class FailingWebSocket(FakeWebSocket):
    """Socket whose transport is closing but not yet marked closed."""

    def __init__(self, error: Exception | None = None) -> None:
        super().__init__()
        self.error = error or ConnectionResetError("Cannot write to closing transport")
        self.attempted: list[str] = []

    async def send_str(self, data: str) -> None:
        self.attempted.append(data)
        raise self.error


async def settle(delay: float = 0.01) -> None:
    """Let background listener and publish tasks run."""
    await asyncio.sleep(delay)


def mock_http_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://node.test/")


# ============================================================================
# Manager Fixtures
# ============================================================================


@pytest.fixture
def send_callback():
    """Gateway send callback supplied by the hosting bot."""
    return AsyncMock()


@pytest.fixture
def manager_options(send_callback):
    return {
        "node": {"host": "node.test", "port": 3000, "password": "secret"},
        "send": send_callback,
    }


@pytest_asyncio.fixture
async def manager(manager_options):
    """Manager whose node has not been opened."""
    from discord_node_manager.application.manager import Manager

    manager = Manager(manager_options)
    yield manager
    await manager.destroy_node()


@pytest.fixture
def fake_ws():
    return FakeWebSocket()


@pytest.fixture
def connected_manager(manager, fake_ws):
    """Manager whose node behaves as if its socket were open."""
    from discord_node_manager.domain.playback.value_objects import NodeState

    manager.node._ws = fake_ws
    manager.node.state = NodeState.CONNECTED
    return manager


@pytest.fixture
def recorded_events(manager):
    """Subscribe a recorder to every event type the manager publishes."""
    import discord_node_manager as dnm

    events: list = []

    async def record(event) -> None:
        events.append(event)

    for event_type in (
        dnm.NodeConnected,
        dnm.NodeDisconnected,
        dnm.NodeError,
        dnm.NodeReady,
        dnm.TrackAdded,
        dnm.TracksAdded,
        dnm.TrackStarted,
        dnm.TrackEnded,
        dnm.TrackErrored,
        dnm.QueueEnded,
        dnm.VoiceReady,
        dnm.VoiceDisconnected,
        dnm.VoiceErrored,
        dnm.AudioPlayerErrored,
    ):
        manager.subscribe(event_type, record)
    return events


# ============================================================================
# Domain Fixtures
# ============================================================================


@pytest.fixture
def requester():
    return SimpleNamespace(id=111, name="userA")


@pytest.fixture
def node_track():
    """A track object as the node returns it."""
    return {
        "url": "https://youtube.com/watch?v=dQw4w9WgXcQ",
        "title": "Test Song",
        "thumbnail": "https://i.ytimg.com/vi/dQw4w9WgXcQ/hq.jpg",
        "duration": 212000,
        "author": "Test Artist",
        "created_at": "2009-10-25",
        "extractor": "youtube",
    }
