"""Connection to the audio node: one persistent socket plus REST calls."""

from __future__ import annotations

import asyncio
import json
import logging
from collections import deque
from typing import TYPE_CHECKING, Any

import aiohttp
import httpx
from discord.backoff import ExponentialBackoff

from discord_node_manager.config.settings import NodeOptions
from discord_node_manager.domain.playback.value_objects import NodeEventType, NodeState
from discord_node_manager.domain.shared.events import NodeConnected, NodeDisconnected, NodeError
from discord_node_manager.domain.shared.exceptions import (
    NodeConnectionError,
    ProtocolError,
    RequestError,
)
from discord_node_manager.domain.shared.messages import ErrorMessages, LogTemplates
from discord_node_manager.infrastructure.node.frames import decode_frame

if TYPE_CHECKING:
    from discord_node_manager.application.router import EventRouter

logger = logging.getLogger(__name__)

_CLOSERS = (
    aiohttp.WSMsgType.CLOSE,
    aiohttp.WSMsgType.CLOSING,
    aiohttp.WSMsgType.CLOSED,
)

_WRITE_ERRORS = (ConnectionResetError, aiohttp.ClientError)


class NodeConnection:
    """Owns the socket to the node and the HTTP client used for REST calls.

    The socket is not opened on construction; :meth:`connect` opens it. Frames
    received on it are decoded and handed to the router; socket failures are
    published as events and never raised to callers.
    """

    def __init__(
        self,
        options: NodeOptions,
        router: EventRouter,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.options = options
        self.identifier = options.identifier
        self.state = NodeState.DISCONNECTED
        self.client_id: str | None = None
        self.access_token: str | None = None

        self._router = router
        self._session: aiohttp.ClientSession | None = None
        self._ws: aiohttp.ClientWebSocketResponse | None = None
        self._listener_task: asyncio.Task[None] | None = None
        self._http = http_client
        self._owns_http = http_client is None
        self._pending: deque[str] = deque(maxlen=options.max_pending_frames)
        self._destroyed = False

    def __repr__(self) -> str:
        return (
            f"<NodeConnection identifier={self.identifier} state={self.state.name} "
            f"url={self.options.socket_url}>"
        )

    @property
    def socket(self) -> aiohttp.ClientWebSocketResponse | None:
        return self._ws

    @property
    def connected(self) -> bool:
        return self.state.is_open and self._ws is not None and not self._ws.closed

    @property
    def pending_frames(self) -> int:
        return len(self._pending)

    def _headers(self) -> dict[str, str]:
        headers = {"Authorization": self.options.password.get_secret_value()}
        if self.client_id:
            headers["Client-Id"] = self.client_id
        return headers

    def _set_state(self, next_state: NodeState) -> None:
        if next_state == self.state:
            return
        if not self.state.can_transition_to(next_state):
            logger.warning(
                LogTemplates.NODE_STATE_CHANGED, self.identifier, self.state.name, next_state.name
            )
        else:
            logger.debug(
                LogTemplates.NODE_STATE_CHANGED, self.identifier, self.state.name, next_state.name
            )
        self.state = next_state
        if next_state == NodeState.DISCONNECTED:
            self._pending.clear()

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
        return self._session

    def _get_http(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient(
                base_url=self.options.rest_url,
                timeout=self.options.request_timeout_s,
            )
            self._owns_http = True
        return self._http

    # === Socket ===

    async def connect(self, client_id: str | None = None) -> bool:
        """Open the socket, retrying with backoff up to ``max_connect_attempts``.

        Returns whether the socket is open. Failure is reported through a
        ``NodeError`` event rather than raised.
        """
        if client_id:
            self.client_id = client_id
        if self.state in (NodeState.CONNECTING, NodeState.CONNECTED):
            return self.state == NodeState.CONNECTED

        self._destroyed = False
        self._set_state(NodeState.CONNECTING)
        opened = await self._open_socket()
        if not opened and not self._destroyed:
            self._set_state(NodeState.DISCONNECTED)
        return opened

    async def _open_socket(self) -> bool:
        backoff = ExponentialBackoff()
        attempts = self.options.max_connect_attempts
        last_error: BaseException | None = None

        for attempt in range(1, attempts + 1):
            if self._destroyed:
                return False

            logger.info(
                LogTemplates.NODE_CONNECTING,
                self.identifier,
                self.options.socket_url,
                attempt,
                attempts,
            )
            try:
                ws = await asyncio.wait_for(
                    self._get_session().ws_connect(
                        self.options.socket_url,
                        headers=self._headers(),
                        heartbeat=self.options.heartbeat_s,
                    ),
                    timeout=self.options.connect_timeout_s,
                )
            except (OSError, TimeoutError, aiohttp.ClientError) as e:
                last_error = e
                if attempt == attempts:
                    break
                delay = backoff.delay()
                logger.warning(
                    LogTemplates.NODE_CONNECT_FAILED, self.identifier, attempt, e, delay
                )
                await asyncio.sleep(delay)
            else:
                if self._destroyed:
                    await ws.close()
                    return False
                self._ws = ws
                self._set_state(NodeState.CONNECTED)
                self._listener_task = asyncio.create_task(self._listen(ws))
                await self._flush_pending()
                logger.info(LogTemplates.NODE_CONNECTED, self.identifier)
                await self._router.publish(NodeConnected(node=self))
                return True

        logger.error(LogTemplates.NODE_CONNECT_GAVE_UP, self.identifier, attempts)
        error = NodeConnectionError(
            ErrorMessages.NODE_CONNECT_FAILED.format(identifier=self.identifier, attempts=attempts),
            attempts=attempts,
        )
        error.__cause__ = last_error
        await self._router.publish(NodeError(node=self, error=error))
        return False

    async def _listen(self, ws: aiohttp.ClientWebSocketResponse) -> None:
        """Read frames until the socket closes, then reconnect unless destroyed."""
        while True:
            msg = await ws.receive()
            if msg.type in _CLOSERS:
                break
            if msg.type == aiohttp.WSMsgType.TEXT:
                await self._handle_message(msg.data)
            elif msg.type == aiohttp.WSMsgType.ERROR:
                logger.warning(
                    LogTemplates.NODE_SOCKET_ERROR, self.identifier, exc_info=ws.exception()
                )
                break
            else:
                logger.debug(LogTemplates.NODE_UNEXPECTED_MESSAGE, self.identifier, msg.type)

        if self._destroyed or ws is not self._ws:
            return
        await self._handle_socket_closed(ws.close_code)

    async def _handle_message(self, raw: str) -> None:
        try:
            frame = decode_frame(raw)
        except ProtocolError:
            logger.warning(LogTemplates.FRAME_MALFORMED, raw)
            return

        if frame.t == NodeEventType.READY:
            token = frame.d.get("access_token")
            if token:
                self.access_token = str(token)
                logger.debug(LogTemplates.NODE_ACCESS_TOKEN, self.identifier)

        self._router.submit_frame(frame)

    async def _handle_socket_closed(self, code: int | None) -> None:
        logger.warning(LogTemplates.NODE_SOCKET_CLOSED, self.identifier, code)
        self._ws = None
        self._set_state(NodeState.RECONNECTING)
        await self._router.publish(NodeDisconnected(node=self, code=code))

        logger.info(LogTemplates.NODE_RECONNECTING, self.identifier)
        if not await self._open_socket() and not self._destroyed:
            self._set_state(NodeState.DISCONNECTED)

    async def send(self, payload: dict[str, Any]) -> bool:
        """Write ``payload`` to the socket as JSON text.

        While the socket is being opened or reopened the frame is queued and
        flushed, in order, once it connects. A frame whose write fails is
        queued again and a ``NodeError`` is published. Returns False when the
        frame was dropped because the node is disconnected.
        """
        if self._destroyed:
            raise NodeConnectionError(ErrorMessages.NODE_DESTROYED.format(identifier=self.identifier))

        data = json.dumps(payload)
        if self.connected:
            await self._write([data])
            return True

        if self.state not in (NodeState.CONNECTING, NodeState.RECONNECTING):
            logger.warning(LogTemplates.NODE_FRAME_DROPPED, self.identifier, self.state.name)
            return False

        self._enqueue([data])
        logger.debug(LogTemplates.NODE_FRAME_QUEUED, self.identifier, len(self._pending))
        return True

    def _enqueue(self, frames: list[str], *, front: bool = False) -> None:
        overflow = len(self._pending) + len(frames) - self._pending.maxlen
        if overflow > 0:
            logger.warning(LogTemplates.NODE_QUEUE_FULL, self.identifier, overflow)
        if front:
            self._pending.extendleft(reversed(frames))
        else:
            self._pending.extend(frames)

    async def _write(self, frames: list[str]) -> bool:
        """Write ``frames`` in order, queueing the unsent rest if the socket fails."""
        for index, data in enumerate(frames):
            try:
                await self._ws.send_str(data)
            except _WRITE_ERRORS as e:
                unsent = frames[index:]
                self._enqueue(unsent, front=True)
                logger.warning(LogTemplates.NODE_WRITE_FAILED, self.identifier, len(unsent), e)
                error = NodeConnectionError(
                    ErrorMessages.NODE_WRITE_FAILED.format(identifier=self.identifier)
                )
                error.__cause__ = e
                await self._router.publish(NodeError(node=self, error=error))
                return False
        return True

    async def _flush_pending(self) -> None:
        if not self._pending:
            return
        pending = list(self._pending)
        self._pending.clear()
        if await self._write(pending):
            logger.debug(LogTemplates.NODE_QUEUE_FLUSHED, self.identifier, len(pending))

    # === REST ===

    async def make_request(
        self,
        method: str,
        path: str,
        *,
        body: Any = None,
    ) -> Any:
        """Call the node's REST API and return the decoded JSON body.

        Raises:
            RequestError: On a non-success status or when no response arrives.
            ProtocolError: When a non-empty body is not JSON.
        """
        path = path.lstrip("/")
        headers = {}
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"

        try:
            response = await self._get_http().request(method, path, headers=headers, json=body)
        except httpx.HTTPError as e:
            logger.warning(LogTemplates.REQUEST_FAILED, method, path, e)
            raise RequestError(method, path) from e

        logger.debug(LogTemplates.REQUEST_SENT, method, path, response.status_code)
        if not response.is_success:
            raise RequestError(method, path, status=response.status_code)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise ProtocolError(ErrorMessages.NON_JSON_RESPONSE, raw=response.text) from e

    # === Lifecycle ===

    async def destroy(self) -> None:
        """Close the socket and HTTP resources. Safe to call more than once."""
        if self._destroyed and self.state == NodeState.DISCONNECTED:
            return

        self._destroyed = True
        was_open = self.state.is_open

        if self._listener_task is not None and self._listener_task is not asyncio.current_task():
            self._listener_task.cancel()
        self._listener_task = None

        if self._ws is not None and not self._ws.closed:
            await self._ws.close()
        self._ws = None

        if self._session is not None:
            await self._session.close()
            self._session = None

        if self._http is not None and self._owns_http:
            await self._http.aclose()
            self._http = None

        self._pending.clear()
        self._set_state(NodeState.DISCONNECTED)
        logger.info(LogTemplates.NODE_DESTROYED, self.identifier)

        if was_open:
            await self._router.publish(NodeDisconnected(node=self))
