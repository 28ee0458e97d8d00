from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from typing import Dict, Set

from starlette.websockets import WebSocket, WebSocketState

from src.schemas.realtime import DashboardEvent, WsEnvelope

logger = logging.getLogger(__name__)

DASHBOARD_TOPIC = "dashboard"


class BroadcastManager:
    """
    In-process fan-out of live updates to connected WebSocket clients.

    Two kinds of topic exist: 'notifications:<user_id>' carries a user's new
    notifications, 'dashboard' carries change notices for every open dashboard.
    Only this process's sockets are reached; with several workers each one
    serves its own clients.
    """

    def __init__(self) -> None:
        self._topics: Dict[str, Set[WebSocket]] = defaultdict(set)
        self._lock = asyncio.Lock()

    # PUBLIC_INTERFACE
    def notification_topic(self, user_id: int | str) -> str:
        return f"notifications:{user_id}"

    # PUBLIC_INTERFACE
    def dashboard_topic(self) -> str:
        return DASHBOARD_TOPIC

    # PUBLIC_INTERFACE
    def subscriber_count(self, topic: str) -> int:
        return len(self._topics.get(topic, ()))

    # PUBLIC_INTERFACE
    async def connect(self, topic: str, websocket: WebSocket) -> None:
        """Subscribe an already accepted socket."""
        async with self._lock:
            self._topics[topic].add(websocket)
        logger.info("WebSocket joined %s (%d open)", topic, self.subscriber_count(topic))

    # PUBLIC_INTERFACE
    async def disconnect(self, topic: str, websocket: WebSocket) -> None:
        async with self._lock:
            sockets = self._topics.get(topic)
            if sockets is None:
                return
            sockets.discard(websocket)
            if not sockets:
                del self._topics[topic]
        logger.info("WebSocket left %s (%d open)", topic, self.subscriber_count(topic))

    # PUBLIC_INTERFACE
    async def broadcast(self, topic: str, message: dict) -> int:
        """
        Send a JSON message to every subscriber of a topic.

        Sockets that are closed or fail to send are unsubscribed. Returns the
        number of clients reached.
        """
        async with self._lock:
            targets = list(self._topics.get(topic, ()))
        delivered = 0
        dead: list[WebSocket] = []
        for ws in targets:
            if WebSocketState.DISCONNECTED in (ws.application_state, ws.client_state):
                dead.append(ws)
                continue
            try:
                await ws.send_json(message)
                delivered += 1
            except Exception:
                logger.exception("Dropping WebSocket on %s after failed send", topic)
                dead.append(ws)
        for ws in dead:
            await self.disconnect(topic, ws)
        return delivered

    # PUBLIC_INTERFACE
    async def publish_notification(self, user_id: int, payload: dict) -> None:
        """Push a serialized notification to the user's connected clients."""
        env = WsEnvelope(type="notification.created", payload=payload, user_id=user_id)
        await self.broadcast(self.notification_topic(user_id), env.model_dump(mode="json"))

    # PUBLIC_INTERFACE
    async def publish_dashboard_event(self, event: DashboardEvent) -> None:
        """Tell dashboards that figures changed (new order, stock movement, ...)."""
        env = WsEnvelope(type=f"dashboard.{event.event}", payload=event.model_dump(mode="json"))
        await self.broadcast(self.dashboard_topic(), env.model_dump(mode="json"))


broadcast_manager = BroadcastManager()
