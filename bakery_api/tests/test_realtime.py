"""WebSocket fan-out without a real server."""
from starlette.websockets import WebSocketState

from src.schemas.realtime import DashboardEvent
from src.services.realtime import BroadcastManager


class FakeSocket:
    def __init__(self, fail=False):
        self.application_state = WebSocketState.CONNECTED
        self.client_state = WebSocketState.CONNECTED
        self.sent = []
        self.fail = fail

    async def send_json(self, message):
        if self.fail:
            raise RuntimeError("socket gone")
        self.sent.append(message)


async def test_notification_reaches_only_its_user():
    manager = BroadcastManager()
    mine, other = FakeSocket(), FakeSocket()
    await manager.connect(manager.notification_topic(1), mine)
    await manager.connect(manager.notification_topic(2), other)

    await manager.publish_notification(1, {"title": "Low stock"})

    assert len(mine.sent) == 1
    assert mine.sent[0]["type"] == "notification.created"
    assert mine.sent[0]["payload"] == {"title": "Low stock"}
    assert other.sent == []


async def test_broken_sockets_are_dropped():
    manager = BroadcastManager()
    good, broken, closed = FakeSocket(), FakeSocket(fail=True), FakeSocket()
    closed.client_state = WebSocketState.DISCONNECTED
    for ws in (good, broken, closed):
        await manager.connect(manager.dashboard_topic(), ws)

    await manager.publish_dashboard_event(DashboardEvent(event="order.created", details={"order_id": 7}))

    assert good.sent[0]["type"] == "dashboard.order.created"
    assert good.sent[0]["payload"]["details"] == {"order_id": 7}
    assert manager.subscriber_count(manager.dashboard_topic()) == 1


async def test_broadcast_to_empty_topic():
    assert await BroadcastManager().broadcast("dashboard", {"type": "ping"}) == 0
