"""Per-user WebSocket hub for pushing notifications as they are created."""
import asyncio
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Set

from lostfound.notifications import utils

logger = logging.getLogger(__name__)


@dataclass
class NotificationHub:
    """Open sockets grouped by user id."""

    connections: Dict[str, Set[Any]] = field(default_factory=lambda: defaultdict(set))
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    async def connect(self, user_id: str, websocket: Any) -> None:
        async with self._lock:
            self.connections[user_id].add(websocket)

    async def disconnect(self, user_id: str, websocket: Any) -> None:
        async with self._lock:
            sockets = self.connections.get(user_id)
            if sockets is None:
                return
            sockets.discard(websocket)
            if not sockets:
                del self.connections[user_id]

    async def push(self, user_id: str, message: Dict[str, Any]) -> int:
        """Send to every socket of one user; dead sockets are dropped. Returns deliveries."""
        async with self._lock:
            sockets = set(self.connections.get(user_id, ()))
        delivered = 0
        dead: Set[Any] = set()
        for ws in sockets:
            try:
                await ws.send_json(message)
                delivered += 1
            except Exception:
                logger.warning("Dropping notification socket for user %s", user_id, exc_info=True)
                dead.add(ws)
        for ws in dead:
            await self.disconnect(user_id, ws)
        return delivered

    async def publish(self, notification: Dict[str, Any]) -> int:
        return await self.push(notification["user_id"], {"type": "notification", "payload": notification})


hub = NotificationHub()


async def notify(user_id: str, type: str, title: str, message: str, data: Optional[Dict] = None) -> Optional[Dict]:
    """Create and push a notification. Failures are logged, never raised to the caller."""
    try:
        notification = utils.create_notification(user_id, type, title, message, data)
    except Exception:
        logger.exception("Failed to create %s notification for %s", type, user_id)
        return None
    await hub.publish(notification)
    return notification
