"""
Client-side notification inbox state.

Pages are fetched on demand; rows pushed over the realtime channel are prepended
and bump the unread counter. There is no deduplication between pushed rows and
pages fetched concurrently. Failed requests are logged and reported through
MutationResult, never raised.
"""

import logging
from typing import List, Dict, Optional

import httpx

from lostfound.client import Session, MutationResult, error_message

logger = logging.getLogger(__name__)


class NotificationFeed:
    page_size = 20

    def __init__(self, session: Session):
        self.session = session
        self.items: List[Dict] = []
        self.unread = 0
        self.total = 0
        self.has_more = False
        self.offset = 0
        self.loading = False

    def _send(self, method: str, path: str, **kwargs) -> Optional[httpx.Response]:
        try:
            return self.session.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.warning("Notification request %s %s failed: %s", method, path, e)
            return None

    @staticmethod
    def _failed(response: Optional[httpx.Response]) -> MutationResult:
        if response is None:
            return MutationResult(ok=False, error="request failed")
        return MutationResult(ok=False, error=error_message(response, "request failed"))

    def load(self, reset: bool = False) -> MutationResult:
        if not self.session.is_authenticated:
            return MutationResult(ok=False, error="not signed in")

        offset = 0 if reset else self.offset
        self.loading = True
        try:
            response = self._send("GET", "/notifications", params={"limit": self.page_size, "offset": offset})
        finally:
            self.loading = False
        if response is None or response.status_code != 200:
            # background fetch; logged only
            if response is not None:
                logger.warning("Notification fetch failed: %s", error_message(response, "request failed"))
            return self._failed(response)

        body = response.json()
        rows = body["notifications"]
        self.items = rows if reset else self.items + rows
        self.total = body["count"]
        self.has_more = body["pagination"]["hasMore"]
        self.offset = offset + len(rows)
        self.refresh_unread()
        return MutationResult(ok=True)

    def refresh_unread(self) -> MutationResult:
        response = self._send("GET", "/notifications/unread-count")
        if response is None or response.status_code != 200:
            if response is not None:
                logger.warning("Unread count fetch failed: %s", response.status_code)
            return self._failed(response)
        self.unread = response.json()["count"]
        return MutationResult(ok=True)

    def receive(self, row: Dict) -> None:
        """Handle a pushed row from the realtime channel."""
        self.items.insert(0, row)
        self.total += 1
        if not row.get("is_read"):
            self.unread += 1

    def handle_message(self, message: Dict) -> None:
        kind = message.get("type")
        if kind == "notification":
            self.receive(message["payload"])
        elif kind == "unread_count":
            self.unread = message["payload"]["count"]

    def _find(self, notification_id: str) -> Optional[Dict]:
        return next((n for n in self.items if n["id"] == notification_id), None)

    def mark_read(self, notification_id: str) -> MutationResult:
        response = self._send("PATCH", f"/notifications/{notification_id}")
        if response is None or response.status_code != 200:
            return self._failed(response)
        row = self._find(notification_id)
        if row is not None and not row["is_read"]:
            row["is_read"] = True
            self.unread = max(0, self.unread - 1)
        return MutationResult(ok=True)

    def mark_all_read(self) -> MutationResult:
        response = self._send("PATCH", "/notifications/read-all")
        if response is None or response.status_code != 200:
            return self._failed(response)
        for row in self.items:
            row["is_read"] = True
        self.unread = 0
        return MutationResult(ok=True)

    def remove(self, notification_id: str) -> MutationResult:
        response = self._send("DELETE", f"/notifications/{notification_id}")
        if response is None or response.status_code != 200:
            return self._failed(response)
        row = self._find(notification_id)
        if row is not None:
            self.items.remove(row)
            self.total = max(0, self.total - 1)
            if not row["is_read"]:
                self.unread = max(0, self.unread - 1)
        return MutationResult(ok=True)
