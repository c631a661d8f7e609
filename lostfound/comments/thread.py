"""
Client-side state for the comment section of one report.

Holds the loaded tree, the composer (draft + reply target) and paging state.
Every mutation returns a MutationResult; like/unlike is applied optimistically
and rolled back if the server refuses it or the request never completes.
"""

import logging
from typing import List, Dict, Optional

import httpx

from lostfound.client import Session, MutationResult, error_message
from lostfound.comments import tree
from lostfound.config import settings
from lostfound.i18n import translate

logger = logging.getLogger(__name__)

IDLE = "idle"
REPLYING = "replying"


class CommentThread:
    page_size = 10

    def __init__(self, session: Session, report_id: str, max_depth: Optional[int] = None):
        self.session = session
        self.report_id = report_id
        self.max_depth = settings.comment_max_depth if max_depth is None else max_depth
        self.comments: List[Dict] = []
        self.total = 0
        self.offset = 0
        self.has_more = False
        self.loading = False
        self.error: Optional[str] = None
        self.draft = ""
        self.reply_to: Optional[str] = None

    @property
    def path(self) -> str:
        return f"/reports/{self.report_id}/comments"

    @property
    def state(self) -> str:
        return REPLYING if self.reply_to else IDLE

    def _t(self, key: str, **params) -> str:
        return translate(key, self.session.locale, **params)

    # ────────────────────────────────
    # Paging
    # ────────────────────────────────
    def fetch_page(self, reset: bool = False) -> MutationResult:
        offset = 0 if reset else self.offset
        self.loading = True
        self.error = None
        try:
            response = self.session.request(
                "GET", self.path, params={"limit": self.page_size, "offset": offset}
            )
        except httpx.HTTPError as e:
            logger.exception("Comment fetch failed for report %s", self.report_id)
            self.error = self._t("errors.generic")
            return MutationResult(ok=False, error=str(e))
        finally:
            self.loading = False

        if response.status_code != 200:
            self.error = error_message(response, self._t("errors.generic"))
            return MutationResult(ok=False, error=self.error)

        body = response.json()
        self.comments = body["comments"] if reset else self.comments + body["comments"]
        self.total = body["total"]
        self.has_more = body["hasMore"]
        self.offset = offset + len(body["comments"])
        return MutationResult(ok=True)

    # ────────────────────────────────
    # Composer
    # ────────────────────────────────
    def set_reply_target(self, comment_id: str) -> None:
        """Selecting the current target again turns reply mode off."""
        if self.reply_to == comment_id:
            self.cancel_reply()
        else:
            self.reply_to = comment_id

    def cancel_reply(self) -> None:
        self.reply_to = None
        self.draft = ""

    def add(self, content: Optional[str] = None) -> MutationResult:
        text = (self.draft if content is None else content).strip()
        if not text:
            return MutationResult(ok=False, error=self._t("errors.comment_required"))
        if not self.session.is_authenticated:
            return MutationResult(ok=False, error=self._t("errors.auth_required"))

        parent_id = self.reply_to
        payload = {"content": text, "parent_comment_id": parent_id}
        try:
            response = self.session.request("POST", self.path, json=payload)
        except httpx.HTTPError as e:
            logger.exception("Comment submit failed for report %s", self.report_id)
            self.error = self._t("errors.generic")
            return MutationResult(ok=False, error=str(e))

        if response.status_code not in (200, 201):
            self.error = error_message(response, self._t("errors.generic"))
            return MutationResult(ok=False, error=self.error)

        comment = response.json()["comment"]
        comment.setdefault("replies", [])
        if parent_id:
            self.comments = tree.insert_reply(self.comments, parent_id, comment)
        else:
            self.comments = [comment, *self.comments]
            self.total += 1
        self.error = None
        self.cancel_reply()
        return MutationResult(ok=True, data=comment)

    # ────────────────────────────────
    # Mutations on existing nodes
    # ────────────────────────────────
    def delete(self, comment_id: str) -> MutationResult:
        try:
            response = self.session.request("DELETE", self.path, params={"comment_id": comment_id})
        except httpx.HTTPError as e:
            logger.warning("Comment delete failed for %s: %s", comment_id, e)
            self.error = self._t("errors.generic")
            return MutationResult(ok=False, error=self.error)

        if response.status_code != 200:
            return MutationResult(ok=False, error=error_message(response, self._t("errors.generic")))
        self.comments = tree.remove_comment(self.comments, comment_id)
        self.total = max(0, self.total - 1)
        if self.reply_to and tree.find_comment(self.comments, self.reply_to) is None:
            self.cancel_reply()
        return MutationResult(ok=True)

    def toggle_like(self, comment_id: str) -> MutationResult:
        if not self.session.is_authenticated:
            return MutationResult(ok=False, error=self._t("errors.auth_required"))
        node = tree.find_comment(self.comments, comment_id)
        if node is None:
            return MutationResult(ok=False, error=self._t("errors.comment_not_found"))

        previous = self.comments
        self.comments = tree.toggle_like(self.comments, comment_id)
        try:
            if node.get("is_liked"):
                response = self.session.request(
                    "DELETE", f"{self.path}/likes", params={"comment_id": comment_id}
                )
            else:
                response = self.session.request("POST", f"{self.path}/likes", json={"comment_id": comment_id})
        except httpx.HTTPError as e:
            logger.warning("Like toggle failed for %s: %s", comment_id, e)
            self.comments = previous
            self.error = self._t("errors.generic")
            return MutationResult(ok=False, error=self.error)

        if response.status_code not in (200, 201):
            self.comments = previous
            return MutationResult(ok=False, error=error_message(response, self._t("errors.generic")))
        return MutationResult(ok=True)

    # ────────────────────────────────
    # View
    # ────────────────────────────────
    def actions_for(self, comment: Dict, depth: int) -> List[str]:
        actions = []
        if self.session.is_authenticated:
            actions.append("like")
            if depth < self.max_depth:
                actions.append("reply")
            if comment["user_id"] == self.session.user_id or self.session.is_admin:
                actions.append("delete")
        return actions

    def render(self) -> List[Dict]:
        return [
            {
                "id": comment["id"],
                "depth": depth,
                "content": comment["content"],
                "author": (comment.get("user") or {}).get("full_name") or self._t("comments.anonymous"),
                "likes_count": comment.get("likes_count", 0),
                "is_liked": comment.get("is_liked", False),
                "actions": self.actions_for(comment, depth),
            }
            for depth, comment in tree.walk(self.comments)
        ]
