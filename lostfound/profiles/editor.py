"""
Client-side profile edit form.

Username edits go through a debounced availability check. The form cannot be
submitted while a check is pending or in flight, or after it reported the name
taken or failed. Keeping the current username never needs a check.
"""

import logging
import time
from typing import Dict, Optional

from lostfound.client import Session, MutationResult, error_message
from lostfound.i18n import translate

logger = logging.getLogger(__name__)

IDLE = "idle"
CHECKING = "checking"
AVAILABLE = "available"
TAKEN = "taken"
ERROR = "error"

EDITABLE_FIELDS = ("first_name", "last_name", "phone")


class ProfileEditor:
    debounce_seconds = 0.5

    def __init__(self, session: Session, profile: Dict):
        self.session = session
        self.profile = profile
        self.username = profile["username"]
        self.fields = {name: profile.get(name) for name in EDITABLE_FIELDS}
        self.check_state = IDLE
        self.check_message: Optional[str] = None
        self.error: Optional[str] = None
        self._changed_at: Optional[float] = None

    @classmethod
    def load(cls, session: Session) -> "ProfileEditor":
        response = session.request("GET", "/user/profile")
        response.raise_for_status()
        return cls(session, response.json())

    @property
    def username_changed(self) -> bool:
        return self.username.strip().lower() != self.profile["username"].lower()

    @property
    def can_submit(self) -> bool:
        if not self.username_changed:
            return True
        return self.check_state not in (CHECKING, TAKEN, ERROR)

    def set_username(self, value: str, now: Optional[float] = None) -> None:
        """Record a keystroke; the availability check becomes due after the debounce delay."""
        self.username = value
        self.check_message = None
        if not self.username_changed:
            self.check_state = IDLE
            self._changed_at = None
            return
        self.check_state = CHECKING
        self._changed_at = time.monotonic() if now is None else now

    def set_field(self, name: str, value: Optional[str]) -> None:
        if name not in EDITABLE_FIELDS:
            raise KeyError(name)
        self.fields[name] = value

    def due(self, now: Optional[float] = None) -> bool:
        if self._changed_at is None:
            return False
        now = time.monotonic() if now is None else now
        return now - self._changed_at >= self.debounce_seconds

    def check_username(self) -> str:
        """Run the availability check and return the resulting state."""
        self._changed_at = None
        if not self.username_changed:
            self.check_state = IDLE
            return self.check_state
        try:
            response = self.session.request(
                "POST",
                "/username-check",
                json={"username": self.username.strip(), "user_id": self.session.user_id},
            )
        except Exception:
            logger.exception("Username check failed")
            self.check_state = ERROR
            self.check_message = translate("username.check_failed", self.session.locale)
            return self.check_state

        if response.status_code != 200:
            self.check_state = ERROR
            self.check_message = error_message(response, translate("username.check_failed", self.session.locale))
            return self.check_state

        body = response.json()
        self.check_state = AVAILABLE if body["available"] else TAKEN
        self.check_message = body["message"]
        return self.check_state

    def tick(self, now: Optional[float] = None) -> str:
        if self.due(now):
            self.check_username()
        return self.check_state

    def save(self) -> MutationResult:
        if not self.can_submit:
            return MutationResult(ok=False, error=self.check_message or translate("username.check_pending", self.session.locale))

        payload = {k: v for k, v in self.fields.items() if v != self.profile.get(k)}
        if self.username_changed:
            payload["username"] = self.username.strip()
        if not payload:
            return MutationResult(ok=True, data=self.profile)

        response = self.session.request("PATCH", "/user/profile", json=payload)
        if response.status_code != 200:
            self.error = error_message(response, translate("errors.generic", self.session.locale))
            return MutationResult(ok=False, error=self.error)

        self.profile = response.json()
        self.username = self.profile["username"]
        self.check_state = IDLE
        self.check_message = None
        self.error = None
        return MutationResult(ok=True, data=self.profile)

    def upload_avatar(self, filename: str, content: bytes, content_type: str = "image/jpeg") -> MutationResult:
        response = self.session.request(
            "POST",
            "/user/upload-profile-picture",
            files={"file": (filename, content, content_type)},
        )
        if response.status_code != 200:
            self.error = error_message(response, translate("errors.generic", self.session.locale))
            return MutationResult(ok=False, error=self.error)
        self.profile = response.json()
        return MutationResult(ok=True, data=self.profile)
