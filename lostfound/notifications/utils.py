"""
utils.py – CRUD and persistence for notifications using JSON storage.
Rows are created by server-side events (moderation, comments, likes, reactions)
and read/deleted by the user they belong to.
"""

from typing import List, Dict, Optional, Tuple

from lostfound.i18n import translate
from lostfound.notifications.schemas import NotificationType
from lostfound.storage import load_json, save_json, data_path, new_id, utcnow_iso

NOTIFICATIONS_FILE = data_path("notifications.json")


# ────────────────────────────────
# JSON helpers
# ────────────────────────────────
def _load_notifications() -> List[Dict]:
    return load_json(NOTIFICATIONS_FILE)


def _save_notifications(data: List[Dict]) -> None:
    save_json(NOTIFICATIONS_FILE, data)


# ────────────────────────────────
# Creation
# ────────────────────────────────
def create_notification(user_id: str, type: str, title: str, message: str, data: Optional[Dict] = None) -> Dict:
    if not user_id or not type or not title or not message:
        raise ValueError("errors.notification_fields")

    notification = {
        "id": new_id(),
        "user_id": user_id,
        "type": type.value if isinstance(type, NotificationType) else type,
        "title": title,
        "message": message,
        "data": data or {},
        "is_read": False,
        "created_at": utcnow_iso(),
    }
    rows = _load_notifications()
    rows.append(notification)
    _save_notifications(rows)
    return notification


def notify_report_accepted(user_id: str, report_id: str, report_title: str, locale: str = "en") -> Dict:
    return create_notification(
        user_id,
        NotificationType.REPORT_ACCEPTED,
        translate("notifications.report_accepted.title", locale),
        translate("notifications.report_accepted.message", locale, title=report_title),
        {"report_id": report_id, "report_title": report_title, "status": "accepted"},
    )


def notify_report_rejected(
    user_id: str, report_id: str, report_title: str, reason: Optional[str] = None, locale: str = "en"
) -> Dict:
    # reason lives in data only, the message stays short
    return create_notification(
        user_id,
        NotificationType.REPORT_REJECTED,
        translate("notifications.report_rejected.title", locale),
        translate("notifications.report_rejected.message", locale, title=report_title),
        {"report_id": report_id, "report_title": report_title, "status": "rejected", "reason": reason},
    )


# ────────────────────────────────
# Reads
# ────────────────────────────────
def list_for_user(user_id: str, limit: int = 50, offset: int = 0, unread_only: bool = False) -> Tuple[List[Dict], int]:
    """Newest first. Returns the requested page and the total matching count."""
    rows = [n for n in _load_notifications() if n["user_id"] == user_id]
    if unread_only:
        rows = [n for n in rows if not n["is_read"]]
    rows.sort(key=lambda n: n["created_at"], reverse=True)
    return rows[offset: offset + limit], len(rows)


def unread_count(user_id: str) -> int:
    return sum(1 for n in _load_notifications() if n["user_id"] == user_id and not n["is_read"])


# ────────────────────────────────
# Mutations (owner only)
# ────────────────────────────────
def mark_as_read(notification_id: str, user_id: str) -> Optional[Dict]:
    rows = _load_notifications()
    for n in rows:
        if n["id"] == notification_id and n["user_id"] == user_id:
            n["is_read"] = True
            _save_notifications(rows)
            return n
    return None


def mark_all_as_read(user_id: str) -> int:
    rows = _load_notifications()
    updated = 0
    for n in rows:
        if n["user_id"] == user_id and not n["is_read"]:
            n["is_read"] = True
            updated += 1
    if updated:
        _save_notifications(rows)
    return updated


def delete_notification(notification_id: str, user_id: str) -> Optional[Dict]:
    rows = _load_notifications()
    target = next((n for n in rows if n["id"] == notification_id and n["user_id"] == user_id), None)
    if target is None:
        return None
    _save_notifications([n for n in rows if n is not target])
    return target


def delete_for_user(user_id: str) -> int:
    rows = _load_notifications()
    remaining = [n for n in rows if n["user_id"] != user_id]
    if len(remaining) != len(rows):
        _save_notifications(remaining)
    return len(rows) - len(remaining)
