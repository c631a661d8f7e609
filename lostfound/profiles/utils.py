"""
Profile reads and owner-only updates, username/email availability and the
account deletion cascade.
"""

import logging
from typing import Dict, Optional, Tuple

from lostfound.authentication import utils as auth_utils
from lostfound.authentication.schemas import validate_username
from lostfound.comments import utils as comment_utils
from lostfound.errors import ConflictError
from lostfound.notifications import utils as notification_utils
from lostfound.preferences import utils as preference_utils
from lostfound.profiles import schemas
from lostfound.storage import utcnow_iso
from lostfound import uploads

logger = logging.getLogger(__name__)


def to_profile(user: Dict) -> Dict:
    first, last = user.get("first_name"), user.get("last_name")
    full_name = " ".join(p for p in (first, last) if p).strip() or user["username"]
    return {
        "user_id": user["user_id"],
        "username": user["username"],
        "email": user["email"],
        "role": user["role"],
        "first_name": first,
        "last_name": last,
        "full_name": full_name,
        "phone": user.get("phone"),
        "avatar_url": user.get("avatar_url"),
        "is_verified": user.get("is_verified", False),
        "has_password": bool(user.get("hashed_password")),
        "terms_accepted_at": user.get("terms_accepted_at"),
        "created_at": user.get("created_at"),
    }


def get_profile(user_id: str) -> Dict:
    user = auth_utils.get_user_by_id(user_id)
    if not user:
        raise LookupError("errors.user_not_found")
    return to_profile(user)


def check_username(username: str, exclude_user_id: Optional[str] = None) -> Tuple[bool, str]:
    """Case-insensitive; the caller's own current name counts as available."""
    try:
        validate_username(username.strip())
    except ValueError:
        return False, "username.invalid"
    owner = auth_utils.get_user_by_username(username)
    if owner and owner["user_id"] != exclude_user_id:
        return False, "username.taken"
    return True, "username.available"


def email_exists(email: str) -> bool:
    return auth_utils.get_user_by_email(email) is not None


def update_profile(user_id: str, update: schemas.ProfileUpdate) -> Dict:
    changes = update.model_dump(exclude_none=True)
    if "username" in changes:
        available, _ = check_username(changes["username"], exclude_user_id=user_id)
        if not available:
            raise ConflictError("errors.username_taken")
    user = auth_utils.update_user(user_id, changes)
    if not user:
        raise LookupError("errors.user_not_found")
    return to_profile(user)


def set_avatar(user_id: str, url: str) -> Dict:
    """Store the new avatar URL and remove the previous file."""
    user = auth_utils.get_user_by_id(user_id)
    if not user:
        raise LookupError("errors.user_not_found")
    previous = user.get("avatar_url")
    user = auth_utils.update_user(user_id, {"avatar_url": url})
    if previous and previous != url:
        uploads.delete_upload(previous)
    return to_profile(user)


def accept_terms(user_id: str) -> Dict:
    user = auth_utils.update_user(user_id, {"terms_accepted_at": utcnow_iso()})
    if not user:
        raise LookupError("errors.user_not_found")
    return to_profile(user)


def delete_account(user_id: str) -> Dict:
    """
    Remove everything tied to the account: settings, notifications, avatar,
    comment activity (soft deleted) and finally the user record.
    Reports stay for the moderation history.
    """
    user = auth_utils.get_user_by_id(user_id)
    if not user:
        raise LookupError("errors.user_not_found")

    removed = {
        "settings": preference_utils.delete_settings(user_id),
        "notifications": notification_utils.delete_for_user(user_id),
        "comments": comment_utils.remove_user_activity(user_id),
    }
    if user.get("avatar_url"):
        uploads.delete_upload(user["avatar_url"])
    auth_utils.delete_user(user_id)
    logger.info("Deleted account %s: %s", user_id, removed)
    return removed
