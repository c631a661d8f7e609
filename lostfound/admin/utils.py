"""
Admin status lookups and the moderation flow (status change + owner notification).
"""

import logging
from typing import Dict, Optional

from lostfound.authentication import utils as auth_utils
from lostfound.authentication.schemas import ADMIN_ROLES
from lostfound.notifications import utils as notification_utils
from lostfound.preferences.utils import get_language
from lostfound.reports import utils as report_utils

logger = logging.getLogger(__name__)


def admin_status(user_id: str) -> Dict:
    user = auth_utils.get_user_by_id(user_id)
    if not user:
        return {"isAdmin": False, "role": None, "adminSince": None}
    is_admin = user["role"] in ADMIN_ROLES
    return {
        "isAdmin": is_admin,
        "role": user["role"],
        "adminSince": (user.get("role_granted_at") or user.get("created_at")) if is_admin else None,
    }


def moderate_report(report_id: str, action: str, reviewer_id: str, rejection_reason: Optional[str] = None):
    """
    Approve or reject a pending report and write the owner's notification in
    their preferred language. Returns (report, notification); the notification
    is None if it could not be created, which never undoes the status change.
    """
    report = report_utils.moderate(report_id, action, reviewer_id, rejection_reason)
    locale = get_language(report["user_id"])
    title = report_utils.report_title(report)
    try:
        if action == "approve":
            notification = notification_utils.notify_report_accepted(report["user_id"], report_id, title, locale)
        else:
            notification = notification_utils.notify_report_rejected(
                report["user_id"], report_id, title, rejection_reason, locale
            )
    except Exception:
        logger.exception("Moderation notification failed for report %s", report_id)
        notification = None
    logger.info("Report %s moderated (%s) by %s", report_id, action, reviewer_id)
    return report, notification
