"""
Threaded comments and comment likes for a report.
"""

import logging
from fastapi import APIRouter, Depends, Query, status
from lostfound.authentication.schemas import ADMIN_ROLES
from lostfound.authentication.security import get_current_user, get_optional_user
from lostfound.comments import utils, schemas
from lostfound.config import settings
from lostfound.errors import ConflictError, http_error
from lostfound.i18n import get_locale, translate
from lostfound.notifications.realtime import notify
from lostfound.notifications.schemas import NotificationType
from lostfound.preferences.utils import get_language
from lostfound.reports import utils as report_utils

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reports/{report_id}/comments", tags=["Comments"])


def _actor_name(user_id: str) -> str:
    return utils.author_summaries([user_id]).get(user_id, utils.ANONYMOUS)["full_name"]


async def _notify(recipient_id: str, kind: NotificationType, actor_id: str, report: dict, data: dict) -> None:
    locale = get_language(recipient_id)
    await notify(
        recipient_id,
        kind.value,
        translate(f"notifications.{kind.value}.title", locale),
        translate(
            f"notifications.{kind.value}.message",
            locale,
            name=_actor_name(actor_id),
            title=report_utils.report_title(report),
        ),
        {"report_id": report["id"], "source": report["source"], "actor_id": actor_id, **data},
    )


def _visible_report(report_id: str, user, locale: str) -> dict:
    try:
        return report_utils.get_visible_report(report_id, user)
    except LookupError as e:
        raise http_error(e, locale)


def _comment_on(report_id: str, comment_id: str, locale: str) -> dict:
    """A comment addressed through another report's path is treated as missing."""
    comment = utils.get_comment(comment_id)
    if not comment or comment["report_id"] != report_id:
        raise http_error(LookupError("errors.comment_not_found"), locale)
    return comment


@router.get("", response_model=schemas.CommentPage)
def list_comments(
    report_id: str,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    user=Depends(get_optional_user),
    locale: str = Depends(get_locale),
):
    _visible_report(report_id, user, locale)
    return utils.list_comments(report_id, user.user_id if user else None, limit=limit, offset=offset)


@router.post("", response_model=schemas.CommentResult, status_code=status.HTTP_201_CREATED)
async def add_comment(
    report_id: str,
    body: schemas.CommentCreate,
    user=Depends(get_current_user),
    locale: str = Depends(get_locale),
):
    """Post a comment or a reply; the report owner and the parent's author are notified."""
    report = _visible_report(report_id, user, locale)
    try:
        comment = utils.add_comment(report_id, user.user_id, body.content, body.parent_comment_id)
    except (ValueError, LookupError) as e:
        raise http_error(e, locale, max=settings.comment_max_length)

    notified = {user.user_id}
    if body.parent_comment_id:
        parent = utils.get_comment(body.parent_comment_id)
        if parent and parent["user_id"] not in notified:
            await _notify(parent["user_id"], NotificationType.reply, user.user_id, report,
                          {"comment_id": comment["id"], "parent_comment_id": parent["id"]})
            notified.add(parent["user_id"])
    if report["user_id"] not in notified:
        await _notify(report["user_id"], NotificationType.comment, user.user_id, report, {"comment_id": comment["id"]})

    return {"success": True, "comment": comment}


@router.put("", response_model=schemas.CommentResult)
def edit_comment(
    report_id: str,
    body: schemas.CommentUpdate,
    user=Depends(get_current_user),
    locale: str = Depends(get_locale),
):
    """Author edits the text of a comment; replies are not included in the response."""
    _comment_on(report_id, body.comment_id, locale)
    try:
        comment = utils.update_comment(body.comment_id, user.user_id, body.content)
    except (ValueError, LookupError, PermissionError) as e:
        raise http_error(e, locale, max=settings.comment_max_length)
    return {"success": True, "comment": comment}


@router.delete("")
def delete_comment(
    report_id: str,
    comment_id: str = Query(...),
    user=Depends(get_current_user),
    locale: str = Depends(get_locale),
):
    """Author or moderator removes a comment together with its replies."""
    _comment_on(report_id, comment_id, locale)
    try:
        removed = utils.delete_comment(comment_id, user.user_id, is_admin=user.role in ADMIN_ROLES)
    except (LookupError, PermissionError) as e:
        raise http_error(e, locale)
    logger.info("Comment %s on report %s deleted by %s (%d rows)", comment_id, report_id, user.user_id, len(removed))
    return {"success": True, "removed": removed}


# ────────────────────────────────
# Likes
# ────────────────────────────────
@router.post("/likes", status_code=status.HTTP_201_CREATED)
async def like_comment(
    report_id: str,
    body: schemas.LikeRequest,
    user=Depends(get_current_user),
    locale: str = Depends(get_locale),
):
    report = _visible_report(report_id, user, locale)
    _comment_on(report_id, body.comment_id, locale)
    try:
        comment = utils.like_comment(body.comment_id, user.user_id)
    except (LookupError, ConflictError) as e:
        raise http_error(e, locale)

    if comment["user_id"] != user.user_id:
        await _notify(comment["user_id"], NotificationType.like, user.user_id, report, {"comment_id": comment["id"]})
    return {"success": True}


@router.delete("/likes")
def unlike_comment(
    report_id: str,
    comment_id: str = Query(...),
    user=Depends(get_current_user),
    locale: str = Depends(get_locale),
):
    _visible_report(report_id, user, locale)
    return {"success": True, "removed": utils.unlike_comment(comment_id, user.user_id)}
