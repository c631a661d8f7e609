"""
Handles report submission and owner edits, photo upload, public browsing and reactions.
Moderation lives in the admin router.
"""

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status
from typing import List, Optional
from lostfound.authentication.security import get_current_user, get_optional_user
from lostfound.config import settings
from lostfound.errors import ConflictError, http_error
from lostfound.i18n import get_locale, translate
from lostfound.notifications.realtime import notify
from lostfound.notifications.schemas import NotificationType
from lostfound.preferences.utils import get_language
from lostfound.reports import utils, schemas
from lostfound import uploads

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.post("", response_model=schemas.Report, status_code=status.HTTP_201_CREATED)
def submit_report(report: schemas.ReportCreate, user=Depends(get_current_user), locale: str = Depends(get_locale)):
    """Submit a missing or sighting report. It stays pending until reviewed."""
    try:
        return utils.create_report(report, user.user_id)
    except LookupError as e:
        raise http_error(e, locale)


@router.post("/{report_id}/photos", response_model=schemas.Report)
async def upload_photos(
    report_id: str,
    photos: List[UploadFile] = File(...),
    user=Depends(get_current_user),
    locale: str = Depends(get_locale),
):
    """Owner uploads photos; they are appended after any existing ones."""
    report = utils.get_report(report_id)
    if not report:
        raise HTTPException(status_code=404, detail=translate("errors.report_not_found", locale))
    if report["user_id"] != user.user_id:
        raise HTTPException(status_code=403, detail=translate("errors.not_report_owner", locale))

    urls = []
    try:
        for photo in photos:
            urls.append(await uploads.save_image(photo, f"reports/{report['type']}", user.user_id))
        return utils.add_photos(report_id, user.user_id, urls)
    except (ValueError, LookupError, PermissionError) as e:
        for url in urls:
            uploads.delete_upload(url)
        raise http_error(e, locale, max=settings.max_report_photos)


@router.get("/public", response_model=schemas.ReportPage)
def list_public_reports(
    type: Optional[schemas.ReportType] = Query(None),
    source: Optional[schemas.ReportSource] = Query(None),
    city: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=50),
):
    rows, pagination = utils.list_public(
        type=type.value if type else None,
        source=source.value if source else None,
        city=city,
        page=page,
        limit=limit,
    )
    return {"reports": rows, "pagination": pagination}


@router.get("/mine", response_model=List[schemas.Report])
def my_reports(user=Depends(get_current_user)):
    return utils.list_for_user(user.user_id)


@router.get("/{report_id}", response_model=schemas.Report)
def get_report(report_id: str, user=Depends(get_optional_user), locale: str = Depends(get_locale)):
    try:
        return utils.get_visible_report(report_id, user)
    except LookupError as e:
        raise http_error(e, locale)


@router.put("/{report_id}", response_model=schemas.Report)
def update_report(
    report_id: str,
    changes: schemas.ReportUpdate,
    user=Depends(get_current_user),
    locale: str = Depends(get_locale),
):
    """Owner edits a pending or rejected report. With resubmit, a rejected report goes back to pending."""
    try:
        utils.get_visible_report(report_id, user)
        return utils.update_report(report_id, user.user_id, changes)
    except (ValueError, LookupError, PermissionError) as e:
        raise http_error(e, locale)


# ────────────────────────────────
# Reactions
# ────────────────────────────────
@router.get("/{report_id}/reactions", response_model=schemas.ReactionSummary)
def list_reactions(report_id: str, user=Depends(get_optional_user), locale: str = Depends(get_locale)):
    try:
        utils.get_visible_report(report_id, user)
    except LookupError as e:
        raise http_error(e, locale)
    return utils.get_reactions(report_id, user.user_id if user else None)


@router.post("/{report_id}/reactions", status_code=status.HTTP_201_CREATED)
async def add_reaction(
    report_id: str,
    body: schemas.ReactionCreate,
    user=Depends(get_current_user),
    locale: str = Depends(get_locale),
):
    try:
        report = utils.get_visible_report(report_id, user)
        reaction = utils.add_reaction(report_id, user.user_id, body.reaction_type.value)
    except (LookupError, ConflictError) as e:
        raise http_error(e, locale)

    if report["user_id"] != user.user_id:
        owner_locale = get_language(report["user_id"])
        key = "support" if body.reaction_type == schemas.ReactionType.support else "generic"
        await notify(
            report["user_id"],
            NotificationType.reaction.value,
            translate(f"notifications.reaction.title_{key}", owner_locale),
            translate("notifications.reaction.message", owner_locale, reaction=body.reaction_type.value),
            {"report_id": report_id, "source": report["source"], "reaction_type": body.reaction_type.value, "actor_id": user.user_id},
        )
    return {"success": True, "reaction": reaction}


@router.delete("/{report_id}/reactions")
def remove_reaction(
    report_id: str,
    reaction_type: schemas.ReactionType = Query(...),
    user=Depends(get_current_user),
    locale: str = Depends(get_locale),
):
    try:
        utils.get_visible_report(report_id, user)
    except LookupError as e:
        raise http_error(e, locale)
    removed = utils.remove_reaction(report_id, user.user_id, reaction_type.value)
    return {"success": True, "removed": removed}
