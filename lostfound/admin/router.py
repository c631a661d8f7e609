"""
Moderation endpoints. Everything except /check requires a moderator or administrator.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import Optional
from lostfound.admin import schemas, utils
from lostfound.authentication.schemas import ADMIN_ROLES
from lostfound.authentication.security import get_current_user, require_admin
from lostfound.errors import ConflictError, http_error
from lostfound.i18n import get_locale, translate
from lostfound.notifications.realtime import hub
from lostfound.reports import schemas as report_schemas
from lostfound.reports import utils as report_utils

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.get("/check", response_model=schemas.AdminCheck)
def check_admin(
    user_id: Optional[str] = Query(None),
    current_user=Depends(get_current_user),
    locale: str = Depends(get_locale),
):
    """Admin flag for the caller, or for any user when an admin asks."""
    target = user_id or current_user.user_id
    if target != current_user.user_id and current_user.role not in ADMIN_ROLES:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=translate("errors.admin_required", locale))
    return utils.admin_status(target)


@router.get("/reports", response_model=report_schemas.ReportPage)
def list_reports(
    source: Optional[report_schemas.ReportSource] = Query(None),
    status: str = Query("all", pattern="^(all|pending|approved|rejected)$"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user=Depends(require_admin),
):
    rows, pagination = report_utils.list_for_admin(
        source=source.value if source else None, status=status, page=page, limit=limit
    )
    return {"reports": rows, "pagination": pagination}


@router.patch("/reports/{report_id}", response_model=schemas.ModerationResult)
async def moderate_report(
    report_id: str,
    body: schemas.ModerationRequest,
    current_user=Depends(require_admin),
    locale: str = Depends(get_locale),
):
    """Approve or reject a pending report; the owner is notified in their language."""
    try:
        report, notification = utils.moderate_report(
            report_id, body.action.value, current_user.user_id, body.rejection_reason
        )
    except (ValueError, LookupError, ConflictError) as e:
        raise http_error(e, locale)

    if notification is not None:
        await hub.publish(notification)
    return {"success": True, "report": report, "notified": notification is not None}


@router.get("/summary", response_model=report_schemas.ReportSummary)
def summary(current_user=Depends(require_admin)):
    return report_utils.get_summary()
