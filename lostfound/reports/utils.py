"""
Utility functions for loading, saving, and managing reports and their reactions.
"""

import math
from typing import List, Optional, Dict, Tuple

from lostfound.authentication.schemas import ADMIN_ROLES
from lostfound.config import settings
from lostfound.errors import ConflictError
from lostfound.reports import schemas
from lostfound.storage import load_json, save_json, data_path, new_id, utcnow_iso

REPORTS_FILE = data_path("reports.json")
REACTIONS_FILE = data_path("reactions.json")


def _load_json() -> List[dict]:
    return load_json(REPORTS_FILE)


def _save_json(data: List[dict]) -> None:
    save_json(REPORTS_FILE, data)


def paginate(rows: List[Dict], page: int, limit: int) -> Tuple[List[Dict], Dict]:
    total = len(rows)
    offset = (page - 1) * limit
    return rows[offset: offset + limit], {
        "total": total,
        "page": page,
        "limit": limit,
        "totalPages": math.ceil(total / limit) if limit else 0,
    }


def _newest_first(rows: List[Dict]) -> List[Dict]:
    return sorted(rows, key=lambda r: r["created_at"], reverse=True)


def report_title(report: Dict) -> str:
    """Human-readable label used in notifications."""
    d = report.get("details") or {}
    kind = report.get("type")
    if kind == "person":
        name = " ".join(p for p in (d.get("first_name"), d.get("last_name")) if p)
        if name:
            return name
    candidates = {
        "pet": d.get("pet_name") or d.get("pet_type"),
        "document": d.get("document_type"),
        "electronics": " ".join(p for p in (d.get("device_brand"), d.get("device_type")) if p),
        "vehicle": " ".join(p for p in (d.get("vehicle_brand"), d.get("vehicle_type")) if p),
        "other": d.get("item_name"),
    }
    return candidates.get(kind) or f"{kind} - {report.get('city', '')}".strip(" -")


# ────────────────────────────────
# Reports
# ────────────────────────────────
def create_report(data: schemas.ReportCreate, user_id: str) -> Dict:
    """Persist a new submission; every report starts out pending."""
    if data.linked_report_id and not get_report(data.linked_report_id):
        raise LookupError("errors.report_not_found")

    reports = _load_json()
    report = {
        "id": new_id(),
        "user_id": user_id,
        **data.model_dump(mode="json"),
        "status": schemas.ReportStatus.pending.value,
        "photos": [],
        "rejection_reason": None,
        "reviewed_at": None,
        "reviewed_by": None,
        "created_at": utcnow_iso(),
        "updated_at": None,
    }
    reports.append(report)
    _save_json(reports)
    return report


def get_report(report_id: str) -> Optional[Dict]:
    return next((r for r in _load_json() if r["id"] == report_id), None)


def can_view(report: Dict, user) -> bool:
    """Approved reports are public; others only to their owner or an admin."""
    if report["status"] == schemas.ReportStatus.approved.value:
        return True
    if user is None:
        return False
    return report["user_id"] == user.user_id or user.role in ADMIN_ROLES


def get_visible_report(report_id: str, user) -> Dict:
    """Hidden reports look exactly like missing ones to everyone else."""
    report = get_report(report_id)
    if not report or not can_view(report, user):
        raise LookupError("errors.report_not_found")
    return report


def update_report(report_id: str, user_id: str, changes: schemas.ReportUpdate) -> Dict:
    """Owner edits a pending or rejected report; resubmitting a rejected one sends it back to review."""
    reports = _load_json()
    for report in reports:
        if report["id"] == report_id:
            if report["user_id"] != user_id:
                raise PermissionError("errors.not_report_owner")
            if report["status"] == schemas.ReportStatus.approved.value:
                raise PermissionError("errors.report_locked")

            fields = changes.model_dump(mode="json", exclude_none=True, exclude={"details", "resubmit"})
            details = {**report["details"], **(changes.details or {})}
            if schemas.missing_details(report["source"], report["type"], details):
                raise ValueError("errors.missing_details")
            phone = fields.get("reporter_phone", report.get("reporter_phone"))
            if report["source"] == schemas.ReportSource.sighting.value and not (phone or "").strip():
                raise ValueError("errors.missing_details")

            report.update(fields)
            report["details"] = details
            if changes.resubmit and report["status"] == schemas.ReportStatus.rejected.value:
                report["status"] = schemas.ReportStatus.pending.value
                report["rejection_reason"] = None
                report["reviewed_at"] = None
                report["reviewed_by"] = None
            report["updated_at"] = utcnow_iso()
            _save_json(reports)
            return report
    raise LookupError("errors.report_not_found")


def add_photos(report_id: str, user_id: str, urls: List[str]) -> Dict:
    """Append photo URLs in upload order."""
    reports = _load_json()
    for report in reports:
        if report["id"] == report_id:
            if report["user_id"] != user_id:
                raise PermissionError("errors.not_report_owner")
            if len(report["photos"]) + len(urls) > settings.max_report_photos:
                raise ValueError("errors.too_many_photos")
            report["photos"].extend(urls)
            report["updated_at"] = utcnow_iso()
            _save_json(reports)
            return report
    raise LookupError("errors.report_not_found")


def list_public(
    type: Optional[str] = None,
    source: Optional[str] = None,
    city: Optional[str] = None,
    page: int = 1,
    limit: int = 12,
) -> Tuple[List[Dict], Dict]:
    rows = [r for r in _load_json() if r["status"] == schemas.ReportStatus.approved.value]
    if type:
        rows = [r for r in rows if r["type"] == type]
    if source:
        rows = [r for r in rows if r["source"] == source]
    if city:
        wanted = city.strip().lower()
        rows = [r for r in rows if r["city"].lower() == wanted]
    return paginate(_newest_first(rows), page, limit)


def list_for_user(user_id: str) -> List[Dict]:
    return _newest_first([r for r in _load_json() if r["user_id"] == user_id])


def list_for_admin(source: Optional[str] = None, status: str = "all", page: int = 1, limit: int = 10) -> Tuple[List[Dict], Dict]:
    rows = _load_json()
    if source:
        rows = [r for r in rows if r["source"] == source]
    if status != "all":
        rows = [r for r in rows if r["status"] == status]
    return paginate(_newest_first(rows), page, limit)


def moderate(report_id: str, action: str, reviewer_id: str, rejection_reason: Optional[str] = None) -> Dict:
    """Approve or reject a pending report."""
    if action not in ("approve", "reject"):
        raise ValueError("errors.invalid_action")

    reports = _load_json()
    for report in reports:
        if report["id"] == report_id:
            if report["status"] != schemas.ReportStatus.pending.value:
                raise ConflictError("errors.report_not_pending")
            report["status"] = (
                schemas.ReportStatus.approved.value if action == "approve" else schemas.ReportStatus.rejected.value
            )
            report["reviewed_at"] = utcnow_iso()
            report["reviewed_by"] = reviewer_id
            if action == "reject" and rejection_reason:
                report["rejection_reason"] = rejection_reason
            _save_json(reports)
            return report
    raise LookupError("errors.report_not_found")


def get_summary() -> Dict:
    reports = _load_json()
    counts = {s.value: 0 for s in schemas.ReportStatus}
    for r in reports:
        counts[r["status"]] = counts.get(r["status"], 0) + 1
    return {"total_reports": len(reports), **counts}


# ────────────────────────────────
# Reactions
# ────────────────────────────────
def get_reactions(report_id: str, user_id: Optional[str] = None) -> Dict:
    rows = [r for r in load_json(REACTIONS_FILE) if r["report_id"] == report_id]
    counts: Dict[str, int] = {}
    for r in rows:
        counts[r["reaction_type"]] = counts.get(r["reaction_type"], 0) + 1
    mine = [r["reaction_type"] for r in rows if user_id and r["user_id"] == user_id]
    return {"counts": counts, "total": len(rows), "user_reactions": mine}


def add_reaction(report_id: str, user_id: str, reaction_type: str) -> Dict:
    if not get_report(report_id):
        raise LookupError("errors.report_not_found")
    rows = load_json(REACTIONS_FILE)
    if any(r["report_id"] == report_id and r["user_id"] == user_id and r["reaction_type"] == reaction_type for r in rows):
        raise ConflictError("errors.already_reacted")
    reaction = {
        "id": new_id(),
        "report_id": report_id,
        "user_id": user_id,
        "reaction_type": reaction_type,
        "created_at": utcnow_iso(),
    }
    rows.append(reaction)
    save_json(REACTIONS_FILE, rows)
    return reaction


def remove_reaction(report_id: str, user_id: str, reaction_type: str) -> bool:
    rows = load_json(REACTIONS_FILE)
    remaining = [
        r for r in rows
        if not (r["report_id"] == report_id and r["user_id"] == user_id and r["reaction_type"] == reaction_type)
    ]
    if len(remaining) == len(rows):
        return False
    save_json(REACTIONS_FILE, remaining)
    return True
