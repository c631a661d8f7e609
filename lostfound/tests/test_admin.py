"""
Tests for moderation:
- Admin check for self and others.
- Listing and summarizing reports (moderator/administrator only).
- Approve/reject only from pending, with a localized owner notification.
"""

import pytest
from fastapi.testclient import TestClient
from lostfound.main import app
from lostfound.notifications import utils as notification_utils
from lostfound.preferences import utils as preference_utils, schemas as preference_schemas
from lostfound.reports import utils as report_utils, schemas as report_schemas

client = TestClient(app)


@pytest.fixture
def auth_user():
    from types import SimpleNamespace

    def _set_user(role: str, user_id: str = "mod1"):
        from lostfound.authentication.security import get_current_user

        fake_user = SimpleNamespace(user_id=user_id, username="mockuser", role=role)
        app.dependency_overrides[get_current_user] = lambda: fake_user
        return fake_user

    yield _set_user
    app.dependency_overrides = {}


@pytest.fixture
def pending_report(make_user):
    owner, _ = make_user("owner")
    report = report_utils.create_report(
        report_schemas.ReportCreate(
            type="document",
            source="missing",
            city="Dammam",
            location="Airport",
            details={"document_type": "passport"},
        ),
        owner["user_id"],
    )
    return owner, report


# --- Admin check ---

def test_admin_check_for_self(make_user, bearer):
    _, token = make_user("boss", role="administrator", role_granted_at="2025-02-01T00:00:00+00:00")
    response = client.get("/api/admin/check", headers=bearer(token))
    assert response.status_code == 200
    assert response.json() == {"isAdmin": True, "role": "administrator", "adminSince": "2025-02-01T00:00:00+00:00"}


def test_admin_check_member(make_user, bearer):
    _, token = make_user("plain")
    body = client.get("/api/admin/check", headers=bearer(token)).json()
    assert body["isAdmin"] is False
    assert body["adminSince"] is None


def test_admin_check_other_user_requires_admin(make_user, bearer):
    other, _ = make_user("other")
    _, token = make_user("plain")
    response = client.get("/api/admin/check", params={"user_id": other["user_id"]}, headers=bearer(token))
    assert response.status_code == 403


def test_moderator_checks_other_user(make_user, auth_user):
    other, _ = make_user("other", role="moderator")
    auth_user("moderator")
    body = client.get("/api/admin/check", params={"user_id": other["user_id"]}).json()
    assert body["isAdmin"] is True
    assert body["adminSince"] == other["created_at"]


# --- Listing ---

def test_list_reports_forbidden_for_members(auth_user):
    auth_user("member")
    assert client.get("/api/admin/reports").status_code == 403
    assert client.get("/api/admin/summary").status_code == 403


def test_list_reports_by_status(auth_user, pending_report, approved_report):
    approved_report()
    auth_user("moderator")
    everything = client.get("/api/admin/reports").json()
    assert everything["pagination"]["total"] == 2

    pending = client.get("/api/admin/reports", params={"status": "pending"}).json()
    assert [r["status"] for r in pending["reports"]] == ["pending"]

    assert client.get("/api/admin/reports", params={"status": "bogus"}).status_code == 422


def test_summary(auth_user, pending_report, approved_report):
    approved_report()
    auth_user("administrator")
    response = client.get("/api/admin/summary")
    assert response.status_code == 200
    assert response.json() == {"total_reports": 2, "pending": 1, "approved": 1, "rejected": 0}


# --- Moderation ---

def test_approve_pending_report(auth_user, pending_report):
    owner, report = pending_report
    auth_user("moderator", user_id="mod1")
    response = client.patch(f"/api/admin/reports/{report['id']}", json={"action": "approve"})
    assert response.status_code == 200
    body = response.json()
    assert body["report"]["status"] == "approved"
    assert body["report"]["reviewed_by"] == "mod1"
    assert body["report"]["reviewed_at"]
    assert body["notified"] is True

    rows, _ = notification_utils.list_for_user(owner["user_id"])
    assert rows[0]["type"] == "REPORT_ACCEPTED"
    assert rows[0]["title"] == "Report approved"
    assert rows[0]["data"]["report_id"] == report["id"]


def test_reject_notifies_in_owner_language(auth_user, pending_report):
    owner, report = pending_report
    preference_utils.update_settings(owner["user_id"], preference_schemas.UserSettingsUpdate(language="ar"))
    auth_user("administrator")
    response = client.patch(
        f"/api/admin/reports/{report['id']}",
        json={"action": "reject", "rejection_reason": "Blurry photos"},
    )
    assert response.status_code == 200
    assert response.json()["report"]["rejection_reason"] == "Blurry photos"

    rows, _ = notification_utils.list_for_user(owner["user_id"])
    assert rows[0]["type"] == "REPORT_REJECTED"
    assert rows[0]["title"] == "تم رفض البلاغ"
    assert rows[0]["data"]["reason"] == "Blurry photos"


def test_only_pending_reports_can_be_moderated(auth_user, pending_report):
    _, report = pending_report
    auth_user("moderator")
    client.patch(f"/api/admin/reports/{report['id']}", json={"action": "approve"})
    again = client.patch(f"/api/admin/reports/{report['id']}", json={"action": "reject"})
    assert again.status_code == 409


def test_moderate_unknown_report(auth_user):
    auth_user("moderator")
    response = client.patch("/api/admin/reports/nope", json={"action": "approve"})
    assert response.status_code == 404


def test_moderate_invalid_action(auth_user, pending_report):
    _, report = pending_report
    auth_user("moderator")
    response = client.patch(f"/api/admin/reports/{report['id']}", json={"action": "delete"})
    assert response.status_code == 422


def test_moderation_survives_notification_failure(auth_user, pending_report, monkeypatch):
    _, report = pending_report

    def boom(*args, **kwargs):
        raise OSError("disk full")

    monkeypatch.setattr("lostfound.notifications.utils.notify_report_accepted", boom)
    auth_user("moderator")
    response = client.patch(f"/api/admin/reports/{report['id']}", json={"action": "approve"})
    assert response.status_code == 200
    assert response.json()["notified"] is False
    assert report_utils.get_report(report["id"])["status"] == "approved"
