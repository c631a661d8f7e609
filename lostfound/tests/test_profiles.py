"""
Tests for profiles:
- Reading and editing the caller's profile.
- Username and email availability checks.
- Avatar upload, terms acceptance and account deletion cascade.
- The client-side ProfileEditor check state machine.
"""

import httpx
import pytest
from fastapi.testclient import TestClient
from lostfound.main import app
from lostfound.authentication import utils as auth_utils
from lostfound.client import Session
from lostfound.comments import utils as comment_utils
from lostfound.notifications import utils as notification_utils
from lostfound.preferences import utils as preference_utils, schemas as preference_schemas
from lostfound.profiles.editor import ProfileEditor

client = TestClient(app)


def auth(token):
    return {"Authorization": f"Bearer {token}"}


# --- Profile endpoints ---

def test_get_profile(make_user):
    user, token = make_user("alice", first_name="Alice", last_name="Hamad")
    response = client.get("/api/user/profile", headers=auth(token))
    assert response.status_code == 200
    body = response.json()
    assert body["user_id"] == user["user_id"]
    assert body["full_name"] == "Alice Hamad"
    assert body["has_password"] is True
    assert "hashed_password" not in body


def test_update_profile_fields(make_user):
    _, token = make_user("alice")
    response = client.patch("/api/user/profile", json={"first_name": "Ally", "phone": "0500"}, headers=auth(token))
    assert response.status_code == 200
    assert response.json()["first_name"] == "Ally"
    assert response.json()["phone"] == "0500"
    assert response.json()["username"] == "alice"


def test_update_username_taken(make_user):
    make_user("bob")
    _, token = make_user("alice")
    response = client.patch("/api/user/profile", json={"username": "BOB"}, headers=auth(token))
    assert response.status_code == 409


def test_update_username_case_change_allowed(make_user):
    _, token = make_user("alice")
    response = client.patch("/api/user/profile", json={"username": "Alice"}, headers=auth(token))
    assert response.status_code == 200
    assert response.json()["username"] == "Alice"


def test_update_username_invalid(make_user):
    _, token = make_user("alice")
    response = client.patch("/api/user/profile", json={"username": "no spaces"}, headers=auth(token))
    assert response.status_code == 422


# --- Availability checks ---

def test_username_check(make_user):
    bob, _ = make_user("bob")
    taken = client.post("/api/username-check", json={"username": "Bob"}).json()
    assert taken == {"available": False, "message": "Username is already taken."}

    own = client.post("/api/username-check", json={"username": "bob", "user_id": bob["user_id"]}).json()
    assert own["available"] is True

    free = client.post("/api/username-check", json={"username": "carol"}, headers={"Accept-Language": "ar"}).json()
    assert free == {"available": True, "message": "اسم المستخدم متاح."}

    invalid = client.post("/api/username-check", json={"username": "x"}).json()
    assert invalid["available"] is False


def test_email_check(make_user):
    make_user("alice")
    assert client.post("/api/email-check", json={"email": "ALICE@example.com"}).json() == {"exists": True}
    assert client.post("/api/email-check", json={"email": "nobody@example.com"}).json() == {"exists": False}


# --- Avatar & terms ---

def test_upload_profile_picture_replaces_previous(make_user, data_files):
    _, token = make_user("alice")
    first = client.post(
        "/api/user/upload-profile-picture",
        files={"file": ("me.png", b"\x89PNGone", "image/png")},
        headers=auth(token),
    )
    assert first.status_code == 200
    first_url = first.json()["avatar_url"]
    assert first_url.startswith("/uploads/avatars/")

    second = client.post(
        "/api/user/upload-profile-picture",
        files={"file": ("me2.png", b"\x89PNGtwo", "image/png")},
        headers=auth(token),
    )
    assert second.json()["avatar_url"] != first_url
    stored = list((data_files / "uploads" / "avatars").rglob("*.png"))
    assert len(stored) == 1


def test_upload_profile_picture_rejects_other_types(make_user):
    _, token = make_user("alice")
    response = client.post(
        "/api/user/upload-profile-picture",
        files={"file": ("cv.pdf", b"%PDF", "application/pdf")},
        headers=auth(token),
    )
    assert response.status_code == 400


def test_accept_terms(make_user):
    _, token = make_user("alice")
    response = client.post("/api/user/accept-terms", headers=auth(token))
    assert response.status_code == 200
    assert response.json()["terms_accepted_at"]


# --- Account deletion ---

def test_delete_account_cascades(make_user, approved_report):
    owner, _ = make_user("owner")
    report = approved_report(owner)
    user, token = make_user("alice")
    preference_utils.update_settings(user["user_id"], preference_schemas.UserSettingsUpdate(theme="dark"))
    notification_utils.create_notification(user["user_id"], "generic", "hi", "there")
    comment = comment_utils.add_comment(report["id"], user["user_id"], "I can help")
    comment_utils.add_comment(report["id"], owner["user_id"], "thanks", comment["id"])

    response = client.delete("/api/delete-account", headers=auth(token))
    assert response.status_code == 200
    assert response.json()["removed"] == {"settings": True, "notifications": 1, "comments": 2}

    assert auth_utils.get_user_by_id(user["user_id"]) is None
    assert notification_utils.list_for_user(user["user_id"])[1] == 0
    assert comment_utils.list_comments(report["id"])["total"] == 0
    # the token is revoked with the account
    assert client.get("/api/user/profile", headers=auth(token)).status_code == 401


# --- ProfileEditor ---

@pytest.fixture
def editor(make_user):
    user, token = make_user("alice")
    session = Session(http=client, token=token, user_id=user["user_id"])
    return ProfileEditor.load(session)


def test_unchanged_username_is_submittable(editor):
    assert editor.check_state == "idle"
    assert editor.can_submit
    editor.set_username("ALICE", now=0)
    assert editor.check_state == "idle"
    assert editor.can_submit


def test_debounced_check_available(editor):
    editor.set_username("alice_new", now=10.0)
    assert editor.check_state == "checking"
    assert not editor.can_submit
    assert not editor.due(now=10.2)
    assert editor.tick(now=10.2) == "checking"
    assert editor.due(now=10.0 + editor.debounce_seconds)
    assert editor.tick(now=11.0) == "available"
    assert editor.can_submit

    result = editor.save()
    assert result.ok
    assert result.data["username"] == "alice_new"
    assert editor.check_state == "idle"


def test_taken_username_blocks_submit(editor, make_user):
    make_user("bob")
    editor.set_username("bob", now=0)
    editor.check_username()
    assert editor.check_state == "taken"
    assert not editor.can_submit
    assert not editor.save().ok


def test_check_error_blocks_submit():
    class Broken:
        def request(self, method, url, **kwargs):
            return httpx.Response(503, json={"detail": "unavailable"})

    session = Session(http=Broken(), token="t", user_id="u1")
    editor = ProfileEditor(session, {"user_id": "u1", "username": "alice"})
    editor.set_username("alicia", now=0)
    assert editor.check_username() == "error"
    assert not editor.can_submit


def test_editor_saves_other_fields(editor):
    editor.set_field("first_name", "Ally")
    result = editor.save()
    assert result.ok
    assert result.data["first_name"] == "Ally"
    with pytest.raises(KeyError):
        editor.set_field("role", "administrator")
