"""
Shared fixtures: every test gets its own data directory, and helpers to create
real accounts with valid bearer tokens for end-to-end flows.
"""

import uuid
import pytest
from lostfound.config import settings
from lostfound.authentication import utils as auth_utils, security
from lostfound.reports import utils as report_utils
from lostfound.comments import utils as comment_utils
from lostfound.notifications import utils as notification_utils
from lostfound.preferences import utils as preference_utils


@pytest.fixture(autouse=True)
def data_files(tmp_path, monkeypatch):
    """Point every JSON collection and the upload folder at tmp_path."""
    monkeypatch.setattr(auth_utils, "USERS_FILE", str(tmp_path / "users.json"))
    monkeypatch.setattr(auth_utils, "REVOKED_TOKENS_FILE", str(tmp_path / "revoked_tokens.json"))
    monkeypatch.setattr(report_utils, "REPORTS_FILE", str(tmp_path / "reports.json"))
    monkeypatch.setattr(report_utils, "REACTIONS_FILE", str(tmp_path / "reactions.json"))
    monkeypatch.setattr(comment_utils, "COMMENTS_FILE", str(tmp_path / "comments.json"))
    monkeypatch.setattr(comment_utils, "LIKES_FILE", str(tmp_path / "comment_likes.json"))
    monkeypatch.setattr(notification_utils, "NOTIFICATIONS_FILE", str(tmp_path / "notifications.json"))
    monkeypatch.setattr(preference_utils, "SETTINGS_FILE", str(tmp_path / "settings.json"))
    monkeypatch.setattr(settings, "upload_dir", str(tmp_path / "uploads"))
    yield tmp_path


@pytest.fixture
def make_user():
    """make_user("alice", role="moderator") -> (user_record, bearer_token)"""
    def _make(username="alice", role="member", password="Secret123", **extra):
        user = {
            "user_id": str(uuid.uuid4()),
            "username": username,
            "email": f"{username}@example.com",
            "hashed_password": security.hash_password(password),
            "role": role,
            "status": "active",
            "is_verified": True,
            "first_name": extra.pop("first_name", username.title()),
            "last_name": extra.pop("last_name", "Tester"),
            "phone": None,
            "avatar_url": None,
            "terms_accepted_at": None,
            **extra,
        }
        auth_utils.add_user(user)
        return user, security.token_for_user(user)
    return _make


@pytest.fixture
def bearer():
    return lambda token: {"Authorization": f"Bearer {token}"}


@pytest.fixture
def approved_report(make_user):
    """An approved missing-pet report owned by a fresh user."""
    def _make(owner=None):
        if owner is None:
            owner, _ = make_user("owner")
        report = {
            "id": str(uuid.uuid4()),
            "user_id": owner["user_id"],
            "type": "pet",
            "source": "missing",
            "status": "approved",
            "city": "Riyadh",
            "location": "King Fahd Road",
            "coordinates": None,
            "additional_info": None,
            "reporter_first_name": None,
            "reporter_last_name": None,
            "reporter_email": None,
            "reporter_phone": None,
            "details": {"pet_name": "Milo", "pet_type": "cat"},
            "linked_report_id": None,
            "photos": [],
            "rejection_reason": None,
            "reviewed_at": None,
            "reviewed_by": None,
            "created_at": "2025-01-01T00:00:00+00:00",
            "updated_at": None,
        }
        rows = report_utils._load_json()
        rows.append(report)
        report_utils._save_json(rows)
        return report
    return _make
