"""
Per-user display settings (theme, language, notification toggles).
Users without a stored row get the defaults.
"""

from typing import List, Dict, Optional

from lostfound.preferences import schemas
from lostfound.storage import load_json, save_json, data_path, utcnow_iso

SETTINGS_FILE = data_path("settings.json")


def _load_settings() -> List[Dict]:
    return load_json(SETTINGS_FILE)


def _stored(user_id: str) -> Optional[Dict]:
    return next((s for s in _load_settings() if s["user_id"] == user_id), None)


def get_settings(user_id: str) -> Dict:
    defaults = schemas.UserSettings().model_dump(mode="json")
    row = _stored(user_id)
    if not row:
        return defaults
    return {key: row.get(key, value) for key, value in defaults.items()}


def get_language(user_id: str) -> str:
    return get_settings(user_id)["language"]


def update_settings(user_id: str, update: schemas.UserSettingsUpdate) -> Dict:
    """Upsert only the fields that were sent."""
    rows = _load_settings()
    changes = update.model_dump(mode="json", exclude_none=True)
    row = next((s for s in rows if s["user_id"] == user_id), None)
    if row is None:
        row = {"user_id": user_id, **schemas.UserSettings().model_dump(mode="json")}
        rows.append(row)
    row.update(changes)
    row["updated_at"] = utcnow_iso()
    save_json(SETTINGS_FILE, rows)
    return get_settings(user_id)


def delete_settings(user_id: str) -> bool:
    rows = _load_settings()
    remaining = [s for s in rows if s["user_id"] != user_id]
    if len(remaining) == len(rows):
        return False
    save_json(SETTINGS_FILE, remaining)
    return True
