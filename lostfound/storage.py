"""
JSON file persistence shared by every feature module.
Each collection lives in its own file; writes go through a temp file and a move.
"""

import os, json, tempfile, shutil, uuid, logging
from typing import List, Dict, Any
from datetime import datetime, date, timezone

from lostfound.config import settings

logger = logging.getLogger(__name__)


def data_path(filename: str) -> str:
    return os.path.join(settings.data_dir, filename)


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def new_id() -> str:
    return str(uuid.uuid4())


def _convert_datetime_to_string(obj: Any) -> Any:
    if isinstance(obj, dict):
        return {k: _convert_datetime_to_string(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_convert_datetime_to_string(v) for v in obj]
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    return obj


def load_json(path: str) -> List[Dict]:
    if not os.path.exists(path):
        return []

    try:
        with open(path, "r", encoding="utf-8") as f:
            content = f.read().strip()
            if not content:
                return []
            return json.loads(content)
    except json.JSONDecodeError:
        logger.warning("Corrupted data file %s. Resetting...", path)
        with open(path, "w", encoding="utf-8") as f:
            json.dump([], f)
        return []


def save_json(path: str, data: List[Dict]) -> None:
    """Safely write a collection to disk (atomic write)."""
    directory = os.path.dirname(path) or "."
    os.makedirs(directory, exist_ok=True)
    tmp_fd, tmp_path = tempfile.mkstemp(dir=directory)
    os.close(tmp_fd)

    try:
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(_convert_datetime_to_string(data), f, indent=2, ensure_ascii=False)
        shutil.move(tmp_path, path)
    finally:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
