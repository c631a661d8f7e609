"""
Comment storage and tree assembly.

Rows are stored flat with a parent pointer; pages are served as a tree of
top-level comments (newest first) each carrying its replies (oldest first),
nested as deep as the data goes. Deletion is soft and covers the whole subtree.
"""

from typing import List, Dict, Optional, Iterable, Set
from collections import defaultdict

from lostfound.authentication import utils as auth_utils
from lostfound.config import settings
from lostfound.errors import ConflictError
from lostfound.i18n import translate
from lostfound.reports import utils as report_utils
from lostfound.storage import load_json, save_json, data_path, new_id, utcnow_iso

COMMENTS_FILE = data_path("comments.json")
LIKES_FILE = data_path("comment_likes.json")

ANONYMOUS = {"full_name": translate("comments.anonymous", settings.default_locale), "avatar_url": None}


def load_comments() -> List[Dict]:
    return load_json(COMMENTS_FILE)


def save_comments(rows: List[Dict]) -> None:
    save_json(COMMENTS_FILE, rows)


def load_likes() -> List[Dict]:
    return load_json(LIKES_FILE)


def save_likes(rows: List[Dict]) -> None:
    save_json(LIKES_FILE, rows)


def _visible(rows: Iterable[Dict]) -> List[Dict]:
    return [r for r in rows if not r.get("is_deleted")]


def get_comment(comment_id: str) -> Optional[Dict]:
    return next((c for c in _visible(load_comments()) if c["id"] == comment_id), None)


def depth_of(comment_id: str, rows: List[Dict]) -> int:
    """0 for a top-level comment, 1 for its replies, and so on."""
    by_id = {r["id"]: r for r in rows}
    depth = 0
    current = by_id.get(comment_id)
    while current and current.get("parent_comment_id"):
        depth += 1
        current = by_id.get(current["parent_comment_id"])
    return depth


def descendant_ids(comment_id: str, rows: List[Dict]) -> Set[str]:
    children = defaultdict(list)
    for r in rows:
        if r.get("parent_comment_id"):
            children[r["parent_comment_id"]].append(r["id"])
    found, stack = set(), [comment_id]
    while stack:
        for child in children.get(stack.pop(), []):
            if child not in found:
                found.add(child)
                stack.append(child)
    return found


def author_summaries(user_ids: Iterable[str]) -> Dict[str, Dict]:
    wanted = set(user_ids)
    summaries = {}
    for user in auth_utils.load_users():
        if user["user_id"] in wanted:
            full_name = " ".join(p for p in (user.get("first_name"), user.get("last_name")) if p).strip()
            summaries[user["user_id"]] = {
                "full_name": full_name or user.get("username") or ANONYMOUS["full_name"],
                "avatar_url": user.get("avatar_url"),
            }
    return summaries


def _enrich(row: Dict, authors: Dict, likes_count: Dict, liked: Set[str]) -> Dict:
    return {
        "id": row["id"],
        "report_id": row["report_id"],
        "user_id": row["user_id"],
        "content": row["content"],
        "parent_comment_id": row.get("parent_comment_id"),
        "is_edited": row.get("is_edited", False),
        "created_at": row["created_at"],
        "updated_at": row.get("updated_at"),
        "user": authors.get(row["user_id"], dict(ANONYMOUS)),
        "likes_count": likes_count.get(row["id"], 0),
        "is_liked": row["id"] in liked,
        "replies": [],
    }


def list_comments(report_id: str, viewer_id: Optional[str] = None, limit: int = 20, offset: int = 0) -> Dict:
    rows = [r for r in _visible(load_comments()) if r["report_id"] == report_id]
    top_level = sorted((r for r in rows if not r.get("parent_comment_id")), key=lambda r: r["created_at"], reverse=True)
    total = len(top_level)
    page = top_level[offset: offset + limit]

    children = defaultdict(list)
    for r in rows:
        if r.get("parent_comment_id"):
            children[r["parent_comment_id"]].append(r)
    for replies in children.values():
        replies.sort(key=lambda r: r["created_at"])

    ids = {r["id"] for r in rows}
    likes_count: Dict[str, int] = defaultdict(int)
    liked: Set[str] = set()
    for like in load_likes():
        if like["comment_id"] in ids:
            likes_count[like["comment_id"]] += 1
            if viewer_id and like["user_id"] == viewer_id:
                liked.add(like["comment_id"])
    authors = author_summaries(r["user_id"] for r in rows)

    def build(row: Dict) -> Dict:
        node = _enrich(row, authors, likes_count, liked)
        node["replies"] = [build(child) for child in children.get(row["id"], [])]
        return node

    return {
        "comments": [build(r) for r in page],
        "total": total,
        "limit": limit,
        "offset": offset,
        "hasMore": offset + limit < total,
    }


def _clean_content(content: Optional[str]) -> str:
    content = (content or "").strip()
    if not content:
        raise ValueError("errors.comment_required")
    if len(content) > settings.comment_max_length:
        raise ValueError("errors.comment_too_long")
    return content


def add_comment(report_id: str, user_id: str, content: str, parent_comment_id: Optional[str] = None) -> Dict:
    """Create a comment or reply and return it enriched, with no likes and no replies."""
    if not report_utils.get_report(report_id):
        raise LookupError("errors.report_not_found")
    content = _clean_content(content)

    rows = load_comments()
    if parent_comment_id:
        visible = _visible(rows)
        parent = next((r for r in visible if r["id"] == parent_comment_id and r["report_id"] == report_id), None)
        if parent is None:
            raise LookupError("errors.parent_not_found")
        if depth_of(parent_comment_id, rows) >= settings.comment_max_depth:
            raise ValueError("errors.depth_exceeded")

    row = {
        "id": new_id(),
        "report_id": report_id,
        "user_id": user_id,
        "content": content,
        "parent_comment_id": parent_comment_id or None,
        "is_deleted": False,
        "is_edited": False,
        "created_at": utcnow_iso(),
        "updated_at": None,
        "deleted_at": None,
    }
    rows.append(row)
    save_comments(rows)
    return _enrich(row, author_summaries([user_id]), {}, set())


def update_comment(comment_id: str, user_id: str, content: str) -> Dict:
    content = _clean_content(content)
    rows = load_comments()
    for row in _visible(rows):
        if row["id"] == comment_id:
            if row["user_id"] != user_id:
                raise PermissionError("errors.not_comment_author")
            row["content"] = content
            row["is_edited"] = True
            row["updated_at"] = utcnow_iso()
            save_comments(rows)
            likes = [l for l in load_likes() if l["comment_id"] == comment_id]
            liked = {comment_id} if any(l["user_id"] == user_id for l in likes) else set()
            return _enrich(row, author_summaries([user_id]), {comment_id: len(likes)}, liked)
    raise LookupError("errors.comment_not_found")


def delete_comment(comment_id: str, user_id: str, is_admin: bool = False) -> List[str]:
    """Soft delete a comment and every reply below it. Returns the ids removed."""
    rows = load_comments()
    target = next((r for r in _visible(rows) if r["id"] == comment_id), None)
    if target is None:
        raise LookupError("errors.comment_not_found")
    if target["user_id"] != user_id and not is_admin:
        raise PermissionError("errors.not_comment_author")

    doomed = {comment_id} | descendant_ids(comment_id, rows)
    now = utcnow_iso()
    removed = []
    for row in rows:
        if row["id"] in doomed and not row.get("is_deleted"):
            row["is_deleted"] = True
            row["deleted_at"] = now
            removed.append(row["id"])
    save_comments(rows)
    return removed


def like_comment(comment_id: str, user_id: str) -> Dict:
    comment = get_comment(comment_id)
    if comment is None:
        raise LookupError("errors.comment_not_found")
    likes = load_likes()
    if any(l["comment_id"] == comment_id and l["user_id"] == user_id for l in likes):
        raise ConflictError("errors.already_liked")
    likes.append({"comment_id": comment_id, "user_id": user_id, "created_at": utcnow_iso()})
    save_likes(likes)
    return comment


def unlike_comment(comment_id: str, user_id: str) -> bool:
    likes = load_likes()
    remaining = [l for l in likes if not (l["comment_id"] == comment_id and l["user_id"] == user_id)]
    if len(remaining) == len(likes):
        return False
    save_likes(remaining)
    return True


def remove_user_activity(user_id: str) -> int:
    """Account deletion: soft delete the user's comments (and their replies) and drop their likes."""
    rows = load_comments()
    doomed: Set[str] = set()
    for row in _visible(rows):
        if row["user_id"] == user_id:
            doomed |= {row["id"]} | descendant_ids(row["id"], rows)
    now = utcnow_iso()
    for row in rows:
        if row["id"] in doomed and not row.get("is_deleted"):
            row["is_deleted"] = True
            row["deleted_at"] = now
    if doomed:
        save_comments(rows)

    likes = load_likes()
    remaining = [l for l in likes if l["user_id"] != user_id]
    if len(remaining) != len(likes):
        save_likes(remaining)
    return len(doomed)
