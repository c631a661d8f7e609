"""
Pure helpers over a list of nested comment dicts (each with a `replies` list).

Every helper returns a new list and leaves its input untouched, so callers can
keep the previous tree around for rollback.
"""

from typing import List, Dict, Optional


def find_comment(comments: List[Dict], comment_id: str) -> Optional[Dict]:
    for comment in comments:
        if comment["id"] == comment_id:
            return comment
        found = find_comment(comment.get("replies", []), comment_id)
        if found is not None:
            return found
    return None


def comment_depth(comments: List[Dict], comment_id: str, depth: int = 0) -> Optional[int]:
    """Depth of a comment in the tree (0 for top level), or None if absent."""
    for comment in comments:
        if comment["id"] == comment_id:
            return depth
        found = comment_depth(comment.get("replies", []), comment_id, depth + 1)
        if found is not None:
            return found
    return None


def insert_reply(comments: List[Dict], parent_id: str, reply: Dict) -> List[Dict]:
    """Append `reply` to the replies of `parent_id`, wherever it sits."""
    result = []
    for comment in comments:
        if comment["id"] == parent_id:
            comment = {**comment, "replies": [*comment.get("replies", []), reply]}
        elif comment.get("replies"):
            comment = {**comment, "replies": insert_reply(comment["replies"], parent_id, reply)}
        result.append(comment)
    return result


def remove_comment(comments: List[Dict], comment_id: str) -> List[Dict]:
    """Drop a comment and its whole subtree."""
    result = []
    for comment in comments:
        if comment["id"] == comment_id:
            continue
        if comment.get("replies"):
            comment = {**comment, "replies": remove_comment(comment["replies"], comment_id)}
        result.append(comment)
    return result


def toggle_like(comments: List[Dict], comment_id: str) -> List[Dict]:
    result = []
    for comment in comments:
        if comment["id"] == comment_id:
            liked = not comment.get("is_liked", False)
            count = comment.get("likes_count", 0) + (1 if liked else -1)
            comment = {**comment, "is_liked": liked, "likes_count": max(0, count)}
        elif comment.get("replies"):
            comment = {**comment, "replies": toggle_like(comment["replies"], comment_id)}
        result.append(comment)
    return result


def walk(comments: List[Dict], depth: int = 0):
    """Yield (depth, comment) pairs in display order."""
    for comment in comments:
        yield depth, comment
        yield from walk(comment.get("replies", []), depth + 1)
