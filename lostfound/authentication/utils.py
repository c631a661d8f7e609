"""
User account storage: lookups, creation, updates and the revoked-token list.
"""

from typing import List, Dict, Optional, Tuple

from lostfound.storage import load_json, save_json, data_path, utcnow_iso

USERS_FILE = data_path("users.json")
REVOKED_TOKENS_FILE = data_path("revoked_tokens.json")

# Never leave the server
PRIVATE_FIELDS = {"hashed_password", "verification_code", "verification_expires_at"}


def load_users() -> List[Dict]:
    return load_json(USERS_FILE)


def save_users(users: List[Dict]) -> None:
    save_json(USERS_FILE, users)


def public_user(user: Dict) -> Dict:
    return {k: v for k, v in user.items() if k not in PRIVATE_FIELDS}


def get_user_by_id(user_id: str) -> Optional[Dict]:
    return next((u for u in load_users() if u["user_id"] == user_id), None)


def get_user_by_username(username: str) -> Optional[Dict]:
    wanted = username.strip().lower()
    return next((u for u in load_users() if u["username"].lower() == wanted), None)


def get_user_by_email(email: str) -> Optional[Dict]:
    wanted = email.strip().lower()
    return next((u for u in load_users() if u["email"].lower() == wanted), None)


def get_user_by_login(login: str) -> Optional[Dict]:
    """Login accepts either the username or the email address."""
    if "@" in login:
        return get_user_by_email(login)
    return get_user_by_username(login)


def user_exists(username: str, email: str) -> Tuple[bool, str]:
    if get_user_by_username(username):
        return True, "errors.username_taken"
    if get_user_by_email(email):
        return True, "errors.email_taken"
    return False, ""


def add_user(user: Dict) -> Dict:
    users = load_users()
    user.setdefault("created_at", utcnow_iso())
    users.append(user)
    save_users(users)
    return user


def update_user(user_id: str, changes: Dict) -> Optional[Dict]:
    users = load_users()
    for user in users:
        if user["user_id"] == user_id:
            user.update(changes)
            user["updated_at"] = utcnow_iso()
            save_users(users)
            return user
    return None


def delete_user(user_id: str) -> bool:
    users = load_users()
    remaining = [u for u in users if u["user_id"] != user_id]
    if len(remaining) == len(users):
        return False
    save_users(remaining)
    return True


# ────────────────────────────────
# Revoked tokens
# ────────────────────────────────
def load_revoked_tokens() -> List[str]:
    return [entry["token"] for entry in load_json(REVOKED_TOKENS_FILE)]


def add_revoked_token(token: str) -> None:
    entries = load_json(REVOKED_TOKENS_FILE)
    if any(e["token"] == token for e in entries):
        return
    entries.append({"token": token, "revoked_at": utcnow_iso()})
    save_json(REVOKED_TOKENS_FILE, entries)
