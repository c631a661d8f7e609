"""
Password hashing, JWT issuing/verification and the auth dependencies used by every router.
"""

import secrets, uuid
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Tuple

import bcrypt
import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from lostfound.authentication import schemas, utils
from lostfound.config import settings
from lostfound.i18n import get_locale, translate

bearer_scheme = HTTPBearer(auto_error=False)

ACCESS = "access"
PASSWORD_RESET = "password_reset"
EMAIL_CHANGE = "email_change"


# PASSWORDS
def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed: Optional[str]) -> bool:
    if not hashed:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        return False


def generate_verification_code() -> str:
    return f"{secrets.randbelow(1_000_000):06d}"


# TOKENS
def _encode(payload: Dict, minutes: int, purpose: str) -> str:
    now = datetime.now(timezone.utc)
    claims = {
        **payload,
        "type": purpose,
        "jti": uuid.uuid4().hex,
        "iat": now,
        "exp": now + timedelta(minutes=minutes),
    }
    return jwt.encode(claims, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str, purpose: str = ACCESS) -> Optional[Dict]:
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except jwt.PyJWTError:
        return None
    if payload.get("type") != purpose:
        return None
    return payload


def create_access_token(data: Dict, expires_minutes: Optional[int] = None) -> str:
    return _encode(data, expires_minutes or settings.access_token_expire_minutes, ACCESS)


def revoke_token(token: str) -> None:
    utils.add_revoked_token(token)


def is_token_revoked(token: str) -> bool:
    return token in utils.load_revoked_tokens()


def create_reset_token(user_id: str) -> str:
    return _encode({"sub": user_id}, settings.reset_token_expire_minutes, PASSWORD_RESET)


def verify_reset_token(token: str) -> Optional[str]:
    """Reset tokens are single use; the router revokes them once consumed."""
    payload = decode_token(token, PASSWORD_RESET)
    if not payload or is_token_revoked(token):
        return None
    return payload.get("sub")


def create_email_change_token(user_id: str, new_email: str) -> str:
    return _encode(
        {"sub": user_id, "new_email": new_email},
        settings.email_change_token_expire_minutes,
        EMAIL_CHANGE,
    )


def verify_email_change_token(token: str) -> Optional[Tuple[str, str]]:
    payload = decode_token(token, EMAIL_CHANGE)
    if not payload or is_token_revoked(token):
        return None
    return payload["sub"], payload["new_email"]


def token_for_user(user: Dict) -> str:
    return create_access_token(
        data={"sub": user["user_id"], "username": user["username"], "role": user["role"], "status": user["status"]}
    )


def user_from_token(token: str) -> Optional[schemas.TokenData]:
    """Resolve a raw bearer token to its user, or None if invalid, revoked or orphaned."""
    payload = decode_token(token)
    if not payload or is_token_revoked(token):
        return None
    user = utils.get_user_by_id(payload.get("sub", ""))
    if not user or user["status"] != schemas.UserStatus.ACTIVE.value:
        return None
    return schemas.TokenData(
        user_id=user["user_id"], username=user["username"], role=user["role"], status=user["status"]
    )


# DEPENDENCIES
def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    locale: str = Depends(get_locale),
) -> schemas.TokenData:
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=translate("errors.auth_required", locale),
            headers={"WWW-Authenticate": "Bearer"},
        )
    user = user_from_token(credentials.credentials)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=translate("errors.invalid_token", locale),
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[schemas.TokenData]:
    if credentials is None:
        return None
    return user_from_token(credentials.credentials)


def get_bearer_token(credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)) -> Optional[str]:
    return credentials.credentials if credentials else None


def require_admin(
    current_user: schemas.TokenData = Depends(get_current_user),
    locale: str = Depends(get_locale),
) -> schemas.TokenData:
    if current_user.role not in schemas.ADMIN_ROLES:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=translate("errors.admin_required", locale))
    return current_user
