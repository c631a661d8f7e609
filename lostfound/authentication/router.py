from fastapi import APIRouter, HTTPException, Depends, status
from fastapi.security import OAuth2PasswordRequestForm, HTTPAuthorizationCredentials, HTTPBearer
from datetime import datetime, timedelta, timezone
from lostfound.authentication import schemas, utils, security
from lostfound.config import settings
from lostfound.i18n import get_locale, translate
import logging
import uuid
from typing import Optional

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer()

router = APIRouter(prefix="/auth", tags=["authentication"])


def _new_verification() -> dict:
    expires = datetime.now(timezone.utc) + timedelta(minutes=settings.verification_code_ttl_minutes)
    return {
        "verification_code": security.generate_verification_code(),
        "verification_expires_at": expires.isoformat(),
    }


# Register
@router.post('/register', response_model=schemas.RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(user: schemas.UserCreate, locale: str = Depends(get_locale)):
    # Check duplicates
    exists, message = utils.user_exists(user.username, user.email)
    if exists:
        raise HTTPException(status_code=400, detail=translate(message, locale))

    verification = _new_verification()
    new_user = {
        "user_id": str(uuid.uuid4()),
        "username": user.username,
        "email": user.email,
        "hashed_password": security.hash_password(user.password),
        "role": schemas.UserRole.MEMBER.value,
        "status": schemas.UserStatus.ACTIVE.value,
        "is_verified": False,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "phone": user.phone,
        "avatar_url": None,
        "terms_accepted_at": None,
        **verification,
    }
    utils.add_user(new_user)
    logger.info("Registered user %s", new_user["user_id"])

    # Normally the code is emailed. For dev/demo, return it:
    return {
        "user_id": new_user["user_id"],
        "username": new_user["username"],
        "email": new_user["email"],
        "role": new_user["role"],
        "status": new_user["status"],
        "is_verified": False,
        "verification_code": verification["verification_code"],
        "message": translate("messages.verification_sent", locale),
    }


# Verify email with the 6-digit code
@router.post('/verify')
async def verify_email(body: schemas.VerifyCode, locale: str = Depends(get_locale)):
    user = utils.get_user_by_email(body.email)
    if not user:
        raise HTTPException(status_code=404, detail=translate("errors.user_not_found", locale))
    if user.get("is_verified"):
        return {"message": translate("messages.already_verified", locale), "is_verified": True}

    expires_at = user.get("verification_expires_at")
    expired = not expires_at or datetime.fromisoformat(expires_at) < datetime.now(timezone.utc)
    if expired or body.code.strip() != user.get("verification_code"):
        raise HTTPException(status_code=400, detail=translate("errors.invalid_code", locale))

    utils.update_user(user["user_id"], {
        "is_verified": True,
        "verification_code": None,
        "verification_expires_at": None,
    })
    return {"message": translate("messages.email_verified", locale), "is_verified": True}


@router.post('/resend-verification')
async def resend_verification(body: schemas.EmailOnly, locale: str = Depends(get_locale)):
    user = utils.get_user_by_email(body.email)
    if not user:
        raise HTTPException(status_code=404, detail=translate("errors.user_not_found", locale))
    if user.get("is_verified"):
        raise HTTPException(status_code=400, detail=translate("messages.already_verified", locale))

    verification = _new_verification()
    utils.update_user(user["user_id"], verification)
    return {"verification_code": verification["verification_code"], "message": translate("messages.verification_sent", locale)}


# Login
@router.post('/login', response_model=schemas.Token)
async def login(form_data: OAuth2PasswordRequestForm = Depends(), locale: str = Depends(get_locale)):
    user = utils.get_user_by_login(form_data.username)
    if not user or not security.verify_password(form_data.password, user.get("hashed_password")):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=translate("errors.invalid_credentials", locale))

    if user["status"] != schemas.UserStatus.ACTIVE.value:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=translate("errors.account_inactive", locale))

    return {"access_token": security.token_for_user(user), "token_type": "bearer"}


# Logout
@router.post('/logout')
async def logout(credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme), locale: str = Depends(get_locale)):
    security.revoke_token(credentials.credentials)
    return {"message": translate("messages.logged_out", locale)}


# Refresh
@router.post("/refresh", response_model=schemas.Token)
async def refresh_token(
    current_user: schemas.TokenData = Depends(security.get_current_user),
    token: Optional[str] = Depends(security.get_bearer_token),
):
    user = utils.get_user_by_id(current_user.user_id)
    # the token being refreshed stops working once a new one is issued
    if token:
        security.revoke_token(token)
    return {"access_token": security.token_for_user(user), "token_type": "bearer"}


# Who Am I
@router.get("/whoami", response_model=schemas.TokenData)
async def whoami(current_user=Depends(security.get_current_user)):
    return current_user


# REQUEST PASSWORD RESET
@router.post("/password/request")
async def request_password_reset(body: schemas.EmailOnly, locale: str = Depends(get_locale)):
    user = utils.get_user_by_email(body.email)
    if not user:
        raise HTTPException(status_code=404, detail=translate("errors.user_not_found", locale))

    reset_token = security.create_reset_token(user["user_id"])

    # Normally you'd email this token. For dev/demo, just return it:
    return {"reset_token": reset_token, "message": translate("messages.reset_token_issued", locale)}


# CONFIRM PASSWORD RESET
@router.post("/password/reset")
async def reset_password(body: schemas.PasswordResetConfirm, locale: str = Depends(get_locale)):
    user_id = security.verify_reset_token(body.token)
    if not user_id:
        raise HTTPException(status_code=400, detail=translate("errors.invalid_token", locale))

    updated = utils.update_user(user_id, {"hashed_password": security.hash_password(body.new_password)})
    if not updated:
        raise HTTPException(status_code=404, detail=translate("errors.user_not_found", locale))
    security.revoke_token(body.token)

    return {"message": translate("messages.password_reset", locale)}


# Checked before sensitive actions (email change, account deletion)
@router.post("/password/verify")
async def verify_current_password(body: schemas.PasswordVerify, current_user=Depends(security.get_current_user)):
    user = utils.get_user_by_id(current_user.user_id)
    return {"valid": bool(user) and security.verify_password(body.password, user.get("hashed_password"))}


@router.post("/password/change")
async def change_password(
    body: schemas.PasswordChange,
    current_user=Depends(security.get_current_user),
    locale: str = Depends(get_locale),
):
    user = utils.get_user_by_id(current_user.user_id)
    if not user or not security.verify_password(body.current_password, user.get("hashed_password")):
        raise HTTPException(status_code=400, detail=translate("errors.wrong_password", locale))
    if body.current_password == body.new_password:
        raise HTTPException(status_code=400, detail=translate("errors.same_password", locale))

    utils.update_user(user["user_id"], {"hashed_password": security.hash_password(body.new_password)})
    return {"message": translate("messages.password_changed", locale)}


@router.post("/email/request-change")
async def request_email_change(
    body: schemas.EmailChangeRequest,
    current_user=Depends(security.get_current_user),
    locale: str = Depends(get_locale),
):
    existing = utils.get_user_by_email(body.new_email)
    if existing:
        detail_key = "errors.same_email" if existing["user_id"] == current_user.user_id else "errors.email_taken"
        raise HTTPException(status_code=400, detail=translate(detail_key, locale))

    token = security.create_email_change_token(current_user.user_id, body.new_email)
    return {"change_token": token, "message": translate("messages.email_change_sent", locale)}


@router.post("/email/confirm-change")
async def confirm_email_change(body: schemas.EmailChangeConfirm, locale: str = Depends(get_locale)):
    decoded = security.verify_email_change_token(body.token)
    if not decoded:
        raise HTTPException(status_code=400, detail=translate("errors.invalid_token", locale))
    user_id, new_email = decoded

    # Someone may have claimed the address since the token was issued
    if utils.get_user_by_email(new_email):
        raise HTTPException(status_code=400, detail=translate("errors.email_taken", locale))

    updated = utils.update_user(user_id, {"email": new_email, "is_verified": True})
    if not updated:
        raise HTTPException(status_code=404, detail=translate("errors.user_not_found", locale))
    security.revoke_token(body.token)
    return {"message": translate("messages.email_changed", locale), "email": new_email}
