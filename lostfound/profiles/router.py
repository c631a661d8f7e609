from fastapi import APIRouter, Depends, File, UploadFile
from typing import Optional
from lostfound.authentication.security import get_current_user, get_bearer_token, revoke_token
from lostfound.errors import ConflictError, http_error
from lostfound.i18n import get_locale, translate
from lostfound.profiles import schemas, utils
from lostfound import uploads

router = APIRouter(tags=["Profiles"])


@router.get("/user/profile", response_model=schemas.Profile)
def get_my_profile(current_user=Depends(get_current_user), locale: str = Depends(get_locale)):
    try:
        return utils.get_profile(current_user.user_id)
    except LookupError as e:
        raise http_error(e, locale)


@router.patch("/user/profile", response_model=schemas.Profile)
def update_my_profile(
    update: schemas.ProfileUpdate,
    current_user=Depends(get_current_user),
    locale: str = Depends(get_locale),
):
    """Owner edits names, phone or username. A taken username is a 409."""
    try:
        return utils.update_profile(current_user.user_id, update)
    except (LookupError, ConflictError) as e:
        raise http_error(e, locale)


@router.post("/username-check", response_model=schemas.UsernameAvailability)
def username_check(body: schemas.UsernameCheck, locale: str = Depends(get_locale)):
    available, key = utils.check_username(body.username, exclude_user_id=body.user_id)
    return {"available": available, "message": translate(key, locale)}


@router.post("/email-check", response_model=schemas.EmailAvailability)
def email_check(body: schemas.EmailCheck):
    return {"exists": utils.email_exists(body.email)}


@router.post("/user/upload-profile-picture", response_model=schemas.Profile)
async def upload_profile_picture(
    file: UploadFile = File(...),
    current_user=Depends(get_current_user),
    locale: str = Depends(get_locale),
):
    try:
        url = await uploads.save_image(file, "avatars", current_user.user_id)
    except ValueError as e:
        raise http_error(e, locale)
    try:
        return utils.set_avatar(current_user.user_id, url)
    except LookupError as e:
        uploads.delete_upload(url)
        raise http_error(e, locale)


@router.post("/user/accept-terms", response_model=schemas.Profile)
def accept_terms(current_user=Depends(get_current_user), locale: str = Depends(get_locale)):
    try:
        return utils.accept_terms(current_user.user_id)
    except LookupError as e:
        raise http_error(e, locale)


@router.delete("/delete-account")
def delete_account(
    current_user=Depends(get_current_user),
    token: Optional[str] = Depends(get_bearer_token),
    locale: str = Depends(get_locale),
):
    """Delete the caller's account and everything tied to it, then revoke the session."""
    try:
        removed = utils.delete_account(current_user.user_id)
    except LookupError as e:
        raise http_error(e, locale)
    if token:
        revoke_token(token)
    return {"success": True, "message": translate("messages.account_deleted", locale), "removed": removed}
