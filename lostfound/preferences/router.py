from fastapi import APIRouter, Depends, Query
from lostfound.authentication.security import get_current_user
from lostfound.preferences import schemas, utils

router = APIRouter(prefix="/user/settings", tags=["Settings"])


@router.get("/public", response_model=schemas.LanguageOnly)
def get_public_language(user_id: str = Query(...)):
    """Language only, for pages rendered before sign-in (password reset links)."""
    return {"language": utils.get_language(user_id)}


@router.get("", response_model=schemas.UserSettings)
def get_my_settings(current_user=Depends(get_current_user)):
    return utils.get_settings(current_user.user_id)


@router.post("", response_model=schemas.UserSettings)
def save_my_settings(update: schemas.UserSettingsUpdate, current_user=Depends(get_current_user)):
    return utils.update_settings(current_user.user_id, update)
