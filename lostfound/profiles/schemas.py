from pydantic import BaseModel, field_validator
from typing import Optional
from lostfound.authentication.schemas import validate_username


class Profile(BaseModel):
    user_id: str
    username: str
    email: str
    role: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    full_name: str
    phone: Optional[str] = None
    avatar_url: Optional[str] = None
    is_verified: bool = False
    has_password: bool = True
    terms_accepted_at: Optional[str] = None
    created_at: Optional[str] = None


class ProfileUpdate(BaseModel):
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None

    @field_validator('username')
    @classmethod
    def check_username(cls, v):
        return validate_username(v) if v is not None else v


class UsernameCheck(BaseModel):
    username: str
    user_id: Optional[str] = None


class UsernameAvailability(BaseModel):
    available: bool
    message: str


class EmailCheck(BaseModel):
    email: str


class EmailAvailability(BaseModel):
    exists: bool
