from pydantic import BaseModel, EmailStr, field_validator
import re
from enum import Enum
from typing import Optional

USERNAME_PATTERN = re.compile(r'^[a-zA-Z0-9_]+$')


# USER ROLE HIERARCHY
class UserRole(str, Enum):
    MEMBER = "member"                # Reports, comments, reactions
    MODERATOR = "moderator"          # Reviews pending reports
    ADMINISTRATOR = "administrator"  # Everything a moderator can, plus user management


ADMIN_ROLES = {UserRole.MODERATOR.value, UserRole.ADMINISTRATOR.value}


class UserStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


def validate_username(v: str) -> str:
    v = v.strip()
    if len(v) < 3:
        raise ValueError('Username must be at least 3 characters long')
    if len(v) > 30:
        raise ValueError('Username cannot exceed 30 characters')
    if not USERNAME_PATTERN.match(v):
        raise ValueError('Username can only contain letters, numbers, and underscores')
    return v


def validate_password(v: str) -> str:
    if len(v) < 8:
        raise ValueError('Password must be at least 8 characters long')
    if not any(c.isupper() for c in v):
        raise ValueError('Password must contain at least one uppercase letter')
    if not any(c.islower() for c in v):
        raise ValueError('Password must contain at least one lowercase letter')
    if not any(c.isdigit() for c in v):
        raise ValueError('Password must contain at least one digit')
    if len(v) > 72:
        raise ValueError("Password cannot exceed 72 characters")
    return v


# USER REGISTRATION CONTRACT
class UserCreate(BaseModel):
    username: str
    email: EmailStr
    password: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None

    @field_validator('username')
    @classmethod
    def check_username(cls, v):
        return validate_username(v)

    @field_validator('password')
    @classmethod
    def check_password(cls, v):
        return validate_password(v)


# USER RESPONSE CONTRACT (Safe data - no passwords)
class UserResponse(BaseModel):
    user_id: str
    username: str
    email: str
    role: str
    status: str
    is_verified: bool = False


class RegisterResponse(UserResponse):
    verification_code: str
    message: str


# TOKEN RESPONSE CONTRACT
class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


# TOKEN DATA CONTRACT (What's embedded in JWT)
class TokenData(BaseModel):
    user_id: Optional[str] = None
    username: Optional[str] = None
    role: Optional[str] = None
    status: Optional[str] = None


class VerifyCode(BaseModel):
    email: EmailStr
    code: str


class EmailOnly(BaseModel):
    email: EmailStr


class PasswordResetConfirm(BaseModel):
    token: str
    new_password: str

    @field_validator('new_password')
    @classmethod
    def check_password(cls, v):
        return validate_password(v)


class PasswordVerify(BaseModel):
    password: str


class PasswordChange(BaseModel):
    current_password: str
    new_password: str

    @field_validator('new_password')
    @classmethod
    def check_password(cls, v):
        return validate_password(v)


class EmailChangeRequest(BaseModel):
    new_email: EmailStr


class EmailChangeConfirm(BaseModel):
    token: str
