from pydantic import BaseModel
from enum import Enum
from typing import Optional


class Theme(str, Enum):
    light = "light"
    dark = "dark"
    system = "system"


class Language(str, Enum):
    en = "en"
    ar = "ar"


class UserSettings(BaseModel):
    theme: Theme = Theme.system
    language: Language = Language.en
    sighting_alerts: bool = True
    new_device_login: bool = True


class UserSettingsUpdate(BaseModel):
    theme: Optional[Theme] = None
    language: Optional[Language] = None
    sighting_alerts: Optional[bool] = None
    new_device_login: Optional[bool] = None


class LanguageOnly(BaseModel):
    language: Language
