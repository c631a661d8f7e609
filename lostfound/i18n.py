"""
Translation bundles (English / Arabic) and locale resolution.
Bundles are JSON files under lostfound/locales and are cached after the first read.
"""

import os, json
from functools import lru_cache
from typing import Dict, Optional

from fastapi import Request

from lostfound.config import settings

LOCALES_DIR = os.path.join(os.path.dirname(__file__), "locales")
SUPPORTED_LOCALES = ("en", "ar")
RTL_LOCALES = {"ar"}
FALLBACK_LOCALE = "en"


@lru_cache(maxsize=None)
def load_bundle(locale: str) -> Dict:
    path = os.path.join(LOCALES_DIR, f"{locale}.json")
    if not os.path.exists(path):
        return {}
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def _lookup(bundle: Dict, key: str) -> Optional[str]:
    node = bundle
    for part in key.split("."):
        if not isinstance(node, dict) or part not in node:
            return None
        node = node[part]
    return node if isinstance(node, str) else None


def normalize_locale(locale: Optional[str]) -> str:
    if locale in SUPPORTED_LOCALES:
        return locale
    return settings.default_locale if settings.default_locale in SUPPORTED_LOCALES else FALLBACK_LOCALE


def resolve_locale(accept_language: Optional[str]) -> str:
    """Pick the first supported language from an Accept-Language header."""
    if not accept_language:
        return normalize_locale(None)
    for part in accept_language.split(","):
        tag = part.split(";")[0].strip().lower()
        primary = tag.split("-")[0]
        if primary in SUPPORTED_LOCALES:
            return primary
    return normalize_locale(None)


def translate(key: str, locale: Optional[str] = None, **params) -> str:
    locale = normalize_locale(locale)
    text = _lookup(load_bundle(locale), key)
    if text is None and locale != FALLBACK_LOCALE:
        text = _lookup(load_bundle(FALLBACK_LOCALE), key)
    if text is None:
        return key
    return text.format(**params) if params else text


def text_direction(locale: Optional[str]) -> str:
    return "rtl" if normalize_locale(locale) in RTL_LOCALES else "ltr"


def get_locale(request: Request) -> str:
    """FastAPI dependency: the caller's locale from ?lang= or Accept-Language."""
    lang = request.query_params.get("lang")
    if lang in SUPPORTED_LOCALES:
        return lang
    return resolve_locale(request.headers.get("accept-language"))
