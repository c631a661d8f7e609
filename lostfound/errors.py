"""
Domain errors raised by the utils modules and their HTTP translation.
Error messages are i18n keys; routers localize them for the caller.
"""

from fastapi import HTTPException, status

from lostfound.i18n import translate


class ConflictError(Exception):
    """The request clashes with existing state (duplicate like, taken username...)."""


def http_error(exc: Exception, locale: str = "en", **params) -> HTTPException:
    if isinstance(exc, LookupError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, PermissionError):
        code = status.HTTP_403_FORBIDDEN
    elif isinstance(exc, ConflictError):
        code = status.HTTP_409_CONFLICT
    else:
        code = status.HTTP_400_BAD_REQUEST
    key = exc.args[0] if exc.args else "errors.generic"
    return HTTPException(status_code=code, detail=translate(key, locale, **params))
