# /markhub-backend/app/core/security.py

"""
Token handling for the two signed artefacts the service deals with:

- access tokens issued by the external credential provider, which we only
  verify (`create_access_token` exists for local development and tests);
- download tokens embedded in signed blob URLs, which we both issue and verify.
"""

import datetime
import re
from typing import Any, Dict, Optional

import jwt

from .config import settings

ALGORITHM = "HS256"
DOWNLOAD_TOKEN_PURPOSE = "blob-download"

# Subjects become blob directory names, so they may not carry separators.
_SAFE_SUBJECT = re.compile(r"^[A-Za-z0-9_.@|:-]+$")


class TokenError(Exception):
    pass


def is_safe_subject(subject: Optional[str]) -> bool:
    return bool(subject) and bool(_SAFE_SUBJECT.match(subject)) and subject not in (".", "..")


def create_access_token(subject: str, email: Optional[str] = None, expires_minutes: int = 60) -> str:
    now = datetime.datetime.now(datetime.timezone.utc)
    payload: Dict[str, Any] = {
        "sub": str(subject),
        "aud": settings.auth_jwt_audience,
        "iat": now,
        "exp": now + datetime.timedelta(minutes=expires_minutes),
    }
    if email:
        payload["email"] = email
    return jwt.encode(payload, settings.auth_jwt_secret, algorithm=ALGORITHM)


def decode_access_token(token: str) -> Dict[str, Any]:
    try:
        payload = jwt.decode(
            token,
            settings.auth_jwt_secret,
            algorithms=[ALGORITHM],
            audience=settings.auth_jwt_audience,
        )
    except jwt.PyJWTError as e:
        raise TokenError(f"Invalid access token: {e}") from e
    if not payload.get("sub"):
        raise TokenError("Access token has no subject.")
    if not is_safe_subject(payload["sub"]):
        raise TokenError("Access token subject contains unsupported characters.")
    return payload


def create_download_token(path: str, ttl_seconds: int) -> str:
    now = datetime.datetime.now(datetime.timezone.utc)
    payload = {
        "path": path,
        "purpose": DOWNLOAD_TOKEN_PURPOSE,
        "iat": now,
        "exp": now + datetime.timedelta(seconds=ttl_seconds),
    }
    return jwt.encode(payload, settings.blob_signing_secret, algorithm=ALGORITHM)


def decode_download_token(token: str) -> str:
    """Returns the blob path carried by a valid, unexpired download token."""
    try:
        payload = jwt.decode(token, settings.blob_signing_secret, algorithms=[ALGORITHM])
    except jwt.ExpiredSignatureError as e:
        raise TokenError("Download link has expired.") from e
    except jwt.PyJWTError as e:
        raise TokenError(f"Invalid download link: {e}") from e
    if payload.get("purpose") != DOWNLOAD_TOKEN_PURPOSE or not payload.get("path"):
        raise TokenError("Invalid download link.")
    return payload["path"]
