from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from src.core.settings import get_app_settings

_pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

ACCESS = "access"
REFRESH = "refresh"


# PUBLIC_INTERFACE
def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check a plain password against its bcrypt hash."""
    return _pwd_context.verify(plain_password, hashed_password)


# PUBLIC_INTERFACE
def get_password_hash(password: str) -> str:
    return _pwd_context.hash(password)


def _encode(subject: str, token_type: str, minutes: int, claims: Optional[Dict[str, Any]] = None) -> str:
    settings = get_app_settings()
    now = datetime.now(tz=timezone.utc)
    payload: Dict[str, Any] = dict(claims or {})
    payload.update({"sub": subject, "type": token_type, "iat": now, "exp": now + timedelta(minutes=minutes)})
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


# PUBLIC_INTERFACE
def create_access_token(subject: str, role: str, expires_minutes: Optional[int] = None) -> str:
    """Short-lived token carrying the user id and role."""
    minutes = expires_minutes or get_app_settings().ACCESS_TOKEN_EXPIRE_MINUTES
    return _encode(subject, ACCESS, minutes, {"role": role})


# PUBLIC_INTERFACE
def create_refresh_token(subject: str, expires_minutes: Optional[int] = None) -> str:
    """Long-lived token only accepted by the refresh endpoint."""
    minutes = expires_minutes or get_app_settings().REFRESH_TOKEN_EXPIRE_MINUTES
    return _encode(subject, REFRESH, minutes)


# PUBLIC_INTERFACE
def decode_token(token: str, expected_type: Optional[str] = None) -> Dict[str, Any]:
    """
    Verify signature and expiry and return the claims.

    Raises:
        JWTError: the token is invalid, expired, has no subject, or is not of
        expected_type when one is given.
    """
    settings = get_app_settings()
    claims = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    if not claims.get("sub"):
        raise JWTError("Token has no subject")
    if expected_type is not None and claims.get("type") != expected_type:
        raise JWTError(f"Expected a {expected_type} token")
    return claims


# PUBLIC_INTERFACE
def detect_device_type(user_agent: Optional[str]) -> str:
    """Classify a User-Agent header into a coarse device label for login logs."""
    if not user_agent:
        return "Unknown"
    ua = user_agent.lower()
    if "ipad" in ua or "tablet" in ua:
        return "Tablet"
    if "mobile" in ua or "android" in ua or "iphone" in ua:
        return "Mobile"
    if "windows" in ua:
        return "Desktop - Windows"
    if "mac os" in ua or "macintosh" in ua:
        return "Desktop - Mac"
    if "linux" in ua:
        return "Desktop - Linux"
    return "Unknown"
