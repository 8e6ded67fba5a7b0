"""Password hashing and self-issued JWT helpers."""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import structlog
from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from app.config.settings import settings

logger = structlog.get_logger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

REFRESH_TOKEN_TYPE = "refresh"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def access_token_expires_in() -> int:
    """Access token lifetime in seconds."""
    return settings.access_token_expire_minutes * 60


def create_access_token(
    subject: str,
    email: Optional[str] = None,
    company_id: Optional[str] = None,
    role: Optional[str] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Create an access token carrying ``{sub, email, companyId, role}``."""
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    to_encode: Dict[str, Any] = {
        "sub": subject,
        "email": email,
        "companyId": company_id,
        "role": role,
        "exp": expire,
    }
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def create_refresh_token(subject: str, expires_delta: Optional[timedelta] = None) -> str:
    """Create a refresh token, only accepted by the refresh endpoint."""
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(days=settings.refresh_token_expire_days)
    )
    to_encode = {"sub": subject, "type": REFRESH_TOKEN_TYPE, "exp": expire}
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def verify_token(token: str, token_type: str = "access") -> Optional[Dict[str, Any]]:
    """Decode and check a self-issued token.

    Returns the payload, or None when the signature or expiry is invalid or the
    token is of the wrong type. Refresh tokens are never valid as access tokens.
    """
    try:
        payload = jwt.decode(
            token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm]
        )
    except ExpiredSignatureError:
        logger.info("token_expired", token_type=token_type)
        return None
    except JWTError as exc:
        logger.info("token_rejected", token_type=token_type, reason=str(exc))
        return None

    is_refresh = payload.get("type") == REFRESH_TOKEN_TYPE
    if (token_type == REFRESH_TOKEN_TYPE) != is_refresh:
        logger.info("token_wrong_type", expected=token_type)
        return None

    if not payload.get("sub"):
        return None

    return payload
