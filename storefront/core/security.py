"""
Storefront - Credentials

bcrypt password digests, HS256 access and refresh tokens, single-use reset tokens.
"""
import hashlib
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Tuple

import bcrypt
from jose import JWTError, jwt

from storefront.core.config import settings
from storefront.core.exceptions import ErrorCode, StorefrontError

# bcrypt only looks at the first 72 bytes
BCRYPT_MAX_BYTES = 72


class TokenDecodeError(StorefrontError):
    """Bearer token is malformed, badly signed or expired"""

    def __init__(self):
        super().__init__("Could not validate credentials", code=ErrorCode.INVALID_TOKEN.value)


def _bcrypt_input(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def get_password_hash(password: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(_bcrypt_input(password), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    if not hashed_password:
        return False
    return bcrypt.checkpw(_bcrypt_input(plain_password), hashed_password.encode("utf-8"))


def create_access_token(claims: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """Sign ``claims`` with an expiry (ACCESS_TOKEN_EXPIRE_MINUTES unless given)"""
    lifetime = expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    payload = {**claims, "exp": datetime.now(timezone.utc) + lifetime, "type": "access"}
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> Dict[str, Any]:
    try:
        return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as exc:
        raise TokenDecodeError() from exc


def create_refresh_token(user_id: str) -> Tuple[str, datetime]:
    """Long-lived token for minting new access tokens, and its expiry"""
    expires_at = datetime.now(timezone.utc) + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
    payload = {"sub": user_id, "exp": expires_at, "type": "refresh", "jti": secrets.token_hex(8)}
    token = jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)
    return token, expires_at.replace(tzinfo=None)


def generate_reset_token() -> str:
    """Raw reset token handed to the user; only its digest is stored"""
    return secrets.token_hex(32)


def hash_token(token: str) -> str:
    """SHA-256 digest stored in place of reset and refresh tokens"""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()
