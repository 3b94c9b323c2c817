from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext

from config import Settings
from errors import AuthenticationError

# auto_error=False: an absent or non-Bearer header yields None instead of a 401.
bearer_scheme = HTTPBearer(auto_error=False)


@lru_cache()
def get_pwd_context(rounds: int = 12) -> CryptContext:
    return CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)


# Password hashing
def hash_password(password: str, rounds: int = 12) -> str:
    return get_pwd_context(rounds).hash(password)


def verify_password(plain_password: str, hashed_password: str, rounds: int = 12) -> bool:
    """Check ``plain_password`` against a stored bcrypt hash.

    A wrong password, an empty value or a hash that passlib cannot identify
    all yield ``False``; this function never raises for bad credentials.
    """
    if not plain_password or not hashed_password:
        return False
    try:
        return get_pwd_context(rounds).verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        return False


# Tokens
def generate_token(claims: dict, settings: Settings) -> str:
    """Sign a bearer token carrying ``userId`` and ``email``."""
    now = datetime.now(timezone.utc)
    to_encode = {
        "userId": claims["userId"],
        "email": claims["email"],
        "iat": now,
        "exp": now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def verify_token(token: str, settings: Settings) -> Optional[dict]:
    """Return the token claims, or ``None`` if the token is not acceptable.

    Bad signatures, expired tokens, malformed input and tokens missing the
    ``userId``/``email`` claims are all reported as ``None``.
    """
    if not token:
        return None
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None

    user_id = payload.get("userId")
    email = payload.get("email")
    if not user_id or not email:
        return None
    return {"userId": user_id, "email": email}


# Request authentication
def get_user_from_credentials(
    credentials: Optional[HTTPAuthorizationCredentials],
    settings: Settings,
) -> Optional[dict]:
    if credentials is None:
        return None
    return verify_token(credentials.credentials, settings)


async def get_user_from_request(request: Request, settings: Settings) -> Optional[dict]:
    credentials = await bearer_scheme(request)
    return get_user_from_credentials(credentials, settings)


def get_settings_dependency(request: Request) -> Settings:
    return request.app.state.settings


async def require_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    settings: Settings = Depends(get_settings_dependency),
) -> dict:
    user = get_user_from_credentials(credentials, settings)
    if user is None:
        raise AuthenticationError("Unauthorized")
    return user
