# auth service - jwt token management and facebook profile lookup
# handles token creation, validation, and turning a facebook access token into a user profile

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import httpx
from jose import JWTError, jwt
from plantjournal.config import settings

logger = logging.getLogger(__name__)


class FacebookAuthError(Exception):
    """facebook rejected the access token or could not be reached"""


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """create a jwt access token"""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode.update({"exp": expire, "type": "access"})
    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def create_refresh_token(data: dict) -> str:
    """create a jwt refresh token"""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
    to_encode.update({"exp": expire, "type": "refresh"})
    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> Optional[dict]:
    """decode and validate a jwt token, returns payload or none"""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
        return payload
    except JWTError as e:
        logger.warning(f"Token decode failed: {e}")
        return None


def profile_from_graph(data: dict) -> dict:
    """shape a graph api /me response into the stored user profile.
    the facebook block keeps the raw provider fields, keyed by facebook.id."""
    return {
        "name": data.get("name", ""),
        "email": data.get("email"),
        "facebook": {
            "id": data.get("id"),
            "name": data.get("name", ""),
            "email": data.get("email"),
            "firstName": data.get("first_name"),
            "lastName": data.get("last_name"),
            "picture": (data.get("picture") or {}).get("data", {}).get("url"),
        },
    }


async def fetch_facebook_profile(access_token: str, client: Optional[httpx.AsyncClient] = None) -> dict:
    """call the graph api /me endpoint and return the user profile"""
    params = {"access_token": access_token, "fields": settings.FACEBOOK_PROFILE_FIELDS}
    url = f"{settings.FACEBOOK_GRAPH_URL}/me"

    try:
        if client is not None:
            resp = await client.get(url, params=params)
        else:
            async with httpx.AsyncClient(timeout=settings.FACEBOOK_TIMEOUT_SECONDS) as ac:
                resp = await ac.get(url, params=params)
    except httpx.HTTPError as e:
        logger.warning(f"Facebook graph request failed: {e}")
        raise FacebookAuthError("Could not reach Facebook") from e

    if resp.status_code != 200:
        logger.warning(f"Facebook rejected access token: {resp.status_code}")
        raise FacebookAuthError("Invalid Facebook access token")

    data = resp.json()
    if not data.get("id"):
        raise FacebookAuthError("Facebook profile has no id")
    return profile_from_graph(data)
