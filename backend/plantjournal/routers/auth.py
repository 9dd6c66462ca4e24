# auth router - facebook sign-in, token refresh, current user

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from plantjournal.dependencies import get_current_user
from plantjournal.exceptions import InvalidIdentifier
from plantjournal.models.user import FacebookLogin, RefreshRequest, TokenResponse, UserResponse
from plantjournal.services.auth_service import (
    FacebookAuthError,
    create_access_token,
    create_refresh_token,
    decode_token,
    fetch_facebook_profile,
)
from plantjournal.services.store import JournalStore, get_store

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/auth", tags=["auth"])


def _tokens_for(user_id: str) -> TokenResponse:
    return TokenResponse(
        accessToken=create_access_token({"sub": user_id}),
        refreshToken=create_refresh_token({"sub": user_id}),
    )


def _doc_to_user(doc: dict) -> UserResponse:
    return UserResponse(
        id=doc["_id"],
        name=doc.get("name", ""),
        email=doc.get("email"),
        facebookId=str(doc.get("facebook", {}).get("id", "")),
        createdAt=doc.get("createdAt"),
    )


@router.post("/facebook", response_model=TokenResponse)
async def facebook_login(
    body: FacebookLogin,
    store: JournalStore = Depends(get_store),
):
    """exchange a facebook access token for api tokens, creating the user on first sign-in"""
    try:
        profile = await fetch_facebook_profile(body.access_token)
    except FacebookAuthError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))

    user = await store.find_or_create_facebook_user(profile)
    logger.info(f"User signed in: {user['_id']}")
    return _tokens_for(user["_id"])


@router.post("/refresh", response_model=TokenResponse)
async def refresh(
    body: RefreshRequest,
    store: JournalStore = Depends(get_store),
):
    """issue a new token pair from a valid refresh token"""
    payload = decode_token(body.refresh_token)
    if payload is None or payload.get("type") != "refresh" or not payload.get("sub"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid refresh token",
        )

    try:
        user = await store.get_user_by_id(payload["sub"])
    except InvalidIdentifier:
        user = None
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )

    return _tokens_for(user["_id"])


@router.get("/me", response_model=UserResponse)
async def me(current_user: dict = Depends(get_current_user)):
    return _doc_to_user(current_user)
