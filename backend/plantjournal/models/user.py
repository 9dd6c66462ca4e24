# user models - facebook sign-in, tokens, and user responses

from typing import Optional
from pydantic import BaseModel, Field


# auth

class FacebookLogin(BaseModel):
    access_token: str = Field(..., alias="accessToken", min_length=1, description="facebook user access token")

    model_config = {"populate_by_name": True}


class TokenResponse(BaseModel):
    access_token: str = Field(..., alias="accessToken")
    refresh_token: str = Field(..., alias="refreshToken")
    token_type: str = "bearer"

    model_config = {"populate_by_name": True}


class RefreshRequest(BaseModel):
    refresh_token: str = Field(..., alias="refreshToken")

    model_config = {"populate_by_name": True}


# user responses

class UserResponse(BaseModel):
    id: str
    name: str = ""
    email: Optional[str] = None
    facebook_id: str = Field(..., alias="facebookId")
    created_at: Optional[str] = Field(None, alias="createdAt")

    model_config = {"populate_by_name": True}
