"""Pydantic schemas for authentication API."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from moviecatalog.models.user import Role


class TokenPairResponse(BaseModel):
    """Response with both JWT tokens."""

    refresh_token: str
    access_token: str


class AccessTokenResponse(BaseModel):
    """Response with a freshly issued access token."""

    access_token: str


class BlockTokenRequest(BaseModel):
    """Request to block a raw token before its natural expiry."""

    token: str = Field(..., min_length=1)


class BlockTokenResponse(BaseModel):
    blocked: bool


class TokenPayloadResponse(BaseModel):
    """Decoded payload of the caller's token."""

    sub: str
    role: Role
    type: str
    iat: int | None = None
    exp: int


class UserResponse(BaseModel):
    """Response with user information."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    role: Role
    created_at: datetime
