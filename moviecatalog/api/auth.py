"""Authentication API endpoints and auth dependencies."""

import logging
from collections.abc import Callable, Coroutine
from typing import Any

import jwt
from fastapi import APIRouter, Depends, Header, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from moviecatalog.api.errors import http_error
from moviecatalog.core import get_db
from moviecatalog.core.cache import CacheStore
from moviecatalog.core.exceptions import MovieCatalogError
from moviecatalog.models.user import Role
from moviecatalog.schemas.auth import (
    AccessTokenResponse,
    BlockTokenRequest,
    BlockTokenResponse,
    TokenPairResponse,
    TokenPayloadResponse,
    UserResponse,
)
from moviecatalog.services.auth import AuthService, Principal, TokenService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def get_cache(request: Request) -> CacheStore:
    """Dependency to get the application cache store."""
    return request.app.state.cache


def get_token_service(cache: CacheStore = Depends(get_cache)) -> TokenService:
    """Dependency to get token service."""
    return TokenService(cache)


def get_auth_service(
    db: AsyncSession = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
) -> AuthService:
    """Dependency to get auth service."""
    return AuthService(db, tokens)


async def get_current_user(request: Request) -> dict[str, Any]:
    """Dependency returning the access-token payload set by BearerTokenMiddleware."""
    payload = getattr(request.state, "user", None)
    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if payload.get("type") != "access":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="An access token is required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return payload


async def get_optional_user(request: Request) -> dict[str, Any] | None:
    """Dependency returning the caller's access payload, or None if anonymous."""
    payload = getattr(request.state, "user", None)
    if payload is None or payload.get("type") != "access":
        return None
    return payload


def require_role(role: Role) -> Callable[..., Coroutine[Any, Any, dict[str, Any]]]:
    """Dependency factory allowing ``role`` and anything more privileged."""

    async def _check(user: dict[str, Any] = Depends(get_current_user)) -> dict[str, Any]:
        try:
            user_role = Role(user.get("role"))
        except ValueError:
            user_role = None
        if user_role is None or user_role.rank > role.rank:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient role",
            )
        return user

    return _check


@router.post(
    "/register",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register(
    authorization: str = Header(..., description="Basic base64(email:password)"),
    auth_service: AuthService = Depends(get_auth_service),
) -> UserResponse:
    """Register a user from Basic credentials."""
    try:
        user = await auth_service.register(authorization)
    except MovieCatalogError as e:
        raise http_error(e) from e
    return UserResponse.model_validate(user)


@router.post("/login", response_model=TokenPairResponse)
async def login(
    authorization: str = Header(..., description="Basic base64(email:password)"),
    auth_service: AuthService = Depends(get_auth_service),
) -> TokenPairResponse:
    """Authenticate Basic credentials and issue refresh and access tokens."""
    try:
        tokens = await auth_service.login(authorization)
    except MovieCatalogError as e:
        raise http_error(e) from e
    return TokenPairResponse(**tokens)


@router.post("/token/access", response_model=AccessTokenResponse)
async def rotate_access_token(
    authorization: str = Header(..., description="Bearer <refresh token>"),
    tokens: TokenService = Depends(get_token_service),
) -> AccessTokenResponse:
    """Issue a new access token for a valid refresh token."""
    try:
        payload = tokens.parse_bearer_token(authorization, expect_refresh=True)
    except MovieCatalogError as e:
        raise http_error(e) from e
    access_token = tokens.issue_token(Principal.from_payload(payload), False)
    return AccessTokenResponse(access_token=access_token)


@router.post("/token/block", response_model=BlockTokenResponse)
async def block_token(
    request: BlockTokenRequest,
    current_user: dict[str, Any] = Depends(get_current_user),
    tokens: TokenService = Depends(get_token_service),
) -> BlockTokenResponse:
    """Block a token until it expires (e.g. on logout)."""
    try:
        blocked = await tokens.block_token(request.token)
    except jwt.PyJWTError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Token could not be decoded",
        ) from e
    except MovieCatalogError as e:
        raise http_error(e) from e
    logger.info(f"User {current_user['sub']} blocked a token")
    return BlockTokenResponse(blocked=blocked)


@router.get("/private", response_model=TokenPayloadResponse)
async def private(
    current_user: dict[str, Any] = Depends(get_current_user),
) -> TokenPayloadResponse:
    """Return the caller's verified token payload."""
    return TokenPayloadResponse(**current_user)
