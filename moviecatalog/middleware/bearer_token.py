"""Bearer token gate for every inbound request.

The gate itself is ``evaluate_authorization``: it takes the raw
Authorization header and returns a ``GateDecision``. The middleware only
translates that decision into a response or ``request.state.user``.

Decision order:
1. no header                         -> PASS (anonymous)
2. malformed bearer header           -> REJECT 400
3. token on the block-list           -> REJECT 401
4. verified payload cached           -> AUTHENTICATE (no re-verification)
5. undecodable or unknown ``type``   -> REJECT 401
6. verifies with the type's secret   -> AUTHENTICATE and cache payload
7. verification failed: expired      -> REJECT 401
                        anything else -> PASS (anonymous)
"""

import enum
import logging
from dataclasses import dataclass
from typing import Any

import jwt
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import JSONResponse

from moviecatalog.core.exceptions import MalformedCredentialError
from moviecatalog.services.auth import (
    TOKEN_TYPES,
    TokenService,
    decode_unverified,
    extract_bearer_token,
)

logger = logging.getLogger(__name__)

# Endpoints that take Basic credentials rather than a bearer token
EXCLUDED_PATHS = [
    "/auth/register",
    "/auth/login",
]


class GateAction(enum.Enum):
    PASS = "pass"
    AUTHENTICATE = "authenticate"
    REJECT = "reject"


@dataclass(frozen=True)
class GateDecision:
    action: GateAction
    payload: dict[str, Any] | None = None
    status_code: int | None = None
    detail: str | None = None

    @classmethod
    def passthrough(cls) -> "GateDecision":
        return cls(GateAction.PASS)

    @classmethod
    def authenticate(cls, payload: dict[str, Any]) -> "GateDecision":
        return cls(GateAction.AUTHENTICATE, payload=payload)

    @classmethod
    def reject(cls, status_code: int, detail: str) -> "GateDecision":
        return cls(GateAction.REJECT, status_code=status_code, detail=detail)


async def evaluate_authorization(auth_header: str | None, tokens: TokenService) -> GateDecision:
    """Decide how to treat a request carrying ``auth_header``."""
    if not auth_header:
        return GateDecision.passthrough()

    try:
        token = extract_bearer_token(auth_header)
    except MalformedCredentialError as e:
        return GateDecision.reject(400, str(e))

    if await tokens.is_blocked(token):
        return GateDecision.reject(401, "Token has been blocked")

    cached = await tokens.get_cached_payload(token)
    if cached is not None:
        return GateDecision.authenticate(cached)

    try:
        token_type = decode_unverified(token).get("type")
    except jwt.PyJWTError:
        return GateDecision.reject(401, "Invalid token")
    if token_type not in TOKEN_TYPES:
        return GateDecision.reject(401, "Invalid token")

    try:
        payload = tokens.verify(token, token_type)
    except jwt.ExpiredSignatureError:
        return GateDecision.reject(401, "Token has expired")
    except jwt.PyJWTError as e:
        logger.debug(f"Token verification failed, continuing anonymously: {e}")
        return GateDecision.passthrough()

    await tokens.cache_verified_payload(token, payload)
    return GateDecision.authenticate(payload)


class BearerTokenMiddleware(BaseHTTPMiddleware):
    """Attach the verified token payload to ``request.state.user``.

    Requests without credentials pass through; endpoints that need a user
    enforce it with the ``get_current_user`` dependency.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request.state.user = None

        # CORS preflight never carries credentials
        if request.method == "OPTIONS":
            return await call_next(request)

        if request.url.path in EXCLUDED_PATHS:
            return await call_next(request)

        tokens = TokenService(request.app.state.cache)
        decision = await evaluate_authorization(request.headers.get("Authorization"), tokens)

        if decision.action is GateAction.REJECT:
            logger.warning(
                f"Rejected token for: {request.method} {request.url.path} - {decision.detail}",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": decision.status_code,
                },
            )
            headers = {"WWW-Authenticate": "Bearer"} if decision.status_code == 401 else None
            return JSONResponse(
                status_code=decision.status_code or 401,
                content={"detail": decision.detail},
                headers=headers,
            )

        if decision.action is GateAction.AUTHENTICATE:
            request.state.user = decision.payload

        return await call_next(request)
