"""Authentication service: credential parsing and the JWT token lifecycle.

Access and refresh tokens are signed with distinct secrets. Two cache
entries track a raw token after issue:

- ``BLOCK_TOKEN_<token>``: block-list entry, lives until the token expires
- ``TOKEN_<token>``: verified payload, expires ``verified_cache_margin_seconds``
  before the token so a cache hit never outlives a valid signature

All cache TTLs are milliseconds.
"""

import base64
import binascii
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import Any, Protocol

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import VerifyMismatchError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from moviecatalog.core.cache import CacheStore
from moviecatalog.core.config import Settings, settings
from moviecatalog.core.exceptions import MalformedCredentialError, UnauthorizedError
from moviecatalog.models.user import Role, User
from moviecatalog.services.user import UserService

logger = logging.getLogger(__name__)

TOKEN_TYPES = ("access", "refresh")

# Argon2 password hasher with recommended parameters
# Memory: 64 MiB, Time: 3 iterations, Parallelism: 4
ph = PasswordHasher(
    time_cost=3,
    memory_cost=65536,
    parallelism=4,
    hash_len=32,
    salt_len=16,
)


def hash_password(password: str) -> str:
    """Hash a password using Argon2id."""
    return ph.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its hash using constant-time comparison."""
    try:
        ph.verify(password_hash, password)
        return True
    except VerifyMismatchError:
        return False


def block_key(token: str) -> str:
    return f"BLOCK_TOKEN_{token}"


def token_key(token: str) -> str:
    return f"TOKEN_{token}"


class HasIdentity(Protocol):
    id: Any
    role: Any


@dataclass(frozen=True)
class BasicCredential:
    identifier: str
    secret: str


@dataclass(frozen=True)
class Principal:
    """Identity carried by a token, usable wherever a User is."""

    id: int
    role: Role

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "Principal":
        return cls(id=int(payload["sub"]), role=Role(payload["role"]))


def _split_header(raw_header: str, scheme: str) -> str:
    """Return the single credential part of ``<scheme> <credential>``."""
    parts = raw_header.split(" ")
    if len(parts) != 2:
        raise MalformedCredentialError("Malformed authorization header")
    header_scheme, credential = parts
    if header_scheme.lower() != scheme or not credential:
        raise MalformedCredentialError("Malformed authorization header")
    return credential


def parse_basic_credential(raw_header: str) -> BasicCredential:
    """Parse ``Basic base64(identifier:secret)``.

    Raises:
        MalformedCredentialError: wrong shape, scheme, encoding, or either side empty.
    """
    blob = _split_header(raw_header, "basic")
    try:
        decoded = base64.b64decode(blob, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as e:
        raise MalformedCredentialError("Basic credential is not valid base64") from e

    identifier, sep, secret = decoded.partition(":")
    if not sep or not identifier or not secret:
        raise MalformedCredentialError("Basic credential must be 'identifier:secret'")
    return BasicCredential(identifier=identifier, secret=secret)


def extract_bearer_token(raw_header: str) -> str:
    """Return the token of ``Bearer <token>``."""
    return _split_header(raw_header, "bearer")


def decode_unverified(token: str) -> dict[str, Any]:
    """Read a token's claims without checking signature or expiry.

    Raises jwt.DecodeError when the token is not a JWT at all.
    """
    return jwt.decode(token, options={"verify_signature": False})


class TokenService:
    """Issues, verifies and blocks JWTs.

    The cache is injected and owned by the application lifespan. ``clock``
    returns epoch seconds and exists for deterministic TTL tests.
    """

    def __init__(
        self,
        cache: CacheStore,
        config: Settings = settings,
        clock: Callable[[], float] = time.time,
    ):
        self.cache = cache
        self.config = config
        self.clock = clock

    def _lookup_secret(self, name: str) -> str:
        return getattr(self.config, name)

    def _secret_for(self, token_type: str) -> str:
        if token_type == "refresh":
            return self._lookup_secret("refresh_token_secret")
        return self._lookup_secret("access_token_secret")

    def _now_ms(self) -> float:
        return self.clock() * 1000

    # ------------------------------------------------------------------
    # Issue / verify
    # ------------------------------------------------------------------

    def issue_token(self, principal: HasIdentity, as_refresh: bool) -> str:
        """Sign an access (300s) or refresh (24h) token for ``principal``."""
        # Both secrets are resolved, refresh first, on every issue
        refresh_secret = self._lookup_secret("refresh_token_secret")
        access_secret = self._lookup_secret("access_token_secret")

        role = principal.role.value if isinstance(principal.role, Enum) else str(principal.role)
        if as_refresh:
            lifetime = timedelta(hours=self.config.refresh_token_expire_hours)
        else:
            lifetime = timedelta(seconds=self.config.access_token_expire_seconds)
        issued_at = datetime.fromtimestamp(int(self.clock()), tz=UTC)

        payload = {
            "sub": str(principal.id),
            "role": role,
            "type": "refresh" if as_refresh else "access",
            "iat": issued_at,
            "exp": issued_at + lifetime,
        }
        token = jwt.encode(
            payload,
            refresh_secret if as_refresh else access_secret,
            algorithm=self.config.jwt_algorithm,
        )
        return str(token)

    def verify(self, token: str, token_type: str) -> dict[str, Any]:
        """Verify signature and expiry with the secret for ``token_type``.

        Raises jwt.ExpiredSignatureError or another jwt.PyJWTError on failure.
        """
        return jwt.decode(
            token,
            self._secret_for(token_type),
            algorithms=[self.config.jwt_algorithm],
            options={"require": ["exp", "sub", "type"]},
            leeway=0,
        )

    def parse_bearer_token(self, raw_header: str, expect_refresh: bool) -> dict[str, Any]:
        """Parse and verify ``Bearer <token>``.

        Raises:
            MalformedCredentialError: bad header, or a refresh token where an
                access token is required (or vice versa).
            UnauthorizedError: token undecodable, bad signature or expired.
        """
        token = extract_bearer_token(raw_header)
        expected = "refresh" if expect_refresh else "access"

        try:
            declared = decode_unverified(token).get("type")
        except jwt.PyJWTError as e:
            raise UnauthorizedError("Invalid token") from e
        if declared != expected:
            raise MalformedCredentialError(f"Expected a {expected} token")

        try:
            payload = self.verify(token, expected)
        except jwt.ExpiredSignatureError as e:
            raise UnauthorizedError("Token has expired") from e
        except jwt.PyJWTError as e:
            raise UnauthorizedError(f"Invalid token: {e}") from e

        if payload.get("type") != expected:
            raise MalformedCredentialError(f"Expected a {expected} token")
        return payload

    # ------------------------------------------------------------------
    # Block-list and verified-payload cache
    # ------------------------------------------------------------------

    async def block_token(self, raw_token: str) -> bool:
        """Block ``raw_token`` until its own expiry. Always returns True."""
        payload = decode_unverified(raw_token)
        exp = payload.get("exp")
        if isinstance(exp, bool) or not isinstance(exp, int | float):
            raise MalformedCredentialError("Token has no numeric 'exp' claim")
        ttl_ms = max(int(exp * 1000 - self._now_ms()), 1)
        await self.cache.set(block_key(raw_token), payload, ttl_ms)
        logger.info(f"Blocked token for sub={payload.get('sub')} for {ttl_ms}ms")
        return True

    async def is_blocked(self, raw_token: str) -> bool:
        return await self.cache.get(block_key(raw_token)) is not None

    async def get_cached_payload(self, raw_token: str) -> dict[str, Any] | None:
        return await self.cache.get(token_key(raw_token))

    async def cache_verified_payload(self, raw_token: str, payload: dict[str, Any]) -> int:
        """Memoize a verified payload; returns the TTL used in milliseconds."""
        remaining_seconds = (payload["exp"] * 1000 - self._now_ms()) / 1000
        ttl_seconds = max(remaining_seconds - self.config.verified_cache_margin_seconds, 1)
        ttl_ms = int(ttl_seconds * 1000)
        await self.cache.set(token_key(raw_token), payload, ttl_ms)
        return ttl_ms


class AuthService:
    """Registration and login on top of TokenService."""

    def __init__(self, session: AsyncSession, tokens: TokenService):
        self.session = session
        self.tokens = tokens
        self.users = UserService(session)

    async def register(self, raw_header: str) -> User:
        """Create a user from ``Basic base64(email:password)``."""
        credential = parse_basic_credential(raw_header)
        return await self.users.create(
            email=credential.identifier,
            password_hash=hash_password(credential.secret),
        )

    async def authenticate(self, email: str, password: str) -> User:
        """Return the user for valid credentials.

        Raises UnauthorizedError for both "user not found" and "wrong
        password" to prevent user enumeration.
        """
        result = await self.session.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()

        if user is None:
            # Dummy hash keeps timing uniform
            verify_password(password, hash_password("dummy"))
            raise UnauthorizedError("Invalid email or password")

        if not verify_password(password, user.password_hash):
            raise UnauthorizedError("Invalid email or password")

        return user

    async def login(self, raw_header: str) -> dict[str, str]:
        """Authenticate ``Basic`` credentials and issue a refresh/access pair."""
        credential = parse_basic_credential(raw_header)
        user = await self.authenticate(credential.identifier, credential.secret)
        logger.info(f"User logged in: {user.email}")
        return {
            "refresh_token": self.tokens.issue_token(user, True),
            "access_token": self.tokens.issue_token(user, False),
        }
