"""Unit tests for credential parsing and the TokenService lifecycle."""

import time
from unittest.mock import AsyncMock, patch

import jwt
import pytest

from moviecatalog.core.config import settings
from moviecatalog.core.exceptions import MalformedCredentialError, UnauthorizedError
from moviecatalog.models.user import Role
from moviecatalog.services.auth import (
    Principal,
    TokenService,
    block_key,
    parse_basic_credential,
    token_key,
)
from tests.conftest import basic_header, unsigned_jwt

NOW = 1_700_000_000.0


def fixed_clock() -> float:
    return NOW


def sign(payload: dict, secret: str | None = None) -> str:
    return jwt.encode(payload, secret or settings.access_token_secret, algorithm="HS256")


@pytest.fixture
def principal():
    return Principal(id=42, role=Role.paid_user)


@pytest.fixture
def mock_cache():
    return AsyncMock()


class TestParseBasicCredential:
    def test_valid(self):
        credential = parse_basic_credential(basic_header("test@test.com", "pw:with:colons"))

        assert credential.identifier == "test@test.com"
        assert credential.secret == "pw:with:colons"

    def test_scheme_is_case_insensitive(self):
        header = basic_header("a@b.c", "pw").replace("Basic", "BASIC")
        assert parse_basic_credential(header).identifier == "a@b.c"

    @pytest.mark.parametrize(
        "header",
        [
            "Basic",
            "Basic a b",
            "Bearer dGVzdDpwdw==",
            "Basic !!!",
            "Basic bm9jb2xvbg==",  # "nocolon"
            "Basic OnB3",  # ":pw"
            "Basic dXNlcjo=",  # "user:"
        ],
    )
    def test_malformed(self, header):
        with pytest.raises(MalformedCredentialError):
            parse_basic_credential(header)


class TestIssueToken:
    def test_access_token_claims(self, mock_cache, principal):
        service = TokenService(mock_cache, clock=fixed_clock)

        token = service.issue_token(principal, False)
        claims = jwt.decode(token, options={"verify_signature": False})

        assert claims["sub"] == "42"
        assert claims["role"] == "paid_user"
        assert claims["type"] == "access"
        assert claims["iat"] == int(NOW)
        assert claims["exp"] - claims["iat"] == 300

    def test_refresh_token_claims(self, mock_cache, principal):
        service = TokenService(mock_cache, clock=fixed_clock)

        claims = jwt.decode(
            service.issue_token(principal, True), options={"verify_signature": False}
        )

        assert claims["type"] == "refresh"
        assert claims["exp"] - claims["iat"] == 24 * 3600

    def test_secrets_resolved_refresh_first(self, mock_cache, principal):
        service = TokenService(mock_cache)

        with patch.object(
            TokenService, "_lookup_secret", autospec=True, side_effect=lambda self, n: "s" * 32
        ) as lookup:
            service.issue_token(principal, False)

        assert [c.args[1] for c in lookup.call_args_list] == [
            "refresh_token_secret",
            "access_token_secret",
        ]

    def test_tokens_use_distinct_secrets(self, mock_cache, principal):
        service = TokenService(mock_cache)

        refresh = service.issue_token(principal, True)
        access = service.issue_token(principal, False)

        assert service.verify(refresh, "refresh")["type"] == "refresh"
        assert service.verify(access, "access")["type"] == "access"
        with pytest.raises(jwt.InvalidSignatureError):
            service.verify(refresh, "access")


class TestParseBearerToken:
    def test_access_token(self, token_service, principal):
        token = token_service.issue_token(principal, False)

        payload = token_service.parse_bearer_token(f"Bearer {token}", expect_refresh=False)

        assert payload["sub"] == "42"
        assert payload["type"] == "access"

    def test_refresh_token(self, token_service, principal):
        token = token_service.issue_token(principal, True)
        payload = token_service.parse_bearer_token(f"bearer {token}", expect_refresh=True)
        assert payload["type"] == "refresh"

    def test_type_mismatch_is_malformed(self, token_service, principal):
        token = token_service.issue_token(principal, False)
        with pytest.raises(MalformedCredentialError):
            token_service.parse_bearer_token(f"Bearer {token}", expect_refresh=True)

    def test_type_mismatch_checked_before_signature(self, token_service):
        token = sign({"sub": "1", "type": "access", "exp": time.time() + 60}, "x" * 32)
        with pytest.raises(MalformedCredentialError):
            token_service.parse_bearer_token(f"Bearer {token}", expect_refresh=True)

    @pytest.mark.parametrize("header", ["Bearer", "Bearer a b", "Basic abc", "Token abc"])
    def test_malformed_header(self, token_service, header):
        with pytest.raises(MalformedCredentialError):
            token_service.parse_bearer_token(header, expect_refresh=False)

    def test_expired(self, token_service):
        token = sign({"sub": "1", "role": "user", "type": "access", "exp": time.time() - 10})
        with pytest.raises(UnauthorizedError):
            token_service.parse_bearer_token(f"Bearer {token}", expect_refresh=False)

    def test_bad_signature(self, token_service):
        token = sign(
            {"sub": "1", "role": "user", "type": "access", "exp": time.time() + 60}, "y" * 32
        )
        with pytest.raises(UnauthorizedError):
            token_service.parse_bearer_token(f"Bearer {token}", expect_refresh=False)

    def test_garbage_token(self, token_service):
        with pytest.raises(UnauthorizedError):
            token_service.parse_bearer_token("Bearer not-a-jwt", expect_refresh=False)


@pytest.mark.asyncio
class TestBlockAndCache:
    async def test_block_ttl_until_expiry(self, mock_cache):
        service = TokenService(mock_cache, clock=fixed_clock)
        token = sign({"sub": "1", "type": "access", "exp": NOW + 5})

        assert await service.block_token(token) is True

        mock_cache.set.assert_awaited_once()
        key, payload, ttl_ms = mock_cache.set.await_args.args
        assert key == block_key(token)
        assert payload["sub"] == "1"
        assert ttl_ms == 5000

    async def test_block_already_expired_token(self, mock_cache):
        service = TokenService(mock_cache, clock=fixed_clock)
        token = sign({"sub": "1", "type": "access", "exp": NOW - 100})

        assert await service.block_token(token) is True
        assert mock_cache.set.await_args.args[2] == 1

    async def test_block_ignores_signature(self, mock_cache):
        service = TokenService(mock_cache, clock=fixed_clock)
        token = sign({"sub": "1", "type": "access", "exp": NOW + 5}, "z" * 32)

        assert await service.block_token(token) is True

    async def test_block_undecodable_token(self, mock_cache):
        service = TokenService(mock_cache, clock=fixed_clock)
        with pytest.raises(jwt.DecodeError):
            await service.block_token("garbage")

    @pytest.mark.parametrize(
        "payload",
        [
            {"sub": "1", "type": "access", "exp": "soon"},
            {"sub": "1", "type": "access", "exp": True},
            {"sub": "1", "type": "access"},
        ],
    )
    async def test_block_requires_numeric_exp(self, mock_cache, payload):
        service = TokenService(mock_cache, clock=fixed_clock)

        with pytest.raises(MalformedCredentialError):
            await service.block_token(unsigned_jwt(payload))

        mock_cache.set.assert_not_awaited()

    async def test_cache_payload_ttl_leaves_margin(self, mock_cache):
        service = TokenService(mock_cache, clock=fixed_clock)
        payload = {"sub": "1", "type": "access", "exp": NOW + 300}

        ttl_ms = await service.cache_verified_payload("tok", payload)

        assert ttl_ms == 270_000
        mock_cache.set.assert_awaited_once_with(token_key("tok"), payload, 270_000)

    async def test_cache_payload_ttl_floor(self, mock_cache):
        service = TokenService(mock_cache, clock=fixed_clock)
        payload = {"sub": "1", "type": "access", "exp": NOW + 10}

        assert await service.cache_verified_payload("tok", payload) == 1000

    async def test_is_blocked_and_cached_payload(self, cache):
        service = TokenService(cache)
        await cache.set(block_key("tok"), {"sub": "1"}, 10_000)
        await cache.set(token_key("other"), {"sub": "2"}, 10_000)

        assert await service.is_blocked("tok") is True
        assert await service.is_blocked("other") is False
        assert await service.get_cached_payload("other") == {"sub": "2"}
        assert await service.get_cached_payload("tok") is None
