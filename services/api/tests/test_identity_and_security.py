from uuid import uuid4

import jwt
import pytest
from fastapi import HTTPException

from teamsync_api.core.config import get_settings
from teamsync_api.core.passwords import hash_password, verify_password
from teamsync_api.core.security import issue_access_token, parse_authorization_header
from teamsync_api.exceptions import BadRequestError
from teamsync_api.models.enums import ProviderKind
from teamsync_api.services.identity import (
    Email,
    Facebook,
    Github,
    Google,
    normalize_email,
    oauth_provider,
    provider_identity,
    provider_password,
)


def test_normalize_email_trims_and_lowercases():
    assert normalize_email("  Alice@Example.COM ") == "alice@example.com"


@pytest.mark.parametrize(
    ("kind", "expected_cls"),
    [("GOOGLE", Google), ("github", Github), (" Facebook ", Facebook)],
)
def test_oauth_provider_builds_variant(kind, expected_cls):
    provider = oauth_provider(kind, " 12345 ")
    assert isinstance(provider, expected_cls)
    assert provider.provider_id == "12345"


def test_oauth_provider_rejects_email_and_unknown_kinds():
    with pytest.raises(BadRequestError):
        oauth_provider("EMAIL", "x")
    with pytest.raises(BadRequestError):
        oauth_provider("TWITTER", "x")
    with pytest.raises(BadRequestError):
        oauth_provider("GOOGLE", "   ")


def test_provider_identity_uses_email_for_email_provider():
    assert provider_identity(Email(password="pw"), email=" Bob@Example.com") == (ProviderKind.EMAIL, "bob@example.com")
    assert provider_identity(Github(provider_id="gh-1"), email="bob@example.com") == (ProviderKind.GITHUB, "gh-1")


def test_only_email_provider_carries_password():
    assert provider_password(Email(password="secret")) == "secret"
    assert provider_password(Google(provider_id="g-1")) is None
    assert "secret" not in repr(Email(password="secret"))


def test_password_hash_roundtrip_and_malformed_hash():
    hashed = hash_password("StrongPassw0rd!")
    assert hashed.startswith("pbkdf2_sha256$")
    assert "StrongPassw0rd!" not in hashed
    assert verify_password("StrongPassw0rd!", hashed) is True
    assert verify_password("wrong", hashed) is False
    assert verify_password("StrongPassw0rd!", None) is False
    assert verify_password("StrongPassw0rd!", "not-a-hash") is False


def test_issued_token_parses_back_to_principal():
    user_id = uuid4()
    token, exp_ts, expires_at = issue_access_token(user_id=user_id, email="a@example.com", provider="EMAIL")

    principal = parse_authorization_header(f"Bearer {token}")
    assert principal.user_id == user_id
    assert principal.email == "a@example.com"
    assert principal.provider == "EMAIL"
    assert principal.claims["iss"] == get_settings().auth_local_issuer
    assert int(expires_at.timestamp()) == exp_ts


def test_invalid_or_missing_token_is_unauthorized():
    with pytest.raises(HTTPException) as exc:
        parse_authorization_header(None)
    assert exc.value.status_code == 401

    with pytest.raises(HTTPException):
        parse_authorization_header("Bearer not-a-jwt")

    forged = jwt.encode({"sub": str(uuid4())}, "another-secret-key-at-least-32-bytes!!", algorithm="HS256")
    with pytest.raises(HTTPException):
        parse_authorization_header(f"Bearer {forged}")


def test_token_with_non_uuid_subject_is_unauthorized():
    settings = get_settings()
    token = jwt.encode(
        {"sub": "not-a-uuid", "iss": settings.auth_local_issuer},
        settings.auth_jwt_secret,
        algorithm="HS256",
    )
    with pytest.raises(HTTPException) as exc:
        parse_authorization_header(f"Bearer {token}")
    assert exc.value.status_code == 401
