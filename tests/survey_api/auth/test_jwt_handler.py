from datetime import datetime, timedelta, timezone

import jwt
import pytest

from survey_api.auth.jwt_handler import create_access_token, decode_access_token
from survey_api.core import config


def test_create_access_token_embeds_claims_and_one_hour_expiry() -> None:
    issued_at = datetime.now(timezone.utc).replace(microsecond=0)

    token = create_access_token({'email': 'a@x.com', 'name': 'A'}, issued_at=issued_at)
    claims = decode_access_token(token)

    assert claims['email'] == 'a@x.com'
    assert claims['name'] == 'A'
    assert claims['exp'] - claims['iat'] == 60 * 60
    assert claims['iat'] == int(issued_at.timestamp())
    assert claims['jti']


def test_create_access_token_never_carries_role_from_server_state() -> None:
    claims = decode_access_token(create_access_token({'email': 'a@x.com'}))

    assert 'role' not in claims


def test_create_access_token_assigns_distinct_token_ids() -> None:
    first = decode_access_token(create_access_token({'email': 'a@x.com'}))
    second = decode_access_token(create_access_token({'email': 'a@x.com'}))

    assert first['jti'] != second['jti']


@pytest.mark.parametrize('claims', [{}, {'email': ''}, {'name': 'no email'}])
def test_create_access_token_requires_email(claims: dict) -> None:
    with pytest.raises(ValueError):
        create_access_token(claims)


def test_decode_access_token_rejects_token_past_expiry() -> None:
    token = create_access_token(
        {'email': 'a@x.com'},
        issued_at=datetime.now(timezone.utc) - timedelta(hours=1, minutes=1),
    )

    with pytest.raises(jwt.ExpiredSignatureError):
        decode_access_token(token)


def test_decode_access_token_rejects_foreign_signature() -> None:
    forged = jwt.encode(
        {'email': 'a@x.com', 'exp': datetime.now(timezone.utc) + timedelta(hours=1)},
        'not-the-server-secret',
        algorithm=config.JWT_ALGORITHM,
    )

    with pytest.raises(jwt.InvalidSignatureError):
        decode_access_token(forged)


def test_decode_access_token_rejects_token_without_expiry() -> None:
    unbounded = jwt.encode({'email': 'a@x.com'}, config.JWT_SECRET_KEY, algorithm=config.JWT_ALGORITHM)

    with pytest.raises(jwt.MissingRequiredClaimError):
        decode_access_token(unbounded)


@pytest.mark.parametrize('token', ['', 'garbage', 'a.b.c'])
def test_decode_access_token_rejects_malformed_tokens(token: str) -> None:
    with pytest.raises(jwt.InvalidTokenError):
        decode_access_token(token)


def test_create_access_token_honours_explicit_zero_lifetime() -> None:
    token = create_access_token({'email': 'a@x.com'}, expires_minutes=0)
    claims = jwt.decode(token, options={'verify_signature': False})

    assert claims['exp'] == claims['iat']
    with pytest.raises(jwt.ExpiredSignatureError):
        decode_access_token(token)
