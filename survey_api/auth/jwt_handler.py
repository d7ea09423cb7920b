from datetime import datetime, timedelta, timezone
from typing import Any, Mapping
from uuid import uuid4

import jwt

from survey_api.core import config

def create_access_token(
    claims: Mapping[str, Any],
    expires_minutes: int | None = None,
    issued_at: datetime | None = None,
) -> str:
    if not claims.get("email"):
        raise ValueError("Token claims must include an email.")

    expire_minutes = config.JWT_EXPIRES_MINUTES if expires_minutes is None else expires_minutes
    issued = issued_at or datetime.now(timezone.utc)
    payload = dict(claims)
    payload.update(
        {
            "iat": issued,
            "exp": issued + timedelta(minutes=expire_minutes),
            "jti": uuid4().hex,
        }
    )
    return jwt.encode(payload, config.JWT_SECRET_KEY, algorithm=config.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict:
    return jwt.decode(
        token,
        config.JWT_SECRET_KEY,
        algorithms=[config.JWT_ALGORITHM],
        options={"require": ["exp"]},
    )
