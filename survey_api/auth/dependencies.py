import logging

import jwt
from fastapi import Depends, Header, HTTPException, status
from pymongo.database import Database

from survey_api.auth import jwt_handler
from survey_api.database import REVOKED_TOKENS, USERS, get_db
from survey_api.models.user import Role, stored_role

logger = logging.getLogger(__name__)

UNAUTHORIZED_DETAIL = "unauthorized access"
FORBIDDEN_DETAIL = "forbidden access"


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=UNAUTHORIZED_DETAIL,
        headers={"WWW-Authenticate": "Bearer"},
    )


def extract_bearer_token(authorization: str) -> str:
    parts = authorization.split()
    return parts[1] if len(parts) > 1 else ""


def verify_token(
    authorization: str | None = Header(default=None),
    db: Database = Depends(get_db),
) -> dict:
    if not authorization:
        logger.debug("Rejected request without Authorization header")
        raise _unauthorized()

    token = extract_bearer_token(authorization)
    try:
        claims = jwt_handler.decode_access_token(token)
    except jwt.InvalidTokenError as exc:
        logger.info("Rejected session token: %s", exc.__class__.__name__)
        raise _unauthorized() from exc

    jti = claims.get("jti")
    if jti and db[REVOKED_TOKENS].find_one({"jti": jti}) is not None:
        logger.info("Rejected revoked session token for %s", claims.get("email"))
        raise _unauthorized()

    return claims


def require_role(required_role: Role):
    """Build a guard that admits only users whose stored role equals ``required_role``.

    The guard runs after ``verify_token``. Roles are flat: an admin does not
    pass a surveyor guard. The role is read from the store on every request,
    so a role change applies to already issued tokens on their next use.
    """

    def role_guard(
        claims: dict = Depends(verify_token),
        db: Database = Depends(get_db),
    ) -> dict:
        email = (claims or {}).get("email")
        user = db[USERS].find_one({"email": email}) if email else None
        if stored_role(user) != required_role:
            logger.info("Denied %s access to %s", required_role.value, email)
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=FORBIDDEN_DETAIL)
        return claims

    role_guard.__name__ = f"verify_{required_role.value}"
    return role_guard


verify_admin = require_role(Role.ADMIN)
verify_surveyor = require_role(Role.SURVEYOR)
