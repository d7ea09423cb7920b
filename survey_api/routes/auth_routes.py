import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, status
from pymongo.database import Database

from survey_api.auth import jwt_handler
from survey_api.auth.dependencies import verify_token
from survey_api.database import REVOKED_TOKENS, get_db
from survey_api.models.user import TokenRequest

router = APIRouter(tags=['auth'])

logger = logging.getLogger(__name__)


@router.post('/jwt')
def issue_token(payload: TokenRequest):
    token = jwt_handler.create_access_token(payload.model_dump())
    logger.debug('Issued session token for %s', payload.email)
    return {'token': token}


@router.post('/jwt/revoke')
def revoke_token(claims: dict = Depends(verify_token), db: Database = Depends(get_db)):
    if not claims.get('jti'):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='Token cannot be revoked.')

    db[REVOKED_TOKENS].update_one(
        {'jti': claims['jti']},
        {
            '$setOnInsert': {
                'jti': claims['jti'],
                'email': claims.get('email'),
                'expires_at': datetime.fromtimestamp(claims['exp'], tz=timezone.utc),
            }
        },
        upsert=True,
    )
    logger.info('Revoked session token for %s', claims.get('email'))
    return {'message': 'token revoked'}
