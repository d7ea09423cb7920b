import logging

from fastapi import APIRouter, Depends
from pymongo import ASCENDING
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from survey_api.auth.dependencies import verify_admin, verify_token
from survey_api.database import (
    USERS,
    get_db,
    parse_object_id,
    serialize_delete,
    serialize_documents,
    serialize_update,
    without_fields,
)
from survey_api.models.user import Role, UserCreate, stored_role

router = APIRouter(tags=['users'])

logger = logging.getLogger(__name__)

USER_EXISTS_RESPONSE = {'message': 'user already exists', 'insertedId': None}
SERVER_OWNED_USER_FIELDS = ('_id', 'role')


def has_role(db: Database, email: str, role: Role) -> bool:
    return stored_role(db[USERS].find_one({'email': email})) == role


def set_role(db: Database, user_id: str, role: Role) -> dict:
    result = db[USERS].update_one({'_id': parse_object_id(user_id)}, {'$set': {'role': role.value}})
    logger.info('Set role %s on user %s (matched=%s)', role.value, user_id, result.matched_count)
    return serialize_update(result)


@router.get('', dependencies=[Depends(verify_admin)])
def list_users(db: Database = Depends(get_db)):
    return serialize_documents(db[USERS].find().sort('status', ASCENDING))


@router.get('/admin/{email}', dependencies=[Depends(verify_token)])
def is_admin(email: str, db: Database = Depends(get_db)):
    return {'admin': has_role(db, email, Role.ADMIN)}


@router.get('/surveyor/{email}', dependencies=[Depends(verify_token)])
def is_surveyor(email: str, db: Database = Depends(get_db)):
    return {'surveyor': has_role(db, email, Role.SURVEYOR)}


@router.get('/pro-user/{email}')
def is_pro_user(email: str, db: Database = Depends(get_db)):
    return {'prouser': has_role(db, email, Role.PROUSER)}


@router.post('')
def create_user(payload: UserCreate, db: Database = Depends(get_db)):
    # Roles change only through the admin grants or a payment.
    user = without_fields(payload.model_dump(), SERVER_OWNED_USER_FIELDS)
    # Conditional insert: the filter and $setOnInsert run as one atomic upsert.
    try:
        result = db[USERS].update_one({'email': user['email']}, {'$setOnInsert': user}, upsert=True)
    except DuplicateKeyError:
        return USER_EXISTS_RESPONSE

    if result.upserted_id is None:
        return USER_EXISTS_RESPONSE

    logger.info('Created user %s', user['email'])
    return {'acknowledged': result.acknowledged, 'insertedId': str(result.upserted_id)}


@router.patch('/admin/{user_id}', dependencies=[Depends(verify_admin)])
def make_admin(user_id: str, db: Database = Depends(get_db)):
    return set_role(db, user_id, Role.ADMIN)


@router.patch('/surveyor/{user_id}', dependencies=[Depends(verify_admin)])
def make_surveyor(user_id: str, db: Database = Depends(get_db)):
    return set_role(db, user_id, Role.SURVEYOR)


@router.delete('/{user_id}', dependencies=[Depends(verify_admin)])
def delete_user(user_id: str, db: Database = Depends(get_db)):
    result = db[USERS].delete_one({'_id': parse_object_id(user_id)})
    logger.info('Deleted user %s (deleted=%s)', user_id, result.deleted_count)
    return serialize_delete(result)
