import logging

from fastapi import APIRouter, Depends, Query
from pymongo import DESCENDING
from pymongo.database import Database

from survey_api.auth.dependencies import verify_surveyor, verify_token
from survey_api.database import (
    SURVEYS,
    get_db,
    parse_object_id,
    serialize_delete,
    serialize_document,
    serialize_documents,
    serialize_insert,
    serialize_update,
    without_fields,
)
from survey_api.models.survey import UPDATABLE_SURVEY_FIELDS, SurveyCreate, SurveyUpdate, VoteRequest

router = APIRouter(tags=['surveys'])

logger = logging.getLogger(__name__)

DEFAULT_LATEST_LIMIT = 6
MAX_LATEST_LIMIT = 50
# Voter emails stay private; public reads return only the tally.
PUBLIC_PROJECTION = {'voters': 0}
SERVER_OWNED_SURVEY_FIELDS = ('_id', 'voters', 'votes')


@router.get('/show-survey')
def list_surveys(db: Database = Depends(get_db)):
    return serialize_documents(db[SURVEYS].find({}, PUBLIC_PROJECTION))


@router.get('/latest-survey')
def list_latest_surveys(
    limit: int = Query(default=DEFAULT_LATEST_LIMIT, ge=1, le=MAX_LATEST_LIMIT),
    db: Database = Depends(get_db),
):
    # ObjectIds grow with insertion time, so _id order is creation order.
    return serialize_documents(db[SURVEYS].find({}, PUBLIC_PROJECTION).sort('_id', DESCENDING).limit(limit))


@router.get('/update-survey/{survey_id}')
def get_survey(survey_id: str, db: Database = Depends(get_db)):
    return serialize_document(db[SURVEYS].find_one({'_id': parse_object_id(survey_id)}, PUBLIC_PROJECTION))


@router.post('/create-survey', dependencies=[Depends(verify_surveyor)])
def create_survey(payload: SurveyCreate, db: Database = Depends(get_db)):
    survey = payload.model_dump(exclude_unset=True)
    survey.update(payload.model_extra or {})
    survey = without_fields(survey, SERVER_OWNED_SURVEY_FIELDS)
    result = db[SURVEYS].insert_one(survey)
    logger.info('Created survey %s', result.inserted_id)
    return serialize_insert(result)


@router.patch('/{survey_id}/update-survey', dependencies=[Depends(verify_surveyor)])
def update_survey(survey_id: str, payload: SurveyUpdate, db: Database = Depends(get_db)):
    changes = {
        field: value
        for field, value in payload.model_dump(exclude_unset=True).items()
        if field in UPDATABLE_SURVEY_FIELDS
    }
    query = {'_id': parse_object_id(survey_id)}
    if not changes:
        matched = db[SURVEYS].count_documents(query, limit=1)
        return {'acknowledged': True, 'matchedCount': matched, 'modifiedCount': 0, 'upsertedId': None}

    return serialize_update(db[SURVEYS].update_one(query, {'$set': changes}))


@router.delete('/delete-survey/{survey_id}', dependencies=[Depends(verify_surveyor)])
def delete_survey(survey_id: str, db: Database = Depends(get_db)):
    result = db[SURVEYS].delete_one({'_id': parse_object_id(survey_id)})
    logger.info('Deleted survey %s (deleted=%s)', survey_id, result.deleted_count)
    return serialize_delete(result)


@router.post('/survey/{survey_id}/vote')
def vote_on_survey(
    survey_id: str,
    payload: VoteRequest,
    claims: dict = Depends(verify_token),
    db: Database = Depends(get_db),
):
    email = claims.get('email')
    object_id = parse_object_id(survey_id)
    # One vote per email: the $ne filter and the $push apply in a single document update.
    result = db[SURVEYS].update_one(
        {'_id': object_id, 'voters': {'$ne': email}},
        {'$inc': {f'votes.{payload.answer}': 1}, '$push': {'voters': email}},
    )
    if result.matched_count == 0 and db[SURVEYS].find_one({'_id': object_id}, {'_id': 1}) is not None:
        return {'message': 'already voted', 'modifiedCount': 0}

    return serialize_update(result)
