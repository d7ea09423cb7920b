import logging

from fastapi import APIRouter, Depends
from pymongo import ASCENDING
from pymongo.database import Database

from survey_api.auth.dependencies import verify_admin, verify_token
from survey_api.database import COMMENTS, REPORTS, get_db, serialize_documents, serialize_insert, without_fields
from survey_api.models.feedback import CommentCreate, ReportCreate

router = APIRouter(tags=['feedback'])

logger = logging.getLogger(__name__)


def _survey_filter(survey_id: str | None) -> dict:
    return {'surveyId': survey_id} if survey_id else {}


@router.get('/comment')
def list_comments(surveyId: str | None = None, db: Database = Depends(get_db)):
    return serialize_documents(db[COMMENTS].find(_survey_filter(surveyId)).sort('_id', ASCENDING))


@router.post('/comment')
def create_comment(
    payload: CommentCreate,
    claims: dict = Depends(verify_token),
    db: Database = Depends(get_db),
):
    comment = without_fields(payload.model_dump())
    comment['email'] = claims.get('email')
    result = db[COMMENTS].insert_one(comment)
    logger.info('Stored comment on survey %s', comment['surveyId'])
    return serialize_insert(result)


@router.get('/report', dependencies=[Depends(verify_admin)])
def list_reports(surveyId: str | None = None, db: Database = Depends(get_db)):
    return serialize_documents(db[REPORTS].find(_survey_filter(surveyId)).sort('_id', ASCENDING))


@router.post('/report')
def create_report(
    payload: ReportCreate,
    claims: dict = Depends(verify_token),
    db: Database = Depends(get_db),
):
    report = without_fields(payload.model_dump())
    report['email'] = claims.get('email')
    result = db[REPORTS].insert_one(report)
    logger.info('Stored report on survey %s', report['surveyId'])
    return serialize_insert(result)
