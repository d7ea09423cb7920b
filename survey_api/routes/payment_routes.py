import logging

import stripe
from fastapi import APIRouter, Depends, HTTPException, status
from pymongo.database import Database

from survey_api.auth.dependencies import FORBIDDEN_DETAIL, verify_admin, verify_token
from survey_api.database import (
    PAYMENTS,
    USERS,
    get_db,
    serialize_documents,
    serialize_insert,
    serialize_update,
    without_fields,
)
from survey_api.models.payment import PaymentCreate, PaymentIntentRequest
from survey_api.models.user import Role
from survey_api.services import payment_gateway

router = APIRouter(tags=['payments'])

logger = logging.getLogger(__name__)


@router.post('/create-payment-intent', dependencies=[Depends(verify_token)])
def create_payment_intent(payload: PaymentIntentRequest):
    amount = payment_gateway.price_to_minor_units(payload.price)
    try:
        client_secret = payment_gateway.create_payment_intent(amount)
    except stripe.StripeError as exc:
        logger.exception('Payment intent creation failed for amount %s', amount)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail='internal server error',
        ) from exc
    return {'clientSecret': client_secret}


@router.get('/payments', dependencies=[Depends(verify_admin)])
def list_payments(email: str | None = None, db: Database = Depends(get_db)):
    query = {'email': email} if email else {}
    return serialize_documents(db[PAYMENTS].find(query))


@router.post('/payments')
def record_payment(
    payload: PaymentCreate,
    claims: dict = Depends(verify_token),
    db: Database = Depends(get_db),
):
    # Paying promotes the payer, so a token may only record its own payments.
    if payload.email != claims.get('email'):
        logger.info('Rejected payment for %s recorded by %s', payload.email, claims.get('email'))
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=FORBIDDEN_DETAIL)

    payment = without_fields(payload.model_dump())
    result = db[PAYMENTS].insert_one(payment)
    # A paying user becomes a pro user whatever their previous role was.
    update_user_role = db[USERS].update_one(
        {'email': payment['email']},
        {'$set': {'role': Role.PROUSER.value}},
    )
    logger.info('Recorded payment %s and promoted %s', result.inserted_id, payment['email'])
    return {'result': serialize_insert(result), 'updateUserRole': serialize_update(update_user_role)}
