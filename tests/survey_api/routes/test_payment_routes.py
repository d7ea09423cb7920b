from types import SimpleNamespace

import pytest
import stripe
from pydantic import ValidationError

from survey_api.database import PAYMENTS, USERS
from survey_api.models.payment import PaymentIntentRequest
from survey_api.services import payment_gateway


@pytest.mark.parametrize(
    ('price', 'amount'),
    [(10, 1000), (10.5, 1050), (19.99, 1999), (0.1, 10), (2.5, 250)],
)
def test_price_to_minor_units_rounds_to_cents(price: float, amount: int) -> None:
    assert payment_gateway.price_to_minor_units(price) == amount


def test_create_payment_intent_calls_stripe_with_card_intent(monkeypatch: pytest.MonkeyPatch) -> None:
    captured = {}

    def fake_create(**kwargs):
        captured.update(kwargs)
        return SimpleNamespace(id='pi_123', client_secret='pi_123_secret')

    monkeypatch.setattr(payment_gateway.stripe.PaymentIntent, 'create', fake_create)
    monkeypatch.setattr(payment_gateway.config, 'STRIPE_SECRET_KEY', 'sk_test_123')

    client_secret = payment_gateway.create_payment_intent(1050)

    assert client_secret == 'pi_123_secret'
    assert captured == {
        'amount': 1050,
        'currency': 'usd',
        'payment_method_types': ['card'],
        'api_key': 'sk_test_123',
    }


def test_payment_intent_route_returns_client_secret(client, auth_header, monkeypatch: pytest.MonkeyPatch) -> None:
    amounts = []

    def fake_create_payment_intent(amount: int) -> str:
        amounts.append(amount)
        return 'secret_abc'

    monkeypatch.setattr(payment_gateway, 'create_payment_intent', fake_create_payment_intent)

    response = client.post('/create-payment-intent', json={'price': 19.99}, headers=auth_header('a@x.com'))

    assert response.status_code == 200
    assert response.json() == {'clientSecret': 'secret_abc'}
    assert amounts == [1999]


@pytest.mark.parametrize('price', [0, -5, 'free', 0.001, 1_000_000, 1e307])
def test_payment_intent_route_rejects_invalid_price(client, auth_header, price) -> None:
    response = client.post('/create-payment-intent', json={'price': price}, headers=auth_header('a@x.com'))

    assert response.status_code == 422


def test_payment_intent_route_maps_gateway_failure(client, auth_header, monkeypatch: pytest.MonkeyPatch) -> None:
    def failing_create_payment_intent(amount: int) -> str:
        raise stripe.StripeError('card network down')

    monkeypatch.setattr(payment_gateway, 'create_payment_intent', failing_create_payment_intent)

    response = client.post('/create-payment-intent', json={'price': 5}, headers=auth_header('a@x.com'))

    assert response.status_code == 500
    assert response.json() == {'detail': 'internal server error'}


def test_payment_promotes_payer_to_prouser_even_from_admin(client, db, add_user, auth_header) -> None:
    add_user('a@x.com', role='admin')

    response = client.post(
        '/payments',
        json={'email': 'a@x.com', 'amount': 500, 'transactionId': 'pi_123'},
        headers=auth_header('a@x.com'),
    )

    assert response.status_code == 200
    body = response.json()
    assert body['result']['acknowledged'] is True
    assert body['updateUserRole']['modifiedCount'] == 1
    assert db[USERS].find_one({'email': 'a@x.com'})['role'] == 'prouser'
    assert db[PAYMENTS].find_one({'transactionId': 'pi_123'})['amount'] == 500


def test_payment_for_unknown_user_is_recorded_without_promotion(client, db, auth_header) -> None:
    response = client.post('/payments', json={'email': 'ghost@x.com', 'amount': 500}, headers=auth_header('ghost@x.com'))

    assert response.json()['updateUserRole']['matchedCount'] == 0
    assert db[PAYMENTS].count_documents({}) == 1


def test_list_payments_is_admin_only_and_filters_by_email(client, db, add_user, auth_header) -> None:
    add_user('admin@x.com', role='admin')
    db[PAYMENTS].insert_many([{'email': 'a@x.com', 'amount': 500}, {'email': 'b@x.com', 'amount': 700}])

    assert client.get('/payments', headers=auth_header('a@x.com')).status_code == 403

    everything = client.get('/payments', headers=auth_header('admin@x.com')).json()
    filtered = client.get('/payments', params={'email': 'b@x.com'}, headers=auth_header('admin@x.com')).json()

    assert len(everything) == 2
    assert [payment['amount'] for payment in filtered] == [700]


@pytest.mark.parametrize('price', [float('inf'), float('nan')])
def test_payment_intent_request_rejects_non_finite_price(price: float) -> None:
    with pytest.raises(ValidationError):
        PaymentIntentRequest(price=price)


def test_payment_for_another_email_is_forbidden(client, db, add_user, auth_header) -> None:
    add_user('admin@x.com', role='admin')
    add_user('nobody@x.com')

    response = client.post('/payments', json={'email': 'admin@x.com', 'amount': 1}, headers=auth_header('nobody@x.com'))

    assert response.status_code == 403
    assert db[USERS].find_one({'email': 'admin@x.com'})['role'] == 'admin'
    assert db[PAYMENTS].count_documents({}) == 0
