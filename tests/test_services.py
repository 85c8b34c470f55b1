import pytest

from towgo import dependencies
from towgo.database import Payment, User
from towgo.main import app
from towgo.services.stripe_client import StripeError

PRIORITY_TOW = {"name": "Priority Tow", "description": "Skip the queue", "price": 49.99}


class DummyStripe:
    is_configured = True

    def __init__(self, error=None):
        self.error = error
        self.sessions = []

    async def create_checkout_session(self, **kwargs):
        self.sessions.append(kwargs)
        if self.error is not None:
            raise self.error
        return {"id": "cs_test_123", "url": "https://checkout.stripe.com/c/pay/cs_test_123"}


@pytest.fixture
def stripe(client):
    dummy = DummyStripe()
    app.dependency_overrides[dependencies.get_stripe_client] = lambda: dummy
    return dummy


def create_service(client, **overrides):
    response = client.post("/api/services", json={**PRIORITY_TOW, **overrides})
    assert response.status_code == 201
    return response.json()


def test_service_catalog_crud(client):
    created = create_service(client, priceId="price_123")
    assert created["priceId"] == "price_123"
    assert created["isActive"] is True

    hidden = create_service(client, name="Retired plan", isActive=False)

    listed = client.get("/api/services").json()
    assert [s["id"] for s in listed] == [created["id"]]

    assert client.get(f"/api/services/{hidden['id']}").json()["name"] == "Retired plan"
    assert client.get("/api/services/999").status_code == 404

    updated = client.patch(f"/api/services/{created['id']}", json={"price": 59.99}).json()
    assert updated["price"] == 59.99
    assert updated["name"] == "Priority Tow"
    assert client.patch("/api/services/999", json={"price": 1}).status_code == 404


def test_service_price_must_be_positive(client):
    assert client.post("/api/services", json={**PRIORITY_TOW, "price": 0}).status_code == 422


def test_checkout_requires_stripe(client):
    service = create_service(client)
    payload = {
        "serviceId": service["id"],
        "successUrl": "https://towgo.example.com/success",
        "cancelUrl": "https://towgo.example.com/cancel",
    }
    assert client.post("/api/checkout", json=payload).status_code == 503


def test_checkout_records_pending_payment(client, stripe):
    service = create_service(client)
    payload = {
        "serviceId": service["id"],
        "successUrl": "https://towgo.example.com/success",
        "cancelUrl": "https://towgo.example.com/cancel",
    }

    response = client.post("/api/checkout", json=payload)

    assert response.status_code == 200
    assert response.json() == {
        "id": "cs_test_123",
        "url": "https://checkout.stripe.com/c/pay/cs_test_123",
    }
    session = stripe.sessions[0]
    assert session["amount"] == 49.99
    assert session["metadata"] == {"userId": "guest", "serviceId": str(service["id"])}

    status = client.get("/api/payment-status/cs_test_123").json()
    assert status == {"sessionId": "cs_test_123", "status": "pending", "amount": 49.99}

    [payment] = client.get("/api/payments").json()
    assert payment["serviceId"] == service["id"]
    assert client.get(f"/api/payments/{payment['id']}").status_code == 200


def test_checkout_unknown_service(client, stripe):
    payload = {"serviceId": 42, "successUrl": "https://a", "cancelUrl": "https://b"}
    assert client.post("/api/checkout", json=payload).status_code == 404
    assert stripe.sessions == []


def test_checkout_stripe_failure(client, stripe):
    stripe.error = StripeError("Stripe rejected checkout session: 400")
    service = create_service(client)
    payload = {"serviceId": service["id"], "successUrl": "https://a", "cancelUrl": "https://b"}

    assert client.post("/api/checkout", json=payload).status_code == 502
    assert client.get("/api/payments").json() == []


def test_payments_of_other_users_are_hidden(client, db_session):
    service = create_service(client)
    db_session.add(User(id="someone-else"))
    payment = Payment(user_id="someone-else", service_id=service["id"], amount=10.0, session_id="cs_other")
    db_session.add(payment)
    db_session.commit()

    assert client.get("/api/payments").json() == []
    assert client.get(f"/api/payments/{payment.id}").status_code == 403
    assert client.get("/api/payments/999").status_code == 404
    assert client.get("/api/payment-status/cs_missing").status_code == 404
