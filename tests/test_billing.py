"""Billing: customer linkage, checkout and webhook reconciliation"""
import asyncio
import itertools
from datetime import datetime

import pytest
import stripe

from app.db import AsyncSessionLocal, SessionLocal
from app.models import User
from app.services.exceptions import NotFoundError
from app.services.stripe import StripeNotConfiguredError, stripe_service, stripe_settings
from app.services.stripe.stripe_service import map_stripe_status
from tests.conftest import auth_headers, create_user, load_user_sync, stripe_object

CHECKOUT = "/api/v1/billing/checkout"
WEBHOOK = "/api/v1/billing/webhooks/stripe"


@pytest.fixture
def stripe_configured(monkeypatch):
    monkeypatch.setattr(stripe_settings, "stripe_secret_key", "sk_test_dummy")
    monkeypatch.setattr(stripe_settings, "stripe_webhook_secret", "whsec_dummy")
    monkeypatch.setattr(stripe_service, "_initialized", False)


@pytest.fixture
def fake_stripe(monkeypatch, stripe_configured):
    """Record Stripe calls instead of making them."""
    calls = {"customers": [], "sessions": []}
    ids = itertools.count(1)

    def create_customer(**kwargs):
        calls["customers"].append(kwargs)
        return stripe_object(id=f"cus_{next(ids)}")

    def create_session(**kwargs):
        calls["sessions"].append(kwargs)
        return stripe_object(id="cs_test_1", url="https://checkout.stripe.com/c/pay/cs_test_1")

    monkeypatch.setattr(stripe.Customer, "create", create_customer)
    monkeypatch.setattr(stripe.checkout.Session, "create", create_session)
    return calls


@pytest.mark.parametrize(
    "stripe_status,expected",
    [
        ("active", "active"),
        ("trialing", "active"),
        ("past_due", "past_due"),
        ("unpaid", "past_due"),
        ("canceled", "canceled"),
        ("incomplete_expired", "canceled"),
        ("incomplete", "none"),
        (None, "none"),
    ],
)
def test_map_stripe_status(stripe_status, expected):
    assert map_stripe_status(stripe_status).value == expected


@pytest.mark.asyncio
async def test_ensure_customer_creates_once(db, free_user, fake_stripe):
    first = await stripe_service.ensure_customer(free_user, db)
    second = await stripe_service.ensure_customer(free_user, db)

    assert first == second == "cus_1"
    assert len(fake_stripe["customers"]) == 1
    assert fake_stripe["customers"][0]["idempotency_key"] == f"customer-create-user-{free_user.id}"
    assert load_user_sync(free_user.id).stripe_customer_id == "cus_1"


@pytest.mark.asyncio
async def test_ensure_customer_keeps_the_first_linked_id(db, free_user, monkeypatch, stripe_configured):
    user_id = free_user.id

    def create_customer(**kwargs):
        # Another request links its customer while this one talks to Stripe
        with SessionLocal() as session:
            session.get(User, user_id).stripe_customer_id = "cus_winner"
            session.commit()
        return stripe_object(id="cus_loser")

    monkeypatch.setattr(stripe.Customer, "create", create_customer)

    result = await stripe_service.ensure_customer(free_user, db)

    assert result == "cus_winner"
    assert load_user_sync(user_id).stripe_customer_id == "cus_winner"


@pytest.mark.asyncio
async def test_concurrent_ensure_customer_persists_one_id(fake_stripe):
    user_id = create_user("racer")

    async def attempt():
        async with AsyncSessionLocal() as session:
            user = await session.get(User, user_id)
            return await stripe_service.ensure_customer(user, session)

    first, second = await asyncio.gather(attempt(), attempt())

    stored = load_user_sync(user_id).stripe_customer_id
    assert first == second == stored
    assert stored in ("cus_1", "cus_2")


@pytest.mark.asyncio
async def test_ensure_customer_requires_configuration(db, free_user, monkeypatch):
    monkeypatch.setattr(stripe_settings, "stripe_secret_key", "")
    monkeypatch.setattr(stripe_service, "_initialized", False)

    with pytest.raises(StripeNotConfiguredError):
        await stripe_service.ensure_customer(free_user, db)


def test_checkout_returns_redirect_url(client, fake_stripe):
    user_id = create_user("upgrader")

    response = client.post(CHECKOUT, json={"planReference": "price_pro"}, headers=auth_headers("upgrader"))

    assert response.status_code == 200
    assert response.json() == {"redirectUrl": "https://checkout.stripe.com/c/pay/cs_test_1"}

    session_kwargs = fake_stripe["sessions"][0]
    assert session_kwargs["customer"] == "cus_1"
    assert session_kwargs["mode"] == "subscription"
    assert session_kwargs["line_items"] == [{"price": "price_pro", "quantity": 1}]
    assert load_user_sync(user_id).stripe_customer_id == "cus_1"


def test_second_checkout_reuses_customer(client, fake_stripe):
    create_user("repeat")
    headers = auth_headers("repeat")

    client.post(CHECKOUT, json={"planReference": "price_pro"}, headers=headers)
    client.post(CHECKOUT, json={"planReference": "price_pro"}, headers=headers)

    assert len(fake_stripe["customers"]) == 1
    assert [s["customer"] for s in fake_stripe["sessions"]] == ["cus_1", "cus_1"]


@pytest.mark.parametrize("body", [{}, {"planReference": ""}, {"planReference": "   "}])
def test_checkout_requires_plan_reference(client, fake_stripe, body):
    create_user("planless")

    response = client.post(CHECKOUT, json=body, headers=auth_headers("planless"))

    assert response.status_code == 400
    assert fake_stripe["sessions"] == []


def test_checkout_requires_authentication(client, fake_stripe):
    response = client.post(CHECKOUT, json={"planReference": "price_pro"})
    assert response.status_code == 401


def test_checkout_without_stripe_configuration(client, monkeypatch):
    create_user("early")
    monkeypatch.setattr(stripe_settings, "stripe_secret_key", "")
    monkeypatch.setattr(stripe_service, "_initialized", False)

    response = client.post(CHECKOUT, json={"planReference": "price_pro"}, headers=auth_headers("early"))

    assert response.status_code == 503


def test_checkout_stripe_failure_is_generic(client, fake_stripe, monkeypatch):
    create_user("unlucky")

    def failing_session(**kwargs):
        raise stripe.StripeError("No such price: 'price_typo'")

    monkeypatch.setattr(stripe.checkout.Session, "create", failing_session)

    response = client.post(CHECKOUT, json={"planReference": "price_typo"}, headers=auth_headers("unlucky"))

    assert response.status_code == 500
    assert response.json()["error"]["message"] == "An unexpected error occurred"
    assert "price_typo" not in response.text


def _deliver(client, monkeypatch, event_type, obj):
    event = stripe_object(type=event_type, data=stripe_object(object=obj))
    monkeypatch.setattr(stripe_service, "construct_webhook_event", lambda payload, signature: event)
    return client.post(WEBHOOK, content=b"{}", headers={"stripe-signature": "t=1,v1=sig"})


def test_webhook_requires_signature(client):
    response = client.post(WEBHOOK, content=b"{}")
    assert response.status_code == 400


def test_webhook_rejects_bad_signature(client, monkeypatch):
    def reject(payload, signature):
        raise stripe.SignatureVerificationError("No signatures found", signature)

    monkeypatch.setattr(stripe_service, "construct_webhook_event", reject)

    response = client.post(WEBHOOK, content=b"{}", headers={"stripe-signature": "t=1,v1=forged"})

    assert response.status_code == 400
    assert response.json()["error"]["message"] == "Invalid signature"


def test_subscription_lifecycle_drives_tier(client, monkeypatch):
    user_id = create_user("subscriber", stripe_customer_id="cus_sub")
    headers = auth_headers("subscriber")
    assert client.get("/api/v1/auth/me", headers=headers).json()["tier"] == "free"

    subscription = stripe_object(
        id="sub_1", customer="cus_sub", status="active", current_period_end=1735689600
    )
    response = _deliver(client, monkeypatch, "customer.subscription.updated", subscription)
    assert response.json() == {"status": "success", "handled": True}

    user = load_user_sync(user_id)
    assert user.subscription_status == "active"
    assert user.stripe_subscription_id == "sub_1"
    assert user.current_period_end == datetime(2025, 1, 1)
    assert client.get("/api/v1/auth/me", headers=headers).json()["tier"] == "pro"

    _deliver(client, monkeypatch, "invoice.payment_failed", stripe_object(customer="cus_sub"))
    assert load_user_sync(user_id).subscription_status == "past_due"
    assert client.get("/api/v1/auth/me", headers=headers).json()["tier"] == "free"

    _deliver(client, monkeypatch, "customer.subscription.deleted", subscription)
    user = load_user_sync(user_id)
    assert user.subscription_status == "canceled"
    assert user.stripe_subscription_id is None


def test_checkout_completed_activates_account(client, monkeypatch):
    user_id = create_user("finisher", stripe_customer_id="cus_fin")

    session = stripe_object(mode="subscription", customer="cus_fin", subscription="sub_fin")
    _deliver(client, monkeypatch, "checkout.session.completed", session)

    user = load_user_sync(user_id)
    assert user.subscription_status == "active"
    assert user.stripe_subscription_id == "sub_fin"


def test_period_end_read_from_subscription_items(client, monkeypatch):
    user_id = create_user("itemized", stripe_customer_id="cus_items")

    subscription = stripe_object(
        id="sub_items",
        customer="cus_items",
        status="trialing",
        items=stripe_object(data=[stripe_object(current_period_end=1735689600)]),
    )
    _deliver(client, monkeypatch, "customer.subscription.created", subscription)

    user = load_user_sync(user_id)
    assert user.subscription_status == "active"
    assert user.current_period_end == datetime(2025, 1, 1)


def test_unrelated_events_are_acknowledged(client, monkeypatch):
    response = _deliver(client, monkeypatch, "charge.refunded", stripe_object(customer="cus_x"))

    assert response.status_code == 200
    assert response.json()["handled"] is False


def test_subscription_endpoint(client):
    create_user("status_check", status="past_due")

    response = client.get("/api/v1/billing/subscription", headers=auth_headers("status_check"))

    assert response.status_code == 200
    assert response.json()["status"] == "past_due"
    assert response.json()["tier"] == "free"


@pytest.mark.asyncio
async def test_ensure_customer_for_vanished_account(db, free_user, fake_stripe, monkeypatch):
    async def account_gone(user_id, session):
        return None

    monkeypatch.setattr(stripe_service, "_load_user", account_gone)

    with pytest.raises(NotFoundError):
        await stripe_service.ensure_customer(free_user, db)


def test_checkout_for_vanished_account_is_not_found(client, fake_stripe, monkeypatch):
    create_user("vanishing")

    async def account_gone(user_id, session):
        return None

    monkeypatch.setattr(stripe_service, "_load_user", account_gone)

    response = client.post(CHECKOUT, json={"planReference": "price_pro"}, headers=auth_headers("vanishing"))

    assert response.status_code == 404
    assert response.json()["error"] == {"code": "NOT_FOUND", "message": "Account not found"}
    assert fake_stripe["sessions"] == []


@pytest.mark.parametrize("missing", ["stripe_secret_key", "stripe_webhook_secret"])
def test_webhook_without_stripe_configuration(client, stripe_configured, monkeypatch, missing):
    monkeypatch.setattr(stripe_settings, missing, "")

    response = client.post(WEBHOOK, content=b"{}", headers={"stripe-signature": "t=1,v1=sig"})

    assert response.status_code == 503


def test_webhook_with_unverifiable_signature(client, stripe_configured):
    response = client.post(WEBHOOK, content=b"{}", headers={"stripe-signature": "t=1,v1=sig"})

    assert response.status_code == 400
