import json
from decimal import Decimal

import pytest
import stripe

from belizevibes.errors import PaymentProviderError
from belizevibes.payments.stripe_client import PaymentIntentIssuer

VALID_SIGNATURE = "t=1,v1=valid"


def test_issue_intent_creates_checkout_session(issuer, fake_stripe):
    intent = issuer.issue_intent("b-1", Decimal("200.00"), "usd", customer_email="ana@example.com")

    assert intent.session_id == "cs_test_1"
    assert intent.client_secret_or_session_url.startswith("https://checkout.stripe.test/")
    assert intent.amount == 20000
    assert intent.currency == "usd"

    params = fake_stripe.created[0]
    assert params["line_items"][0]["price_data"]["unit_amount"] == 20000
    assert params["metadata"] == {"booking_id": "b-1"}
    assert params["payment_intent_data"]["metadata"] == {"booking_id": "b-1"}
    assert params["client_reference_id"] == "b-1"
    assert params["customer_email"] == "ana@example.com"
    assert params["success_url"] == "http://testserver/booking/success?booking=b-1&session_id={CHECKOUT_SESSION_ID}"
    assert params["cancel_url"] == "http://testserver/booking/cancel?booking=b-1"

def test_key_is_passed_per_call(issuer, fake_stripe):
    before = stripe.api_key
    issuer.issue_intent("b-1", Decimal("10"), "usd")
    assert fake_stripe.api_keys == ["sk_test_belizevibes"]
    assert stripe.api_key == before

@pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-5"), Decimal("0.001")])
def test_non_positive_amount_never_reaches_stripe(issuer, fake_stripe, amount):
    with pytest.raises(PaymentProviderError):
        issuer.issue_intent("b-1", amount, "usd")
    assert fake_stripe.created == []

def test_missing_key_raises_provider_error(payment_config, fake_stripe):
    issuer = PaymentIntentIssuer(payment_config.model_copy(update={"secret_key": ""}))
    with pytest.raises(PaymentProviderError):
        issuer.issue_intent("b-1", Decimal("10"), "usd")
    assert fake_stripe.created == []

def test_provider_failure_is_wrapped(issuer, fake_stripe):
    fake_stripe.fail = RuntimeError("Your card was declined")
    with pytest.raises(PaymentProviderError) as exc:
        issuer.issue_intent("b-1", Decimal("10"), "usd")
    assert exc.value.message == "Failed to initialize payment"

def test_retrieve_session_normalizes_fields(issuer, fake_stripe):
    intent = issuer.issue_intent("b-1", Decimal("10"), "usd")
    fake_stripe.pay(intent.session_id)
    session = issuer.retrieve_session(intent.session_id)
    assert session["payment_status"] == "paid"
    assert session["booking_id"] == "b-1"
    assert session["payment_intent"] == "pi_test_1"

def test_retrieve_unknown_session_raises(issuer):
    with pytest.raises(PaymentProviderError):
        issuer.retrieve_session("cs_missing")

def test_parse_event_checks_signature(issuer):
    payload = json.dumps({"type": "payment_intent.succeeded", "data": {"object": {}}}).encode()
    assert issuer.parse_event(payload, VALID_SIGNATURE)["type"] == "payment_intent.succeeded"
    with pytest.raises(PaymentProviderError):
        issuer.parse_event(payload, "t=1,v1=forged")

def test_parse_event_requires_webhook_secret(payment_config):
    issuer = PaymentIntentIssuer(payment_config.model_copy(update={"webhook_secret": ""}))
    with pytest.raises(PaymentProviderError):
        issuer.parse_event(b"{}", VALID_SIGNATURE)
