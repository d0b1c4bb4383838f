from decimal import Decimal

import pytest

from belizevibes.errors import NotFoundError, PaymentProviderError, ReconciliationError, ValidationError
from belizevibes.payments import service as payments_service


def _event(event_type, **obj):
    return {"id": "evt_1", "type": event_type, "data": {"object": obj}}

def test_checkout_completed_and_paid_confirms(fake_db, pending_booking):
    event = _event("checkout.session.completed", id="cs_1", payment_status="paid",
                   payment_intent="pi_1", metadata={"booking_id": "b-1"})
    result = payments_service.handle_event(event)
    assert result["status"] == "ok"
    assert result["outcome"] == "confirmed"
    assert fake_db.rows("bookings")[0]["payment_intent_id"] == "pi_1"

def test_duplicate_webhook_is_idempotent(fake_db, pending_booking):
    event = _event("payment_intent.succeeded", id="pi_1", metadata={"booking_id": "b-1"})
    assert payments_service.handle_event(event)["outcome"] == "confirmed"
    assert payments_service.handle_event(event)["outcome"] == "already_confirmed"

def test_checkout_completed_unpaid_waits_for_async_payment(fake_db, pending_booking):
    event = _event("checkout.session.completed", id="cs_1", payment_status="unpaid", metadata={"booking_id": "b-1"})
    result = payments_service.handle_event(event)
    assert result["status"] == "ignored"
    assert fake_db.rows("bookings")[0]["status"] == "pending"

def test_async_payment_succeeded_uses_client_reference(fake_db, pending_booking):
    event = _event("checkout.session.async_payment_succeeded", id="cs_1", client_reference_id="b-1")
    assert payments_service.handle_event(event)["outcome"] == "confirmed"

def test_payment_failure_keeps_booking_pending(fake_db, pending_booking):
    event = _event("payment_intent.payment_failed", id="pi_1", metadata={"booking_id": "b-1"})
    result = payments_service.handle_event(event)
    assert result["outcome"] == "payment_failed"
    row = fake_db.rows("bookings")[0]
    assert row["status"] == "pending"
    assert row["payment_status"] == "failed"

def test_payment_failure_after_confirmation_changes_nothing(fake_db, pending_booking):
    payments_service.handle_event(_event("payment_intent.succeeded", id="pi_1", metadata={"booking_id": "b-1"}))
    result = payments_service.handle_event(_event("checkout.session.async_payment_failed", id="cs_1", metadata={"booking_id": "b-1"}))
    assert result["outcome"] == "unchanged"
    row = fake_db.rows("bookings")[0]
    assert (row["status"], row["payment_status"]) == ("confirmed", "paid")

def test_other_events_are_ignored(fake_db):
    assert payments_service.handle_event(_event("customer.created", id="cus_1"))["status"] == "ignored"
    assert fake_db.calls == []

def test_event_without_booking_reference_is_ignored(fake_db):
    result = payments_service.handle_event(_event("payment_intent.succeeded", id="pi_1", metadata={}))
    assert result["reason"] == "invalid_booking_reference"
    assert fake_db.calls == []

def test_start_checkout_requires_existing_booking(issuer):
    with pytest.raises(NotFoundError):
        payments_service.start_checkout("b-404", issuer)

def test_start_checkout_requires_pending_booking(issuer, pending_booking, fake_stripe):
    pending_booking.update(status="confirmed", payment_status="paid")
    with pytest.raises(ValidationError):
        payments_service.start_checkout("b-1", issuer)
    assert fake_stripe.created == []

def test_start_checkout_records_payment_session(issuer, pending_booking, fake_db):
    result = payments_service.start_checkout("b-1", issuer)
    assert result.payment.amount == 20000
    assert result.booking.id == "b-1"
    sessions = fake_db.rows("payment_sessions")
    assert sessions[0]["booking_id"] == "b-1"
    assert sessions[0]["stripe_session_id"] == result.payment.session_id

def test_provider_failure_leaves_booking_pending(issuer, fake_db, fake_stripe, booking_form):
    fake_db.add_adventure("tour-42", 100)
    fake_stripe.fail = RuntimeError("api.stripe.com unreachable")
    with pytest.raises(PaymentProviderError):
        payments_service.create_booking_and_checkout(booking_form, issuer)
    row = fake_db.rows("bookings")[0]
    assert (row["status"], row["payment_status"]) == ("pending", "pending")

def test_create_booking_and_checkout_issues_after_insert(issuer, fake_db, fake_stripe, booking_form):
    fake_db.add_adventure("tour-42", 100)
    result = payments_service.create_booking_and_checkout(booking_form, issuer, user_id="u-1")
    assert result.booking.total_amount == Decimal("200.00")
    assert result.booking.user_id == "u-1"
    assert fake_stripe.created[0]["metadata"]["booking_id"] == result.booking.id
    assert result.payment.booking_id == result.booking.id

def test_redirect_with_paid_session_confirms(issuer, fake_stripe, pending_booking):
    intent = issuer.issue_intent("b-1", Decimal("200.00"), "usd")
    fake_stripe.pay(intent.session_id)
    result = payments_service.confirm_from_redirect("b-1", intent.session_id, issuer)
    assert result.outcome == "confirmed"
    assert result.booking.payment_reference == "pi_test_1"

def test_redirect_with_unpaid_session_is_refused(issuer, fake_db, pending_booking):
    intent = issuer.issue_intent("b-1", Decimal("200.00"), "usd")
    with pytest.raises(ReconciliationError):
        payments_service.confirm_from_redirect("b-1", intent.session_id, issuer)
    assert fake_db.rows("bookings")[0]["status"] == "pending"

def test_redirect_with_session_of_another_booking_is_refused(issuer, fake_stripe, pending_booking):
    intent = issuer.issue_intent("b-2", Decimal("50.00"), "usd")
    fake_stripe.pay(intent.session_id)
    with pytest.raises(ReconciliationError):
        payments_service.confirm_from_redirect("b-1", intent.session_id, issuer)

def test_redirect_without_session_leaves_booking_pending(issuer, fake_db, pending_booking):
    with pytest.raises(ReconciliationError):
        payments_service.confirm_from_redirect("b-1", None, issuer)
    row = fake_db.rows("bookings")[0]
    assert (row["status"], row["payment_status"]) == ("pending", "pending")

def test_redirect_with_paid_session_without_reference_is_refused(issuer, fake_db, fake_stripe, pending_booking):
    fake_stripe.sessions["cs_other"] = {
        "id": "cs_other", "payment_status": "paid", "status": "complete",
        "metadata": {}, "client_reference_id": None, "payment_intent": "pi_other",
    }
    with pytest.raises(ReconciliationError):
        payments_service.confirm_from_redirect("b-1", "cs_other", issuer)
    assert fake_db.rows("bookings")[0]["status"] == "pending"
