import os

os.environ.setdefault("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS", "1")

from datetime import datetime, timezone
from typing import Any, Dict, Generator, List, Optional

import pytest
import stripe
from fastapi.testclient import TestClient

from belizevibes.app_setup.factory import create_app
from belizevibes.payments.config import PaymentConfig
from belizevibes.payments.stripe_client import PaymentIntentIssuer

WEBHOOK_SECRET = "whsec_test_secret"
VALID_SIGNATURE = "t=1,v1=valid"

# Marquage automatique selon le dossier
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "tests/unit/" in nodeid:
            item.add_marker(pytest.mark.unit)
        elif "tests/integration/" in nodeid:
            item.add_marker(pytest.mark.integration)
        elif "tests/functional/" in nodeid:
            item.add_marker(pytest.mark.functional)


class _Resp:
    def __init__(self, data=None, count=None):
        self.data = data
        self.count = count


class FakeQuery:
    """Query builder PostgREST minimal: select/insert/update + filtres eq + limit."""

    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table_name = table
        self.op = "select"
        self.values: Dict[str, Any] = {}
        self.filters: List[tuple] = []
        self._limit: Optional[int] = None

    def select(self, columns: str = "*"):
        self.op = "select"
        return self

    def insert(self, row: Dict[str, Any]):
        self.op = "insert"
        self.values = dict(row)
        return self

    def update(self, values: Dict[str, Any]):
        self.op = "update"
        self.values = dict(values)
        return self

    def eq(self, column: str, value: Any):
        self.filters.append((column, value))
        return self

    def limit(self, n: int):
        self._limit = n
        return self

    def execute(self):
        self.db.calls.append((self.table_name, self.op, dict(self.values), list(self.filters)))
        failure = self.db.failures.get((self.table_name, self.op))
        if failure is not None:
            raise failure
        rows = self.db.tables.setdefault(self.table_name, [])
        if self.op == "insert":
            row = dict(self.values)
            self.db.sequence += 1
            row.setdefault("id", f"b-{self.db.sequence}")
            row.setdefault("created_at", datetime.now(timezone.utc).isoformat())
            rows.append(row)
            return _Resp([dict(row)])
        matched = [r for r in rows if all(r.get(c) == v for c, v in self.filters)]
        if self.op == "update":
            for r in matched:
                r.update(self.values)
            return _Resp([dict(r) for r in matched])
        if self._limit is not None:
            matched = matched[: self._limit]
        return _Resp([dict(r) for r in matched])


class FakeSupabase:
    """Base Supabase en mémoire (tables -> listes de lignes)."""

    def __init__(self):
        self.tables: Dict[str, List[Dict[str, Any]]] = {}
        self.failures: Dict[tuple, Exception] = {}
        self.calls: List[tuple] = []
        self.sequence = 0

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def rows(self, name: str) -> List[Dict[str, Any]]:
        return self.tables.get(name, [])

    def add_adventure(self, adventure_id: str, price, title: str = "", is_active: bool = True):
        self.tables.setdefault("adventures", []).append(
            {"id": adventure_id, "title": title or adventure_id, "price_per_person": price, "is_active": is_active}
        )

    def add_booking(self, **row):
        self.tables.setdefault("bookings", []).append(row)
        return row


class FakeStripe:
    """Remplace stripe.checkout.Session et stripe.Webhook.construct_event."""

    def __init__(self):
        self.created: List[Dict[str, Any]] = []
        self.api_keys: List[str] = []
        self.sessions: Dict[str, Dict[str, Any]] = {}
        self.fail: Optional[Exception] = None

    def create(self, api_key=None, **params):
        if self.fail is not None:
            raise self.fail
        self.api_keys.append(api_key)
        self.created.append(params)
        n = len(self.created)
        session = {
            "id": f"cs_test_{n}",
            "url": f"https://checkout.stripe.test/pay/cs_test_{n}",
            "payment_status": "unpaid",
            "status": "open",
            "metadata": params.get("metadata") or {},
            "client_reference_id": params.get("client_reference_id"),
            "payment_intent": f"pi_test_{n}",
        }
        self.sessions[session["id"]] = session
        return session

    def retrieve(self, session_id, api_key=None, **params):
        if self.fail is not None:
            raise self.fail
        if session_id not in self.sessions:
            raise ValueError(f"No such checkout.session: {session_id}")
        return self.sessions[session_id]

    def pay(self, session_id: str) -> Dict[str, Any]:
        session = self.sessions[session_id]
        session["payment_status"] = "paid"
        session["status"] = "complete"
        return session

    @staticmethod
    def construct_event(payload, sig_header, secret):
        if secret != WEBHOOK_SECRET or sig_header != VALID_SIGNATURE:
            raise ValueError("No signatures found matching the expected signature for payload")
        return {}


@pytest.fixture()
def payment_config() -> PaymentConfig:
    return PaymentConfig(
        mode="test",
        secret_key="sk_test_belizevibes",
        credential_source="STRIPE_SECRET_KEY_TEST",
        webhook_secret=WEBHOOK_SECRET,
        currency="usd",
        success_url="http://testserver/booking/success",
        cancel_url="http://testserver/booking/cancel",
    )

@pytest.fixture()
def issuer(payment_config) -> PaymentIntentIssuer:
    return PaymentIntentIssuer(payment_config)

@pytest.fixture()
def app(payment_config):
    return create_app(payment_config=payment_config)

@pytest.fixture()
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()

# Base Supabase en mémoire pour tous les tests (clients anon et service-role)
@pytest.fixture(autouse=True)
def fake_db(monkeypatch) -> FakeSupabase:
    db = FakeSupabase()
    monkeypatch.setattr("belizevibes.infra.supabase_client.get_supabase", lambda: db)
    monkeypatch.setattr("belizevibes.infra.supabase_client.get_service_supabase", lambda: db)
    return db

# Aucun appel réseau vers Stripe
@pytest.fixture(autouse=True)
def fake_stripe(monkeypatch) -> FakeStripe:
    fake = FakeStripe()
    monkeypatch.setattr(stripe.checkout.Session, "create", fake.create)
    monkeypatch.setattr(stripe.checkout.Session, "retrieve", fake.retrieve)
    monkeypatch.setattr(stripe.Webhook, "construct_event", fake.construct_event)
    return fake

@pytest.fixture()
def booking_form() -> Dict[str, Any]:
    return {
        "adventureId": "tour-42",
        "bookingDate": "2025-03-10",
        "travelerName": "Ana Smith",
        "email": "ana@example.com",
        "phone": "+501 600 0000",
        "numberOfTravelers": 2,
        "specialRequests": "Vegetarian lunch",
    }

@pytest.fixture()
def pending_booking(fake_db) -> Dict[str, Any]:
    """Réservation 'b-1' en attente de paiement (200.00 usd)."""
    return fake_db.add_booking(
        id="b-1",
        adventure_id="tour-42",
        booking_date="2025-03-10",
        lead_guest_name="Ana Smith",
        lead_guest_email="ana@example.com",
        lead_guest_phone="",
        participants=2,
        special_requests=None,
        base_price="100.00",
        total_amount="200.00",
        currency="usd",
        status="pending",
        payment_status="pending",
        created_at="2025-01-05T10:00:00+00:00",
    )
