"""
Shared pytest fixtures.

Each test gets a fresh SQLite file database (file-backed so worker threads
share it), a notifier that records instead of sending, and helpers for
bearer tokens.
"""
import pytest

from app import create_app
from config import Config
from models import db
from security.tokens import issue_token
from services.notifications import Notifier

CATALOG = [
    {"name": "Cleaning", "slots": ["9am", "10am"], "price": 50},
    {"name": "Whitening", "slots": ["9am", "11am", "1pm"], "price": 120},
]


class RecordingNotifier(Notifier):
    """Keeps dispatched notifications in memory instead of queueing them."""

    def __init__(self):
        super().__init__()
        self.sent = []

    def init_app(self, app):
        self.app = app
        app.extensions["notifier"] = self

    def dispatch(self, kind, payload):
        self.sent.append((kind, dict(payload)))
        return None

    def of_kind(self, kind):
        return [payload for k, payload in self.sent if k == kind]


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def app(tmp_path, notifier):
    config = type("TestConfig", (Config,), {
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite:///" + str(tmp_path / "portal_test.db"),
        "ACCESS_TOKEN_SECRET": "test-token-secret",
        "STRIPE_SECRET_KEY": "sk_test_dummy",
        "SMTP_HOST": None,
        "CORS_ORIGINS": ["http://localhost:3000"],
    })
    app = create_app(config, notifier=notifier)
    with app.app_context():
        db.create_all()
        app.extensions["store"].add_services(CATALOG)
    yield app
    app.extensions["store"].close()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def store(app):
    return app.extensions["store"]


@pytest.fixture
def auth(app):
    """auth("a@x.com") -> headers carrying a valid bearer token for that email."""
    def _headers(email):
        with app.app_context():
            token = issue_token(email)
        return {"Authorization": f"Bearer {token}"}
    return _headers


@pytest.fixture
def admin_headers(app, store, auth):
    from models.user import Role

    with app.app_context():
        store.upsert_user("admin@x.com", "Admin")
        store.set_role("admin@x.com", Role.ADMIN)
    return auth("admin@x.com")


def booking_payload(**overrides):
    payload = {
        "treatment": "Cleaning",
        "date": "2024-01-05",
        "slot": "10am",
        "patient": "a@x.com",
        "patientName": "Alice",
    }
    payload.update(overrides)
    return payload
