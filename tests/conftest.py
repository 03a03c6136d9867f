# tests/conftest.py
import jwt
import pytest
from fastapi.testclient import TestClient

from app.core.clients import build_clients
from app.core.config import Settings
from app.core.database import init_db
from app.core.exceptions import UpstreamError
from app.main import create_app
from app.notifications.email import EmailSender
from app.ticket.models import Ticket
from app.ticket.store import TicketStore

TOKEN_SECRET = "unit-test-signing-key-not-checked-by-default"


class RecordingMailer(EmailSender):
    def __init__(self):
        self.sent = []
        self.fail_when = None

    def send(self, to, subject, body):
        if self.fail_when is not None and self.fail_when in body:
            raise UpstreamError("Could not send email", "smtp unavailable")
        self.sent.append({"to": to, "subject": subject, "body": body})


def make_token(sub, groups=None, secret=TOKEN_SECRET):
    claims = {"sub": sub}
    if groups is not None:
        claims["cognito:groups"] = groups
    return jwt.encode(claims, secret, algorithm="HS256")


def auth_header(sub, groups=None):
    return {"Authorization": f"Bearer {make_token(sub, groups)}"}


@pytest.fixture
def settings(tmp_path):
    return Settings(
        DATABASE_URL=f"sqlite:///{tmp_path / 'tickets.db'}",
        UPLOAD_DIR=str(tmp_path / "uploads"),
        ADMIN_EMAIL="helpdesk@example.com",
        SCHEDULER_ENABLED=False,
        SMTP_HOST=None,
        AUTH_JWT_SECRET=None,
    )


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture
def clients(settings, mailer):
    c = build_clients(settings, mailer=mailer)
    init_db(c.engine)
    yield c
    c.close()


@pytest.fixture
def client(settings, clients):
    app = create_app(settings, clients)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db(clients):
    session = clients.session_factory()
    yield session
    session.close()


@pytest.fixture
def store(db):
    return TicketStore(db)


@pytest.fixture
def admin_headers():
    return auth_header("admin-1", ["ADMIN"])


@pytest.fixture
def snapshot(clients):
    """Current (ticketId, status) pairs, read through a fresh session."""

    def take():
        with clients.session_factory() as session:
            return sorted((t.ticket_id, t.status) for t in session.query(Ticket).all())

    return take


@pytest.fixture
def headers_for():
    return auth_header


@pytest.fixture
def token_for():
    return make_token
