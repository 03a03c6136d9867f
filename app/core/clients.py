# app/core/clients.py
from dataclasses import dataclass
from pathlib import Path

from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from app.auth.tokens import AuthContextResolver, HmacTokenVerifier, TokenVerifier, UnverifiedTokenDecoder
from app.core.config import Settings
from app.core.database import create_db_engine, create_session_factory
from app.notifications.dispatcher import NotificationDispatcher
from app.notifications.email import EmailSender, LoggingEmailSender, SmtpEmailSender
from app.notifications.queue import TicketEventQueue
from app.storage.blobs import BlobStore, LocalBlobStore


@dataclass
class Clients:
    """Collaborator handles built once at startup and passed to each component."""

    engine: Engine
    session_factory: sessionmaker
    auth_resolver: AuthContextResolver
    blob_store: BlobStore
    event_queue: TicketEventQueue
    dispatcher: NotificationDispatcher

    def close(self) -> None:
        self.engine.dispose()


def build_token_verifier(settings: Settings) -> TokenVerifier:
    if settings.AUTH_JWT_SECRET:
        return HmacTokenVerifier(settings.AUTH_JWT_SECRET, settings.jwt_algorithms)
    return UnverifiedTokenDecoder()


def build_mailer(settings: Settings) -> EmailSender:
    if not settings.SMTP_HOST:
        return LoggingEmailSender()
    return SmtpEmailSender(
        host=settings.SMTP_HOST,
        port=settings.SMTP_PORT,
        sender=settings.ADMIN_EMAIL,
        username=settings.SMTP_USERNAME,
        password=settings.SMTP_PASSWORD,
        use_tls=settings.SMTP_USE_TLS,
        timeout=settings.SMTP_TIMEOUT,
    )


def build_clients(
    settings: Settings,
    mailer: EmailSender | None = None,
    blob_store: BlobStore | None = None,
    token_verifier: TokenVerifier | None = None,
) -> Clients:
    engine = create_db_engine(settings.DATABASE_URL)
    session_factory = create_session_factory(engine)
    mailer = mailer or build_mailer(settings)
    return Clients(
        engine=engine,
        session_factory=session_factory,
        auth_resolver=AuthContextResolver(
            token_verifier or build_token_verifier(settings),
            groups_claim=settings.AUTH_GROUPS_CLAIM,
            admin_group=settings.AUTH_ADMIN_GROUP,
        ),
        blob_store=blob_store or LocalBlobStore(Path(settings.UPLOAD_DIR), settings.BLOB_BASE_URL),
        event_queue=TicketEventQueue(session_factory),
        dispatcher=NotificationDispatcher(mailer, settings.ADMIN_EMAIL, session_factory),
    )
