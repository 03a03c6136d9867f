# app/notifications/dispatcher.py
import logging
from datetime import datetime, timedelta
from typing import Iterable

from sqlalchemy.orm import sessionmaker

from app.notifications.email import EmailSender
from app.notifications.queue import QueuedEvent, TicketEventQueue
from app.ticket.models import TicketStatus
from app.ticket.schemas import TicketCreatedEvent
from app.ticket.store import TicketStore

logger = logging.getLogger(__name__)

NEW_TICKET_SUBJECT = "New ticket in your helpdesk"
REMINDER_SUBJECT = "Unopened tickets from previous days"


def start_of_previous_day(now: datetime) -> datetime:
    """Midnight at the start of the calendar day before ``now``."""
    return (now - timedelta(days=1)).replace(hour=0, minute=0, second=0, microsecond=0)


def format_new_ticket_email(event: TicketCreatedEvent) -> str:
    return (
        "A ticket was added to your helpdesk\n"
        f"ID: {event.ticket_id}\n"
        f"Title: {event.title}\n"
        f"{event.description}"
    )


class NotificationDispatcher:
    """Sends admin emails for new tickets and the daily stale-ticket digest.

    Nothing here raises to the caller: both paths are fire-and-forget, so
    failures are logged and the run carries on.
    """

    def __init__(self, mailer: EmailSender, admin_email: str, session_factory: sessionmaker):
        self.mailer = mailer
        self.admin_email = admin_email
        self.session_factory = session_factory

    def process_creation_events(self, events: Iterable[QueuedEvent | TicketCreatedEvent | str]) -> int:
        sent = 0
        for raw in events:
            try:
                event = _decode_event(raw)
                self.mailer.send(self.admin_email, NEW_TICKET_SUBJECT, format_new_ticket_email(event))
            except Exception:
                logger.exception("Failed to send new ticket notification for %r", raw)
                continue
            sent += 1
            logger.info("New ticket notification sent for %s", event.ticket_id)
        return sent

    def daily_ticket_reminder(self, now: datetime | None = None) -> bool:
        """Email a digest of NEW tickets created before yesterday. Returns True if sent."""
        cutoff = start_of_previous_day(now or datetime.now())
        cutoff_ms = int(cutoff.timestamp() * 1000)

        try:
            with self.session_factory() as db:
                stale = TicketStore(db).get_by_status(TicketStatus.NEW, created_before=cutoff_ms)
                lines = [f"ID: {t.ticket_id} - {t.title}" for t in stale]

            if not lines:
                logger.info("No unopened tickets older than %s", cutoff.isoformat())
                return False

            body = "These tickets have not been opened yet:\n" + "\n".join(lines)
            self.mailer.send(self.admin_email, REMINDER_SUBJECT, body)
        except Exception:
            logger.exception("Daily ticket reminder failed")
            return False

        logger.info("Daily ticket reminder sent with %d tickets", len(lines))
        return True


def consume_ticket_events(queue: TicketEventQueue, dispatcher: NotificationDispatcher, batch_size: int = 10) -> int:
    """Deliver one batch from the queue to the dispatcher and acknowledge it."""
    batch = queue.receive(batch_size)
    if not batch:
        return 0
    dispatcher.process_creation_events(batch)
    queue.ack([e.id for e in batch])
    return len(batch)


def _decode_event(raw: QueuedEvent | TicketCreatedEvent | str) -> TicketCreatedEvent:
    if isinstance(raw, TicketCreatedEvent):
        return raw
    body = raw.body if isinstance(raw, QueuedEvent) else raw
    return TicketCreatedEvent.model_validate_json(body)
