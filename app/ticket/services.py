# app/ticket/services.py
import base64
import binascii
import logging
import time
import uuid

from app.auth.dependencies import require_admin
from app.auth.tokens import AuthContext
from app.core.exceptions import NotFoundError, UpstreamError, ValidationError
from app.notifications.queue import TicketEventQueue
from app.storage.blobs import BlobStore
from app.ticket.models import TRANSITION_TARGETS, Ticket, TicketStatus
from app.ticket.schemas import TicketCreate, TicketCreatedEvent
from app.ticket.store import TicketStore

logger = logging.getLogger(__name__)


def decode_attachment(encoded: str) -> bytes:
    # Line breaks and missing padding are tolerated, other stray characters are not
    cleaned = "".join(encoded.split())
    cleaned += "=" * (-len(cleaned) % 4)
    try:
        return base64.b64decode(cleaned, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValidationError("Attachment is not valid base64", str(exc)) from exc


def create_ticket(
    store: TicketStore,
    blobs: BlobStore,
    queue: TicketEventQueue,
    caller: AuthContext,
    payload: TicketCreate,
    default_content_type: str,
) -> Ticket:
    # Decode before any side effect so a bad attachment leaves nothing behind
    attachment_bytes = decode_attachment(payload.attachment) if payload.attachment else None

    ticket = Ticket(
        ticket_id=str(uuid.uuid4()),
        user_sub=caller.subject,
        created_at=int(time.time() * 1000),
        title=payload.title,
        description=payload.description,
        status=TicketStatus.NEW.value,
    )
    if attachment_bytes is not None:
        content_type = payload.attachment_content_type or default_content_type
        ticket.attachment = blobs.store(attachment_bytes, content_type)

    store.put(ticket)
    logger.info("Ticket %s created by %s", ticket.ticket_id, caller.subject)

    # Persist first, then publish. A failed publish leaves the ticket in place.
    event = TicketCreatedEvent(ticket_id=ticket.ticket_id, title=ticket.title, description=ticket.description)
    try:
        queue.publish(event)
    except UpstreamError as exc:
        logger.error("Ticket %s saved but creation event was not published: %s", ticket.ticket_id, exc)
        raise UpstreamError("Could not create ticket", exc.error) from exc
    return ticket


def update_status(store: TicketStore, caller: AuthContext, ticket_id: str, status: TicketStatus) -> TicketStatus:
    if not ticket_id:
        raise ValidationError(error="ticketId must not be empty")
    if status not in TRANSITION_TARGETS:
        raise ValidationError(error=f"status {status.value} is not a valid target")
    require_admin(caller)

    # No guard on the current status: any ticket may move to OPEN or CLOSED
    if not store.update_status(ticket_id, status):
        raise NotFoundError(error=f"no ticket with id {ticket_id}")
    logger.info("Ticket %s set to %s by %s", ticket_id, status.value, caller.subject)
    return status
