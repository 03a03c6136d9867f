# app/notifications/queue.py
"""Ticket event queue backed by a database table.

Delivery is at-least-once: ``receive`` hands out undelivered rows and only
``ack`` marks them done, so a batch that is never acknowledged comes back
on the next poll.
"""
import logging
import time
from dataclasses import dataclass

from sqlalchemy import BigInteger, Column, Integer, Text, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from app.core.database import Base
from app.core.exceptions import UpstreamError
from app.ticket.schemas import TicketCreatedEvent

logger = logging.getLogger(__name__)


class QueuedEventRow(Base):
    __tablename__ = "ticket_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    payload = Column(Text, nullable=False)
    enqueued_at = Column(BigInteger, nullable=False)
    delivered_at = Column(BigInteger, nullable=True, index=True)
    attempts = Column(Integer, nullable=False, default=0)


@dataclass(frozen=True)
class QueuedEvent:
    id: int
    body: str
    attempts: int


class TicketEventQueue:
    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def publish(self, event: TicketCreatedEvent) -> int:
        row = QueuedEventRow(
            payload=event.model_dump_json(by_alias=True),
            enqueued_at=_now_ms(),
            attempts=0,
        )
        with self.session_factory() as db:
            try:
                db.add(row)
                db.commit()
            except SQLAlchemyError as exc:
                db.rollback()
                raise UpstreamError("Could not publish ticket event", str(exc)) from exc
            logger.debug("Queued event %s for ticket %s", row.id, event.ticket_id)
            return row.id

    def receive(self, max_messages: int = 10) -> list[QueuedEvent]:
        with self.session_factory() as db:
            try:
                rows = list(db.scalars(
                    select(QueuedEventRow)
                    .where(QueuedEventRow.delivered_at.is_(None))
                    .order_by(QueuedEventRow.id)
                    .limit(max_messages)
                ))
                for row in rows:
                    row.attempts += 1
                batch = [QueuedEvent(id=row.id, body=row.payload, attempts=row.attempts) for row in rows]
                db.commit()
            except SQLAlchemyError as exc:
                db.rollback()
                raise UpstreamError("Could not receive ticket events", str(exc)) from exc
        return batch

    def ack(self, event_ids: list[int]) -> None:
        if not event_ids:
            return
        with self.session_factory() as db:
            try:
                db.execute(
                    update(QueuedEventRow)
                    .where(QueuedEventRow.id.in_(event_ids))
                    .values(delivered_at=_now_ms())
                )
                db.commit()
            except SQLAlchemyError as exc:
                db.rollback()
                raise UpstreamError("Could not acknowledge ticket events", str(exc)) from exc

    def pending_count(self) -> int:
        with self.session_factory() as db:
            return db.scalar(
                select(func.count()).select_from(QueuedEventRow).where(QueuedEventRow.delivered_at.is_(None))
            )


def _now_ms() -> int:
    return int(time.time() * 1000)
