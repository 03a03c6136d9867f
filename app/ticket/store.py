# app/ticket/store.py
from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import UpstreamError
from app.ticket.models import Ticket, TicketStatus


class TicketStore:
    """Keyed ticket records with lookups by status and by owner.

    Both lookups are index queries over the one ``tickets`` table, so they
    always agree with the stored record. Results come back in arrival order.
    Driver errors are rolled back and raised as ``UpstreamError``.
    """

    def __init__(self, db: Session):
        self.db = db

    def put(self, ticket: Ticket) -> Ticket:
        try:
            self.db.add(ticket)
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise UpstreamError("Could not save ticket", str(exc)) from exc
        self.db.refresh(ticket)
        return ticket

    def get(self, ticket_id: str) -> Ticket | None:
        return self._scalars(select(Ticket).where(Ticket.ticket_id == ticket_id)).first()

    def get_by_status(self, status: TicketStatus, created_before: int | None = None) -> list[Ticket]:
        query = select(Ticket).where(Ticket.status == status.value)
        if created_before is not None:
            query = query.where(Ticket.created_at < created_before)
        return list(self._scalars(query.order_by(Ticket.id)))

    def get_by_owner(self, user_sub: str) -> list[Ticket]:
        return list(self._scalars(select(Ticket).where(Ticket.user_sub == user_sub).order_by(Ticket.id)))

    def update_status(self, ticket_id: str, status: TicketStatus) -> bool:
        """Overwrite the status field. Returns False if no such ticket exists."""
        try:
            result = self.db.execute(
                update(Ticket).where(Ticket.ticket_id == ticket_id).values(status=status.value)
            )
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise UpstreamError("Could not update ticket status", str(exc)) from exc
        return result.rowcount > 0

    def _scalars(self, query):
        try:
            return self.db.scalars(query)
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise UpstreamError("Could not read tickets", str(exc)) from exc
