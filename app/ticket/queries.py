# app/ticket/queries.py
from app.auth.tokens import AuthContext
from app.ticket.models import Ticket, TicketStatus
from app.ticket.schemas import AdminTicketList, TicketOut, TicketPage
from app.ticket.store import TicketStore


def _page(tickets: list[Ticket]) -> TicketPage:
    return TicketPage(count=len(tickets), tickets=[TicketOut.model_validate(t) for t in tickets])


def list_tickets(store: TicketStore, caller: AuthContext) -> AdminTicketList | TicketPage:
    """Admins get the OPEN and NEW queues; everyone else gets their own tickets."""
    if caller.is_admin:
        tickets_open = store.get_by_status(TicketStatus.OPEN)
        tickets_new = store.get_by_status(TicketStatus.NEW)
        return AdminTicketList(tickets_open=_page(tickets_open), tickets_new=_page(tickets_new))

    return _page(store.get_by_owner(caller.subject))
