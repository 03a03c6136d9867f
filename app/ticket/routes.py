# app/ticket/routes.py
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from app.auth.dependencies import get_auth_context
from app.auth.tokens import AuthContext
from app.core.database import get_db
from app.ticket import queries as ticket_queries
from app.ticket import services as ticket_service
from app.ticket.schemas import AdminTicketList, StatusOut, StatusUpdate, TicketCreate, TicketOut, TicketPage
from app.ticket.store import TicketStore

router = APIRouter(prefix="/ticket", tags=["Tickets"])


def get_store(db: Session = Depends(get_db)) -> TicketStore:
    return TicketStore(db)


@router.post("/create", response_model=TicketOut, response_model_exclude_none=True, status_code=201)
def create(
    ticket: TicketCreate,
    request: Request,
    caller: AuthContext = Depends(get_auth_context),
    store: TicketStore = Depends(get_store),
):
    clients = request.app.state.clients
    return ticket_service.create_ticket(
        store,
        clients.blob_store,
        clients.event_queue,
        caller,
        ticket,
        default_content_type=request.app.state.settings.ATTACHMENT_CONTENT_TYPE,
    )


@router.get("/all", response_model=AdminTicketList | TicketPage, response_model_exclude_none=True)
def list_all(
    caller: AuthContext = Depends(get_auth_context),
    store: TicketStore = Depends(get_store),
):
    return ticket_queries.list_tickets(store, caller)


@router.post("/updateStatus", response_model=StatusOut)
def update_status(
    payload: StatusUpdate,
    caller: AuthContext = Depends(get_auth_context),
    store: TicketStore = Depends(get_store),
):
    status = ticket_service.update_status(store, caller, payload.ticket_id, payload.status)
    return StatusOut(status=status)
