# app/ticket/schemas.py
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from app.ticket.models import TRANSITION_TARGETS, TicketStatus


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TicketBase(CamelModel):
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)


class TicketCreate(TicketBase):
    # base64 encoded file contents
    attachment: str | None = None
    attachment_content_type: str | None = None


class StatusUpdate(CamelModel):
    ticket_id: str = Field(..., min_length=1)
    status: TicketStatus

    @field_validator("status")
    @classmethod
    def status_must_be_transition_target(cls, value: TicketStatus) -> TicketStatus:
        if value not in TRANSITION_TARGETS:
            allowed = ", ".join(sorted(s.value for s in TRANSITION_TARGETS))
            raise ValueError(f"status must be one of: {allowed}")
        return value


class StatusOut(BaseModel):
    status: TicketStatus


class TicketOut(TicketBase):
    ticket_id: str
    user_sub: str
    created_at: int
    attachment: str | None = None
    status: TicketStatus

    model_config = ConfigDict(from_attributes=True)


class TicketPage(BaseModel):
    count: int
    tickets: list[TicketOut]


class AdminTicketList(CamelModel):
    tickets_open: TicketPage
    tickets_new: TicketPage


class TicketCreatedEvent(CamelModel):
    ticket_id: str
    title: str
    description: str
