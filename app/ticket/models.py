# app/ticket/models.py
import enum

from sqlalchemy import BigInteger, Column, Integer, String, Text
from app.core.database import Base


class TicketStatus(str, enum.Enum):
    NEW = "NEW"
    OPEN = "OPEN"
    CLOSED = "CLOSED"


# NEW is only ever assigned at creation
TRANSITION_TARGETS = frozenset({TicketStatus.OPEN, TicketStatus.CLOSED})


class Ticket(Base):
    __tablename__ = "tickets"

    # Surrogate key, keeps arrival order within index lookups
    id = Column(Integer, primary_key=True, autoincrement=True)
    ticket_id = Column(String(36), unique=True, nullable=False, index=True)
    user_sub = Column(String, nullable=False, index=True)
    created_at = Column(BigInteger, nullable=False, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    attachment = Column(String, nullable=True)
    status = Column(String(16), default=TicketStatus.NEW.value, nullable=False, index=True)
