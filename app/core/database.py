# app/core/database.py
from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

Base = declarative_base()


def create_db_engine(database_url: str) -> Engine:
    connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
    return create_engine(database_url, connect_args=connect_args)


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(engine: Engine) -> None:
    # Models register themselves on Base when imported
    import app.ticket.models  # noqa: F401
    import app.notifications.queue  # noqa: F401

    Base.metadata.create_all(bind=engine)


# Common DB dependency
def get_db(request: Request):
    db = request.app.state.clients.session_factory()
    try:
        yield db
    finally:
        db.close()
