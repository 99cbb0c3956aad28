from collections.abc import Generator

from sqlmodel import Session, SQLModel, create_engine

from motionlog.core.config import settings
from motionlog.db import models  # noqa: F401


def _create_engine():
    url = settings.database_url
    kwargs = {"echo": False, "pool_pre_ping": True}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
    return create_engine(url, **kwargs)


engine = _create_engine()


def init_db() -> None:
    SQLModel.metadata.create_all(engine)


def get_session() -> Generator[Session, None, None]:
    with Session(engine) as session:
        yield session
