from pathlib import Path
from typing import Generator

from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine, select

from courtside.config import COURT_COUNT, DATABASE_URL, SQL_ECHO

_is_sqlite = DATABASE_URL.startswith("sqlite")
_connect_args = {"check_same_thread": False} if _is_sqlite else {}

if _is_sqlite and ":memory:" not in DATABASE_URL:
    db_path = DATABASE_URL.replace("sqlite:///", "", 1)
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)

engine: Engine = create_engine(
    DATABASE_URL,
    echo=SQL_ECHO,
    connect_args=_connect_args,
)


def get_session() -> Generator[Session, None, None]:
    """Get database session"""
    with Session(engine) as session:
        yield session


def init_db() -> None:
    """Initialize database - create all tables and seed courts"""
    # Import all models to ensure they're registered with SQLModel metadata
    import courtside.models  # noqa: F401

    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        ensure_courts(session, COURT_COUNT)


def ensure_courts(session: Session, count: int) -> None:
    """Create Court rows idx 1..count that do not exist yet."""
    from courtside.models.court import Court

    existing = set(session.exec(select(Court.idx)).all())
    for idx in range(1, count + 1):
        if idx not in existing:
            session.add(Court(idx=idx))
    session.commit()
