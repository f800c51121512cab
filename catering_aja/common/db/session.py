from contextlib import contextmanager
import os
from pathlib import Path
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool


DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///data/catering.db")

engine = None
SessionLocal = sessionmaker(autoflush=False, expire_on_commit=False, future=True)


def _is_memory_sqlite(url: str) -> bool:
    return url in ("sqlite://", "sqlite:///:memory:") or (url.startswith("sqlite") and ":memory:" in url)


def init_engine(database_url: str = DATABASE_URL):
    """(Re)bind the session factory to a new engine."""
    global engine
    kwargs = {}
    if _is_memory_sqlite(database_url):
        # one shared connection, otherwise every session sees an empty database
        kwargs = {"poolclass": StaticPool, "connect_args": {"check_same_thread": False}}
    elif database_url.startswith("sqlite:///"):
        # Ensure sqlite file parent directory exists to avoid 'unable to open database file'
        db_path = database_url.split("sqlite:///")[-1]
        Path(db_path).expanduser().resolve().parent.mkdir(parents=True, exist_ok=True)
        kwargs = {"connect_args": {"check_same_thread": False}}
    if engine is not None:
        engine.dispose()
    engine = create_engine(database_url, future=True, **kwargs)
    SessionLocal.configure(bind=engine)
    return engine


def create_all() -> None:
    from ..models import Base

    Base.metadata.create_all(engine)


def drop_all() -> None:
    from ..models import Base

    Base.metadata.drop_all(engine)


@contextmanager
def get_session():
    if engine is None:
        init_engine()
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
