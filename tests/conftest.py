import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

import skybrief.db as db_module
import skybrief.db_models  # noqa: F401 - registers tables on Base


@pytest.fixture
def db_engine(tmp_path, monkeypatch):
    """Engine for a throwaway SQLite database, also used by ``init_db``."""

    monkeypatch.setattr(db_module, "CLEANUP_STATE_FILE", tmp_path / "cleanup_state.txt")
    monkeypatch.setattr(db_module, "_last_cleanup_date", None)

    engine = create_engine(
        f"sqlite:///{tmp_path}/briefings.db",
        connect_args={"check_same_thread": False},
    )
    monkeypatch.setattr(db_module, "engine", engine)
    db_module.Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def anyio_backend():
    """The code under test is built on asyncio (``asyncio.gather``)."""
    return "asyncio"
