import os
from collections.abc import Generator
from typing import Any

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker

from orm_study.exceptions import EnvNotFoundError
from orm_study.orm.schema import Base, Member, Team


def _postgres_url() -> str | None:
    """PostgreSQL URL from POSTGRES_* and TEST_DB_NAME, or None when TEST_DB_NAME is unset."""
    db_name = os.getenv("TEST_DB_NAME")
    if not db_name:
        return None

    host = os.getenv("POSTGRES_HOST")
    user = os.getenv("POSTGRES_USER")
    pwd = os.getenv("POSTGRES_PASSWORD")
    port = os.getenv("POSTGRES_PORT", "5432")
    if not all([host, user, pwd]):
        raise EnvNotFoundError("POSTGRES_HOST, POSTGRES_USER, POSTGRES_PASSWORD")
    return f"postgresql+psycopg://{user}:{pwd}@{host}:{port}/{db_name}"


@pytest.fixture(scope="session")
def db_engine(tmp_path_factory):
    """Create a database engine for the test session.

    Uses PostgreSQL when TEST_DB_NAME (with POSTGRES_HOST, POSTGRES_USER,
    POSTGRES_PASSWORD, POSTGRES_PORT) is set, otherwise a SQLite file in a
    temporary directory.
    """
    postgres_url = _postgres_url()
    if postgres_url is not None:
        engine = create_engine(postgres_url, pool_pre_ping=True)
    else:
        engine = create_engine(f"sqlite:///{tmp_path_factory.mktemp('db') / 'orm_study.db'}")

        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    Base.metadata.create_all(engine)

    yield engine

    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope="session")
def session_factory(db_engine) -> sessionmaker[Session]:
    return sessionmaker(bind=db_engine)


@pytest.fixture(autouse=True)
def clean_tables(request) -> Generator[None, Any, None]:
    """Delete every row after each database test so tests stay independent."""
    engine = request.getfixturevalue("db_engine") if "db_engine" in request.fixturenames else None
    yield
    if engine is None:
        return
    with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())


@pytest.fixture
def db_session(session_factory) -> Generator[Session, Any, None]:
    """Create a new database session for each test.

    The session is rolled back after the test; nothing it flushed is kept.
    """
    session = session_factory()

    yield session

    session.rollback()
    session.close()


def _sample_members() -> tuple[list[Team], list[Member]]:
    team_a = Team(name="teamA")
    team_b = Team(name="teamB")
    members = [
        Member("member1", 10, team_a),
        Member("member2", 20, team_a),
        Member("member3", 30, team_b),
        Member("member4", 40, team_b),
    ]
    return [team_a, team_b], members


@pytest.fixture
def sample_members(db_session: Session) -> list[Member]:
    """teamA (member1 aged 10, member2 aged 20) and teamB (member3 aged 30, member4 aged 40), flushed only."""
    teams, members = _sample_members()
    db_session.add_all(teams)
    for member in members:
        db_session.add(member)
        # flush one by one so ids follow insertion order
        db_session.flush()
    return members


@pytest.fixture
def committed_members(session_factory) -> None:
    """Same data set as `sample_members`, committed so every new session sees it."""
    teams, members = _sample_members()
    with session_factory() as session:
        session.add_all(teams)
        for member in members:
            session.add(member)
            session.flush()
        session.commit()
