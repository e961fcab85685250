"""
Shared fixtures: in-memory database, fake NHL provider, API client
"""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.directory import PlayerDirectory
from app.main import app, get_db, get_directory
from app.models import Base
from app.nhl_client import ProviderError
from app.schemas import DirectoryEntry
from app.stats_fetcher import StatsFetcher


class FakeProvider:
    """In-memory stand-in for the NHL API providers."""

    def __init__(self, roster=None, stats=None, fail_roster=False, fail_stats=()):
        self.roster = [DirectoryEntry(id=pid, name=name) for pid, name in (roster or [])]
        self.stats = stats or {}
        self.fail_roster = fail_roster
        self.fail_stats = set(fail_stats)
        self.roster_calls = 0
        self.stats_calls = []

    def fetch_roster(self):
        self.roster_calls += 1
        if self.fail_roster:
            raise ProviderError("HTTP 503")
        return list(self.roster)

    def fetch_player_season_stats(self, player_id, season):
        self.stats_calls.append((player_id, season))
        if player_id in self.fail_stats:
            raise ProviderError("HTTP 500")
        return self.stats.get(player_id)


def stat_line(games, points, shots, name=None):
    return {"name": name, "games": games, "goals": 0, "assists": points, "points": points, "shots": shots}


ROSTER = [
    (8478402, "Connor McDavid"),
    (8477934, "Leon Draisaitl"),
    (8478483, "Mitch Marner"),
    (8475913, "Mark Stone"),
    (8479318, "Auston Matthews"),
]


@pytest.fixture
def make_provider():
    return FakeProvider


@pytest.fixture
def provider():
    return FakeProvider(
        roster=ROSTER,
        stats={
            8478402: stat_line(10, 18, 40, name="Connor McDavid"),
            8477934: stat_line(0, 0, 0, name="Leon Draisaitl"),
        },
    )


@pytest.fixture
def directory(provider):
    return PlayerDirectory(provider)


@pytest.fixture
def fetcher(provider, directory):
    return StatsFetcher(provider, directory)


@pytest.fixture
def db():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def client(db, directory):
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_directory] = lambda: directory
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
