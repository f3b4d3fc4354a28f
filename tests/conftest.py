"""Shared fixtures: temporary SQLite store, fake ML service, wired services."""

import pytest

from jobsforce.config import AppConfig
from jobsforce.models import create_db_engine, create_session_factory, init_db
from jobsforce.reconciler import Reconciler
from jobsforce.services import build_services
from jobsforce.storage.listing_store import ListingStore
from jobsforce.storage.users import UserDirectory


class FakeScoreClient:
    """Stands in for MlScoreClient; records every call."""

    def __init__(self, response=None, error=None):
        self.response = response if response is not None else []
        self.error = error
        self.calls = []

    def fetch_candidates(self, skills, limit):
        self.calls.append((list(skills), limit))
        if self.error is not None:
            raise self.error
        if callable(self.response):
            return self.response(skills, limit)
        return list(self.response)


@pytest.fixture
def config(tmp_path):
    config = AppConfig()
    config.database.url = f"sqlite:///{tmp_path / 'test.db'}"
    config.log_dir = str(tmp_path / "logs")
    return config


@pytest.fixture
def session_factory(config):
    engine = create_db_engine(config.database.url)
    init_db(engine)
    yield create_session_factory(engine)
    engine.dispose()


@pytest.fixture
def store(session_factory):
    return ListingStore(session_factory)


@pytest.fixture
def users(session_factory):
    return UserDirectory(session_factory)


@pytest.fixture
def reconciler(store):
    return Reconciler(store)


@pytest.fixture
def fake_client():
    return FakeScoreClient()


@pytest.fixture
def services(config, fake_client):
    services = build_services(config, score_client=fake_client)
    yield services
    services.writer.stop()
    services.engine.dispose()
