"""Builds the store, client, reconciler, writer and engine from config."""

from dataclasses import dataclass

from sqlalchemy import Engine

from jobsforce.config import AppConfig
from jobsforce.jobs.ml_client import MlScoreClient
from jobsforce.models import create_db_engine, create_session_factory, init_db
from jobsforce.reconciler import Reconciler
from jobsforce.recommendations import RecommendationEngine
from jobsforce.storage.listing_store import ListingStore
from jobsforce.storage.users import UserDirectory
from jobsforce.storage.writer import BatchWriter


@dataclass
class Services:
    config: AppConfig
    engine: Engine
    store: ListingStore
    users: UserDirectory
    score_client: object
    reconciler: Reconciler
    writer: BatchWriter
    recommender: RecommendationEngine


def build_services(config: AppConfig, score_client=None) -> Services:
    """Create every collaborator. ``score_client`` may be swapped for a fake in tests."""
    engine = create_db_engine(config.database.url, echo=config.database.echo)
    init_db(engine)
    session_factory = create_session_factory(engine)

    store = ListingStore(session_factory)
    users = UserDirectory(session_factory)
    client = score_client or MlScoreClient(config.ml_service)
    reconciler = Reconciler(store)
    writer = BatchWriter(reconciler, queue_size=config.writer.queue_size)
    recommender = RecommendationEngine(
        store=store,
        score_client=client,
        reconciler=reconciler,
        writer=writer,
        config=config.recommendations,
    )
    return Services(
        config=config,
        engine=engine,
        store=store,
        users=users,
        score_client=client,
        reconciler=reconciler,
        writer=writer,
        recommender=recommender,
    )
