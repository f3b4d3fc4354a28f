"""ORM models for the listing store and its user collaborator."""

from .base import Base, create_db_engine, create_session_factory, init_db
from .job_listing import DEFAULT_JOB_TYPE, JOB_TYPES, JobListing
from .user import User

__all__ = [
    "Base",
    "create_db_engine",
    "create_session_factory",
    "init_db",
    "JobListing",
    "JOB_TYPES",
    "DEFAULT_JOB_TYPE",
    "User",
]
