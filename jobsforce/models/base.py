"""SQLAlchemy engine and session setup."""

from pathlib import Path

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.engine import make_url
from sqlalchemy.orm import DeclarativeBase, sessionmaker


class Base(DeclarativeBase):
    pass


def _unicode_lower(value):
    return value.lower() if isinstance(value, str) else value


def _register_sqlite_functions(dbapi_conn, connection_record):
    # SQLite's built-in lower() only folds ASCII; match str.lower() instead
    dbapi_conn.create_function("lower", 1, _unicode_lower, deterministic=True)


def create_db_engine(url: str, echo: bool = False) -> Engine:
    """Build an engine; SQLite files get their parent directory created."""
    connect_args = {}
    parsed = make_url(url)
    is_sqlite = parsed.get_backend_name() == "sqlite"
    if is_sqlite:
        # Sessions are opened from request, scheduler and writer threads
        connect_args["check_same_thread"] = False
        if parsed.database and parsed.database != ":memory:":
            Path(parsed.database).parent.mkdir(parents=True, exist_ok=True)

    engine = create_engine(
        url,
        pool_pre_ping=True,
        echo=echo,
        connect_args=connect_args,
    )
    if is_sqlite:
        event.listen(engine, "connect", _register_sqlite_functions)
    return engine


def create_session_factory(engine: Engine) -> sessionmaker:
    # expire_on_commit=False keeps returned rows readable after the session closes
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def init_db(engine: Engine) -> None:
    """Create all tables that do not exist yet."""
    Base.metadata.create_all(engine)
