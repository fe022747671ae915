from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

from utils.logging import log_function_call

# Declarative base class that the ORM models should inherit from.
Base = declarative_base()


# ---------------------------------------------------------------------------
# Engine / session helpers
# ---------------------------------------------------------------------------

def _is_in_memory(url: str) -> bool:
    return url in ("sqlite://", "sqlite:///:memory:") or ":memory:" in url


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    # SQLite ships with foreign-key enforcement off per connection.
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def make_engine(url: str, *, echo: bool = False) -> Engine:
    """Create the SQLAlchemy engine for ``url``.

    For SQLite ``check_same_thread`` is disabled so that FastAPI can use the
    connection from its worker threads, and foreign keys are switched on for
    every new connection. In-memory databases share a single connection
    (``StaticPool``), otherwise each connection would see an empty schema.
    """
    kwargs = {"echo": echo}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if _is_in_memory(url):
            kwargs["poolclass"] = StaticPool

    engine = create_engine(url, **kwargs)

    if url.startswith("sqlite"):
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def make_session_factory(engine: Engine) -> sessionmaker:
    """Return a session factory bound to ``engine``.

    ``expire_on_commit`` is off so rows stay readable after the short-lived
    session that created them has been closed.
    """
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@log_function_call()
def init_db(engine: Engine) -> None:
    """Create tables if they do not yet exist.

    Importing ``helpdesk.memory.models`` registers all subclasses with the Base
    metadata, after which ``metadata.create_all`` will build the schema.
    """
    # The models import needs to stay **inside** the function to avoid circular
    # imports, since models.py imports Base from here.
    from . import models  # noqa: F401  (side-effect import)

    Base.metadata.create_all(bind=engine)
