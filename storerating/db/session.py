from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase
from sqlalchemy.pool import StaticPool

class Base(DeclarativeBase):
    pass

def normalize_url(url: str) -> str:
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+psycopg://", 1)
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+psycopg://", 1)
    return url

def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()

def build_engine(url: str, echo: bool = False) -> Engine:
    url = normalize_url(url)

    kwargs = {}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        # in-memory databases live per connection, so every session must share one
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool

    engine = create_engine(
        url,
        echo=echo,
        pool_pre_ping=True,
        future=True,
        **kwargs,
    )
    if url.startswith("sqlite"):
        # SQLite ignores REFERENCES clauses unless asked per connection
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine

def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine,
        future=True,
    )

def init_db(engine: Engine):
    from storerating.models import user, store, rating  # noqa: F401
    Base.metadata.create_all(bind=engine)
