from sqlalchemy import create_engine, event
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker, declarative_base
from dayflow.core.config import settings

DATABASE_URL = settings.database_url


def build_engine(url: str) -> Engine:
    """PostgreSQL in production, SQLite for local development and tests."""
    if url.startswith("postgresql"):
        return create_engine(url, pool_pre_ping=True)
    return create_engine(url, connect_args={"check_same_thread": False})


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores REFERENCES clauses unless asked per connection
    if type(dbapi_connection).__module__.startswith("sqlite3"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


engine = build_engine(DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """
    One session per request. Commits and rollbacks belong to the service
    layer (BaseService.transaction).
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def upsert(db: Session, model):
    """
    INSERT for `model` that supports on_conflict_do_update().
    Only PostgreSQL and SQLite provide it.
    """
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        return postgresql.insert(model)
    if dialect == "sqlite":
        return sqlite.insert(model)
    raise NotImplementedError(f"Upsert is not supported for dialect '{dialect}'")


def init_db():
    """Create missing tables. Called from the application lifespan and the seed script."""
    import dayflow.models  # noqa: F401
    Base.metadata.create_all(bind=engine)
