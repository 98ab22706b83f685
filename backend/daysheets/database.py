from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker
from daysheets.core.config import settings
import os
import logging

logger = logging.getLogger(__name__)

if os.getenv("PYTEST_RUN") == "1":
    SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"
else:
    SQLALCHEMY_DATABASE_URL = settings.SQLALCHEMY_DATABASE_URL

is_sqlite = SQLALCHEMY_DATABASE_URL.startswith("sqlite")

# Avoid stale idle connections causing first-hit failures after inactivity
pool_kwargs = {"pool_pre_ping": True}
if is_sqlite:
    connect_args = {"check_same_thread": False, "timeout": 15}
else:
    connect_args = {}
    try:
        pool_kwargs.update({
            "pool_size": int(os.getenv("DB_POOL_SIZE") or 6),
            "max_overflow": int(os.getenv("DB_MAX_OVERFLOW") or 6),
            "pool_recycle": int(os.getenv("DB_POOL_RECYCLE") or 300),
            "pool_timeout": float(os.getenv("DB_POOL_TIMEOUT") or 5.0),
        })
    except ValueError:
        logger.warning("Invalid DB pool env values; using defaults")
        pool_kwargs.update({"pool_recycle": 300})

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args=connect_args,
    **pool_kwargs,
)

if is_sqlite:

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        try:
            # WAL improves read concurrency; NORMAL reduces fsync pressure.
            cursor.execute("PRAGMA journal_mode=WAL;")
            cursor.execute("PRAGMA synchronous=NORMAL;")
            cursor.execute("PRAGMA busy_timeout=60000;")
            cursor.execute("PRAGMA foreign_keys=ON;")
        finally:
            cursor.close()


SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


# Dependency
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
