"""
core/db.py -- Engine construction shared by every store.

The API lifespan builds one engine with a bounded connection pool and hands
it to both stores, so the pool is the only shared mutable resource in the
process. The lifespan disposes of it on shutdown. A store built from a URL
(tests, the CLI) owns a private engine and disposes of it in close().

Layer rule: core/ is the kernel. This module may not import from api/,
auth/ or content/.
"""

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine


def _sqlite_on_connect(dbapi_conn, connection_record) -> None:
    """Enable foreign keys and WAL journal mode on every new SQLite connection.

    SQLite ignores ON DELETE CASCADE unless foreign_keys is switched on, and
    PRAGMAs are not inherited by new connections from the pool.
    """
    dbapi_conn.execute("PRAGMA foreign_keys=ON")
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def make_engine(db_url: str, pool_size: int = 10) -> Engine:
    """Create an engine with a bounded connection pool.

    SQLite keeps SQLAlchemy's default pool. Server databases (MySQL,
    PostgreSQL) get exactly pool_size connections, no overflow, and a
    pre-ping so connections dropped by the server are replaced transparently.
    """
    if db_url.startswith("sqlite"):
        # check_same_thread=False: FastAPI runs sync handlers in a thread pool,
        # so a pooled connection may be used from a thread other than its creator.
        engine = create_engine(db_url, connect_args={"check_same_thread": False})
        event.listen(engine, "connect", _sqlite_on_connect)
        return engine
    return create_engine(db_url, pool_size=pool_size, max_overflow=0, pool_pre_ping=True)
