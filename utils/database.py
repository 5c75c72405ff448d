import logging
import time
from threading import Lock

from mysql.connector import Error, pooling
from mysql.connector.errors import PoolError
from flask import g, current_app

log = logging.getLogger(__name__)

_pool_lock = Lock()
POOL_RETRY_DELAY = 0.05


class StoreError(Exception):
    """Raised when a statement cannot be executed against the store."""


def _get_pool():
    pool = current_app.extensions.get("mysql_pool")
    if pool is not None:
        return pool
    with _pool_lock:
        # Another thread may have built it while we waited
        pool = current_app.extensions.get("mysql_pool")
        if pool is None:
            pool = pooling.MySQLConnectionPool(
                pool_name="job_tracker",
                pool_size=current_app.config.get("MYSQL_POOL_SIZE", 10),
                pool_reset_session=True,
                host=current_app.config["MYSQL_HOST"],
                port=current_app.config.get("MYSQL_PORT", 3306),
                user=current_app.config["MYSQL_USER"],
                password=current_app.config["MYSQL_PASSWORD"],
                database=current_app.config["MYSQL_DB"],
                autocommit=False,
                connection_timeout=current_app.config.get("MYSQL_CONNECT_TIMEOUT", 10),
                use_unicode=True,
                charset="utf8mb4",
            )
            current_app.extensions["mysql_pool"] = pool
    return pool


def _acquire(pool):
    """Take a pooled connection, waiting up to MYSQL_POOL_WAIT seconds for one to free up."""
    deadline = time.monotonic() + current_app.config.get("MYSQL_POOL_WAIT", 5)
    while True:
        try:
            return pool.get_connection()
        except PoolError:
            if time.monotonic() >= deadline:
                raise
            time.sleep(POOL_RETRY_DELAY)


def get_db():
    if "db" not in g:
        try:
            g.db = _acquire(_get_pool())
        except Error as e:
            log.warning("⚠️ Database connection error: %s", e)
            return None
    return g.db


def close_db(e=None):
    db = g.pop("db", None)
    if db is not None:
        # Pooled connections go back to the pool on close()
        db.close()


def execute_query(query, params=None, fetch_one=False, fetch_all=False):
    db = get_db()
    if not db:
        raise StoreError("Database unavailable")

    cursor = db.cursor(dictionary=True)
    try:
        cursor.execute(query, params or ())

        if fetch_one:
            result = cursor.fetchone()
        elif fetch_all:
            result = cursor.fetchall()
        else:
            db.commit()
            result = cursor.lastrowid

        return result
    except Error as e:
        log.error("Query error: %s", e)
        try:
            db.rollback()
        except Error:
            pass
        raise StoreError(str(e)) from e
    finally:
        cursor.close()
