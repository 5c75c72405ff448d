import threading
import time

import pytest
from mysql.connector.errors import PoolError

from utils import database
from utils.database import StoreError


class FakeConnection:
    def __init__(self):
        self.closed = False

    def close(self):
        self.closed = True


class FakePool:
    def __init__(self, busy_for=0):
        self.busy_for = busy_for
        self.calls = 0

    def get_connection(self):
        self.calls += 1
        if self.calls <= self.busy_for:
            raise PoolError(msg="Failed getting connection; pool exhausted")
        return FakeConnection()


@pytest.fixture
def app_without_pool(flask_app, monkeypatch):
    flask_app.extensions.pop("mysql_pool", None)
    monkeypatch.setattr(database, "POOL_RETRY_DELAY", 0.01)
    yield flask_app
    flask_app.extensions.pop("mysql_pool", None)


def test_get_db_waits_for_a_free_connection(app_without_pool):
    pool = FakePool(busy_for=3)
    app_without_pool.extensions["mysql_pool"] = pool

    with app_without_pool.app_context():
        conn = database.get_db()
        assert isinstance(conn, FakeConnection)
        assert database.get_db() is conn

    assert pool.calls == 4
    assert conn.closed


def test_exhausted_pool_gives_up_after_the_wait(app_without_pool, monkeypatch):
    monkeypatch.setitem(app_without_pool.config, "MYSQL_POOL_WAIT", 0.05)
    app_without_pool.extensions["mysql_pool"] = FakePool(busy_for=10 ** 6)

    with app_without_pool.app_context():
        assert database.get_db() is None
        with pytest.raises(StoreError):
            database.execute_query("SELECT 1", fetch_one=True)


def test_pool_is_built_once_under_concurrent_first_use(app_without_pool, monkeypatch):
    built = []

    class CountingPool(FakePool):
        def __init__(self, **kwargs):
            super().__init__()
            time.sleep(0.02)
            built.append(self)

    monkeypatch.setattr(database.pooling, "MySQLConnectionPool", CountingPool)
    seen = []
    barrier = threading.Barrier(8)

    def worker():
        barrier.wait()
        with app_without_pool.app_context():
            seen.append(database._get_pool())

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(5)

    assert len(built) == 1
    assert len(seen) == 8
    assert all(p is built[0] for p in seen)
