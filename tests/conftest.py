import sqlite3

import pytest
from mysql.connector import Error


SCHEMA = [
    """
    CREATE TABLE `User` (
        userID INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        email TEXT UNIQUE NOT NULL,
        password TEXT NOT NULL,
        contact_info TEXT DEFAULT ''
    )
    """,
    """
    CREATE TABLE Admin (
        adminID INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        email TEXT UNIQUE NOT NULL,
        password TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE Company (
        companyID INTEGER PRIMARY KEY AUTOINCREMENT,
        companyName TEXT NOT NULL,
        location TEXT DEFAULT '',
        contactInfo TEXT DEFAULT '',
        industry TEXT DEFAULT '',
        city TEXT DEFAULT '',
        country TEXT DEFAULT ''
    )
    """,
    """
    CREATE TABLE JobRole (
        roleID INTEGER PRIMARY KEY AUTOINCREMENT,
        companyID INTEGER NOT NULL,
        roleTitle TEXT NOT NULL,
        jobType TEXT DEFAULT '',
        description TEXT,
        salaryRange TEXT DEFAULT '',
        location TEXT DEFAULT ''
    )
    """,
    """
    CREATE TABLE JobApplication (
        applicationID INTEGER PRIMARY KEY AUTOINCREMENT,
        userID INTEGER NOT NULL,
        roleID INTEGER NOT NULL,
        applicationDate TEXT NOT NULL,
        deadline TEXT,
        status TEXT DEFAULT 'Applied',
        resume TEXT,
        coverLetter TEXT
    )
    """,
    """
    CREATE TABLE Interview (
        interviewID INTEGER PRIMARY KEY AUTOINCREMENT,
        applicationID INTEGER NOT NULL,
        interviewDate TEXT NOT NULL,
        interviewMode TEXT NOT NULL,
        result TEXT DEFAULT 'Pending'
    )
    """,
    """
    CREATE TABLE Notification (
        notificationID INTEGER PRIMARY KEY AUTOINCREMENT,
        type TEXT NOT NULL,
        date TEXT NOT NULL,
        time TEXT NOT NULL,
        applicationID INTEGER NOT NULL,
        adminID INTEGER,
        delivered INTEGER NOT NULL DEFAULT 0,
        isRead INTEGER NOT NULL DEFAULT 0
    )
    """,
]


class FakeCursor:
    def __init__(self, conn):
        self._cur = conn.cursor()

    def execute(self, sql, params=()):
        # Translate MySQL-style %s placeholders to SQLite ? placeholders for tests
        try:
            self._cur.execute(sql.replace("%s", "?"), tuple(params or ()))
        except sqlite3.Error as exc:
            raise Error(msg=str(exc)) from exc

    def fetchone(self):
        row = self._cur.fetchone()
        if row is None:
            return None
        cols = [d[0] for d in self._cur.description]
        return {cols[i]: row[i] for i in range(len(cols))}

    def fetchall(self):
        rows = self._cur.fetchall()
        cols = [d[0] for d in self._cur.description]
        return [{cols[i]: r[i] for i in range(len(cols))} for r in rows]

    @property
    def lastrowid(self):
        return self._cur.lastrowid

    def close(self):
        self._cur.close()


class FakeDB:
    """In-memory sqlite database speaking the subset of the mysql-connector API the store uses."""

    def __init__(self):
        self.conn = sqlite3.connect(":memory:")
        self.conn.isolation_level = None
        for ddl in SCHEMA:
            self.conn.execute(ddl)

    def cursor(self, dictionary=True):
        return FakeCursor(self.conn)

    def commit(self):
        pass

    def rollback(self):
        pass

    def close(self):
        self.conn.close()

    # Test helpers

    def query(self, sql, params=()):
        cur = self.cursor()
        cur.execute(sql, params)
        return cur.fetchall()

    def add_user(self, name="Ada Applicant", email="ada@example.com", password="x"):
        cur = self.cursor()
        cur.execute("INSERT INTO `User` (name, email, password) VALUES (%s, %s, %s)", (name, email, password))
        return cur.lastrowid

    def add_role(self, company_name="Acme", role_title="Backend Engineer"):
        cur = self.cursor()
        cur.execute("INSERT INTO Company (companyName, location) VALUES (%s, %s)", (company_name, "Remote"))
        company_id = cur.lastrowid
        cur.execute(
            "INSERT INTO JobRole (companyID, roleTitle, jobType) VALUES (%s, %s, %s)",
            (company_id, role_title, "Full-time"),
        )
        return cur.lastrowid

    def add_application(self, user_id, role_id, status="Applied", application_id=None):
        cur = self.cursor()
        if application_id is None:
            cur.execute(
                "INSERT INTO JobApplication (userID, roleID, applicationDate, status) VALUES (%s, %s, %s, %s)",
                (user_id, role_id, "2024-02-01", status),
            )
            return cur.lastrowid
        cur.execute(
            "INSERT INTO JobApplication (applicationID, userID, roleID, applicationDate, status) VALUES (%s, %s, %s, %s, %s)",
            (application_id, user_id, role_id, "2024-02-01", status),
        )
        return application_id

    def add_notification(self, application_id, type_="Status changed", date="2024-03-01", time="09:30:00", admin_id=None, delivered=0):
        cur = self.cursor()
        cur.execute(
            "INSERT INTO Notification (type, date, time, applicationID, adminID, delivered, isRead) VALUES (%s, %s, %s, %s, %s, %s, 0)",
            (type_, date, time, application_id, admin_id, delivered),
        )
        return cur.lastrowid


@pytest.fixture
def fake_db(monkeypatch):
    db = FakeDB()
    import utils.database as dbmod

    monkeypatch.setattr(dbmod, "get_db", lambda: db)
    yield db
    db.close()


@pytest.fixture
def flask_app():
    import app as app_module

    app_module.app.config.update(TESTING=True, WTF_CSRF_ENABLED=False)
    return app_module.app


@pytest.fixture
def client(flask_app, fake_db):
    with flask_app.test_client() as c:
        yield c
