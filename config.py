import os


class Config:
    # SECRET_KEY should be set via environment variable in production.
    # A benign development default is kept here for local/dev convenience.
    SECRET_KEY = os.environ.get("SECRET_KEY") or os.environ.get("FLASK_SECRET_KEY") or "dev-secret-key-change-me"

    # MySQL configuration (the DB_* names are accepted for older .env files)
    MYSQL_HOST = os.environ.get("MYSQL_HOST") or os.environ.get("DB_HOST") or "localhost"
    MYSQL_PORT = int(os.environ.get("MYSQL_PORT") or os.environ.get("DB_PORT") or 3306)
    MYSQL_USER = os.environ.get("MYSQL_USER") or os.environ.get("DB_USER") or "root"
    MYSQL_PASSWORD = os.environ.get("MYSQL_PASSWORD") or os.environ.get("DB_PASSWORD") or ""  # EMPTY is common for local XAMPP
    MYSQL_DB = os.environ.get("MYSQL_DB") or os.environ.get("DB_NAME") or "job_tracker"
    MYSQL_POOL_SIZE = int(os.environ.get("MYSQL_POOL_SIZE") or 10)
    MYSQL_CONNECT_TIMEOUT = int(os.environ.get("MYSQL_CONNECT_TIMEOUT") or 10)
    MYSQL_POOL_WAIT = float(os.environ.get("MYSQL_POOL_WAIT") or 5)

    # Notification relay
    NOTIF_POLL_INTERVAL_MS = int(os.environ.get("NOTIF_POLL_INTERVAL_MS") or 3000)

    # Dashboard front end runs on another origin (vite dev server, static host)
    CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*")

    HOST = os.environ.get("HOST", "0.0.0.0")
    PORT = int(os.environ.get("PORT") or 4000)
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
