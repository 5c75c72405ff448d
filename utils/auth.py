import bcrypt
import logging
from flask import session

log = logging.getLogger(__name__)

ROLES = ("user", "admin")


def hash_password(password):
    """Hash a password using bcrypt. Raises ValueError for invalid input."""
    if not password:
        raise ValueError("Password must be a non-empty string")
    try:
        return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")
    except Exception as exc:
        log.exception("❌ Failed to hash password: %s", exc)
        raise


def check_password(hashed_password, user_password):
    if not hashed_password or not user_password:
        return False
    try:
        return bcrypt.checkpw(user_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash (e.g. a legacy plaintext row)
        log.warning("⚠️ Stored credential is not a bcrypt hash; refusing login")
        return False


def login_user(account_id, role, email, full_name=""):
    role = (role or "").lower()
    if role not in ROLES:
        raise ValueError(f"Unknown role: {role!r}")
    session.clear()
    session["user_id"] = account_id
    session["user_role"] = role
    session["user_email"] = email
    session["user_name"] = full_name
    session["logged_in"] = True


def logout_user():
    session.clear()


def is_logged_in():
    return bool(session.get("logged_in"))


def get_current_user():
    if not is_logged_in():
        return None
    return {
        "id": session.get("user_id"),
        "role": session.get("user_role"),
        "email": session.get("user_email"),
        "name": session.get("user_name"),
    }
