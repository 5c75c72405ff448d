"""Maps live socket sessions to user identities and fans pushes out to them."""
import logging
from threading import Lock

log = logging.getLogger(__name__)

NOTIFICATION_EVENT = "notification"


def room_for(user_id):
    return f"user:{user_id}"


def parse_user_id(value):
    """Accept ``{"userID": 5}``, ``5`` or ``"5"``; return ``None`` for anything else."""
    if isinstance(value, dict):
        value = value.get("userID")
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class ChannelRegistry:
    """Session to user-identity registry.

    ``emit(session_id, event, payload)`` is the transport callback used to
    reach a single session. Registrations live only for the process lifetime.
    """

    def __init__(self, emit):
        self._emit = emit
        self._lock = Lock()
        self._sessions_by_user = {}
        self._user_by_session = {}

    def register(self, session_id, user_id):
        with self._lock:
            previous = self._user_by_session.get(session_id)
            if previous is not None and previous != user_id:
                self._discard(session_id, previous)
            self._user_by_session[session_id] = user_id
            self._sessions_by_user.setdefault(user_id, set()).add(session_id)
        log.info("socket %s joined room %s", session_id, room_for(user_id))

    def unregister(self, session_id):
        with self._lock:
            user_id = self._user_by_session.pop(session_id, None)
            if user_id is not None:
                self._discard(session_id, user_id)
        return user_id

    def _discard(self, session_id, user_id):
        sessions = self._sessions_by_user.get(user_id)
        if not sessions:
            return
        sessions.discard(session_id)
        if not sessions:
            del self._sessions_by_user[user_id]

    def sessions_for(self, user_id):
        with self._lock:
            return frozenset(self._sessions_by_user.get(user_id, ()))

    def user_for(self, session_id):
        with self._lock:
            return self._user_by_session.get(session_id)

    def push(self, user_id, payload, event=NOTIFICATION_EVENT):
        """Send ``payload`` to every session of ``user_id``; return how many were reached.

        Users with no registered session get nothing. A session whose emit
        fails is logged and skipped. The last error is raised only when
        every session failed.
        """
        # Snapshot under the lock, emit outside it so a slow transport
        # never blocks connect/disconnect handlers.
        sessions = self.sessions_for(user_id)
        if not sessions:
            log.debug("No live sessions in %s, dropping %s", room_for(user_id), event)
            return 0

        reached = 0
        last_error = None
        for session_id in sessions:
            try:
                self._emit(session_id, event, payload)
            except Exception as e:
                log.exception("⚠️ Failed to emit %s to socket %s", event, session_id)
                last_error = e
            else:
                reached += 1

        if reached == 0 and last_error is not None:
            raise last_error
        return reached

    def __len__(self):
        with self._lock:
            return len(self._user_by_session)

    # Transport hooks

    def on_connect(self, session_id):
        log.info("socket connected %s", session_id)

    def on_identify(self, session_id, payload):
        user_id = parse_user_id(payload)
        if user_id is None:
            log.warning("Ignoring identify from %s with payload %r", session_id, payload)
            return None
        self.register(session_id, user_id)
        return user_id

    def on_disconnect(self, session_id):
        self.unregister(session_id)
        log.info("socket disconnected %s", session_id)
