"""Background relay from the notification outbox to live user channels."""
import logging
from contextlib import nullcontext
from threading import Event, Lock, Thread

from utils.channels import NOTIFICATION_EVENT, room_for
from utils.outbox import NotificationPayload

log = logging.getLogger(__name__)

DEFAULT_INTERVAL_MS = 3000


class NotificationPoller:
    """Periodically pushes undelivered notifications and marks them delivered.

    ``store`` must provide ``query_undelivered_notifications()`` and
    ``mark_notification_delivered(notification_id)``; ``registry`` must
    provide ``push(user_id, payload, event)``. ``app_context`` is a factory for
    the context each tick runs in (``app.app_context`` in the server).

    Ticks run one after another on a single worker thread, so a slow tick
    delays the next one instead of overlapping it.
    """

    def __init__(self, store, registry, interval_ms=DEFAULT_INTERVAL_MS, app_context=None):
        if int(interval_ms) <= 0:
            raise ValueError("interval_ms must be a positive number of milliseconds")
        self.store = store
        self.registry = registry
        self.interval_ms = int(interval_ms)
        self._app_context = app_context or nullcontext
        self._stop_event = Event()
        self._tick_lock = Lock()
        self._thread = None

    @property
    def running(self):
        return self._thread is not None and self._thread.is_alive()

    def start(self):
        if self.running:
            return self
        self._stop_event.clear()
        self._thread = Thread(target=self._run, name="notification-poller", daemon=True)
        self._thread.start()
        log.info("Notification poller started (interval=%sms)", self.interval_ms)
        return self

    def stop(self, timeout=None):
        """Stop scheduling ticks and wait for the in-flight tick to finish."""
        self._stop_event.set()
        thread = self._thread
        if thread is not None:
            thread.join(timeout)
            if thread.is_alive():
                log.warning("Notification poller did not stop within %ss", timeout)
                return
        self._thread = None
        log.info("Notification poller stopped")

    def _run(self):
        while not self._stop_event.wait(self.interval_ms / 1000.0):
            try:
                self.tick()
            except Exception:
                log.exception("❌ Notification poller tick failed")

    def tick(self):
        """Run one scan-and-deliver cycle; return the number of rows marked delivered."""
        with self._tick_lock, self._app_context():
            try:
                rows = self.store.query_undelivered_notifications()
            except Exception:
                log.exception("❌ Failed to query undelivered notifications")
                return 0

            if not rows:
                return 0

            delivered = 0
            for row in sorted(rows, key=lambda r: r["notificationID"]):
                if self._deliver(row):
                    delivered += 1
            return delivered

    def _deliver(self, row):
        notification_id = row.get("notificationID")
        owner = row.get("ownerUserID")
        try:
            payload = NotificationPayload.from_row(row)
            reached = self.registry.push(owner, payload.to_dict(), NOTIFICATION_EVENT)
        except Exception:
            # Left undelivered, the next tick tries again
            log.exception("⚠️ Failed to push notification %s to %s", notification_id, room_for(owner))
            return False

        log.info("emitted notification %s to %s (%s sessions)", notification_id, room_for(owner), reached)
        try:
            self.store.mark_notification_delivered(notification_id)
        except Exception:
            log.exception("⚠️ Failed to mark notification %s delivered", notification_id)
            return False
        return True


def start_poller(store, registry, interval_ms=DEFAULT_INTERVAL_MS, app_context=None):
    return NotificationPoller(store, registry, interval_ms=interval_ms, app_context=app_context).start()


def stop_poller(poller, timeout=None):
    poller.stop(timeout)
