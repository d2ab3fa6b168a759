"""Background timer that removes abandoned matches."""

import logging
import threading
from datetime import datetime, timezone

from src.services.session_service import SessionService

logger = logging.getLogger(__name__)

MIN_INTERVAL_SECONDS = 5


class MatchSweeper:
    """Calls SessionService.purge_expired() periodically on a daemon thread."""

    def __init__(self, service: SessionService, interval_seconds: int) -> None:
        self._service = service
        self._interval_seconds = max(MIN_INTERVAL_SECONDS, interval_seconds)
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self.last_run_at: str | None = None
        self.last_removed: int = 0

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def run_once(self) -> int:
        try:
            self.last_removed = self._service.purge_expired()
        except Exception:
            logger.exception("Match sweep failed")
            self.last_removed = 0
        self.last_run_at = datetime.now(timezone.utc).isoformat()
        return self.last_removed

    def start(self) -> None:
        if self.is_running:
            return

        def _loop() -> None:
            while not self._stop_event.wait(self._interval_seconds):
                self.run_once()

        self._stop_event.clear()
        self._thread = threading.Thread(target=_loop, name="match-sweeper", daemon=True)
        self._thread.start()
        logger.info("Match sweeper started (every %ss)", self._interval_seconds)

    def stop(self) -> None:
        if not self.is_running:
            return
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=2)
        logger.info("Match sweeper stopped")
