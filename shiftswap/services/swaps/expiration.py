"""
Expiration of swap requests nobody answered.

expire_swap_requests() is the batch operation; SwapExpirationScheduler runs it
once at start and then every interval on a background thread.
"""

import logging
import threading
from datetime import datetime
from typing import Callable, Optional

from sqlalchemy.orm import Session

from shiftswap.core.config import settings
from shiftswap.core.timeutils import as_utc, utcnow
from shiftswap.db.database import SessionLocal
from shiftswap.db.models.shift_swap_history import SwapChangeType
from shiftswap.db.models.shifts import Shifts
from shiftswap.db.models.swap_requests import SwapStatus

from .history import record_history
from .store import expire_overdue


logger = logging.getLogger(__name__)


def record_expiry(
    db: Session,
    shift: Optional[Shifts],
    request_id: int,
    from_user_id: int,
    to_user_id: int,
    requested_at: datetime,
) -> None:
    if shift is None:
        logger.warning("Swap request %s expired but its shift is gone, no history snapshot", request_id)
        return
    record_history(
        db, shift,
        swap_request_id=request_id,
        from_user_id=from_user_id,
        to_user_id=to_user_id,
        status=SwapStatus.EXPIRED,
        change_type=SwapChangeType.SWAP_EXPIRED,
        requested_at=requested_at,
        notes="Expired without a response",
    )


def expire_swap_requests(db: Session, now: Optional[datetime] = None) -> int:
    """
    Expire every PENDING request whose deadline is before `now`.
    Returns how many rows this call flipped; a repeat call returns 0.
    """
    now = as_utc(now) or utcnow()
    logger.debug("Checking for expired swap requests at %s", now.isoformat())

    expired = expire_overdue(db, now)
    if not expired:
        db.commit()
        logger.debug("No swap requests to expire")
        return 0

    shift_ids = {row.shift_id for row in expired}
    shifts = {s.id: s for s in db.query(Shifts).filter(Shifts.id.in_(shift_ids)).all()}
    for row in expired:
        record_expiry(db, shifts.get(row.shift_id), row.id, row.from_user_id, row.to_user_id, row.requested_at)
    db.commit()

    logger.info("Expired %d swap requests", len(expired))
    return len(expired)


class SwapExpirationScheduler:
    """
    Runs expire_swap_requests() on its own thread and session.
    Build one per process (or per test), start() it, stop() it.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session] = SessionLocal,
        interval_seconds: Optional[float] = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.session_factory = session_factory
        self.interval_seconds = float(interval_seconds if interval_seconds is not None else settings.SWAP_SWEEP_INTERVAL_SECONDS)
        self.clock = clock

        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            logger.warning("Swap expiration scheduler already running")
            return

        logger.info("Starting swap expiration scheduler, interval %ss", self.interval_seconds)
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name="swap-expiration", daemon=True)
        self._thread.start()

    def stop(self, timeout: float = 5.0) -> None:
        self._stop.set()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=timeout)
        if self._thread is not None:
            logger.info("Stopped swap expiration scheduler")
        self._thread = None

    def run_once(self) -> int:
        """One sweep in a fresh session. Errors are logged, never raised."""
        db = self.session_factory()
        try:
            return expire_swap_requests(db, self.clock())
        except Exception:
            db.rollback()
            logger.exception("Error expiring swap requests, will retry next tick")
            return 0
        finally:
            db.close()

    def _loop(self) -> None:
        # first sweep straight away, then every interval until stopped
        while not self._stop.is_set():
            self.run_once()
            self._stop.wait(self.interval_seconds)
