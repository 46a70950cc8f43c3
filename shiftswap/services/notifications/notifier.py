"""
Notification side channel for swap events.
The engine decides who hears about what; delivery beyond an in-app row is
someone else's job.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional

from sqlalchemy.orm import Session

from shiftswap.core.config import settings
from shiftswap.db.database import SessionLocal
from shiftswap.db.models.notifications import Notifications, NotificationSettings


logger = logging.getLogger(__name__)


class NotificationEvent(str, Enum):
    SHIFT_SWAP_REQUEST = "SHIFT_SWAP_REQUEST"
    SHIFT_SWAP_ACCEPTED = "SHIFT_SWAP_ACCEPTED"
    SHIFT_SWAP_REJECTED = "SHIFT_SWAP_REJECTED"
    SHIFT_SWAP_APPROVED = "SHIFT_SWAP_APPROVED"
    SHIFT_SWAP_DECLINED = "SHIFT_SWAP_DECLINED"


TITLES = {
    NotificationEvent.SHIFT_SWAP_REQUEST: "Shift swap request",
    NotificationEvent.SHIFT_SWAP_ACCEPTED: "Shift swap accepted",
    NotificationEvent.SHIFT_SWAP_REJECTED: "Shift swap rejected",
    NotificationEvent.SHIFT_SWAP_APPROVED: "Shift swap approved",
    NotificationEvent.SHIFT_SWAP_DECLINED: "Shift swap declined by manager",
}

MESSAGES = {
    NotificationEvent.SHIFT_SWAP_REQUEST: "A colleague offered you their shift on {shift_date}.",
    NotificationEvent.SHIFT_SWAP_ACCEPTED: "Your swap request was accepted. Waiting for manager approval.",
    NotificationEvent.SHIFT_SWAP_REJECTED: "Your swap request was rejected.",
    NotificationEvent.SHIFT_SWAP_APPROVED: "The manager approved the shift swap. The shift has been reassigned.",
    NotificationEvent.SHIFT_SWAP_DECLINED: "The manager declined the shift swap.",
}


@dataclass
class SwapNotification:
    """What happened to which swap, and who should hear about it."""
    recipient_user_ids: List[int]
    swap_request_id: int
    shift_id: int
    status: str
    actor_user_id: Optional[int] = None
    extra: dict = field(default_factory=dict)

    def as_payload(self) -> dict:
        return {
            "swap_request_id": self.swap_request_id,
            "shift_id": self.shift_id,
            "status": self.status,
            "actor_user_id": self.actor_user_id,
            **self.extra,
        }


class BaseNotifier(ABC):
    """Abstract base for notifiers."""

    @abstractmethod
    def notify(self, event: NotificationEvent, payload: SwapNotification) -> None:
        ...


class LoggingNotifier(BaseNotifier):
    def notify(self, event: NotificationEvent, payload: SwapNotification) -> None:
        logger.info(
            "Swap notification %s for users %s: %s",
            event.value, payload.recipient_user_ids, payload.as_payload(),
        )


class InAppNotifier(BaseNotifier):
    """Stores one notification row per recipient, in its own session."""

    def __init__(self, session_factory: Callable[[], Session] = SessionLocal):
        self.session_factory = session_factory

    def notify(self, event: NotificationEvent, payload: SwapNotification) -> None:
        db = self.session_factory()
        try:
            delivered = []
            for user_id in payload.recipient_user_ids:
                if not _swap_notifications_enabled(db, user_id):
                    logger.debug("Swap notifications disabled for user %s", user_id)
                    continue
                db.add(Notifications(
                    user_id=user_id,
                    type=event.value,
                    title=TITLES[event],
                    message=MESSAGES[event].format(shift_date=payload.extra.get("shift_date", "")),
                    payload=payload.as_payload(),
                ))
                delivered.append(user_id)
            db.commit()
            logger.info("Swap notification %s stored for users %s", event.value, delivered)
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()


def _swap_notifications_enabled(db: Session, user_id: int) -> bool:
    prefs = db.query(NotificationSettings).filter(NotificationSettings.user_id == user_id).first()
    return prefs is None or prefs.enable_swap_notifications


def get_notifier() -> BaseNotifier:
    """Factory to get the configured notifier."""
    name = settings.NOTIFIER

    if name == "inapp":
        return InAppNotifier()
    elif name == "log":
        return LoggingNotifier()
    else:
        raise ValueError(f"Unknown notifier: {name}")
