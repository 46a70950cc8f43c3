from .notifier import (
    BaseNotifier,
    InAppNotifier,
    LoggingNotifier,
    NotificationEvent,
    SwapNotification,
    get_notifier,
)

__all__ = [
    "BaseNotifier",
    "InAppNotifier",
    "LoggingNotifier",
    "NotificationEvent",
    "SwapNotification",
    "get_notifier",
]
