from domain.events.list_events import NOTIFIER_NAMES, ChangeReason
from domain.events.notifier import EventNotifier, Handler, Unsubscribe

__all__ = [
    "NOTIFIER_NAMES",
    "ChangeReason",
    "EventNotifier",
    "Handler",
    "Unsubscribe",
]
