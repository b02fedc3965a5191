"""
Change Notifier
Post-commit change events for connected clients

Services publish only after their transaction has committed. A failing
notifier is logged and never undoes the committed change.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from tactical_inventory.core.logging import get_logger
from tactical_inventory.core.config import Settings, settings as default_settings

logger = get_logger("business")


# Event kinds
ENTRY_CREATED = "entry-created"
ENTRY_UPDATED = "entry-updated"
ENTRY_DELETED = "entry-deleted"
DISPATCH_CREATED = "dispatch-created"
DISPATCH_UPDATED = "dispatch-updated"
DISPATCH_DELETED = "dispatch-deleted"
DISPATCH_APPROVED = "dispatch-approved"
RECOVERY_CREATED = "recovery-created"
CYCLIC_TASK_CREATED = "cyclic-task-created"
CYCLIC_COUNT_RECORDED = "cyclic-count-recorded"
CYCLIC_TASK_COMPLETED = "cyclic-task-completed"
ITEM_CREATED = "item-created"
ITEM_UPDATED = "item-updated"
ITEM_DELETED = "item-deleted"
ORDER_CREATED = "order-created"


@dataclass(frozen=True)
class ChangeEvent:
    kind: str
    sites: Sequence[str]
    entity_id: Optional[int]
    payload: Dict[str, Any] = field(default_factory=dict)


class ChangeNotifier(ABC):
    """Receives committed change events"""

    @abstractmethod
    def publish(self, event: ChangeEvent) -> None:
        pass


class LoggingChangeNotifier(ChangeNotifier):
    """Writes each event to the application log"""

    def publish(self, event: ChangeEvent) -> None:
        logger.info(
            f"{event.kind} id={event.entity_id} sites={','.join(event.sites)}"
        )


class NullChangeNotifier(ChangeNotifier):
    def publish(self, event: ChangeEvent) -> None:
        pass


class RecordingChangeNotifier(ChangeNotifier):
    """Keeps published events in memory"""

    def __init__(self):
        self.events: List[ChangeEvent] = []

    def publish(self, event: ChangeEvent) -> None:
        self.events.append(event)

    def kinds(self) -> List[str]:
        return [event.kind for event in self.events]

    def clear(self) -> None:
        self.events.clear()


def publish_safely(notifier: Optional[ChangeNotifier], event: ChangeEvent) -> None:
    """Deliver an event after commit; delivery failures are logged only"""
    if notifier is None:
        return
    try:
        notifier.publish(event)
    except Exception:
        logger.exception(f"Failed to publish {event.kind} for id={event.entity_id}")


def create_notifier(config: Optional[Settings] = None) -> ChangeNotifier:
    config = config or default_settings
    backend = (config.NOTIFIER_BACKEND or "logging").lower()
    if backend == "none":
        return NullChangeNotifier()
    if backend == "logging":
        return LoggingChangeNotifier()
    raise ValueError(f"Unknown notifier backend: {config.NOTIFIER_BACKEND}")
