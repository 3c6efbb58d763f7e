# Rev 0.2.0
"""In-process change notifications (Rev 0.2.0)

The gateway publishes one notification per affected row after a write
commits. Screens subscribe to a table/event pair, optionally narrowed by
equality filters, and must release the subscription when they close.

    sub = notifier.subscribe("messages", "INSERT", {"project_id": 7}, on_insert)
    ...
    sub.unsubscribe()
"""
from __future__ import annotations
import itertools
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional

log = logging.getLogger(__name__)

Callback = Callable[[Dict[str, Any]], None]


@dataclass
class Subscription:
    id: int
    table: str
    event: str
    filters: Dict[str, Any] = field(default_factory=dict)
    callback: Optional[Callback] = None
    _notifier: Optional["ChangeNotifier"] = field(default=None, repr=False)

    @property
    def active(self) -> bool:
        return self._notifier is not None

    def matches(self, table: str, event: str, record: Mapping[str, Any]) -> bool:
        if table != self.table or (self.event != "*" and event != self.event):
            return False
        for col, want in self.filters.items():
            have = record.get(col)
            if have is None or str(have) != str(want):
                return False
        return True

    def unsubscribe(self) -> None:
        if self._notifier is not None:
            self._notifier._remove(self.id)
            self._notifier = None


class ChangeNotifier:
    def __init__(self) -> None:
        self._subs: Dict[int, Subscription] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def subscribe(
        self,
        table: str,
        event: str = "INSERT",
        filters: Optional[Mapping[str, Any]] = None,
        callback: Optional[Callback] = None,
    ) -> Subscription:
        if callback is None:
            raise ValueError("callback required")
        with self._lock:
            sub = Subscription(
                id=next(self._ids),
                table=table,
                event=event.upper(),
                filters=dict(filters or {}),
                callback=callback,
                _notifier=self,
            )
            self._subs[sub.id] = sub
        log.debug("subscribe #%s %s %s %s", sub.id, table, sub.event, sub.filters)
        return sub

    def _remove(self, sub_id: int) -> None:
        with self._lock:
            self._subs.pop(sub_id, None)
        log.debug("unsubscribe #%s", sub_id)

    def subscriber_count(self, table: Optional[str] = None) -> int:
        with self._lock:
            return sum(1 for s in self._subs.values() if table is None or s.table == table)

    def publish(self, table: str, event: str, record: Mapping[str, Any]) -> int:
        """Deliver to every matching subscriber; returns the delivery count.

        A failing callback is logged and does not stop delivery to the others.
        """
        with self._lock:
            targets: List[Subscription] = [
                s for s in self._subs.values() if s.matches(table, event, record)
            ]
        payload = {"table": table, "event": event, "record": dict(record)}
        delivered = 0
        for sub in targets:
            try:
                sub.callback(payload)
                delivered += 1
            except Exception:
                log.exception("Change callback #%s for %s/%s failed", sub.id, table, event)
        return delivered
