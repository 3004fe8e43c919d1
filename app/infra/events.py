from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Callable
from typing import Any

from sqlmodel import Session

from app.domain.models import ChangeEvent, ChangeKind, EventRecord
from app.infra.db import engine

logger = logging.getLogger(__name__)

EventHandler = Callable[[ChangeEvent], None]

WILDCARD = "*"


class EventBus:
    """Process-wide change signal.

    Subscribers register for one ``ChangeKind`` (or ``"*"``) and are called
    after the event has been recorded. A failing subscriber is logged and
    does not stop the others. Events carry ids only; listeners
    re-read whatever they display.
    """

    def __init__(self) -> None:
        self._subscribers: dict[str, list[EventHandler]] = defaultdict(list)

    def subscribe(self, kind: ChangeKind | str, handler: EventHandler) -> None:
        self._subscribers[str(kind)].append(handler)

    def unsubscribe(self, kind: ChangeKind | str, handler: EventHandler) -> None:
        key = str(kind)
        if key in self._subscribers and handler in self._subscribers[key]:
            self._subscribers[key].remove(handler)

    def publish(self, event: ChangeEvent, session: Session | None = None) -> None:
        should_commit = session is None
        if session is None:
            session = Session(engine)
        try:
            record = EventRecord(
                event_id=event.event_id,
                event_type=event.event_type,
                barangay_id=event.barangay_id,
                ts=event.ts,
                actor_id=event.actor_id,
                payload=event.payload,
            )
            session.add(record)
            if should_commit:
                session.commit()
        finally:
            if should_commit:
                session.close()

        handlers = [*self._subscribers.get(str(event.kind), []), *self._subscribers.get(WILDCARD, [])]
        for handler in handlers:
            try:
                handler(event)
            except Exception:
                logger.exception("event handler failed for %s", event.event_type)

    def publish_change(
        self,
        kind: ChangeKind,
        action: str,
        barangay_id: str,
        payload: dict[str, Any],
        actor_id: str | None = None,
    ) -> ChangeEvent:
        event = ChangeEvent(
            kind=kind,
            action=action,
            barangay_id=barangay_id,
            actor_id=actor_id,
            payload=payload,
        )
        self.publish(event)
        return event


event_bus = EventBus()
