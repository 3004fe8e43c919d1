from __future__ import annotations

import pytest
from sqlmodel import Session, SQLModel, create_engine, select

from app.domain.models import ChangeEvent, ChangeKind, EventRecord
from app.infra.events import WILDCARD, EventBus


def test_event_bus_publish_and_subscribe() -> None:
    engine = create_engine("sqlite:///:memory:")
    SQLModel.metadata.create_all(engine)

    bus = EventBus()
    seen: list[str] = []
    everything: list[str] = []

    def handler(event: ChangeEvent) -> None:
        seen.append(event.event_id)

    bus.subscribe(ChangeKind.PETS, handler)
    bus.subscribe(WILDCARD, lambda event: everything.append(event.event_type))

    event = ChangeEvent(
        kind=ChangeKind.PETS,
        action="created",
        barangay_id="barangay-a",
        payload={"pet_id": "pet-1"},
    )
    with Session(engine) as session:
        bus.publish(event, session=session)
        session.commit()

    with Session(engine) as session:
        stored = session.exec(select(EventRecord)).all()

    assert len(stored) == 1
    assert stored[0].event_id == event.event_id
    assert stored[0].event_type == "pets.created"
    assert stored[0].barangay_id == "barangay-a"
    assert seen == [event.event_id]
    assert everything == ["pets.created"]


def test_unsubscribed_handler_is_not_called() -> None:
    engine = create_engine("sqlite:///:memory:")
    SQLModel.metadata.create_all(engine)

    bus = EventBus()
    calls: list[ChangeEvent] = []
    bus.subscribe(ChangeKind.STRAYS, calls.append)
    bus.unsubscribe(ChangeKind.STRAYS, calls.append)
    bus.unsubscribe(ChangeKind.OWNERS, calls.append)

    with Session(engine) as session:
        bus.publish(
            ChangeEvent(kind=ChangeKind.STRAYS, action="updated", barangay_id="barangay-b"),
            session=session,
        )
        session.commit()

    assert calls == []


def test_other_kinds_do_not_reach_handler() -> None:
    engine = create_engine("sqlite:///:memory:")
    SQLModel.metadata.create_all(engine)

    bus = EventBus()
    calls: list[str] = []
    bus.subscribe(ChangeKind.NOTIFICATIONS, lambda event: calls.append(event.action))

    with Session(engine) as session:
        bus.publish(ChangeEvent(kind=ChangeKind.PETS, action="deleted", barangay_id="b"), session=session)
        bus.publish(ChangeEvent(kind=ChangeKind.NOTIFICATIONS, action="created", barangay_id="b"), session=session)
        session.commit()

    assert calls == ["created"]


def test_failing_handler_does_not_stop_the_others(caplog: pytest.LogCaptureFixture) -> None:
    engine = create_engine("sqlite:///:memory:")
    SQLModel.metadata.create_all(engine)

    bus = EventBus()
    calls: list[str] = []

    def broken(event: ChangeEvent) -> None:
        raise RuntimeError("listener exploded")

    bus.subscribe(ChangeKind.OWNERS, broken)
    bus.subscribe(ChangeKind.OWNERS, lambda event: calls.append(event.event_type))
    bus.subscribe(WILDCARD, lambda event: calls.append("wildcard"))

    event = ChangeEvent(kind=ChangeKind.OWNERS, action="created", barangay_id="barangay-c")
    with Session(engine) as session:
        bus.publish(event, session=session)
        session.commit()

    with Session(engine) as session:
        assert session.exec(select(EventRecord)).one().event_id == event.event_id
    assert calls == ["owners.created", "wildcard"]
    assert "event handler failed for owners.created" in caplog.text
