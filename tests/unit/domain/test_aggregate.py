"""Tests for the Aggregate base class."""

import pytest
from ulid import ULID

from chronicle.context import ExecutionContext, set_context
from chronicle.domain import Aggregate, Command, DomainEvent, DomainRuleViolation, Event
from chronicle.routing import applies_event, handles_command


class Increment(Command[None]):
    amount: int = 1


class Unhandled(Command[None]):
    pass


class Incremented(DomainEvent):
    amount: int


class Ignored(DomainEvent):
    pass


class Counter(Aggregate):
    value: int = 0

    @handles_command
    def handle_increment(self, cmd: Increment) -> None:
        if cmd.amount <= 0:
            raise DomainRuleViolation("amount must be positive")
        self.emit(Incremented(amount=cmd.amount))

    @applies_event
    def apply_incremented(self, evt: Incremented) -> None:
        self.value += evt.amount


def history(*amounts: int) -> list[Event[Incremented]]:
    return [
        Event(aggregate_id="c-1", data=Incremented(amount=amount), sequence=i)
        for i, amount in enumerate(amounts, start=1)
    ]


def test_handled_types_come_from_annotations():
    assert Counter.handled_command_types() == {Increment}
    assert Counter.applied_event_types() == {Incremented}


def test_new_aggregate_is_in_initial_state():
    counter = Counter(id="c-1")

    assert counter.value == 0
    assert counter.version == 0
    assert counter.last_event_time is None
    assert counter.get_uncommitted_events() == []


def test_handle_emits_unsequenced_event_and_applies_it():
    counter = Counter(id="c-1")

    counter.handle(Increment(aggregate_id="c-1", amount=5))

    assert counter.value == 5
    assert counter.version == 1
    [event] = counter.get_uncommitted_events()
    assert event.aggregate_id == "c-1"
    assert event.data == Incremented(amount=5)
    assert event.sequence == 0
    assert counter.last_event_time == event.timestamp


def test_rule_violation_emits_nothing():
    counter = Counter(id="c-1")

    with pytest.raises(DomainRuleViolation, match="amount must be positive"):
        counter.handle(Increment(aggregate_id="c-1", amount=0))

    assert counter.get_uncommitted_events() == []
    assert counter.version == 0


def test_unhandled_command_raises():
    counter = Counter(id="c-1")

    with pytest.raises(NotImplementedError):
        counter.handle(Unhandled(aggregate_id="c-1"))


def test_payload_without_applier_is_ignored():
    counter = Counter(id="c-1")

    counter.apply(Ignored())

    assert counter.value == 0


def test_replay_folds_history_in_order():
    counter = Counter(id="c-1")
    events = history(1, 2, 3)

    counter.replay_events(events)

    assert counter.value == 6
    assert counter.version == 3
    assert counter.last_event_time == events[-1].timestamp
    assert counter.get_uncommitted_events() == []


def test_identical_histories_give_identical_state():
    events = history(4, 1)
    first = Counter(id="c-1")
    second = Counter(id="c-1")

    first.replay_events(events)
    second.replay_events(events)

    assert first.model_dump() == second.model_dump()


def test_changed_since_tracks_emitted_events():
    counter = Counter(id="c-1")
    counter.replay_events(history(1))

    assert not counter.changed_since(1)
    counter.handle(Increment(aggregate_id="c-1"))
    assert counter.changed_since(1)


def test_emit_takes_ids_from_execution_context():
    correlation_id = ULID()
    command = Increment(aggregate_id="c-1")
    set_context(ExecutionContext.create(correlation_id).for_command(command.command_id))
    counter = Counter(id="c-1")

    counter.handle(command)

    [event] = counter.get_uncommitted_events()
    assert event.correlation_id == correlation_id
    assert event.causation_id == command.command_id


def test_uncommitted_events_are_not_serialized():
    counter = Counter(id="c-1")
    counter.handle(Increment(aggregate_id="c-1"))

    assert "uncommitted_events" not in counter.model_dump()


def test_clear_uncommitted_events():
    counter = Counter(id="c-1")
    counter.handle(Increment(aggregate_id="c-1"))

    counter.clear_uncommitted_events()

    assert counter.get_uncommitted_events() == []
    assert counter.value == 1
