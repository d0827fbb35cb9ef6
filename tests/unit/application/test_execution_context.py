"""Tests for ExecutionContext."""

from ulid import ULID

from chronicle.context import ExecutionContext, clear_context, get_context, set_context


def test_empty_context_by_default():
    assert get_context() == ExecutionContext()


def test_create_uses_correlation_as_causation():
    correlation_id = ULID()

    ctx = ExecutionContext.create(correlation_id)

    assert ctx.correlation_id == correlation_id
    assert ctx.causation_id == correlation_id
    assert ctx.command_id is None


def test_for_command_and_for_event_keep_correlation():
    ctx = ExecutionContext.create()
    command_id, event_id = ULID(), ULID()

    command_ctx = ctx.for_command(command_id)
    event_ctx = command_ctx.for_event(event_id)

    assert command_ctx.command_id == command_id
    assert event_ctx.correlation_id == ctx.correlation_id
    assert event_ctx.causation_id == event_id
    assert event_ctx.command_id is None


def test_set_and_clear():
    ctx = ExecutionContext.create()

    set_context(ctx)
    assert get_context() is ctx

    clear_context()
    assert get_context() == ExecutionContext()
