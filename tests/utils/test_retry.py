from __future__ import annotations

import asyncio

import pytest

from statscard.utils.retry import linear_backoff, retry_async


class FlakyOperation:
    def __init__(self, outcomes: list[object]) -> None:
        self._outcomes = outcomes.copy()
        self.calls = 0

    async def __call__(self) -> object:
        self.calls += 1
        outcome = self._outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def _run(operation: FlakyOperation, sleeps: list[float], **kwargs: object) -> object:
    async def fake_sleep(delay: float) -> None:
        sleeps.append(delay)

    return asyncio.run(
        retry_async(
            operation,
            max_attempts=kwargs.pop("max_attempts", 3),
            backoff=linear_backoff(1.0),
            sleeper=fake_sleep,
            **kwargs,
        )
    )


def test_linear_backoff_grows_with_attempt() -> None:
    backoff = linear_backoff(1.5)

    assert [backoff(attempt) for attempt in (1, 2, 3)] == [1.5, 3.0, 4.5]
    assert backoff(0) == 0


def test_success_on_first_attempt_does_not_sleep() -> None:
    sleeps: list[float] = []
    operation = FlakyOperation(["ok"])

    assert _run(operation, sleeps) == "ok"
    assert operation.calls == 1
    assert sleeps == []


def test_exceptions_are_retried_until_success() -> None:
    sleeps: list[float] = []
    operation = FlakyOperation([RuntimeError("boom"), RuntimeError("boom"), "ok"])

    assert _run(operation, sleeps) == "ok"
    assert operation.calls == 3
    assert sleeps == [1.0, 2.0]


def test_last_exception_is_raised_when_attempts_run_out() -> None:
    sleeps: list[float] = []
    operation = FlakyOperation([RuntimeError("one"), RuntimeError("two"), RuntimeError("three")])

    with pytest.raises(RuntimeError, match="three"):
        _run(operation, sleeps)
    assert operation.calls == 3


def test_exceptions_outside_retry_on_propagate_immediately() -> None:
    sleeps: list[float] = []
    operation = FlakyOperation([KeyError("nope"), "ok"])

    with pytest.raises(KeyError):
        _run(operation, sleeps, retry_on=(RuntimeError,))
    assert operation.calls == 1
    assert sleeps == []


def test_suspicious_results_are_retried_and_last_one_returned() -> None:
    sleeps: list[float] = []
    operation = FlakyOperation([0, 0, 0])

    assert _run(operation, sleeps, should_retry=lambda value: value == 0) == 0
    assert operation.calls == 3
    assert sleeps == [1.0, 2.0]


def test_max_attempts_below_one_still_runs_once() -> None:
    sleeps: list[float] = []
    operation = FlakyOperation(["ok"])

    assert _run(operation, sleeps, max_attempts=0) == "ok"
    assert operation.calls == 1
