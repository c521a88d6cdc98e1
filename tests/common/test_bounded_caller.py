import time

import pytest

from src.smart_attendance.smart_attendance.common.bounded import BoundedCaller, CallTimeout


def test_returns_value_within_limit():
    caller = BoundedCaller(1.0)
    try:
        assert caller.call(lambda: 42) == 42
    finally:
        caller.close()


def test_raises_call_timeout_and_releases_caller():
    caller = BoundedCaller(0.05)
    started = time.monotonic()
    try:
        with pytest.raises(CallTimeout):
            caller.call(lambda: time.sleep(0.5))
        assert time.monotonic() - started < 0.4
    finally:
        caller.close()


def test_errors_from_the_call_propagate():
    caller = BoundedCaller(1.0)

    def boom():
        raise RuntimeError("sensor unplugged")

    try:
        with pytest.raises(RuntimeError):
            caller.call(boom)
    finally:
        caller.close()


def test_timeout_must_be_positive():
    with pytest.raises(ValueError):
        BoundedCaller(0)
