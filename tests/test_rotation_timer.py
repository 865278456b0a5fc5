"""Unit tests for RotationTimer."""

from __future__ import annotations

import threading
import time

import pytest

from rotation_timer import RotationTimer


def _wait_for(predicate, timeout: float = 2.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.005)
    return predicate()


class TestRotationTimer:
    def test_rejects_non_positive_interval(self):
        with pytest.raises(ValueError):
            RotationTimer(0, lambda: None)

    def test_fires_repeatedly(self):
        calls: list[float] = []
        timer = RotationTimer(0.01, lambda: calls.append(time.monotonic()))
        timer.start()
        try:
            assert _wait_for(lambda: len(calls) >= 3)
        finally:
            timer.stop()

    def test_no_calls_after_stop(self):
        calls: list[int] = []
        timer = RotationTimer(0.01, lambda: calls.append(1))
        timer.start()
        _wait_for(lambda: len(calls) >= 1)
        timer.stop()
        count = len(calls)
        time.sleep(0.05)
        assert len(calls) == count
        assert not timer.running

    def test_callback_exception_does_not_kill_timer(self):
        calls: list[int] = []

        def flaky() -> None:
            calls.append(1)
            if len(calls) == 1:
                raise OSError("disk full")

        timer = RotationTimer(0.01, flaky)
        timer.start()
        try:
            assert _wait_for(lambda: len(calls) >= 2)
        finally:
            timer.stop()

    def test_stop_waits_for_in_flight_callback(self):
        started = threading.Event()
        finished = threading.Event()

        def slow() -> None:
            started.set()
            time.sleep(0.1)
            finished.set()

        timer = RotationTimer(0.01, slow)
        timer.start()
        assert started.wait(2.0)
        timer.stop()
        assert finished.is_set()

    def test_stop_without_start(self):
        RotationTimer(1.0, lambda: None).stop()
