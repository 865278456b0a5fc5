"""Unit tests for HistoryBuffer."""

from __future__ import annotations

import pytest

from history_buffer import HistoryBuffer


class TestCapacity:
    def test_default_capacity(self):
        assert HistoryBuffer().max_entries == 100

    def test_rejects_non_positive_capacity(self):
        with pytest.raises(ValueError):
            HistoryBuffer(0)

    @pytest.mark.parametrize("n", [0, 1, 4, 5, 6, 37])
    def test_length_is_min_of_appends_and_capacity(self, n: int):
        buf = HistoryBuffer(5)
        for i in range(n):
            buf.append(f"line-{i}")
        assert len(buf) == min(n, 5)
        assert buf.snapshot() == [f"line-{i}" for i in range(max(0, n - 5), n)]

    def test_oldest_evicted_first(self):
        buf = HistoryBuffer(2)
        buf.append("a")
        buf.append("b")
        buf.append("c")
        assert buf.snapshot() == ["b", "c"]


class TestTail:
    def test_tail_returns_last_n_in_order(self):
        buf = HistoryBuffer(100)
        for i in range(150):
            buf.append(f"msg-{i}")
        assert buf.tail(10) == [f"msg-{i}" for i in range(140, 150)]

    def test_tail_clamped_to_length(self):
        buf = HistoryBuffer(10)
        buf.append("only")
        assert buf.tail(10) == ["only"]

    def test_tail_zero_is_empty(self):
        buf = HistoryBuffer(10)
        buf.append("x")
        assert buf.tail(0) == []

    def test_tail_of_empty_buffer(self):
        assert HistoryBuffer(3).tail(5) == []
