"""Tests for clu.terminal.buffer.OutputBuffer."""

from __future__ import annotations

import threading

from clu.terminal.buffer import OutputBuffer


class TestOutputBufferBasics:
    def test_empty(self) -> None:
        buf = OutputBuffer()
        assert buf.count == 0
        assert len(buf) == 0
        assert buf.info_text == ""
        assert buf.error_text == ""

    def test_append(self) -> None:
        buf = OutputBuffer()
        buf.append_info("hello\n")
        buf.append_error("oops\n")
        assert buf.count == 2
        assert buf.info_lines == ["hello\n"]
        assert buf.error_lines == ["oops\n"]

    def test_append_many(self) -> None:
        buf = OutputBuffer()
        buf.append_info("a\n", "b\n", "c\n")
        assert buf.count == 3

    def test_append_nothing(self) -> None:
        buf = OutputBuffer()
        buf.append_info()
        assert buf.count == 0

    def test_text_has_no_added_separators(self) -> None:
        buf = OutputBuffer()
        buf.append_info("a", "b\n", "c")
        assert buf.info_text == "ab\nc"

    def test_lines_are_copies(self) -> None:
        buf = OutputBuffer()
        buf.append_info("a\n")
        lines = buf.info_lines
        lines.append("mutated")
        assert buf.info_lines == ["a\n"]


class TestOutputBufferObservers:
    def test_observers_in_registration_order(self) -> None:
        buf = OutputBuffer()
        calls: list[tuple[str, str]] = []
        buf.add_info_observer(lambda u: calls.append(("first", u)))
        buf.add_info_observer(lambda u: calls.append(("second", u)))
        buf.append_info("x", "y")
        assert calls == [
            ("first", "x"),
            ("second", "x"),
            ("first", "y"),
            ("second", "y"),
        ]

    def test_tracks_have_separate_observers(self) -> None:
        buf = OutputBuffer()
        info: list[str] = []
        error: list[str] = []
        buf.add_info_observer(info.append)
        buf.add_error_observer(error.append)
        buf.append_info("i")
        buf.append_error("e")
        assert info == ["i"]
        assert error == ["e"]

    def test_failing_observer_does_not_stop_append(self) -> None:
        buf = OutputBuffer()
        seen: list[str] = []

        def boom(_: str) -> None:
            raise RuntimeError("boom")

        buf.add_info_observer(boom, seen.append)
        buf.append_info("line")
        assert buf.info_lines == ["line"]
        assert seen == ["line"]

    def test_observer_may_read_buffer(self) -> None:
        buf = OutputBuffer()
        counts: list[int] = []
        buf.add_info_observer(lambda _: counts.append(buf.count))
        buf.append_info("a", "b")
        assert counts == [1, 2]

    def test_observers_survive_clear(self) -> None:
        buf = OutputBuffer()
        seen: list[str] = []
        buf.add_info_observer(seen.append)
        buf.clear()
        buf.append_info("after")
        assert seen == ["after"]


class TestOutputBufferClear:
    def test_clear(self) -> None:
        buf = OutputBuffer()
        buf.append_info("a")
        buf.append_error("b")
        buf.clear()
        assert buf.count == 0
        assert buf.info_text == ""
        assert buf.error_text == ""

    def test_clear_is_idempotent(self) -> None:
        buf = OutputBuffer()
        buf.append_info("a")
        buf.clear()
        buf.clear()
        assert buf.count == 0

    def test_take(self) -> None:
        buf = OutputBuffer()
        buf.append_info("a", "b")
        buf.append_error("c")
        info, error = buf.take()
        assert info == ["a", "b"]
        assert error == ["c"]
        assert buf.count == 0


class TestOutputBufferWait:
    def test_returns_immediately_when_count_differs(self) -> None:
        buf = OutputBuffer()
        buf.append_info("a")
        assert buf.wait_for_data(since=0, timeout=0) is True

    def test_times_out_without_data(self) -> None:
        buf = OutputBuffer()
        assert buf.wait_for_data(since=0, timeout=0.05) is False

    def test_wakes_on_append_from_other_thread(self) -> None:
        buf = OutputBuffer()
        timer = threading.Timer(0.05, buf.append_error, args=("late",))
        timer.start()
        try:
            assert buf.wait_for_data(since=0, timeout=5) is True
        finally:
            timer.join()
        assert buf.error_lines == ["late"]

    def test_count_monotonic_under_concurrent_appends(self) -> None:
        buf = OutputBuffer()

        def writer(append) -> None:
            for i in range(200):
                append(f"{i}\n")

        threads = [
            threading.Thread(target=writer, args=(buf.append_info,)),
            threading.Thread(target=writer, args=(buf.append_error,)),
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert buf.count == 400
        assert buf.info_lines == [f"{i}\n" for i in range(200)]
