"""Tests for asynchronous conversion on an executor."""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor

import pytest

from xml_json_converter.api.asynchronous import submit_parse
from xml_json_converter.shared.config import ParserConfig
from xml_json_converter.shared.errors import XMLSyntaxError


class ManualExecutor:
    """Executor that runs submitted work only when asked to."""

    def __init__(self):
        self.pending = []

    def submit(self, fn, *args, **kwargs):
        future = Future()
        self.pending.append((future, fn, args, kwargs))
        return future

    def run_all(self):
        for future, fn, args, kwargs in self.pending:
            if not future.set_running_or_notify_cancel():
                continue
            try:
                future.set_result(fn(*args, **kwargs))
            except Exception as e:
                future.set_exception(e)


class TestSubmitParse:
    """Test suite for submit_parse."""

    def test_result_through_future(self):
        """Test that the future resolves to the tree."""
        with ThreadPoolExecutor(max_workers=2) as pool:
            future = submit_parse(pool, "<a><b>1</b></a>")
            assert future.result(timeout=10) == {"a": {"b": 1}}

    def test_on_complete_called(self):
        """Test that the completion callback receives the tree."""
        received = []
        done = threading.Event()

        def on_complete(tree):
            received.append(tree)
            done.set()

        with ThreadPoolExecutor(max_workers=1) as pool:
            submit_parse(pool, "<a>1</a>", on_complete=on_complete)
            assert done.wait(timeout=10)

        assert received == [{"a": 1}]

    def test_on_failure_called(self):
        """Test that the failure callback receives the error."""
        errors = []
        executor = ManualExecutor()

        future = submit_parse(
            executor, "<a>", on_complete=lambda tree: pytest.fail("unexpected"), on_failure=errors.append
        )
        executor.run_all()

        assert len(errors) == 1
        assert isinstance(errors[0], XMLSyntaxError)
        with pytest.raises(XMLSyntaxError):
            future.result()

    def test_completion_callback_error_reported(self):
        """Test that an error raised by on_complete goes to on_failure."""
        errors = []
        executor = ManualExecutor()

        def on_complete(tree):
            raise RuntimeError("callback broke")

        future = submit_parse(executor, "<a/>", on_complete=on_complete, on_failure=errors.append)
        executor.run_all()

        assert future.result() == {"a": ""}
        assert [str(e) for e in errors] == ["callback broke"]

    def test_failure_logged_without_callback(self, caplog):
        """Test that failures are logged when no failure callback is given."""
        executor = ManualExecutor()

        with caplog.at_level(logging.WARNING, logger="xml_json_converter"):
            submit_parse(executor, "<a>")
            executor.run_all()

        assert any(
            "Asynchronous conversion failed" in record.getMessage() for record in caplog.records
        )

    def test_cancelled_future_skips_callbacks(self):
        """Test that cancelling before start prevents work and callbacks."""
        calls = []
        executor = ManualExecutor()

        future = submit_parse(
            executor, "<a/>", on_complete=calls.append, on_failure=calls.append
        )
        assert future.cancel()
        executor.run_all()

        assert future.cancelled()
        assert calls == []

    def test_config_is_used(self):
        """Test that the configuration applies to the parse."""
        executor = ManualExecutor()

        future = submit_parse(executor, "<a>1</a>", config=ParserConfig.string_preserving())
        executor.run_all()

        assert future.result() == {"a": "1"}
