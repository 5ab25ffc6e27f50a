"""
Tests for the error reporter hook.
"""

from __future__ import annotations

import logging

from api_exceptions.api.reporting import Reporter
from api_exceptions.core.exceptions import FormValidationError
from api_exceptions.models.errors import (
    ErrorKind,
    InternalServerErrorApiError,
    NotFoundApiError,
)


class TestReporterUnwrap:
    def test_api_error_with_cause_reports_cause(self) -> None:
        reported: list[BaseException] = []
        original = ValueError("original")
        Reporter(sinks=[reported.append]).report(InternalServerErrorApiError(cause=original))
        assert reported == [original]

    def test_api_error_without_cause_reports_itself(self) -> None:
        reported: list[BaseException] = []
        error = NotFoundApiError()
        Reporter(sinks=[reported.append]).report(error)
        assert reported == [error]

    def test_raw_error_forwarded(self) -> None:
        reported: list[BaseException] = []
        error = RuntimeError("raw")
        Reporter(sinks=[reported.append]).report(error)
        assert reported == [error]


class TestReporterLogging:
    def test_server_error_logged_with_traceback(self, caplog) -> None:
        with caplog.at_level(logging.ERROR, logger="api_exceptions.api.reporting"):
            Reporter().report(RuntimeError("kaboom"))

        record = caplog.records[0]
        assert record.levelno == logging.ERROR
        assert "kaboom" in record.getMessage()
        assert record.exc_info is not None

    def test_client_error_logged_as_warning(self, caplog) -> None:
        with caplog.at_level(logging.WARNING, logger="api_exceptions.api.reporting"):
            Reporter().report(FormValidationError({"email": ["required"]}))

        record = caplog.records[0]
        assert record.levelno == logging.WARNING
        assert record.getMessage().startswith("422 FormValidationError")
        assert record.exc_info is None

    def test_dont_report_skips_kind(self, caplog) -> None:
        reported: list[BaseException] = []
        reporter = Reporter(sinks=[reported.append], dont_report=[ErrorKind.NOT_FOUND])

        with caplog.at_level(logging.DEBUG, logger="api_exceptions.api.reporting"):
            reporter.report(NotFoundApiError())

        assert reported == []
        assert caplog.records == []


class TestReporterSafety:
    def test_failing_sink_does_not_raise(self, caplog) -> None:
        reported: list[BaseException] = []

        def broken(error: BaseException) -> None:
            raise ConnectionError("monitoring down")

        reporter = Reporter(sinks=[broken, reported.append])
        error = RuntimeError("boom")

        with caplog.at_level(logging.ERROR, logger="api_exceptions.api.reporting"):
            reporter.report(error)

        assert reported == [error]
        assert any("failed" in r.getMessage() for r in caplog.records)

    def test_add_sink(self) -> None:
        reported: list[BaseException] = []
        reporter = Reporter()
        reporter.add_sink(reported.append)
        reporter.report(KeyError("k"))
        assert len(reported) == 1
