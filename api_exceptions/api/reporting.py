"""
Error reporting hook.

Logs each handled error and forwards it to optional monitoring sinks
(Sentry, Bugsnag, ...). ApiErrors are unwrapped to their original cause so
reports point at the real failure. Reporting never raises.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable

from api_exceptions.api.classifier import classify
from api_exceptions.models.errors import ApiError, ErrorKind

logger = logging.getLogger(__name__)

# Monitoring integration: receives the unwrapped error
ReportSink = Callable[[BaseException], None]


class Reporter:
    """
    Forwards handled errors to the log and to monitoring sinks.

    Attributes:
        sinks: Callables invoked with each reported error
        dont_report: Kinds that are never reported
    """

    def __init__(
        self,
        sinks: Iterable[ReportSink] = (),
        dont_report: Iterable[ErrorKind] = (),
    ) -> None:
        self.sinks: list[ReportSink] = list(sinks)
        self.dont_report: frozenset[ErrorKind] = frozenset(dont_report)

    def add_sink(self, sink: ReportSink) -> None:
        self.sinks.append(sink)

    def should_report(self, error: BaseException) -> bool:
        return classify(error).kind not in self.dont_report

    def report(self, error: BaseException) -> None:
        """
        Report an error.

        Args:
            error: The raised error; ApiErrors are unwrapped to their cause
        """
        if not self.should_report(error):
            return

        target = error.to_report() if isinstance(error, ApiError) else error
        status = classify(error).status_code

        if status >= 500:
            logger.error(f"{type(target).__name__}: {target}", exc_info=target)
        else:
            logger.warning(f"{status} {type(target).__name__}: {target}")

        for sink in self.sinks:
            try:
                sink(target)
            except Exception:
                logger.exception(f"Error report sink {sink!r} failed")
