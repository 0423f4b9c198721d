"""
Collect access events from log records emitted by the access logger.

Only records that were already logged are observed; nothing here sits in
the HTTP path.
"""

import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional

from access_testkit.config.settings import Settings
from access_testkit.logging import get_logger
from access_testkit.logging.access_events import (
    AccessEventRecord,
    AccessLogEnricherFilter,
)

logger = get_logger(__name__)


class AccessEventCollector(logging.Handler):
    """Handler that keeps the access events of the records it handles, in order."""

    def __init__(self, logger_name: Optional[str] = None, level: int = logging.NOTSET):
        super().__init__(level)
        self.enricher = AccessLogEnricherFilter(logger_name)
        self.addFilter(self.enricher)
        self._events: List[AccessEventRecord] = []
        self.skipped = 0

    def emit(self, record: logging.LogRecord) -> None:
        event = getattr(record, "access_event", None)
        if event is None:
            self.skipped += 1
            return
        self._events.append(event)

    @property
    def events(self) -> List[AccessEventRecord]:
        return list(self._events)

    def last(self) -> AccessEventRecord:
        """Most recent access event; LookupError when none was captured."""
        if not self._events:
            raise LookupError("No access events captured")
        return self._events[-1]

    def clear(self) -> None:
        self._events.clear()
        self.skipped = 0

    def __len__(self) -> int:
        return len(self._events)


@contextmanager
def capture_access_events(
    logger_name: Optional[str] = None, settings: Optional[Settings] = None
) -> Iterator[AccessEventCollector]:
    """Attach a collector to the access logger for the duration of the block.

    The logger name defaults to ``settings.access_log.logger_name``. If the
    logger would drop INFO records it is lowered to INFO and restored on exit.
    """
    if logger_name is None:
        logger_name = (settings or Settings()).access_log.logger_name
    access_logger = logging.getLogger(logger_name)
    collector = AccessEventCollector(logger_name)
    previous_level = access_logger.level
    if not access_logger.isEnabledFor(logging.INFO):
        access_logger.setLevel(logging.INFO)
    access_logger.addHandler(collector)
    logger.debug("access_capture_started", access_logger=logger_name)
    try:
        yield collector
    finally:
        access_logger.removeHandler(collector)
        access_logger.setLevel(previous_level)
        logger.debug(
            "access_capture_stopped",
            access_logger=logger_name,
            captured=len(collector),
            skipped=collector.skipped,
        )
