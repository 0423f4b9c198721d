import logging
from datetime import datetime
from http import HTTPMethod, HTTPStatus

import pytest

from access_testkit.logging.capture import AccessEventCollector, capture_access_events
from access_testkit.testing import assert_that

LINE = 'h=127.0.0.1 u=- r="POST /api/v1/orders HTTP/1.1" s=201 b=87 L=0.004 a="pytest"'


def test_capture_collects_events_from_the_access_logger(test_settings):
    access_logger = logging.getLogger(test_settings.access_log.logger_name)
    with capture_access_events(settings=test_settings) as captured:
        access_logger.info(LINE)
        access_logger.info("shutting down")

    assert len(captured) == 1
    assert captured.skipped == 1
    (
        assert_that(captured.last())
        .has_method(HTTPMethod.POST)
        .has_request_url(HTTPMethod.POST, "/api/v1/orders", "HTTP/1.1")
        .has_status_code(HTTPStatus.CREATED)
        .has_content_length(1)
        .has_thread_name()
    )


def test_capture_restores_logger_state():
    access_logger = logging.getLogger("capture.restore.access")
    access_logger.setLevel(logging.WARNING)
    with capture_access_events("capture.restore.access") as captured:
        assert access_logger.level == logging.INFO
        assert captured in access_logger.handlers
        access_logger.info(LINE)
    assert access_logger.level == logging.WARNING
    assert captured not in access_logger.handlers
    assert len(captured) == 1


def test_capture_supports_lazy_formatting():
    access_logger = logging.getLogger("capture.args.access")
    with capture_access_events("capture.args.access") as captured:
        access_logger.info('h=%s r="%s" s=%d', "10.1.1.1", "GET /health HTTP/1.1", 200)
    assert_that(captured.last()).has_remote_addr("10.1.1.1").has_request_uri("/health")


def test_collector_last_and_clear():
    collector = AccessEventCollector("collector.access")
    with pytest.raises(LookupError):
        collector.last()

    logger = logging.getLogger("collector.access")
    logger.setLevel(logging.INFO)
    logger.addHandler(collector)
    try:
        logger.info(LINE)
        logger.info(LINE.replace("s=201", "s=409"))
    finally:
        logger.removeHandler(collector)

    assert [e.status_code for e in collector.events] == [201, 409]
    collector.clear()
    assert len(collector) == 0
    assert collector.skipped == 0


def test_captured_timestamp_falls_between_surrounding_clock_reads():
    access_logger = logging.getLogger("capture.clock.access")
    with capture_access_events("capture.clock.access") as captured:
        for _ in range(50):
            start = datetime.now()
            access_logger.info(LINE)
            end = datetime.now()
            assert_that(captured.last()).has_timestamp(start, end)
    assert len(captured) == 50
