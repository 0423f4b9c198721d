"""
Pytest configuration and shared fixtures for access_testkit tests.
"""
import pytest
from datetime import datetime

from access_testkit.config.settings import Settings, LoggingSettings, AccessLogSettings
from access_testkit.logging.access_events import AccessEventRecord

# 2024-03-01 12:00:00.250 local time
EVENT_TIME = datetime(2024, 3, 1, 12, 0, 0, 250000)


@pytest.fixture
def test_settings():
    """Test settings configuration."""
    return Settings(
        environment="testing",
        logging=LoggingSettings(level="DEBUG"),
        access_log=AccessLogSettings(logger_name="test.access"),
    )


@pytest.fixture
def event_time():
    return EVENT_TIME


@pytest.fixture
def populated_event():
    """An access event with every field filled in."""
    return AccessEventRecord(
        timestamp=int(EVENT_TIME.timestamp() * 1000),
        protocol="HTTP/1.1",
        method="GET",
        request_uri="/a/b",
        request_url="GET /a/b?x=1 HTTP/1.1",
        remote_addr="127.0.0.1",
        local_port=8080,
        remote_host="localhost",
        remote_user="alice",
        status_code=200,
        content_length=512,
        thread_name="worker-1",
    )


@pytest.fixture
def unset_event():
    """An access event where the server populated nothing."""
    return AccessEventRecord()
