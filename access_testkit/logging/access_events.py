"""
Access event records and their extraction from access log lines.

An access event is a read-only snapshot of one HTTP exchange as it was
logged. Fields that the server never populated hold a sentinel rather than
being absent, matching what ends up in the log line itself:

- numeric fields use ``SENTINEL`` (-1)
- string fields use ``NA`` ("-")
"""

import logging
import re
from typing import Dict, Optional, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, field_validator

from access_testkit.config.settings import AccessLogSettings
from access_testkit.utils.exceptions import AccessLogParseError

SENTINEL = -1
NA = "-"

ACCESS_LOG_FORMAT = AccessLogSettings().format

_INT_FIELDS = ("timestamp", "local_port", "status_code", "content_length")
_STR_FIELDS = (
    "protocol", "method", "request_uri", "request_url",
    "remote_addr", "remote_host", "remote_user", "thread_name",
)


@runtime_checkable
class AccessEvent(Protocol):
    """Read accessors every access event exposes."""

    @property
    def timestamp(self) -> int: ...

    @property
    def protocol(self) -> str: ...

    @property
    def method(self) -> str: ...

    @property
    def request_uri(self) -> str: ...

    @property
    def request_url(self) -> str: ...

    @property
    def remote_addr(self) -> str: ...

    @property
    def local_port(self) -> int: ...

    @property
    def remote_host(self) -> str: ...

    @property
    def remote_user(self) -> str: ...

    @property
    def status_code(self) -> int: ...

    @property
    def content_length(self) -> int: ...

    @property
    def thread_name(self) -> str: ...


class AccessEventRecord(BaseModel):
    """Immutable access event. ``None`` on input becomes the field's sentinel."""

    model_config = ConfigDict(frozen=True)

    timestamp: int = SENTINEL  # epoch milliseconds
    protocol: str = NA
    method: str = NA
    request_uri: str = NA
    request_url: str = NA  # full request line, e.g. "GET /a?x=1 HTTP/1.1"
    remote_addr: str = NA
    local_port: int = SENTINEL
    remote_host: str = NA
    remote_user: str = NA
    status_code: int = SENTINEL
    content_length: int = SENTINEL
    thread_name: str = NA

    @field_validator(*_INT_FIELDS, mode="before")
    @classmethod
    def unset_int_to_sentinel(cls, v):
        return SENTINEL if v is None else v

    @field_validator(*_STR_FIELDS, mode="before")
    @classmethod
    def unset_str_to_na(cls, v):
        return NA if v is None else v

    def is_populated(self, field: str) -> bool:
        """True when ``field`` holds a value other than its sentinel."""
        value = getattr(self, field)
        if field in _INT_FIELDS:
            return value != SENTINEL
        return value != NA


_TOKEN_RE = re.compile(r'(?P<key>\w+)=(?:"(?P<quoted>[^"]*)"|(?P<bare>\S+))')


def parse_access_line(line: str) -> Dict[str, str]:
    """Split an access log line into its key=value tokens.

    Expected layout (see ACCESS_LOG_FORMAT):
        h=<ip> u=<user> r="<METHOD PATH PROTO>" s=<status> b=<bytes> L=<latency> a="<user-agent>"

    ``rh=<remote host>`` and ``lp=<local port>`` may also appear.
    """
    tokens: Dict[str, str] = {}
    for m in _TOKEN_RE.finditer(line):
        quoted = m.group("quoted")
        tokens[m.group("key")] = quoted if quoted is not None else m.group("bare")
    if "r" not in tokens:
        raise AccessLogParseError("Not an access log line: missing request line", line=line)
    return tokens


def _int_or_unset(value: Optional[str]) -> int:
    if value is None or value == NA:
        return SENTINEL
    return int(value)


def _split_request_line(request_line: str):
    parts = request_line.split()
    method, target, protocol = (parts + [NA, NA, NA])[:3]
    request_uri = target.split("?", 1)[0] if target != NA else NA
    return method, request_uri, protocol


def access_event_from_record(record: logging.LogRecord) -> AccessEventRecord:
    """Build an access event from a log record carrying an access log line.

    Raises AccessLogParseError when the message is not an access log line
    and ValueError when a numeric token is malformed.
    """
    tokens = parse_access_line(str(record.getMessage()))
    request_line = tokens["r"].strip() or NA
    method, request_uri, protocol = _split_request_line(request_line)
    remote_addr = tokens.get("h", NA)
    return AccessEventRecord(
        timestamp=int(record.created * 1000),
        protocol=protocol,
        method=method,
        request_uri=request_uri,
        request_url=request_line,
        remote_addr=remote_addr,
        local_port=_int_or_unset(tokens.get("lp")),
        # No reverse lookup: the host falls back to the address
        remote_host=tokens.get("rh", remote_addr),
        remote_user=tokens.get("u", NA),
        status_code=_int_or_unset(tokens.get("s")),
        content_length=_int_or_unset(tokens.get("b")),
        thread_name=record.threadName,
    )


class AccessLogEnricherFilter(logging.Filter):
    """Parse access log messages and attach the resulting access event.

    Adds ``access_event`` plus flat ``http_method``, ``http_path``,
    ``http_protocol`` and ``http_status`` attributes to records of the
    access logger. Records are never dropped.
    """

    def __init__(self, logger_name: Optional[str] = None):
        super().__init__()
        self.logger_name = logger_name or AccessLogSettings().logger_name

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name != self.logger_name:
            return True
        # Idempotency: if already enriched, skip
        if hasattr(record, "access_event"):
            return True
        try:
            event = access_event_from_record(record)
        except ValueError:
            # Do not block logging on parsing failures
            return True
        setattr(record, "access_event", event)
        setattr(record, "http_method", event.method)
        setattr(record, "http_path", event.request_uri)
        setattr(record, "http_protocol", event.protocol)
        setattr(record, "http_status", event.status_code)
        return True
