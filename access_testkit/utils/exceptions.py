# Structured exception hierarchy for access_testkit

from typing import Dict, Any, Optional
from datetime import datetime, timezone


class AccessTestkitException(Exception):
    """Base exception for all access_testkit specific errors"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc)


class VerificationFailure(AccessTestkitException, AssertionError):
    """A check against an access event did not hold.

    Derives from AssertionError so test runners report it as a failed
    assertion rather than an error.
    """

    def __init__(self, message: str, field: str, expected: Any = None, actual: Any = None,
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
        self.field = field
        self.expected = expected
        self.actual = actual


class AccessLogParseError(AccessTestkitException, ValueError):
    """Access log line does not match the expected key=value format"""

    def __init__(self, message: str, line: str, **kwargs):
        super().__init__(message, **kwargs)
        self.line = line
