"""Test-support toolkit for HTTP access-log events."""

__version__ = "0.3.0"
