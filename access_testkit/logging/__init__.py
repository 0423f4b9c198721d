# Structured logging for access_testkit
import sys
import logging
import structlog
from typing import Any, Optional

from access_testkit.config.settings import Settings

# Global flag to prevent duplicate logging configuration
_logging_configured = False

# Marks the console handler installed here so reconfiguration can find it
_HANDLER_NAME = "access_testkit.console"


def _add_standard_context(settings: Settings):
    def processor(logger, name, event_dict):
        """Bind standard context fields once from settings."""
        event_dict.setdefault("env", settings.environment.value)
        event_dict.setdefault("service", settings.app_name)
        return event_dict
    return processor


def _redact_sensitive(keys_to_redact):
    keys = {k.lower() for k in keys_to_redact}

    def _redact(obj):
        if isinstance(obj, dict):
            out = {}
            for k, v in obj.items():
                if isinstance(k, str) and k.lower() in keys:
                    out[k] = "[REDACTED]"
                else:
                    out[k] = _redact(v)
            return out
        if isinstance(obj, list):
            return [_redact(v) for v in obj]
        return obj

    def processor(logger, name, event_dict):
        """Redact sensitive fields from event dict recursively."""
        return _redact(event_dict)
    return processor


def _console_handler() -> logging.Handler:
    root_logger = logging.getLogger()
    for handler in root_logger.handlers:
        if handler.get_name() == _HANDLER_NAME:
            return handler
    handler = logging.StreamHandler(sys.stdout)
    handler.set_name(_HANDLER_NAME)
    root_logger.addHandler(handler)
    return handler


def configure_logging(settings: Optional[Settings] = None) -> None:
    """Configure stdlib logging and structlog once per process."""
    global _logging_configured

    # Prevent duplicate configuration
    if _logging_configured:
        return

    settings = settings or Settings()
    level = getattr(logging, settings.logging.level)

    foreign_chain = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    console_processor = (
        structlog.processors.JSONRenderer()
        if settings.logging.console_json_format
        else structlog.dev.ConsoleRenderer()
    )
    handler = _console_handler()
    handler.setLevel(level)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=console_processor,
            foreign_pre_chain=foreign_chain,
        )
    )
    logging.getLogger().setLevel(level)

    structlog.configure(
        processors=[
            _add_standard_context(settings),
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            _redact_sensitive(settings.logging.redact_keys),
            # Defer final rendering to handlers via ProcessorFormatter
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    _logging_configured = True


def get_logger(name: str, **context: Any) -> structlog.BoundLogger:
    """Get a structured logger instance, optionally bound to context.

    Always backed by the stdlib logger of the same name, so stdlib levels
    filter its output whether or not configure_logging has run.
    """
    logger = structlog.wrap_logger(
        logging.getLogger(name),
        wrapper_class=structlog.stdlib.BoundLogger,
    )
    if context:
        logger = logger.bind(**context)
    return logger


def is_logging_configured() -> bool:
    return _logging_configured


__all__ = [
    "configure_logging",
    "get_logger",
    "is_logging_configured",
]
