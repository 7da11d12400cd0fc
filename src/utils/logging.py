"""JSON logging shared by the API, the services and the report script."""
import logging
import sys
from typing import Any, Optional, TextIO
import structlog
from pythonjsonlogger import jsonlogger

from src.config import settings

# Libraries that log every HTTP round-trip at INFO
NOISY_LOGGERS = ("azure", "urllib3")

_STRUCTLOG_PROCESSORS = [
    structlog.stdlib.filter_by_level,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.stdlib.PositionalArgumentsFormatter(),
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
    structlog.processors.UnicodeDecoder(),
    structlog.stdlib.render_to_log_kwargs,
]


class InspectionJsonFormatter(jsonlogger.JsonFormatter):
    """Stamps every record with the service name and environment."""

    def add_fields(self, log_record: dict[str, Any], record: logging.LogRecord, message_dict: dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record.update(
            level=record.levelname,
            logger=record.name,
            service=settings.service_name,
            environment=settings.environment,
        )


def _json_handler(stream: TextIO) -> logging.Handler:
    handler = logging.StreamHandler(stream)
    handler.setFormatter(InspectionJsonFormatter("%(timestamp)s %(level)s %(logger)s %(message)s"))
    return handler


def setup_logging(level: Optional[str] = None, stream: TextIO = sys.stdout) -> None:
    """Route stdlib and structlog output through one JSON handler.

    ``level`` overrides ``settings.log_level``; the report script passes
    ``sys.stderr`` as ``stream`` so its stdout stays machine-readable.
    """
    log_level = getattr(logging, (level or settings.log_level).upper(), logging.INFO)

    root = logging.getLogger()
    root.handlers = [_json_handler(stream)]
    root.setLevel(log_level)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))

    structlog.configure(
        processors=_STRUCTLOG_PROCESSORS,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Structlog logger bound to ``name`` (usually ``__name__``)."""
    return structlog.get_logger(name)
