import json
import logging
from typing import Any, Dict, Optional


_RESERVED_FIELDS = {
    "name",
    "msg",
    "args",
    "levelname",
    "levelno",
    "pathname",
    "filename",
    "module",
    "exc_info",
    "exc_text",
    "stack_info",
    "lineno",
    "funcName",
    "created",
    "msecs",
    "relativeCreated",
    "thread",
    "threadName",
    "processName",
    "process",
    "taskName",
}

_default_level = "INFO"


def configure_logging(level: Optional[str]) -> None:
    """Set the level used by loggers created afterwards and by those already created."""
    global _default_level
    if not level:
        return
    _default_level = level.upper()
    for logger in list(logging.root.manager.loggerDict.values()):
        if not isinstance(logger, logging.Logger):
            continue
        if any(isinstance(h.formatter, _JsonFormatter) for h in logger.handlers):
            logger.setLevel(_default_level)


def setup_json_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(_JsonFormatter())
        logger.addHandler(handler)
    logger.setLevel(level or _default_level)
    logger.propagate = False
    return logger


class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload: Dict[str, Any] = {
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
        }
        extra_fields = {
            k: v for k, v in record.__dict__.items() if k not in _RESERVED_FIELDS
        }
        if extra_fields:
            payload.update(extra_fields)
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def log_state(logger: logging.Logger, **kwargs: Any) -> None:
    logger.info(json.dumps(kwargs, default=str))
