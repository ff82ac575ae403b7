"""
JSON logging for the API process.

Each record carries the request correlation ID and, once the caller is
resolved, the acting profile ID.
"""
import logging
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pythonjsonlogger import jsonlogger

from dayflow.core.config import settings

request_id_var: ContextVar[str] = ContextVar("request_id", default="")
actor_id_var: ContextVar[str] = ContextVar("actor_id", default="")

_QUIET_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "urllib3")


class DayflowJsonFormatter(jsonlogger.JsonFormatter):
    def __init__(self, *args, service: str = "dayflow", environment: str = "", **kwargs):
        super().__init__(*args, **kwargs)
        self.service = service
        self.environment = environment

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)

        if not log_record.get("timestamp"):
            log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = (log_record.get("level") or record.levelname).upper()
        log_record["service"] = self.service
        if self.environment:
            log_record["environment"] = self.environment

        for key, var in (("request_id", request_id_var), ("actor_id", actor_id_var)):
            value = var.get()
            if value:
                log_record[key] = value


def setup_logging(level: Optional[str] = None):
    """Install the JSON handler on the root logger once per process."""
    root = logging.getLogger()
    if any(isinstance(h.formatter, DayflowJsonFormatter) for h in root.handlers):
        return

    handler = logging.StreamHandler()
    handler.setFormatter(DayflowJsonFormatter(
        "%(timestamp) %(level) %(name) %(message)",
        service=settings.app_name,
        environment=settings.environment,
    ))
    root.addHandler(handler)
    root.setLevel((level or settings.log_level).upper())

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
