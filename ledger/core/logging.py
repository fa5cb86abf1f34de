"""JSON logging for the ledger service."""
from __future__ import annotations

import logging
from typing import Any, Optional

from pythonjsonlogger import jsonlogger

# Libraries whose INFO output drowns the request and lifecycle logs.
QUIET_LOGGERS = ("sqlalchemy.engine", "alembic.runtime.migration")


class LedgerJsonFormatter(jsonlogger.JsonFormatter):
    """Stamps every record with the service name and runtime environment."""

    def __init__(self, *args: Any, service: str, env: str, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.service = service
        self.env = env

    def add_fields(self, log_record: dict[str, Any], record: logging.LogRecord, message_dict: dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record.setdefault("service", self.service)
        log_record.setdefault("env", self.env)


def setup_logging(level: str = "INFO", *, service: str = "apexfin-ledger", env: str = "dev") -> None:
    """Replace root handlers with a single JSON stream handler."""

    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
    root_logger.setLevel(level.upper())

    handler = logging.StreamHandler()
    handler.setFormatter(
        LedgerJsonFormatter("%(asctime)s %(levelname)s %(name)s %(message)s", service=service, env=env)
    )
    root_logger.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    logger = logging.getLogger(name)
    if level is not None:
        logger.setLevel(level.upper())
    return logger


__all__ = ["LedgerJsonFormatter", "setup_logging", "get_logger"]
