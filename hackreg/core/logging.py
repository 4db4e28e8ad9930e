# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""JSON logging: one object per line on stdout, tagged with the service name."""
import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from hackreg.core.config import settings

# record attributes copied into the line when passed through ``extra``
CONTEXT_FIELDS = ("request_id", "team_id")


class JSONFormatter(logging.Formatter):
    def __init__(self, service: Optional[str] = None):
        super().__init__()
        self.service = service or settings.SERVICE_NAME

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "service": self.service,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for field in CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                entry[field] = value
        if record.exc_info and record.exc_info[1]:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    logger = logging.getLogger(name or settings.SERVICE_NAME)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JSONFormatter())
        logger.addHandler(handler)
        logger.setLevel(settings.LOG_LEVEL)
        logger.propagate = False
    return logger
