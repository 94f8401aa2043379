from __future__ import annotations

import json
import logging
import re
from datetime import datetime, timezone

from backoffice.core.request_context import get_client_ip, get_request_id, get_restaurant_id, get_user_id

_SENSITIVE_PATTERNS = [
    re.compile(r"(authorization\s*[:=]\s*bearer\s+)([^\s\"]+)", re.IGNORECASE),
    re.compile(r"(token\s*[:=]\s*)([^\s\",}]+)", re.IGNORECASE),
    re.compile(r"(password\s*[:=]\s*)([^\s\",}]+)", re.IGNORECASE),
    re.compile(r"(product_?key\s*[:=]\s*)([^\s\",}]+)", re.IGNORECASE),
    re.compile(r"(secret\s*[:=]\s*)([^\s\",}]+)", re.IGNORECASE),
]

_OPTIONAL_FIELDS = ("endpoint", "method", "status_code", "error_code")


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        record.message = record.getMessage()
        payload = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "request_id": getattr(record, "request_id", None) or get_request_id(),
            "restaurant_id": getattr(record, "restaurant_id", None) or get_restaurant_id(),
            "user_id": getattr(record, "user_id", None) or get_user_id(),
            "client_ip": getattr(record, "client_ip", None) or get_client_ip(),
            "module": record.name,
            "message": mask_sensitive(record.message),
            "duration_ms": getattr(record, "duration_ms", None),
        }
        for field in _OPTIONAL_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                payload[field] = value
        if record.exc_info:
            payload["exception"] = mask_sensitive(self.formatException(record.exc_info))
        return json.dumps(payload, ensure_ascii=False)


def mask_sensitive(value: str) -> str:
    masked = value
    for pattern in _SENSITIVE_PATTERNS:
        masked = pattern.sub(r"\1***", masked)
    return masked


def configure_logging(level: str = "INFO") -> None:
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(level)

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter("%(message)s"))
    root_logger.addHandler(handler)

    for logger_name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(logger_name).setLevel(level)
