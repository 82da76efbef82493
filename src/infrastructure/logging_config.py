"""Structured logging configuration.

Configures the root logger for CLI runs: one JSON object per line when
logs are shipped somewhere, plain text otherwise.

Data Quality Impact:
    - Raw field values are only logged at DEBUG level
    - Structured format enables aggregation of rejected-row warnings
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

# Attributes every LogRecord carries; anything else came in through ``extra=``
_STANDARD_ATTRS = set(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


class StructuredFormatter(logging.Formatter):
    """Render each log record as a single JSON object.

    Values passed through ``extra=`` (for example ``source`` and
    ``row_number`` from the CSV ingester) become top-level keys.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Serialize the record, including any ``extra=`` attributes."""
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in vars(record).items():
            if key not in _STANDARD_ATTRS and key not in log_data:
                log_data[key] = value

        return json.dumps(log_data, default=str)


def setup_logging(use_json: bool = False, log_level: str = "INFO") -> None:
    """Install a single stderr handler on the root logger.

    Parameters:
        use_json: Emit StructuredFormatter output instead of plain text
        log_level: Level name; unknown names fall back to INFO
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Repeated CLI invocations must not stack handlers
    root_logger.handlers.clear()

    # Logs go to stderr so stdout stays clean for command output
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    if use_json:
        formatter = StructuredFormatter()
    else:
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

    handler.setFormatter(formatter)
    root_logger.addHandler(handler)
