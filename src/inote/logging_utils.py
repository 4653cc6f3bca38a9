import json
import logging
import sys
from typing import Any

# Attributes every LogRecord carries; anything else came in through ``extra=``.
_RECORD_ATTRS = frozenset(
    logging.LogRecord("", logging.NOTSET, "", 0, "", (), None).__dict__,
) | {"message", "asctime", "taskName"}


class JSONFormatter(logging.Formatter):
    """Formatter that renders records as one JSON object per line.

    Context passed through ``extra=`` (``note_id``, ``storage_key``...) is
    emitted under ``context``; values JSON cannot encode fall back to ``repr``.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Render ``record`` as a JSON string.

        Args:
            record: The log record to format.

        Returns:
            A single-line JSON document.

        """
        log_record: dict[str, Any] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }
        context = {
            name: value
            for name, value in record.__dict__.items()
            if name not in _RECORD_ATTRS and not name.startswith("_")
        }
        if context:
            log_record["context"] = context
        if record.exc_info:
            exc_type, exc_value, _ = record.exc_info
            if exc_type is not None:
                log_record["error"] = {
                    "type": exc_type.__name__,
                    "detail": str(exc_value),
                }
            log_record["exception"] = self.formatException(record.exc_info)
        elif record.exc_text:
            log_record["exception"] = record.exc_text
        if record.stack_info:
            log_record["stack"] = self.formatStack(record.stack_info)
        return json.dumps(log_record, default=repr, ensure_ascii=False)


def setup_logging(level: str | int = logging.INFO) -> None:
    """Configures the root logger with a JSON formatter on stderr.

    Stdout is left to command output.
    """
    root = logging.getLogger()
    # Avoid adding multiple handlers if setup is called multiple times
    if not any(isinstance(h.formatter, JSONFormatter) for h in root.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(JSONFormatter())
        root.addHandler(handler)
    root.setLevel(level)
