import contextvars
import json
import logging
from contextlib import contextmanager
from typing import Dict, Iterable, Optional

# Per-request fields stamped onto every record emitted while a request runs.
_request_ctx: contextvars.ContextVar[Dict[str, Optional[str]]] = contextvars.ContextVar(
    "nl2cosmos_request", default={}
)

REQUEST_FIELDS = ("trace_id", "container", "partition_key")

NOISY_LOGGERS = ("httpx", "httpcore", "openai", "azure", "urllib3")

TEXT_FORMAT = "%(asctime)s - [%(trace_id)s] - %(name)s - %(levelname)s - %(message)s"


class RequestContextFilter(logging.Filter):
    """Copies the active request fields onto the log record (None outside a request)."""

    def filter(self, record):
        ctx = _request_ctx.get()
        for field in REQUEST_FIELDS:
            setattr(record, field, ctx.get(field))
        return True


@contextmanager
def request_context(
    trace_id: str,
    container_name: Optional[str] = None,
    partition_key_value: Optional[str] = None,
):
    """Binds a trace id, and optionally the target container and partition, for the enclosed block."""
    token = _request_ctx.set({
        "trace_id": trace_id,
        "container": container_name or None,
        "partition_key": partition_key_value or None,
    })
    try:
        yield
    finally:
        _request_ctx.reset(token)


def current_trace_id() -> Optional[str]:
    return _request_ctx.get().get("trace_id")


class JsonFormatter(logging.Formatter):
    """One JSON object per line; request fields are emitted only when set."""

    _RESERVED = set(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }
        for field in REQUEST_FIELDS:
            value = getattr(record, field, None)
            if value:
                payload[field] = value

        # Anything passed through ``extra=``.
        for key, value in record.__dict__.items():
            if key in self._RESERVED or key in REQUEST_FIELDS or key.startswith("_"):
                continue
            payload[key] = value

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str, ensure_ascii=False)


def configure_logging(
    level: str = "INFO",
    json_format: bool = False,
    quiet_loggers: Iterable[str] = NOISY_LOGGERS,
):
    """Installs a single stream handler on the root logger.

    Args:
        level (str): Root logging level.
        json_format (bool): Emit JSON lines instead of the text format.
        quiet_loggers (Iterable[str]): Client-library loggers capped at WARNING.
    """
    root = logging.getLogger()
    root.setLevel(level)
    for existing in root.handlers[:]:
        root.removeHandler(existing)

    handler = logging.StreamHandler()
    handler.addFilter(RequestContextFilter())
    handler.setFormatter(JsonFormatter() if json_format else logging.Formatter(TEXT_FORMAT))
    root.addHandler(handler)

    for name in quiet_loggers:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
