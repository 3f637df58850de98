"""structlog setup for the dashboard backend.

Both outbound clients put secrets in the URL: Binance requests carry an
HMAC ``signature`` query parameter and table-store requests carry the
function key as ``code``. Those values are masked before rendering, and
the httpx request logger (which prints full URLs) is held at WARNING.
"""

import logging
import os
import re

import structlog

# Query parameters whose values must never reach a log sink
REDACTED_PARAMS = ("signature", "code")
_REDACT_PATTERN = re.compile(r"\b(%s)=[^&\s\"']+" % "|".join(REDACTED_PARAMS))


def redact_secrets(
    logger: logging.Logger, method_name: str, event_dict: dict
) -> dict:
    """Mask signed-URL and function-key values in string fields of an event."""
    for key, value in event_dict.items():
        if isinstance(value, str) and "=" in value:
            event_dict[key] = _REDACT_PATTERN.sub(r"\1=***", value)
    return event_dict


def setup_logging(log_level: str = "INFO") -> None:
    """Route structlog and stdlib records through one formatter.

    ``LOG_FORMAT=json`` renders one JSON object per line for log shipping;
    anything else uses the colored console renderer.
    """
    log_format = os.environ.get("LOG_FORMAT", "console").lower()

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        redact_secrets,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    renderer: structlog.types.Processor
    if log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=[redact_secrets],
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    for noisy in ("httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
