"""structlog setup for the candle consensus service.

Every module logs through ``get_logger(__name__)`` with event-style messages
(``consensus_saved``, ``strategy_rule_failed``) and keyword context. The
analysis service binds ``candle_id`` and ``pair`` with
``structlog.contextvars.bound_contextvars`` so they appear on every line of a
run, including lines emitted by the store and the evaluator.
"""

import logging

import structlog

#: Third-party loggers that are far too chatty at DEBUG.
_QUIET_LOGGERS = ("aiosqlite", "asyncio", "uvicorn.access")

LOG_FORMATS = ("console", "json")


def _renderer(log_format: str) -> structlog.types.Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer()


def setup_logging(log_level: str = "INFO", log_format: str = "console") -> None:
    """Route structlog and stdlib logging through one renderer.

    Args:
        log_level: Root level name (DEBUG shows every strategy verdict).
        log_format: "console" for humans, "json" for log shippers.
    """
    log_format = log_format.lower()
    if log_format not in LOG_FORMATS:
        raise ValueError(f"log_format must be one of {LOG_FORMATS}, got {log_format!r}")

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(log_format),
            ],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
