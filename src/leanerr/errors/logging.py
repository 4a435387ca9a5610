from __future__ import annotations

import logging
from typing import Callable, Optional

from rich.console import Console
from rich.logging import RichHandler

from .config import LoggingConfig

LOGGER_NAME = "leanerr"

LogSink = Callable[[str], None]


def _default_sink(text: str) -> None:
    # Unconfigured, the logging module's last-resort handler still reaches stderr.
    logging.getLogger(LOGGER_NAME).error(text)


_sink: LogSink = _default_sink


def log(text: str) -> None:
    """Emit a rendered error through the current log sink."""
    _sink(text)


def set_log_sink(sink: Optional[LogSink]) -> LogSink:
    """
    Replace the log sink; ``None`` restores the default. Returns the previous sink.

    Usage example
    -------------
        previous = set_log_sink(my_alerting.send)
        ...
        set_log_sink(previous)
    """
    global _sink
    previous = _sink
    _sink = sink if sink is not None else _default_sink
    return previous


class _RunContextFilter(logging.Filter):
    def __init__(self, *, run_id: str) -> None:
        super().__init__()
        self._run_id = run_id

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003
        # Ensure `run_id` exists for formatter
        if not hasattr(record, "run_id"):
            setattr(record, "run_id", self._run_id)
        return True


def configure_logging(*, cfg: LoggingConfig) -> logging.Logger:
    """
    Configure console logging (Rich, on stderr) and an optional plain log file.

    Returns
    -------
    logger
        The configured "leanerr" logger.

    Usage example
    -------------
        logger = configure_logging(cfg=LoggingConfig(log_dir=Path("logs")))
        logger.info("Hello")
    """
    run_id = cfg.resolved_run_id()

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    logger.handlers.clear()
    logger.filters.clear()
    logger.propagate = False

    logger.addFilter(_RunContextFilter(run_id=run_id))

    console_handler = RichHandler(
        console=Console(stderr=True),
        rich_tracebacks=cfg.rich_tracebacks,
        show_path=False,
    )
    console_handler.setLevel(cfg.console_level)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(console_handler)

    if cfg.log_dir is not None:
        cfg.log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(cfg.log_dir / f"run_{run_id}.log", encoding="utf-8")
        file_handler.setLevel(cfg.file_level)
        file_handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)sZ | run=%(run_id)s | %(levelname)s | %(name)s | %(message)s",
                datefmt="%Y-%m-%dT%H:%M:%S",
            )
        )
        logger.addHandler(file_handler)

    logger.debug("Logging configured (run_id=%s, log_dir=%s)", run_id, cfg.log_dir)
    return logger
