"""Logging utilities for osv-audit."""

import logging
from pathlib import Path
from typing import Any, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

LOG_THEME = Theme({
    "info": "cyan",
    "warning": "yellow",
    "error": "red",
    "critical": "red bold",
    "debug": "dim",
})

# All loggers share one level so ``--verbose`` reaches parsers and clients alike
_level = logging.INFO


class AuditLogger:
    """Logger with rich formatting on stderr.

    stdout is reserved for command output (JSON envelopes, tables), so log
    records always go to stderr.
    """

    def __init__(self, name: str, level: Optional[int] = None) -> None:
        self.logger = logging.getLogger(f"osv_audit.{name}")
        self.logger.setLevel(level if level is not None else _level)
        self._setup_handlers()

    def _setup_handlers(self) -> None:
        """Attach a rich stderr handler unless one is already present."""
        if any(isinstance(h, RichHandler) for h in self.logger.handlers):
            return

        console = Console(stderr=True, theme=LOG_THEME)
        handler = RichHandler(
            console=console,
            show_time=True,
            show_path=False,
            markup=False,
        )
        handler.setFormatter(logging.Formatter(fmt="%(name)s: %(message)s", datefmt="[%X]"))

        self.logger.addHandler(handler)
        self.logger.propagate = False

    def info(self, msg: str, **kwargs: Any) -> None:
        self.logger.info(msg, extra=kwargs)

    def warning(self, msg: str, **kwargs: Any) -> None:
        self.logger.warning(msg, extra=kwargs)

    def error(self, msg: str, **kwargs: Any) -> None:
        self.logger.error(msg, extra=kwargs)

    def debug(self, msg: str, **kwargs: Any) -> None:
        self.logger.debug(msg, extra=kwargs)


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[Path] = None,
    verbose: bool = False,
) -> None:
    """Setup logging configuration for osv-audit.

    Args:
        level: Logging level
        log_file: Optional log file path
        verbose: Enable verbose logging
    """
    global _level

    if verbose:
        level = logging.DEBUG
    _level = level

    package_logger = logging.getLogger("osv_audit")
    package_logger.setLevel(level)
    for name, logger in logging.Logger.manager.loggerDict.items():
        if name.startswith("osv_audit.") and isinstance(logger, logging.Logger):
            logger.setLevel(level)
            if log_file and not any(isinstance(h, logging.FileHandler) for h in logger.handlers):
                file_handler = logging.FileHandler(log_file)
                file_handler.setFormatter(
                    logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
                )
                logger.addHandler(file_handler)

    logging.getLogger("aiohttp").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)


def get_logger(name: str) -> AuditLogger:
    """Get an osv-audit logger instance.

    Args:
        name: Logger name

    Returns:
        Configured logger instance
    """
    return AuditLogger(name)
