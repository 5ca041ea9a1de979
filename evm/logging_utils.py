from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

DEFAULT_LOG_NAME = "evm.log"


def configure_logging(
    log_path: Optional[str] = None,
    level: int = logging.INFO,
    also_console: bool = False,
) -> Optional[str]:
    """Configure root logging for one evm invocation.

    The file handler records every lifecycle decision. When the requested
    log path cannot be opened (read-only home, missing permissions) we fall
    back to a file in the working directory instead of failing the command.

    The console handler is off by default; user-facing output goes through
    print() in the CLI and the console handler is only for --verbose.

    Returns the actual file path being used, or None when no file was opened.
    """

    logger = logging.getLogger()
    logger.setLevel(min(level, logging.INFO) if log_path else level)

    # Avoid duplicate handlers if configure_logging() is called multiple times.
    if getattr(logger, "_evm_configured", False):
        return getattr(logger, "_evm_log_path", log_path)

    fmt = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )

    chosen_path: Optional[str] = None
    handlers: list[logging.Handler] = []

    if log_path:
        try:
            Path(log_path).parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_path)
            chosen_path = log_path
        except OSError:
            fallback = str(Path.cwd() / DEFAULT_LOG_NAME)
            file_handler = logging.FileHandler(fallback)
            chosen_path = fallback
        file_handler.setFormatter(fmt)
        handlers.append(file_handler)

    if also_console:
        console = logging.StreamHandler()
        console.setFormatter(fmt)
        console.setLevel(level)
        handlers.append(console)

    for h in handlers:
        logger.addHandler(h)

    setattr(logger, "_evm_configured", True)
    setattr(logger, "_evm_log_path", chosen_path)

    logging.getLogger(__name__).debug(
        "Logging initialized (requested=%s, actual=%s)", log_path, chosen_path
    )
    return chosen_path
