"""
Process-wide logging: console always, rotating file under LOGS_DIR unless disabled.
"""
import logging
import logging.handlers
import os
from pathlib import Path
from clinical_anon.core.config import LOGS_DIR

DEFAULT_FMT = "%(asctime)s - %(levelname)-5s - %(name)s - %(message)s"
DATE_FMT = "%Y-%m-%d %H:%M:%S"
LOG_FILE = "anonymization.log"

_installed: list[logging.Handler] = []

def _formatter() -> logging.Formatter:
    return logging.Formatter(DEFAULT_FMT, datefmt=DATE_FMT)

def setup_logging(level: str | None = None, logs_dir: Path | None = LOGS_DIR, file_name: str = LOG_FILE) -> None:
    """Configure the root logger once; ``logs_dir=None`` keeps output on the console only."""
    if _installed:
        return
    root = logging.getLogger()
    root.setLevel((level or os.getenv("ANON_LOG_LEVEL", "INFO")).upper())

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if logs_dir is not None:
        Path(logs_dir).mkdir(parents=True, exist_ok=True)
        handlers.append(logging.handlers.RotatingFileHandler(
            Path(logs_dir) / file_name, maxBytes=2_000_000, backupCount=3, encoding="utf-8"
        ))

    for handler in handlers:
        handler.setFormatter(_formatter())
        root.addHandler(handler)
    _installed.extend(handlers)

def reset_logging() -> None:
    """Detach the handlers installed by setup_logging."""
    root = logging.getLogger()
    while _installed:
        handler = _installed.pop()
        root.removeHandler(handler)
        handler.close()
