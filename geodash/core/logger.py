"""
Logging: level, file log, timestamp, per-mode context.
Configure once with setup_logging(); use get_logger() / get_mode_logger() everywhere.
"""
import logging
import os
from pathlib import Path
from typing import Optional

from .config import ENV_LOG_LEVEL, ENV_LOG_DIR

ROOT_NAME = "geodash"
_FORMAT = "%(asctime)s [%(levelname)s] %(name)s%(mode)s %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_setup_done = False


class GeoDashFormatter(logging.Formatter):
    """Formatter with timestamp and optional measurement mode; safe when record has no mode."""

    def __init__(self):
        super().__init__(fmt=_FORMAT, datefmt=_DATE_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        setattr(record, "mode", getattr(record, "mode", ""))
        return super().format(record)


class ModeAdapter(logging.LoggerAdapter):
    """Logger that adds measurement mode context so formatter shows e.g. [area]."""

    def process(self, msg, kwargs):
        extra = kwargs.get("extra") or {}
        mode = self.extra.get("mode", "")
        extra["mode"] = f" [{mode}]" if mode else ""
        kwargs["extra"] = extra
        return msg, kwargs


def _get_level_from_env() -> int:
    raw = os.environ.get(ENV_LOG_LEVEL, "").strip().upper()
    return getattr(logging, raw, logging.INFO)


def _ensure_log_dir(log_dir: Optional[os.PathLike | str]) -> Optional[Path]:
    log_dir = log_dir or os.environ.get(ENV_LOG_DIR)
    if not log_dir:
        return None
    path = Path(log_dir)
    path.mkdir(parents=True, exist_ok=True)
    return path


def setup_logging(
    level: Optional[int] = None,
    log_dir: Optional[os.PathLike | str] = None,
) -> None:
    """
    Configure geodash root logger: level, console handler, optional file handler.
    Idempotent; safe to call once at startup.
    """
    global _setup_done
    if _setup_done:
        return

    root = logging.getLogger(ROOT_NAME)
    if level is None:
        level = _get_level_from_env()
    root.setLevel(level)

    formatter = GeoDashFormatter()

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(formatter)
    root.addHandler(console)

    path = _ensure_log_dir(log_dir)
    if path is not None:
        fh = logging.FileHandler(path / "geodash.log", encoding="utf-8")
        fh.setLevel(level)
        fh.setFormatter(formatter)
        root.addHandler(fh)

    _setup_done = True


def get_logger(name: str) -> logging.Logger:
    """Return a logger under geodash.* (e.g. geodash.session)."""
    if not name.startswith(ROOT_NAME + "."):
        name = f"{ROOT_NAME}.{name}"
    return logging.getLogger(name)


def get_mode_logger(logger: logging.Logger, mode) -> ModeAdapter:
    """
    Return an adapter that adds the measurement mode to every log line.
    Accepts a MeasurementMode (its value is used) or a plain string; None gives no context.
    """
    if isinstance(logger, ModeAdapter):
        logger = logger.logger
    label = getattr(mode, "value", mode) or ""
    return ModeAdapter(logger, {"mode": str(label)})
