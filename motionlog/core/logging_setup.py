import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from motionlog.core.config import settings

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def setup_logging(log_dir: Path | None = None, level: str | None = None) -> logging.Logger:
    logger = logging.getLogger("motionlog")
    logger.setLevel((level or settings.log_level).upper())
    logger.propagate = False
    if logger.handlers:
        return logger

    fmt = logging.Formatter(LOG_FORMAT)

    ch = logging.StreamHandler()
    ch.setFormatter(fmt)
    logger.addHandler(ch)

    target_dir = log_dir if log_dir is not None else settings.log_dir
    if target_dir is not None:
        target_dir.mkdir(parents=True, exist_ok=True)
        fh = RotatingFileHandler(target_dir / "motionlog.log", maxBytes=5_000_000, backupCount=5)
        fh.setFormatter(fmt)
        logger.addHandler(fh)

    return logger
