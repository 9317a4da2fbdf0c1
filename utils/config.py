import logging
import os
import sys
from dataclasses import dataclass
from typing import Optional


LOGGER_NAME = "imgc"


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        logging.getLogger(LOGGER_NAME).warning("Ignoring %s=%r, using %d", name, raw, default)
        return default


def _env_log_level(name: str, default: str) -> str:
    level = os.getenv(name, default).upper()
    if not isinstance(logging.getLevelName(level), int):
        logging.getLogger(LOGGER_NAME).warning("Ignoring %s=%r, using %s", name, level, default)
        return default
    return level


@dataclass(frozen=True)
class CompressorSettings:
    log_level: str
    png_compression: int
    report_metrics: bool

    @classmethod
    def from_env(cls) -> "CompressorSettings":
        return cls(
            log_level=_env_log_level("IMGC_LOG_LEVEL", "INFO"),
            png_compression=min(9, max(0, _env_int("IMGC_PNG_COMPRESSION", 9))),
            report_metrics=os.getenv("IMGC_REPORT_METRICS", "0").lower() in ("1", "true", "yes", "on"),
        )


SETTINGS = CompressorSettings.from_env()


class _BelowWarning(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno < logging.WARNING


def configure_logging(level: Optional[str] = None) -> logging.Logger:
    """Progress log on stdout, diagnostics on stderr."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level or SETTINGS.log_level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    formatter = logging.Formatter("%(message)s")

    info_handler = logging.StreamHandler(sys.stdout)
    info_handler.addFilter(_BelowWarning())
    info_handler.setFormatter(formatter)

    error_handler = logging.StreamHandler(sys.stderr)
    error_handler.setLevel(logging.WARNING)
    error_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))

    logger.addHandler(info_handler)
    logger.addHandler(error_handler)
    return logger
