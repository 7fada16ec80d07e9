"""Logging setup for the CLI and web entry points."""
import logging
import sys

_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Attach a single stream handler to the package logger."""
    logger = logging.getLogger("lorcana_meta")
    logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    if any(getattr(h, "_lorcana_meta", False) for h in logger.handlers):
        return
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(_FORMAT))
    handler._lorcana_meta = True
    logger.addHandler(handler)
