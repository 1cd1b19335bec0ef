import logging
from typing import Optional

DEFAULT_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def setup_logging(level: int | str = logging.INFO, fmt: Optional[str] = None) -> None:
    """Configure root logging once. Later calls only adjust the level."""
    root = logging.getLogger()
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    if root.handlers:
        root.setLevel(level)
        return
    logging.basicConfig(level=level, format=fmt or DEFAULT_FORMAT)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    return logging.getLogger(name or "dockclean")
