import logging
import sys
from pathlib import Path
from typing import Optional, Union

from . import config


def setup_logging(level: Optional[Union[str, int]] = None, log_file: Optional[str] = None):
    """
    Configure the root logger for command-line entry points.

    - Timestamped message format.
    - Logs to the console (stdout).
    - Optionally mirrors logs to ``log_file``.
    """
    if level is None:
        level = config.LOG_LEVEL
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, mode="w", encoding="utf-8"))

    logging.basicConfig(
        level=level,
        format="%(asctime)s.%(msecs)03d [%(levelname)s] %(name)s:%(lineno)d | %(message)s",
        datefmt="%H:%M:%S",
        handlers=handlers,
        force=True,
    )

    logging.getLogger("faultterrain").setLevel(level)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("PIL").setLevel(logging.WARNING)
