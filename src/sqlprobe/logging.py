import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def setup_logging(log_file: Optional[str] = None, level: int = logging.INFO) -> None:
    root = logging.getLogger()
    root.setLevel(level)

    # calling twice must not duplicate output
    for h in list(root.handlers):
        if getattr(h, "_sqlprobe", False):
            root.removeHandler(h)
            h.close()

    formatter = logging.Formatter(_FORMAT)
    handlers = []

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        handlers.append(RotatingFileHandler(log_file, maxBytes=5_000_000, backupCount=5, encoding="utf-8"))

    handlers.append(logging.StreamHandler())

    for h in handlers:
        h.setFormatter(formatter)
        h._sqlprobe = True
        root.addHandler(h)
