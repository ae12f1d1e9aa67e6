import logging
import sys
from pathlib import Path
from typing import Optional

from embedviz.core.config import settings

LOG_FILE_NAME = "embedviz.log"


def setup_logging(log_dir: Optional[str] = None, level: Optional[str] = None):
    """
    Configures the ROOT logger.
    Every `embedviz.*` logger inherits the console and file handlers.
    """
    logger = logging.getLogger()

    # Prevent adding duplicate handlers if setup_logging is called twice
    if logger.handlers:
        return logger

    logger.setLevel(level or settings.LOG_LEVEL)

    formatter = logging.Formatter(
        "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        "%Y-%m-%d %H:%M:%S"
    )

    # 1. Console Handler
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    # 2. File Handler
    log_path = Path(log_dir or settings.LOG_DIR)
    log_path.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(log_path / LOG_FILE_NAME, encoding="utf-8")
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    # Silence noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("PIL").setLevel(logging.WARNING)

    return logger


def get_logger(name: str):
    """
    Helper to get a named logger under the `embedviz` namespace.
    """
    if not name.startswith("embedviz"):
        name = f"embedviz.{name}"
    return logging.getLogger(name)
