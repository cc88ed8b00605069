import logging
import os
import sys
from datetime import datetime

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'


def setup_logger(name, logs_dir=None, level=None):
    """Console logger, plus a timestamped log file when logs_dir is given."""
    level_name = str(level or os.getenv("EACHR_LOG_LEVEL", "INFO")).strip().upper()
    log_level = getattr(logging, level_name, logging.INFO)

    logger = logging.getLogger(name)
    logger.setLevel(log_level)
    logger.propagate = False

    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT)

    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setLevel(log_level)
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    if logs_dir:
        os.makedirs(logs_dir, exist_ok=True)
        timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
        safe_name = name.replace(".", "_")
        log_filepath = os.path.join(logs_dir, f"{safe_name}_{timestamp}.log")
        file_handler = logging.FileHandler(log_filepath)
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
