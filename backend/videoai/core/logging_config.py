import logging
import os
import sys
from datetime import datetime
from typing import Optional

from videoai.core.config import settings

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

def configure_logging(log_dir: Optional[str] = None, level: int = logging.INFO):
    """configure structured logging to stdout and, when a log dir is set, a dated file"""
    log_dir = settings.LOG_DIR if log_dir is None else log_dir
    handlers = [logging.StreamHandler(sys.stdout)]

    if log_dir:
        # create logs directory if it doesn't exist
        os.makedirs(log_dir, exist_ok=True)
        handlers.append(
            logging.FileHandler(
                os.path.join(log_dir, f'videoai_{datetime.now().strftime("%Y%m%d")}.log'),
                mode='a'
            )
        )

    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers)

def get_logger(name: str) -> logging.Logger:
    """get a configured logger instance"""
    return logging.getLogger(name)
