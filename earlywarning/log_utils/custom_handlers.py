# earlywarning/log_utils/custom_handlers.py
import logging
import logging.handlers
import os
from datetime import datetime
from typing import Optional, Union

from .formatters import AnalysisFormatter, DetailedAnalysisFormatter

PACKAGE_LOGGER = 'earlywarning'


class AnalysisFileHandler(logging.FileHandler):
    """Handler writing one log file per analysis run"""
    def __init__(self, base_dir='analysis_results', filename=None):
        if filename is None:
            timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
            filename = f'analysis_{timestamp}.log'

        log_dir = os.path.join(base_dir, 'logs')
        os.makedirs(log_dir, exist_ok=True)
        super().__init__(os.path.join(log_dir, filename), encoding='utf-8')


class RotatingAnalysisFileHandler(logging.handlers.RotatingFileHandler):
    """Size-rotated analysis log handler"""
    def __init__(self, base_dir='analysis_results', filename='analysis.log',
                 maxBytes=1024*1024, backupCount=5):
        log_dir = os.path.join(base_dir, 'logs')
        os.makedirs(log_dir, exist_ok=True)
        super().__init__(
            os.path.join(log_dir, filename),
            maxBytes=maxBytes,
            backupCount=backupCount,
            encoding='utf-8'
        )


def setup_analysis_logging(level: Union[int, str] = logging.INFO,
                           log_dir: Optional[str] = None,
                           rotating: bool = True) -> logging.Logger:
    """
    Configure the package logger for command-line use

    Library code only creates module loggers; handlers are attached here so
    that importing the package never changes the host application's logging.

    Args:
        level: log level name or number
        log_dir: when given, also write a detailed log file under
            ``<log_dir>/logs``
        rotating: use RotatingAnalysisFileHandler instead of one file per run

    Returns:
        logging.Logger: the configured ``earlywarning`` logger
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            raise ValueError(f"Unknown log level: {level}")

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler()
    console.setFormatter(AnalysisFormatter())
    logger.addHandler(console)

    if log_dir is not None:
        if rotating:
            file_handler = RotatingAnalysisFileHandler(base_dir=log_dir)
        else:
            file_handler = AnalysisFileHandler(base_dir=log_dir)
        file_handler.setFormatter(DetailedAnalysisFormatter())
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger
