"""
Logging configuration for the tokenintel service
"""
import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Union


def setup_logging(logger_name: str, log_level: Union[int, str] = logging.INFO) -> logging.Logger:
    """
    Set up logging configuration for a specific logger

    Args:
        logger_name: Name of the logger to configure
        log_level: Logging level to use

    Returns:
        logging.Logger: Configured logger instance
    """
    logger = logging.getLogger(logger_name)
    logger.setLevel(log_level)

    # Remove any existing handlers
    logger.handlers = []

    # Prevent propagation to root logger to avoid duplicate logs
    logger.propagate = False

    log_dir = Path("logs")
    log_dir.mkdir(exist_ok=True)

    log_file = log_dir / f"{logger_name.replace('.', '_')}.log"
    file_handler = logging.handlers.RotatingFileHandler(
        log_file,
        maxBytes=50*1024*1024,  # 50MB
        backupCount=10
    )
    file_handler.setLevel(log_level)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)

    file_handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    ))
    console_handler.setFormatter(logging.Formatter('%(levelname)s: %(name)s: %(message)s'))

    logger.addHandler(file_handler)
    logger.addHandler(console_handler)

    # Chatty transport libraries
    logging.getLogger('httpx').setLevel(logging.WARNING)
    logging.getLogger('httpcore').setLevel(logging.WARNING)
    logging.getLogger('hpack').setLevel(logging.WARNING)

    return logger

