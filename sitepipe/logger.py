import logging
import os
from datetime import datetime

LOGGER_NAME = 'sitepipe'


def setup_logging(verbose=False, log_dir='logs'):
    """Set up console and file logging for the sitepipe logger tree."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)

    if logger.handlers:
        return logger

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    console_handler.setFormatter(logging.Formatter('%(message)s'))
    logger.addHandler(console_handler)

    # File handler for all logs
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        log_filename = datetime.now().strftime('sitepipe_%Y-%m-%d_%H-%M-%S.log')
        file_handler = logging.FileHandler(os.path.join(log_dir, log_filename))
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
        logger.addHandler(file_handler)

    return logger
