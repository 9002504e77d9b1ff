"""
Logging setup

All glue_gen modules log under the 'glue_gen' logger hierarchy.
"""

import logging
from pathlib import Path
from typing import Optional

LOGGER_NAME = 'glue_gen'


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get a logger under the glue_gen hierarchy"""
    return logging.getLogger(f'{LOGGER_NAME}.{name}' if name else LOGGER_NAME)


def configure_logging(verbose: bool = False, log_file: Optional[Path] = None) -> logging.Logger:
    """Send glue_gen records to the console and optionally to a file"""
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # Repeated runs in one process must not duplicate output
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(logging.Formatter('[glue_gen] %(levelname)s %(message)s'))
    logger.addHandler(console)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter('%(asctime)s %(levelname)s %(name)s: %(message)s'))
        logger.addHandler(file_handler)

    return logger
