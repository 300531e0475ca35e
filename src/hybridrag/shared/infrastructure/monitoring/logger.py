"""
Logging setup for HybridRAG.

Only the ``hybridrag`` package logger is configured, so embedding the
library in an application never rewires the application's root logger.
Records still propagate, which keeps them visible to host handlers.
"""

import logging
import sys
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from ...config.settings import get_settings

PACKAGE_LOGGER = 'hybridrag'
QUIET_LIBRARIES = ('onnxruntime', 'tokenizers')


def _build_handlers(log_file: Optional[str], formatter: logging.Formatter) -> List[logging.Handler]:
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding='utf-8'))

    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


@lru_cache()
def setup_logging(
    log_level: Optional[str] = None,
    log_file: Optional[str] = None,
    include_timestamp: bool = True
) -> logging.Logger:
    """
    Configure the package logger.

    Args:
        log_level: Level name; defaults to ``Settings.log_level``
        log_file: Extra file destination; defaults to ``Settings.log_file``
        include_timestamp: Prefix records with a timestamp

    Returns:
        The configured package logger
    """
    config = get_settings().logging_config

    level_name = (log_level or config.get('level') or 'INFO').upper()
    level = getattr(logging, level_name, logging.INFO)

    fmt = config.get('format', '%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    if not include_timestamp:
        fmt = fmt.replace('%(asctime)s - ', '')
    formatter = logging.Formatter(fmt, datefmt='%Y-%m-%d %H:%M:%S')

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(level)
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()
    for handler in _build_handlers(log_file or config.get('file'), formatter):
        package_logger.addHandler(handler)

    for name in QUIET_LIBRARIES:
        logging.getLogger(name).setLevel(logging.WARNING)

    return package_logger


@lru_cache()
def get_logger(name: str) -> logging.Logger:
    """
    Get a logger, configuring package logging on first use.

    Args:
        name: Logger name (usually __name__)
    """
    setup_logging()
    return logging.getLogger(name)
