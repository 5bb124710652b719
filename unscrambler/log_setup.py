"""
Logging setup for the Word Unscrambler game.
Level comes from LOG_LEVEL, log files go to LOG_DIR.
"""

import os
import logging
from pathlib import Path

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def configure_logging(level: str = None, log_dir: str = None) -> None:
    """Configure the root logger with a stream handler and, when possible, a file handler."""
    level_name = (level or os.getenv('LOG_LEVEL', 'INFO')).strip().upper()
    log_level = getattr(logging, level_name, logging.INFO)

    handlers = [logging.StreamHandler()]
    logs_path = Path(log_dir or os.getenv('LOG_DIR', 'logs'))
    try:
        logs_path.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(logs_path / 'game.log'))
    except OSError:
        # Read-only working directory; console logging only
        pass

    logging.basicConfig(level=log_level, format=LOG_FORMAT, handlers=handlers, force=True)

    logging.getLogger().setLevel(log_level)
    logging.getLogger('unscrambler').setLevel(log_level)
    # requests/urllib3 are chatty at DEBUG
    logging.getLogger('urllib3').setLevel(max(log_level, logging.INFO))
