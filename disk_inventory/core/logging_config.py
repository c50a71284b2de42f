"""Centralized logging configuration for the disk inventory."""

import logging
import os
from typing import Optional

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class LoggingConfigurator:
    """Handles all logging setup independently of other configuration."""

    @staticmethod
    def setup_logging(log_level: str = 'INFO', log_file: Optional[str] = None) -> None:
        """Set up root logging once at startup.

        Args:
            log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
            log_file: Optional path to log file. Console output is always kept.
        """
        level = getattr(logging, log_level.upper(), logging.INFO)
        handlers = [logging.StreamHandler()]

        if log_file:
            log_dir = os.path.dirname(log_file)
            if log_dir:
                os.makedirs(log_dir, exist_ok=True)
            handlers.insert(0, logging.FileHandler(log_file))

        logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=True)

        # prometheus_client's HTTP server logs every scrape at INFO
        if level > logging.DEBUG:
            logging.getLogger('prometheus_client').setLevel(logging.WARNING)

    @staticmethod
    def get_logger(name: str) -> logging.Logger:
        """Get a logger instance (usually for __name__)."""
        return logging.getLogger(name)
