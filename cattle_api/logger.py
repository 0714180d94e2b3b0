"""
Structured logging for Cattle Measurement API

Format: [LEVEL] [component] message | key=value key2=value2

Components follow the module that emits them, e.g. 'session:calibration',
'placement', 'api:sessions'.
"""

import logging
import os
import sys
import threading
from enum import Enum
from typing import Optional


MAX_VALUE_LENGTH = 200


class Logger:
    """
    Component-tagged key=value logger.

    Usage:
        log = Logger('cattle_api')
        log.info('session', 'Image loaded', session_id=sid, width=1000, height=800)
        log.error('api', 'Upload rejected', error='not an image', fix='Send a JPEG or PNG')
    """

    def __init__(self, name: str = 'cattle_api', level: Optional[str] = None):
        self._logger = logging.getLogger(name)
        level = level or os.environ.get('LOG_LEVEL', 'INFO')
        self._logger.setLevel(getattr(logging, level.upper(), logging.INFO))
        self._lock = threading.Lock()

        if not self._logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(logging.Formatter('%(message)s'))
            self._logger.addHandler(handler)

    @staticmethod
    def _render(value) -> str:
        if isinstance(value, Enum):
            value = value.value
        if isinstance(value, float):
            return f"{value:.4g}"
        value = str(value)
        if len(value) > MAX_VALUE_LENGTH:
            value = value[:MAX_VALUE_LENGTH] + "..."
        return value.replace('|', '\\|')

    def _format(self, level: str, component: str, message: str, **kwargs) -> str:
        """Format: [LEVEL] [component] message | key=value key2=value2"""
        base = f"[{level}] [{component}] {message}"
        pairs = [f"{k}={self._render(v)}" for k, v in kwargs.items() if v is not None]
        if pairs:
            return f"{base} | {' '.join(pairs)}"
        return base

    def _emit(self, level_no: int, level: str, component: str, message: str, **kwargs):
        if not self._logger.isEnabledFor(level_no):
            return
        with self._lock:
            self._logger.log(level_no, self._format(level, component, message, **kwargs))

    def debug(self, component: str, message: str, **kwargs):
        self._emit(logging.DEBUG, "DEBUG", component, message, **kwargs)

    def info(self, component: str, message: str, **kwargs):
        self._emit(logging.INFO, "INFO", component, message, **kwargs)

    def warn(self, component: str, message: str, **kwargs):
        self._emit(logging.WARNING, "WARN", component, message, **kwargs)

    def error(self, component: str, message: str, **kwargs):
        """
        Log an error. Always include 'error' kwarg with the actual error.
        Optionally include 'fix' kwarg with action to take.
        """
        self._emit(logging.ERROR, "ERROR", component, message, **kwargs)


# Global logger instance
log = Logger('cattle_api')
