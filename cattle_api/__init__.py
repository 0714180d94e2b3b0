"""
Cattle Measurement API Package
"""

from .main import app
from .session import sessions
from .logger import log

__all__ = ['app', 'sessions', 'log']
