"""
Utilities Module
Logging helpers shared by the engine and entry points
"""
from utils.logger import setup_logger, set_log_level, LogContext

__all__ = [
    'setup_logger',
    'set_log_level',
    'LogContext'
]
