"""
Utility modules for the CRISP bootstrap.
"""

from .logging import setup_root_logger, get_logger, StatusLogger

__all__ = ["setup_root_logger", "get_logger", "StatusLogger"]
