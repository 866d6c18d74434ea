"""
FilmGrade utilities module.
"""

from .logging import StructuredLogger, GradingStats, setup_console_logging

__all__ = [
    'StructuredLogger',
    'GradingStats',
    'setup_console_logging',
]
