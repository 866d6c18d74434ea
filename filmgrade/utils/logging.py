"""
Logging utilities for FilmGrade
Provides structured logging and batch progress tracking
"""

import logging
import sys
from typing import Optional, Dict, Any
from datetime import datetime
import json

import colorlog

DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

_console_handler: Optional[logging.Handler] = None


class StructuredLogger:
    """Provides structured logging with metadata"""

    def __init__(self, name: str, metadata: Optional[Dict[str, Any]] = None):
        """
        Initialize structured logger

        Args:
            name: Logger name
            metadata: Default metadata to include in all logs
        """
        self.logger = logging.getLogger(name)
        self.metadata = metadata or {}

    def _format_message(self, message: str, **kwargs) -> str:
        """Format message with metadata"""
        data = {**self.metadata, **kwargs}
        if data:
            return f"{message} | {json.dumps(data, default=str)}"
        return message

    def debug(self, message: str, **kwargs):
        self.logger.debug(self._format_message(message, **kwargs))

    def info(self, message: str, **kwargs):
        self.logger.info(self._format_message(message, **kwargs))

    def warning(self, message: str, **kwargs):
        self.logger.warning(self._format_message(message, **kwargs))

    def error(self, message: str, **kwargs):
        self.logger.error(self._format_message(message, **kwargs))


class GradingStats:
    """Tracks batch grading statistics"""

    def __init__(self):
        self.start_time = datetime.now()
        self.total_files = 0
        self.processed_files = 0
        self.graded_files = 0
        self.failed_files = 0
        self.errors = []
        self.processing_times = []

    def set_total(self, total: int):
        """Set total number of files to grade"""
        self.total_files = total

    def add_result(self, success: bool, processing_time: Optional[float] = None):
        """
        Add a grading result

        Args:
            success: Whether the file was graded and written
            processing_time: Time taken to grade the file
        """
        self.processed_files += 1

        if success:
            self.graded_files += 1
        else:
            self.failed_files += 1

        if processing_time:
            self.processing_times.append(processing_time)

    def add_error(self, file_path: str, error: str):
        """Record a failure for a file"""
        self.errors.append({
            'file': file_path,
            'error': error,
            'time': datetime.now()
        })
        self.add_result(False)

    def get_elapsed_time(self) -> float:
        """Get elapsed time in seconds"""
        return (datetime.now() - self.start_time).total_seconds()

    def get_average_processing_time(self) -> float:
        """Get average processing time per file"""
        if not self.processing_times:
            return 0.0
        return sum(self.processing_times) / len(self.processing_times)

    def get_summary(self) -> Dict[str, Any]:
        """Get grading summary"""
        elapsed = self.get_elapsed_time()

        return {
            'total_files': self.total_files,
            'processed_files': self.processed_files,
            'graded_files': self.graded_files,
            'failed_files': self.failed_files,
            'errors': len(self.errors),
            'elapsed_time': elapsed,
            'average_time_per_file': self.get_average_processing_time(),
        }

    def format_summary(self) -> str:
        """Render the summary as console text"""
        summary = self.get_summary()
        lines = [
            "=" * 60,
            "GRADING SUMMARY",
            "=" * 60,
            f"Total files:      {summary['total_files']}",
            f"Graded:           {summary['graded_files']}",
            f"Failed:           {summary['failed_files']}",
            f"Elapsed time:     {summary['elapsed_time']:.1f}s",
            f"Avg time/file:    {summary['average_time_per_file']:.2f}s",
            "=" * 60,
        ]

        if self.errors:
            lines.append("ERRORS:")
            for error in self.errors[:10]:  # Show first 10 errors
                lines.append(f"  - {error['file']}: {error['error']}")
            if len(self.errors) > 10:
                lines.append(f"  ... and {len(self.errors) - 10} more errors")

        return "\n".join(lines)


def setup_console_logging(level: str = "INFO", color: bool = True):
    """
    Setup console logging with optional color support

    Args:
        level: Logging level
        color: Whether to use colored output
    """
    console_handler = logging.StreamHandler(sys.stdout)

    if color and sys.stdout.isatty():
        formatter = colorlog.ColoredFormatter(
            '%(log_color)s%(asctime)s - %(name)s - %(levelname)s%(reset)s - %(message)s',
            log_colors={
                'DEBUG': 'cyan',
                'INFO': 'green',
                'WARNING': 'yellow',
                'ERROR': 'red',
                'CRITICAL': 'red,bg_white',
            }
        )
    else:
        formatter = logging.Formatter(DEFAULT_FORMAT)

    console_handler.setFormatter(formatter)

    global _console_handler
    root_logger = logging.getLogger()
    if _console_handler is not None:
        root_logger.removeHandler(_console_handler)
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    root_logger.addHandler(console_handler)
    _console_handler = console_handler
    return console_handler
