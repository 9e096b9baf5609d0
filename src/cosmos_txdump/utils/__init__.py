"""Utility functions and helpers"""

from .config_manager import ConfigManager
from .csv_writer import CSVWriter, records_to_rows
from .display import render_table
from .error_handler import ErrorHandler, ErrorCategory, ErrorSeverity, handle_pipeline_error
from .query import filter_by_type, sort_by

__all__ = [
    'ConfigManager',
    'CSVWriter',
    'records_to_rows',
    'render_table',
    'ErrorHandler',
    'ErrorCategory',
    'ErrorSeverity',
    'handle_pipeline_error',
    'filter_by_type',
    'sort_by',
]
