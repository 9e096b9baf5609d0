"""Structured error recording and logging for the transaction dump tool."""

import json
import logging
import traceback
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Any
from dataclasses import dataclass, asdict
import sys

from ..errors import (
    GasParseError,
    NetworkError,
    ParseError,
    TaskFailure,
    TimestampParseError,
    TranslationError,
)


class ErrorSeverity(Enum):
    """Error severity levels"""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Error categories for classification"""
    NETWORK = "network"
    DATA_PARSING = "data_parsing"
    TRANSLATION = "translation"
    TASK = "task"
    OUTPUT = "output"
    SYSTEM = "system"


@dataclass
class ErrorDetail:
    """Detailed error information"""
    timestamp: str
    severity: str
    category: str
    error_code: str
    message: str
    url: Optional[str] = None
    height: Optional[int] = None
    field_name: Optional[str] = None
    raw_value: Optional[str] = None
    stack_trace: Optional[str] = None
    context: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization"""
        return asdict(self)


class JSONFormatter(logging.Formatter):
    def format(self, record):
        log_entry = {
            'timestamp': datetime.fromtimestamp(record.created).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno
        }

        for extra_field in ('error_code', 'category', 'url', 'height', 'context'):
            if hasattr(record, extra_field):
                log_entry[extra_field] = getattr(record, extra_field)

        return json.dumps(log_entry, default=str)


class ErrorHandler:
    """Records pipeline failures and writes them as JSON lines"""

    error_codes = {
        # Network errors
        "NETWORK_ERROR": "N001",
        "HTTP_STATUS_ERROR": "N002",

        # Response parsing errors
        "PARSE_ERROR": "P001",

        # Translation errors
        "GAS_PARSE_ERROR": "T001",
        "TIMESTAMP_PARSE_ERROR": "T002",
        "TRANSLATION_ERROR": "T099",

        # Range task errors
        "TASK_FAILURE": "R001",

        # Output errors
        "OUTPUT_WRITE_ERROR": "O001",

        # Query warnings
        "NO_RECORDS": "Q001",

        "UNEXPECTED_ERROR": "S999"
    }

    def __init__(self, log_directory: Optional[str] = "logs", enable_console: bool = True):
        self.log_directory = Path(log_directory) if log_directory else None
        if self.log_directory is not None:
            self.log_directory.mkdir(parents=True, exist_ok=True)

        self.errors: List[ErrorDetail] = []
        self.warnings: List[ErrorDetail] = []

        self._setup_logging(enable_console)

    def _setup_logging(self, enable_console: bool):
        """Set up structured JSON logging"""
        self.logger = logging.getLogger('cosmos_txdump.errors')
        self.logger.setLevel(logging.DEBUG)
        self.logger.propagate = False

        # handlers left by an earlier instance still hold their log file open
        self.close()

        if self.log_directory is not None:
            log_file = self.log_directory / f"txdump_{datetime.now().strftime('%Y%m%d')}.jsonl"
            file_handler = logging.FileHandler(log_file)
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(JSONFormatter())
            self.logger.addHandler(file_handler)

        if enable_console:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setLevel(logging.WARNING)
            console_handler.setFormatter(logging.Formatter('%(asctime)s - %(levelname)s - %(message)s'))
            self.logger.addHandler(console_handler)

    def close(self):
        for handler in list(self.logger.handlers):
            handler.close()
            self.logger.removeHandler(handler)

    def log_error(self,
                  message: str,
                  error_type: str,
                  category: ErrorCategory = ErrorCategory.SYSTEM,
                  url: Optional[str] = None,
                  height: Optional[int] = None,
                  field_name: Optional[str] = None,
                  raw_value: Optional[str] = None,
                  exception: Optional[BaseException] = None,
                  context: Optional[Dict[str, Any]] = None) -> ErrorDetail:
        """Log an error with detailed information"""

        error_code = self.error_codes.get(error_type, "S999")
        stack_trace = None

        if exception:
            stack_trace = ''.join(traceback.format_exception(
                type(exception), exception, exception.__traceback__
            ))

        error_detail = ErrorDetail(
            timestamp=datetime.now().isoformat(),
            severity=ErrorSeverity.ERROR.value,
            category=category.value,
            error_code=error_code,
            message=message,
            url=url,
            height=height,
            field_name=field_name,
            raw_value=raw_value,
            stack_trace=stack_trace,
            context=context or {}
        )

        self.errors.append(error_detail)

        self.logger.error(
            message,
            extra={
                'error_code': error_code,
                'category': category.value,
                'url': url,
                'height': height,
                'context': context or {}
            }
        )

        return error_detail

    def log_warning(self,
                    message: str,
                    warning_type: str,
                    category: ErrorCategory = ErrorCategory.SYSTEM,
                    context: Optional[Dict[str, Any]] = None) -> ErrorDetail:
        """Log a warning with detailed information"""

        warning_code = self.error_codes.get(warning_type, "W999")

        warning_detail = ErrorDetail(
            timestamp=datetime.now().isoformat(),
            severity=ErrorSeverity.WARNING.value,
            category=category.value,
            error_code=warning_code,
            message=message,
            context=context or {}
        )

        self.warnings.append(warning_detail)

        self.logger.warning(
            message,
            extra={
                'error_code': warning_code,
                'category': category.value,
                'context': context or {}
            }
        )

        return warning_detail

    def log_info(self, message: str, context: Optional[Dict[str, Any]] = None):
        """Log informational message"""
        self.logger.info(message, extra={'context': context or {}})

    def get_error_summary(self) -> Dict[str, Any]:
        """Get summary of all errors and warnings"""
        errors_by_category: Dict[str, int] = {}
        for error in self.errors:
            errors_by_category[error.category] = errors_by_category.get(error.category, 0) + 1

        return {
            'total_errors': len(self.errors),
            'total_warnings': len(self.warnings),
            'errors_by_category': errors_by_category,
            'error_codes': sorted({e.error_code for e in self.errors}),
        }

    def has_errors(self) -> bool:
        """Check if any errors have been logged"""
        return len(self.errors) > 0


def handle_pipeline_error(error_handler: ErrorHandler, exception: BaseException) -> ErrorDetail:
    """Record a fetch, parse, translation or task failure with the matching code"""
    height = None
    cause = exception
    if isinstance(exception, TaskFailure):
        height = exception.height
        cause = exception.cause

    if isinstance(cause, NetworkError):
        error_type = "HTTP_STATUS_ERROR" if cause.status_code is not None else "NETWORK_ERROR"
        category = ErrorCategory.NETWORK
    elif isinstance(cause, ParseError):
        error_type = "PARSE_ERROR"
        category = ErrorCategory.DATA_PARSING
    elif isinstance(cause, GasParseError):
        error_type = "GAS_PARSE_ERROR"
        category = ErrorCategory.TRANSLATION
    elif isinstance(cause, TimestampParseError):
        error_type = "TIMESTAMP_PARSE_ERROR"
        category = ErrorCategory.TRANSLATION
    elif isinstance(cause, TranslationError):
        error_type = "TRANSLATION_ERROR"
        category = ErrorCategory.TRANSLATION
    elif isinstance(exception, TaskFailure):
        error_type = "TASK_FAILURE"
        category = ErrorCategory.TASK
    else:
        error_type = "UNEXPECTED_ERROR"
        category = ErrorCategory.SYSTEM

    return error_handler.log_error(
        str(exception),
        error_type,
        category,
        url=getattr(cause, 'url', None),
        height=height,
        field_name=getattr(cause, 'field_name', None),
        raw_value=getattr(cause, 'raw_value', None),
        exception=exception,
        context={'infrastructure': exception.is_infrastructure} if isinstance(exception, TaskFailure) else None
    )
