"""
Utilities Package - Logging and Exception Handling
"""
from .logging import get_logger, setup_logging
from .exceptions import (
    CardiaGuardError,
    RecordShapeError,
    UnsupportedFileError,
    AnalysisError,
    AnalysisConfigurationError,
    AnalysisResponseError,
)

__all__ = [
    "get_logger",
    "setup_logging",
    "CardiaGuardError",
    "RecordShapeError",
    "UnsupportedFileError",
    "AnalysisError",
    "AnalysisConfigurationError",
    "AnalysisResponseError",
]
