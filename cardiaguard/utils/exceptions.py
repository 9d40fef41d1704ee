"""
Custom Exception Hierarchy

Error types for the clinical feature pipeline, each carrying a stable
error code and structured details for API responses.
"""
from typing import Optional, Dict, Any


class CardiaGuardError(Exception):
    """Base exception for all CardiaGuard errors."""

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details
        }


class RecordShapeError(CardiaGuardError):
    """Unknown feature name, or a mapping without exactly the ten features."""

    def __init__(
        self,
        message: str,
        field_name: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="RECORD_SHAPE_ERROR",
            details={"field": field_name, **(details or {})}
        )
        self.field_name = field_name


class UnsupportedFileError(CardiaGuardError):
    """Uploaded file is not a .tab or .csv document."""

    def __init__(
        self,
        message: str,
        filename: str = "",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="UNSUPPORTED_FILE",
            details={"filename": filename, **(details or {})}
        )
        self.filename = filename


class AnalysisError(CardiaGuardError):
    """The external analysis capability failed."""

    def __init__(
        self,
        message: str = "",
        code: str = "ANALYSIS_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message=message, code=code, details=details)


class AnalysisConfigurationError(AnalysisError):
    """The analysis capability is not configured (e.g. missing API key)."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            code="ANALYSIS_CONFIG_ERROR",
            details=details
        )


class AnalysisResponseError(AnalysisError):
    """The model replied with something that is not a usable analysis."""

    def __init__(
        self,
        message: str,
        raw_text: str = "",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="ANALYSIS_RESPONSE_ERROR",
            details={"raw_text": raw_text[:500], **(details or {})}
        )
        self.raw_text = raw_text
