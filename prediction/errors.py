"""
Error taxonomy for the prediction pipeline.
"""

from typing import Any, Dict, Optional


class PredictionError(Exception):
    """Base class for every failure the prediction pipeline reports."""

    status_code = 500
    error_type = 'prediction_error'

    def __init__(self, message: str, diagnostics: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.diagnostics = dict(diagnostics or {})

    def to_dict(self) -> Dict[str, Any]:
        body = {
            'error': self.message,
            'errorType': self.error_type,
        }
        if self.diagnostics:
            body['diagnostics'] = self.diagnostics
        return body


class InvalidRequest(PredictionError):
    """A caller supplied a missing or malformed parameter."""

    status_code = 400
    error_type = 'invalid_request'

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field

    def to_dict(self) -> Dict[str, Any]:
        body = super().to_dict()
        body['field'] = self.field
        return body


class EngineError(PredictionError):
    """The engine could not produce a usable report."""

    error_type = 'engine_error'


class EngineMissing(EngineError):
    error_type = 'engine_missing'


class EngineTimeout(EngineError):
    error_type = 'engine_timeout'


class EngineNonZeroExit(EngineError):
    error_type = 'engine_nonzero_exit'

    def __init__(self, message: str, exit_code: int, diagnostics: Optional[Dict[str, Any]] = None):
        super().__init__(message, diagnostics)
        self.exit_code = exit_code
        self.diagnostics.setdefault('exitCode', exit_code)


class ReportMissing(EngineError):
    error_type = 'report_missing'


class ParseDegraded(PredictionError):
    """Raised inside the report parser; never escapes it."""

    error_type = 'parse_degraded'
