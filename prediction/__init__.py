"""
ITURHFProp prediction adapter.

This package turns path requests into ITURHFProp runs and back:
- Request validation
- Engine input serialization
- Engine process management
- Report parsing
- Band mapping and 24-hour batches
"""

from .band_mapper import BandMapper, reliability_status
from .batch_orchestrator import HourlyBatchOrchestrator
from .engine_runner import EnginePort, EngineRunner
from .errors import (
    EngineError,
    EngineMissing,
    EngineNonZeroExit,
    EngineTimeout,
    InvalidRequest,
    ParseDegraded,
    PredictionError,
    ReportMissing,
)
from .input_serializer import serialize_request
from .models import (
    BandCondition,
    BandResult,
    EngineReportLine,
    EngineRun,
    HourlyBatchResult,
    HourlyEntry,
    PredictionRequest,
    PredictionResult,
)
from .output_parser import ReportParser, parse_report
from .request_validator import parse_prediction_request
from .service import PredictionService

__all__ = [
    'BandMapper',
    'reliability_status',
    'HourlyBatchOrchestrator',
    'EnginePort',
    'EngineRunner',
    'EngineError',
    'EngineMissing',
    'EngineNonZeroExit',
    'EngineTimeout',
    'InvalidRequest',
    'ParseDegraded',
    'PredictionError',
    'ReportMissing',
    'serialize_request',
    'BandCondition',
    'BandResult',
    'EngineReportLine',
    'EngineRun',
    'HourlyBatchResult',
    'HourlyEntry',
    'PredictionRequest',
    'PredictionResult',
    'ReportParser',
    'parse_report',
    'parse_prediction_request',
    'PredictionService'
]
