"""
Prediction service.

Wires the pipeline stages together: serialize the request, run the engine,
parse the report, then optionally map bands or fan out over 24 hours.
"""

import logging
import threading
from dataclasses import replace
from functools import partial
from typing import Mapping, Optional

from .band_mapper import BandMapper
from .batch_orchestrator import HourlyBatchOrchestrator
from .constants import HF_BANDS
from .engine_runner import EnginePort, EngineRunner
from .errors import EngineError
from .input_serializer import serialize_request
from .models import BandResult, HourlyBatchResult, PredictionRequest, PredictionResult
from .output_parser import parse_report

logger = logging.getLogger(__name__)


class PredictionService:
    """Single-point, band and hourly predictions against one engine."""

    def __init__(self, engine: EnginePort, data_dir: str, report_dir: str = '/tmp/',
                 timeout: Optional[float] = None, band_table: Mapping[str, float] = HF_BANDS,
                 max_workers: int = 4, hourly_timeout: Optional[float] = None):
        self.engine = engine
        self.data_dir = data_dir
        self.report_dir = report_dir
        self.timeout = timeout
        self.band_mapper = BandMapper(band_table)
        self.max_workers = max_workers
        self.hourly_timeout = hourly_timeout

    @classmethod
    def from_config(cls, config) -> 'PredictionService':
        runner = EngineRunner(
            engine_path=config.ITURHFPROP_PATH,
            scratch_dir=config.ITURHFPROP_TEMP_DIR,
            lib_dir=config.ITURHFPROP_LIB_DIR,
            timeout=config.ENGINE_TIMEOUT
        )
        return cls(
            engine=runner,
            data_dir=config.ITURHFPROP_DATA,
            report_dir=config.ITURHFPROP_REPORT_DIR,
            timeout=config.ENGINE_TIMEOUT,
            max_workers=config.HOURLY_MAX_WORKERS,
            hourly_timeout=config.HOURLY_TIMEOUT
        )

    def predict(self, request: PredictionRequest,
                cancel_event: Optional[threading.Event] = None) -> PredictionResult:
        """
        Run one prediction.

        Engine failures propagate as EngineError with the generated input
        attached to their diagnostics. Parse problems never raise; they come
        back as a result with an empty frequency list and ``error`` set.
        Setting ``cancel_event`` stops the engine run early.
        """
        input_text = serialize_request(request, self.data_dir, self.report_dir)
        logger.info(
            f"Predicting TX {request.tx_lat}, {request.tx_lon} -> RX {request.rx_lat}, {request.rx_lon} "
            f"(month {request.month}, hour {request.hour}, SSN {request.ssn})"
        )
        logger.debug(f"Input file:\n{input_text}")

        try:
            run = self.engine.invoke(input_text, self.timeout, cancel_event)
        except EngineError as e:
            e.diagnostics.setdefault('inputContent', input_text)
            e.diagnostics.setdefault('params', request.to_params())
            logger.error(f"Engine failure ({e.error_type}): {e.message}")
            raise

        result = parse_report(run.report)
        return replace(
            result,
            elapsed_ms=run.elapsed_ms,
            exec_stdout=run.stdout,
            exec_stderr=run.stderr,
            input_content=input_text,
            exit_code=run.exit_code,
            params=request.to_params()
        )

    def predict_bands(self, request: PredictionRequest) -> BandResult:
        """Predict on the configured band frequencies and label each band."""
        result = self.predict(request.with_frequencies(self.band_mapper.frequencies))
        return self.band_mapper.map(result)

    def predict_hourly(self, base_request: PredictionRequest) -> HourlyBatchResult:
        """Predict every UTC hour for the request's path, month and SSN."""
        cancel_event = threading.Event()
        orchestrator = HourlyBatchOrchestrator(
            partial(self.predict, cancel_event=cancel_event),
            max_workers=self.max_workers,
            timeout=self.hourly_timeout,
            cancel_event=cancel_event
        )
        return orchestrator.run(base_request)
