"""
24-hour batch runner.

Fans the single-point pipeline out over hours 0-23 on a bounded thread
pool. A failure in one hour is recorded against that hour only; the
assembled result is always ordered by hour.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FuturesTimeoutError, as_completed
from typing import Callable, Dict, Optional

from .constants import HOURS_PER_DAY
from .errors import EngineTimeout, PredictionError
from .models import HourlyBatchResult, HourlyEntry, PredictionRequest, PredictionResult

logger = logging.getLogger(__name__)


class HourlyBatchOrchestrator:
    """Runs one prediction per UTC hour and gathers the results."""

    def __init__(self, predict: Callable[[PredictionRequest], PredictionResult],
                 max_workers: int = 4, timeout: Optional[float] = None,
                 cancel_event: Optional[threading.Event] = None):
        self.predict = predict
        self.max_workers = max(1, max_workers)
        self.timeout = timeout
        # Set when the batch times out, so in-flight predictions can stop
        self.cancel_event = cancel_event

    def _run_hour(self, base_request: PredictionRequest, hour: int) -> HourlyEntry:
        try:
            result = self.predict(base_request.with_hour(hour))
            return HourlyEntry.from_result(hour, result)
        except PredictionError as e:
            logger.warning(f"Hour {hour:02d} failed: {e.message}")
            return HourlyEntry.failed(hour, e.message)
        except Exception as e:
            logger.exception(f"Hour {hour:02d} failed unexpectedly")
            return HourlyEntry.failed(hour, str(e))

    def run(self, base_request: PredictionRequest) -> HourlyBatchResult:
        entries: Dict[int, HourlyEntry] = {}
        executor = ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix='hourly')
        try:
            futures = {
                executor.submit(self._run_hour, base_request, hour): hour
                for hour in range(HOURS_PER_DAY)
            }
            try:
                for future in as_completed(futures, timeout=self.timeout):
                    hour = futures[future]
                    entries[hour] = future.result()
            except FuturesTimeoutError:
                logger.error(f"Hourly batch exceeded {self.timeout}s, cancelling unfinished hours")
                if self.cancel_event is not None:
                    self.cancel_event.set()
                timeout_error = EngineTimeout(f"Hourly batch did not finish within {self.timeout:g}s")
                for future, hour in futures.items():
                    if hour in entries:
                        continue
                    if future.done() and not future.cancelled():
                        entries[hour] = future.result()
                    else:
                        future.cancel()
                        entries[hour] = HourlyEntry.failed(hour, timeout_error.message)
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        ordered = tuple(entries[hour] for hour in range(HOURS_PER_DAY))
        failed = [entry.hour for entry in ordered if not entry.ok]
        if failed:
            logger.info(f"Hourly batch finished with {len(failed)} failed hours: {failed}")
        return HourlyBatchResult(request=base_request, entries=ordered)
