"""
Value objects passed between the stages of the prediction pipeline.
"""

import hashlib
import json
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Tuple

from .constants import (
    DEFAULT_FREQUENCIES,
    DEFAULT_NOISE,
    DEFAULT_REQUIRED_RELIABILITY,
    DEFAULT_REQUIRED_SNR,
    DEFAULT_SSN,
    DEFAULT_TX_POWER_WATTS,
    HOURS_PER_DAY,
    NoiseEnvironment,
)


@dataclass(frozen=True)
class PredictionRequest:
    """A validated path/time/solar request. ``hour`` is None for batch bases."""

    tx_lat: float
    tx_lon: float
    rx_lat: float
    rx_lon: float
    year: int
    month: int
    hour: Optional[int] = None
    ssn: int = DEFAULT_SSN
    tx_power: float = DEFAULT_TX_POWER_WATTS
    frequencies: Tuple[float, ...] = DEFAULT_FREQUENCIES
    man_made_noise: NoiseEnvironment = DEFAULT_NOISE
    required_reliability: float = DEFAULT_REQUIRED_RELIABILITY
    required_snr: float = DEFAULT_REQUIRED_SNR

    def with_hour(self, hour: Optional[int]) -> 'PredictionRequest':
        return replace(self, hour=hour)

    def with_frequencies(self, frequencies) -> 'PredictionRequest':
        return replace(self, frequencies=tuple(frequencies))

    def to_params(self) -> Dict[str, Any]:
        """Request echo included in single-point responses."""
        return {
            'txLat': self.tx_lat,
            'txLon': self.tx_lon,
            'rxLat': self.rx_lat,
            'rxLon': self.rx_lon,
            'hour': self.hour,
            'month': self.month,
            'year': self.year,
            'ssn': self.ssn,
            'txPower': self.tx_power,
            'frequencies': list(self.frequencies),
            'manMadeNoise': self.man_made_noise.value,
            'requiredReliability': self.required_reliability,
            'requiredSNR': self.required_snr,
        }

    def cache_key(self) -> str:
        payload = json.dumps(self.to_params(), sort_keys=True)
        return hashlib.sha1(payload.encode('utf-8')).hexdigest()


@dataclass(frozen=True)
class EngineReportLine:
    """One row of the engine's Calculated Parameters table."""

    freq: float
    sdbw: float
    snr: float
    reliability: float

    def to_dict(self) -> Dict[str, float]:
        return {
            'freq': self.freq,
            'sdbw': self.sdbw,
            'snr': self.snr,
            'reliability': self.reliability,
        }


@dataclass(frozen=True)
class EngineRun:
    """Raw outcome of a single engine invocation."""

    report: str
    exit_code: int
    stdout: str = ''
    stderr: str = ''
    elapsed_ms: int = 0
    invocation_id: str = ''


@dataclass(frozen=True)
class PredictionResult:
    """Parsed report plus the diagnostics gathered while producing it."""

    frequencies: Tuple[EngineReportLine, ...] = ()
    muf: Optional[float] = None
    raw: str = ''
    error: Optional[str] = None
    elapsed_ms: Optional[int] = None
    exec_stdout: str = ''
    exec_stderr: str = ''
    input_content: str = ''
    exit_code: Optional[int] = None
    params: Dict[str, Any] = field(default_factory=dict)

    @property
    def engine_clean(self) -> bool:
        """True when the engine exited with status 0."""
        return self.exit_code == 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'frequencies': [line.to_dict() for line in self.frequencies],
            'muf': self.muf,
            'raw': self.raw,
            'error': self.error,
            'elapsed': self.elapsed_ms,
            'execStdout': self.exec_stdout,
            'execStderr': self.exec_stderr,
            'inputContent': self.input_content,
            'exitCode': self.exit_code,
            'params': self.params,
        }


@dataclass(frozen=True)
class BandCondition:
    freq: float
    reliability: float
    snr: float
    sdbw: float
    status: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'freq': self.freq,
            'reliability': self.reliability,
            'snr': self.snr,
            'sdbw': self.sdbw,
            'status': self.status,
        }


@dataclass(frozen=True)
class BandResult:
    """Named-band view of a prediction. Unmatched bands are absent."""

    bands: Dict[str, BandCondition]
    prediction: PredictionResult

    @property
    def muf(self) -> Optional[float]:
        return self.prediction.muf

    def to_dict(self) -> Dict[str, Any]:
        return {name: condition.to_dict() for name, condition in self.bands.items()}


@dataclass(frozen=True)
class HourlyEntry:
    """One hour of a 24-hour batch: either frequencies/MUF or an error."""

    hour: int
    muf: Optional[float] = None
    frequencies: Tuple[EngineReportLine, ...] = ()
    error: Optional[str] = None

    @classmethod
    def from_result(cls, hour: int, result: PredictionResult) -> 'HourlyEntry':
        return cls(hour=hour, muf=result.muf, frequencies=result.frequencies)

    @classmethod
    def failed(cls, hour: int, message: str) -> 'HourlyEntry':
        return cls(hour=hour, error=message)

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> Dict[str, Any]:
        if self.error is not None:
            return {'hour': self.hour, 'error': self.error}
        return {
            'hour': self.hour,
            'muf': self.muf,
            'frequencies': [line.to_dict() for line in self.frequencies],
        }


@dataclass(frozen=True)
class HourlyBatchResult:
    request: PredictionRequest
    entries: Tuple[HourlyEntry, ...]

    def __post_init__(self):
        if [entry.hour for entry in self.entries] != list(range(HOURS_PER_DAY)):
            raise ValueError("hourly batch must hold exactly one entry per hour 0-23, in order")

    @property
    def failed_hours(self) -> List[int]:
        return [entry.hour for entry in self.entries if not entry.ok]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'path': {
                'tx': {'lat': self.request.tx_lat, 'lon': self.request.tx_lon},
                'rx': {'lat': self.request.rx_lat, 'lon': self.request.rx_lon},
            },
            'month': self.request.month,
            'year': self.request.year,
            'ssn': self.request.ssn,
            'hourly': [entry.to_dict() for entry in self.entries],
        }
