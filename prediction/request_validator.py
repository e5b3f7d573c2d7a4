"""
Request validation for prediction endpoints.

Turns raw query parameters into a PredictionRequest, or raises
InvalidRequest naming the first offending parameter. Validation always
completes before any engine process is spawned.
"""

import math
from datetime import datetime
from typing import Mapping, Optional, Tuple

import pytz

from .constants import (
    DEFAULT_FREQUENCIES,
    DEFAULT_NOISE,
    DEFAULT_REQUIRED_RELIABILITY,
    DEFAULT_REQUIRED_SNR,
    DEFAULT_SSN,
    DEFAULT_TX_POWER_WATTS,
    MAX_FREQUENCY_MHZ,
    MIN_FREQUENCY_MHZ,
    NoiseEnvironment,
)
from .errors import InvalidRequest
from .models import PredictionRequest

COORDINATE_FIELDS = (
    ('txLat', 90.0),
    ('txLon', 180.0),
    ('rxLat', 90.0),
    ('rxLon', 180.0),
)


def _raw(args: Mapping, name: str) -> Optional[str]:
    value = args.get(name)
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _parse_float(name: str, text: str) -> float:
    try:
        value = float(text)
    except (TypeError, ValueError):
        raise InvalidRequest(name, f"{name} must be a number, got {text!r}")
    if not math.isfinite(value):
        raise InvalidRequest(name, f"{name} must be a finite number, got {text!r}")
    return value


def _parse_int(name: str, text: str) -> int:
    try:
        return int(text)
    except (TypeError, ValueError):
        value = _parse_float(name, text)
        if not value.is_integer():
            raise InvalidRequest(name, f"{name} must be an integer, got {text!r}")
        return int(value)


def _optional_int(args: Mapping, name: str, default: int, low: int, high: int) -> int:
    text = _raw(args, name)
    if text is None:
        return default
    value = _parse_int(name, text)
    if not low <= value <= high:
        raise InvalidRequest(name, f"{name} must be between {low} and {high}, got {value}")
    return value


def _optional_float(args: Mapping, name: str, default: float) -> float:
    text = _raw(args, name)
    if text is None:
        return default
    return _parse_float(name, text)


def parse_coordinates(args: Mapping) -> Tuple[float, float, float, float]:
    """Parse and range-check txLat, txLon, rxLat, rxLon."""
    values = []
    for name, limit in COORDINATE_FIELDS:
        text = _raw(args, name)
        if text is None:
            raise InvalidRequest(
                name,
                f"Missing required coordinate {name} (txLat, txLon, rxLat, rxLon are required)"
            )
        value = _parse_float(name, text)
        if abs(value) > limit:
            raise InvalidRequest(name, f"{name} must be between -{limit:g} and {limit:g}, got {value:g}")
        values.append(value)
    return tuple(values)


def parse_frequencies(text: Optional[str]) -> Tuple[float, ...]:
    """Parse a comma-separated MHz list; every entry must lie within 2-30 MHz."""
    if text is None:
        return DEFAULT_FREQUENCIES

    frequencies = []
    for part in text.split(','):
        part = part.strip()
        if not part:
            continue
        freq = _parse_float('frequencies', part)
        if not MIN_FREQUENCY_MHZ <= freq <= MAX_FREQUENCY_MHZ:
            raise InvalidRequest(
                'frequencies',
                f"frequency {freq:g} MHz is outside the {MIN_FREQUENCY_MHZ:g}-{MAX_FREQUENCY_MHZ:g} MHz range"
            )
        frequencies.append(freq)

    if not frequencies:
        raise InvalidRequest('frequencies', "frequencies must list at least one value")
    return tuple(frequencies)


def parse_noise(text: Optional[str]) -> NoiseEnvironment:
    if text is None:
        return DEFAULT_NOISE
    try:
        return NoiseEnvironment(text.upper())
    except ValueError:
        allowed = ', '.join(level.value for level in NoiseEnvironment)
        raise InvalidRequest('manMadeNoise', f"manMadeNoise must be one of {allowed}, got {text!r}")


def parse_prediction_request(
    args: Mapping,
    include_hour: bool = True,
    now: Optional[datetime] = None
) -> PredictionRequest:
    """
    Build a PredictionRequest from query parameters.

    Args:
        args: Mapping of raw parameter strings (e.g. ``request.args``)
        include_hour: When False the hour is left unset, for 24-hour batches
        now: Reference time for defaults, current UTC time when omitted

    Returns:
        Validated PredictionRequest

    Raises:
        InvalidRequest: naming the missing or malformed parameter
    """
    if now is None:
        now = datetime.now(pytz.utc)

    tx_lat, tx_lon, rx_lat, rx_lon = parse_coordinates(args)

    year = _optional_int(args, 'year', now.year, 1900, 2100)
    month = _optional_int(args, 'month', now.month, 1, 12)
    hour = _optional_int(args, 'hour', now.hour, 0, 23) if include_hour else None
    ssn = _optional_int(args, 'ssn', DEFAULT_SSN, 0, 500)

    tx_power = _optional_float(args, 'txPower', DEFAULT_TX_POWER_WATTS)
    if tx_power <= 0:
        raise InvalidRequest('txPower', f"txPower must be greater than 0 W, got {tx_power:g}")

    required_reliability = _optional_float(args, 'requiredReliability', DEFAULT_REQUIRED_RELIABILITY)
    if not 0 <= required_reliability <= 100:
        raise InvalidRequest('requiredReliability', "requiredReliability must be between 0 and 100")

    return PredictionRequest(
        tx_lat=tx_lat,
        tx_lon=tx_lon,
        rx_lat=rx_lat,
        rx_lon=rx_lon,
        year=year,
        month=month,
        hour=hour,
        ssn=ssn,
        tx_power=tx_power,
        frequencies=parse_frequencies(_raw(args, 'frequencies')),
        man_made_noise=parse_noise(_raw(args, 'manMadeNoise')),
        required_reliability=required_reliability,
        required_snr=_optional_float(args, 'requiredSNR', DEFAULT_REQUIRED_SNR),
    )
