"""
Encoder for the ITURHFProp input file.

The engine's input grammar is fixed: one ``Key value`` pair per line in a
set order. Numeric precision matters (coordinates at 4 decimals,
frequencies at 3, power in dBkW at 1), so every value goes through an
explicit format spec here and nowhere else.
"""

import math
import os

from .constants import (
    ANTENNA_GAIN_DBI,
    BANDWIDTH_HZ,
    DEFAULT_HOUR,
    MODULATION,
    PATH_TYPE,
    REPORT_FORMAT,
)
from .models import PredictionRequest

PATH_NAME = 'OpenHamClock'
TX_NAME = 'TX'
RX_NAME = 'RX'


def engine_hour(hour) -> int:
    """Map an hour-of-day to the engine's 1-24 convention (0 becomes 24)."""
    if hour is None:
        return DEFAULT_HOUR
    return 24 if hour == 0 else hour


def watts_to_dbkw(watts: float) -> float:
    return 10 * math.log10(watts / 1000)


def _number(value) -> str:
    """Render integral values without a trailing .0, as the engine expects."""
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def _coord(value: float) -> str:
    """Four decimals, with no negative zero (``-0.0`` and ``-0.00001`` both give ``0.0000``)."""
    text = f"{value:.4f}"
    if text == '-0.0000':
        return '0.0000'
    return text


def serialize_request(request: PredictionRequest, data_dir: str, report_dir: str) -> str:
    """
    Render a request as ITURHFProp input text.

    Args:
        request: Validated prediction request
        data_dir: Engine install root holding the ``Data/`` reference files
        report_dir: Directory the engine writes its own report files into

    Returns:
        Input file contents, newline terminated
    """
    data_path = os.path.join(os.path.abspath(data_dir), 'Data', '')
    report_path = os.path.join(os.path.abspath(report_dir), '')
    freq_list = ', '.join(f"{freq:.3f}" for freq in request.frequencies)
    rx_lat = _coord(request.rx_lat)
    rx_lon = _coord(request.rx_lon)

    lines = [
        f'PathName "{PATH_NAME}"',
        f'PathTXName "{TX_NAME}"',
        f'Path.L_tx.lat {_coord(request.tx_lat)}',
        f'Path.L_tx.lng {_coord(request.tx_lon)}',
        'TXAntFilePath "ISOTROPIC"',
        f'TXGOS {ANTENNA_GAIN_DBI:.1f}',
        f'PathRXName "{RX_NAME}"',
        f'Path.L_rx.lat {rx_lat}',
        f'Path.L_rx.lng {rx_lon}',
        'RXAntFilePath "ISOTROPIC"',
        f'RXGOS {ANTENNA_GAIN_DBI:.1f}',
        'AntennaOrientation "TX2RX"',
        f'Path.year {request.year}',
        f'Path.month {request.month}',
        f'Path.hour {engine_hour(request.hour)}',
        f'Path.SSN {request.ssn}',
        f'Path.frequency {freq_list}',
        f'Path.txpower {watts_to_dbkw(request.tx_power):.1f}',
        f'Path.BW {BANDWIDTH_HZ}',
        f'Path.SNRr {_number(request.required_snr)}',
        f'Path.SNRXXp {_number(request.required_reliability)}',
        f'Path.ManMadeNoise "{request.man_made_noise.value}"',
        f'Path.Modulation {MODULATION}',
        f'Path.SorL {PATH_TYPE}',
    ]

    # The bounding box collapses onto the receiver for point-to-point runs
    for corner in ('LL', 'LR', 'UL', 'UR'):
        lines.append(f'{corner}.lat {rx_lat}')
        lines.append(f'{corner}.lng {rx_lon}')

    lines.extend([
        f'DataFilePath "{data_path}"',
        f'RptFilePath "{report_path}"',
        f'RptFileFormat "{REPORT_FORMAT}"',
    ])

    return '\n'.join(lines) + '\n'
