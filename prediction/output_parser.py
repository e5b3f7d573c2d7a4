"""
Parser for ITURHFProp report files.

Only the "Calculated Parameters" table is interpreted; everything else in
the report is kept as opaque diagnostic text. Data rows look like::

    02, 05,    2.000,-120.29, -16.04,   0.00

i.e. month, hour, frequency (MHz), received power (dBW), SNR (dB) and
basic circuit reliability (%).
"""

import logging
import math
import re
from enum import Enum
from typing import List, Optional

from .constants import RAW_REPORT_LIMIT
from .errors import ParseDegraded
from .models import EngineReportLine, PredictionResult

logger = logging.getLogger(__name__)

MUF_PATTERN = re.compile(r'(?:BMUF|MUF|Operational MUF)\s*[:=]?\s*([\d.]+)', re.IGNORECASE)

TABLE_START = 'Calculated Parameters'
TABLE_END = 'End Calculated'
BANNER = '*****'

FREQ_FIELD = 2
POWER_FIELD = 3
SNR_FIELD = 4
BCR_FIELD = 5
MIN_FIELDS = 6


class ParserState(Enum):
    OUTSIDE_TABLE = 'outside'
    INSIDE_TABLE = 'inside'
    DONE = 'done'


def _to_float(text: str) -> float:
    try:
        return float(text)
    except ValueError:
        return math.nan


def extract_muf(report: str) -> Optional[float]:
    """Find the first MUF figure anywhere in the report."""
    match = MUF_PATTERN.search(report)
    if not match:
        return None
    try:
        return float(match.group(1))
    except ValueError:
        return None


def parse_row(line: str) -> Optional[EngineReportLine]:
    """Parse one table row, or None if it is not a usable data row."""
    parts = [part.strip() for part in line.split(',')]
    if len(parts) < MIN_FIELDS:
        return None

    freq = _to_float(parts[FREQ_FIELD])
    if not math.isfinite(freq) or freq <= 0:
        return None

    return EngineReportLine(
        freq=freq,
        sdbw=_to_float(parts[POWER_FIELD]),
        snr=_to_float(parts[SNR_FIELD]),
        reliability=_to_float(parts[BCR_FIELD]),
    )


class ReportParser:
    """Line scanner over the report's Calculated Parameters table."""

    def __init__(self):
        self.state = ParserState.OUTSIDE_TABLE
        self.rows: List[EngineReportLine] = []

    def feed(self, line: str):
        if self.state is ParserState.DONE:
            return

        trimmed = line.strip()

        if TABLE_START in trimmed and 'End' not in trimmed:
            self.state = ParserState.INSIDE_TABLE
            return

        if self.state is not ParserState.INSIDE_TABLE:
            return

        # A banner before any data is a leading decoration, not the end
        if (TABLE_END in trimmed or BANNER in trimmed) and self.rows:
            self.state = ParserState.DONE
            return

        if not trimmed or trimmed.startswith('*') or trimmed.startswith('-'):
            return

        row = parse_row(trimmed)
        if row is not None:
            logger.debug(f"[Parse] Freq {row.freq} MHz: SNR={row.snr} dB, BCR={row.reliability}%")
            self.rows.append(row)

    def parse(self, report: str) -> List[EngineReportLine]:
        for line in report.splitlines():
            self.feed(line)
            if self.state is ParserState.DONE:
                break
        return self.rows


def _scan(report: str) -> PredictionResult:
    if not report or not report.strip():
        raise ParseDegraded("Engine report is empty")

    rows = ReportParser().parse(report)
    muf = extract_muf(report)
    raw = report[:RAW_REPORT_LIMIT]

    if not rows:
        return PredictionResult(
            muf=muf,
            raw=raw,
            error="No Calculated Parameters rows found in engine report"
        )

    return PredictionResult(frequencies=tuple(rows), muf=muf, raw=raw)


def parse_report(report: str) -> PredictionResult:
    """
    Parse raw report text into a PredictionResult.

    Never raises: an empty, truncated or unrecognisable report yields an
    empty frequency list with ``error`` describing what went wrong.
    """
    try:
        result = _scan(report)
    except ParseDegraded as e:
        logger.warning(f"[Parse] {e.message}")
        return PredictionResult(raw=(report or '')[:RAW_REPORT_LIMIT], error=e.message)
    except Exception as e:
        logger.error(f"[Parse Error] {e}")
        return PredictionResult(raw=str(report)[:RAW_REPORT_LIMIT], error=f"Report parse failed: {e}")

    logger.info(f"[Parse] Found {len(result.frequencies)} frequency results")
    return result
