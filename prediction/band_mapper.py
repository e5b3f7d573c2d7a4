"""
Band mapper for prediction results.

Reconciles the frequencies the engine reports against a named band table.
"""

import logging
from types import MappingProxyType
from typing import AbstractSet, Dict, Mapping, Optional, Sequence, Set

from .constants import (
    BAND_MATCH_TOLERANCE_MHZ,
    FAIR_RELIABILITY,
    GOOD_RELIABILITY,
    HF_BANDS,
)
from .models import BandCondition, BandResult, EngineReportLine, PredictionResult

logger = logging.getLogger(__name__)


def reliability_status(reliability: float) -> str:
    """GOOD at 70% and above, FAIR at 40% and above, POOR otherwise."""
    if reliability >= GOOD_RELIABILITY:
        return 'GOOD'
    if reliability >= FAIR_RELIABILITY:
        return 'FAIR'
    return 'POOR'


class BandMapper:
    """Maps result rows onto band names within a frequency tolerance."""

    def __init__(self, band_table: Mapping[str, float] = HF_BANDS,
                 tolerance: float = BAND_MATCH_TOLERANCE_MHZ):
        self.band_table = MappingProxyType(dict(band_table))
        self.tolerance = tolerance

    @property
    def frequencies(self):
        return tuple(self.band_table.values())

    def match(self, nominal: float, rows: Sequence[EngineReportLine],
              claimed: AbstractSet[int] = frozenset()) -> Optional[int]:
        """Index of the nearest unclaimed row within tolerance; ties go to the earlier row."""
        best = None
        best_distance = None
        for index, row in enumerate(rows):
            if index in claimed:
                continue
            distance = abs(row.freq - nominal)
            if distance >= self.tolerance:
                continue
            if best_distance is None or distance < best_distance:
                best, best_distance = index, distance
        return best

    def map(self, result: PredictionResult) -> BandResult:
        bands: Dict[str, BandCondition] = {}
        claimed: Set[int] = set()
        # Bands claim rows in table order; a row fills at most one band
        for name, nominal in self.band_table.items():
            index = self.match(nominal, result.frequencies, claimed)
            if index is None:
                continue
            claimed.add(index)
            row = result.frequencies[index]
            bands[name] = BandCondition(
                freq=row.freq,
                reliability=row.reliability,
                snr=row.snr,
                sdbw=row.sdbw,
                status=reliability_status(row.reliability),
            )

        logger.debug(f"Matched {len(bands)} of {len(self.band_table)} bands")
        return BandResult(bands=bands, prediction=result)
