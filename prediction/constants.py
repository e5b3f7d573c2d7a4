"""
Shared constants for ITURHFProp predictions.
"""

from enum import Enum
from types import MappingProxyType

MODEL_NAME = 'ITU-R P.533-14'
ENGINE_NAME = 'ITURHFProp'

# HF band probe frequencies in MHz. P.533 is only valid from 2 to 30 MHz,
# so 160m is nudged up to 2.0 and 6m is left out.
HF_BANDS = MappingProxyType({
    '160m': 2.0,
    '80m': 3.5,
    '60m': 5.3,
    '40m': 7.1,
    '30m': 10.1,
    '20m': 14.1,
    '17m': 18.1,
    '15m': 21.1,
    '12m': 24.9,
    '11m': 27.0,  # CB band
    '10m': 28.1,
})

DEFAULT_FREQUENCIES = tuple(HF_BANDS.values())

MIN_FREQUENCY_MHZ = 2.0
MAX_FREQUENCY_MHZ = 30.0


class NoiseEnvironment(str, Enum):
    """Man-made noise categories understood by the engine."""
    CITY = 'CITY'
    RESIDENTIAL = 'RESIDENTIAL'
    RURAL = 'RURAL'
    QUIET = 'QUIET'


# Request defaults
DEFAULT_SSN = 100
DEFAULT_TX_POWER_WATTS = 100.0
DEFAULT_NOISE = NoiseEnvironment.RESIDENTIAL
DEFAULT_REQUIRED_RELIABILITY = 90  # percent
DEFAULT_REQUIRED_SNR = 15  # dB, SSB
DEFAULT_HOUR = 12  # used when a request carries no hour

# Fixed engine input values
BANDWIDTH_HZ = 3000
ANTENNA_GAIN_DBI = 0.0
MODULATION = 'ANALOG'
PATH_TYPE = 'SHORTPATH'
REPORT_FORMAT = 'RPT_PR | RPT_SNR | RPT_BCR'

# Band matching and status thresholds
BAND_MATCH_TOLERANCE_MHZ = 1.0
GOOD_RELIABILITY = 70
FAIR_RELIABILITY = 40

# Diagnostic truncation
RAW_REPORT_LIMIT = 3000
DEBUG_INPUT_LIMIT = 1000

HOURS_PER_DAY = 24
