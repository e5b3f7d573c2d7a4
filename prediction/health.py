"""
Engine installation checks for the health and diagnostic endpoints.

These only inspect the filesystem (plus one optional canned prediction for
the diagnostic view); they are not part of the prediction path.
"""

import logging
import os
from datetime import datetime
from typing import Any, Dict

import pytz

from .constants import ENGINE_NAME, MODEL_NAME
from .errors import PredictionError
from .models import PredictionRequest

logger = logging.getLogger(__name__)

SERVICE_VERSION = '1.0.0'
REQUIRED_LIBRARIES = ('libp533.so', 'libp372.so')
IONOSPHERIC_DATA_FILE = 'ionos12.bin'
DATA_LISTING_LIMIT = 15

DIAGNOSTIC_REQUEST = PredictionRequest(
    tx_lat=40.0, tx_lon=-75.0,
    rx_lat=51.0, rx_lon=0.0,
    year=2025, month=6, hour=12,
    ssn=100, frequencies=(14.0,)
)


def _found(exists: bool) -> str:
    return 'found' if exists else 'missing'


def check_engine_health(config) -> Dict[str, Any]:
    """Report which parts of the engine installation are present."""
    data_dir = os.path.join(config.ITURHFPROP_DATA, 'Data')

    binary_exists = os.path.isfile(config.ITURHFPROP_PATH)
    data_exists = os.path.isdir(data_dir)
    libp533_exists = os.path.exists(os.path.join(config.ITURHFPROP_LIB_DIR, 'libp533.so'))
    libp372_exists = os.path.exists(os.path.join(config.ITURHFPROP_LIB_DIR, 'libp372.so'))
    ionos_exists = os.path.exists(os.path.join(data_dir, IONOSPHERIC_DATA_FILE))

    healthy = binary_exists and data_exists and libp533_exists and ionos_exists

    return {
        'status': 'healthy' if healthy else 'degraded',
        'service': 'iturhfprop',
        'version': SERVICE_VERSION,
        'engine': f"{ENGINE_NAME} ({MODEL_NAME})",
        'binary': _found(binary_exists),
        'libp533': _found(libp533_exists),
        'libp372': _found(libp372_exists),
        'dataDir': _found(data_exists),
        'ionosData': _found(ionos_exists),
        'paths': {
            'binary': config.ITURHFPROP_PATH,
            'data': config.ITURHFPROP_DATA,
            'lib': config.ITURHFPROP_LIB_DIR
        },
        'timestamp': datetime.now(pytz.utc).isoformat()
    }


def collect_diagnostics(config, service=None) -> Dict[str, Any]:
    """Detailed installation report, with an optional canned test run."""
    results = {
        'binary': {},
        'libraries': {},
        'data': {},
        'testRun': {}
    }

    try:
        stats = os.stat(config.ITURHFPROP_PATH)
        results['binary'] = {
            'exists': True,
            'size': stats.st_size,
            'mode': oct(stats.st_mode & 0o7777),
            'executable': os.access(config.ITURHFPROP_PATH, os.X_OK),
            'path': config.ITURHFPROP_PATH
        }
    except OSError as e:
        results['binary'] = {'exists': False, 'error': str(e)}

    try:
        libs = sorted(f for f in os.listdir(config.ITURHFPROP_LIB_DIR) if f.endswith('.so'))
        results['libraries'] = {
            'found': libs,
            'missing': [lib for lib in REQUIRED_LIBRARIES if lib not in libs]
        }
    except OSError as e:
        results['libraries'] = {'error': str(e)}

    data_dir = os.path.join(config.ITURHFPROP_DATA, 'Data')
    try:
        data_files = sorted(os.listdir(data_dir))
        results['data'] = {
            'dataDir': data_files[:DATA_LISTING_LIMIT],
            'ionosData': _found(IONOSPHERIC_DATA_FILE in data_files),
            'hasIonos': any('ionos' in f for f in data_files),
            'hasAnt': any(f.endswith('.ant') for f in data_files),
            'fileCount': len(data_files)
        }
    except OSError as e:
        results['data'] = {'error': str(e)}

    if service is not None:
        results['testRun'] = _test_run(service)

    return results


def _test_run(service) -> Dict[str, Any]:
    try:
        result = service.predict(DIAGNOSTIC_REQUEST)
    except PredictionError as e:
        logger.warning(f"Diagnostic test run failed: {e.message}")
        return e.to_dict()

    return {
        'exitCode': result.exit_code,
        'elapsed': result.elapsed_ms,
        'freqCount': len(result.frequencies),
        'muf': result.muf,
        'error': result.error,
        'execStdout': result.exec_stdout.splitlines()[:20],
        'execStderr': result.exec_stderr.splitlines()[:20],
        'testOutput': result.raw.splitlines()[:20]
    }
