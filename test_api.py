"""Tests for the HTTP API blueprint."""

import pytest

from app_factory import create_app
from config import TestingConfig
from conftest import FakeEngine
from prediction.service import PredictionService

COORDS = 'txLat=40.7128&txLon=-74.006&rxLat=51.5074&rxLon=-0.1278'


class CachingConfig(TestingConfig):
    CACHE_TYPE = 'SimpleCache'


def _client(engine, config=TestingConfig):
    service = PredictionService(engine, data_dir='/opt/iturhfprop', max_workers=4)
    app = create_app(config, service=service)
    return app.test_client()


@pytest.fixture
def engine():
    return FakeEngine()


@pytest.fixture
def client(engine):
    return _client(engine)


def test_predict(client, engine):
    response = client.get(f'/api/predict?{COORDS}&month=6&hour=0&ssn=80&txPower=1000&frequencies=7.1,14.1')

    assert response.status_code == 200
    body = response.get_json()
    assert body['model'] == 'ITU-R P.533-14'
    assert body['engine'] == 'ITURHFProp'
    assert [row['freq'] for row in body['frequencies']] == [7.1, 14.1]
    assert body['muf'] == 18.5
    assert body['error'] is None
    assert body['exitCode'] == 0
    assert body['params']['hour'] == 0
    assert 'Path.hour 24' in body['inputContent']
    assert 'Path.txpower 0.0' in body['inputContent']
    assert 'Path.SSN 80' in body['inputContent']
    assert len(engine.inputs) == 1


def test_predict_missing_coordinates(client, engine):
    response = client.get('/api/predict?txLat=40&txLon=-74&rxLat=51')

    assert response.status_code == 400
    body = response.get_json()
    assert body['field'] == 'rxLon'
    assert body['errorType'] == 'invalid_request'
    assert engine.inputs == []


def test_predict_engine_failure_is_structured(engine):
    client = _client(FakeEngine(fail_hours={9}))

    response = client.get(f'/api/predict?{COORDS}&hour=9')

    assert response.status_code == 500
    body = response.get_json()
    assert body['errorType'] == 'engine_nonzero_exit'
    assert body['error']
    assert body['diagnostics']['exitCode'] == 139
    assert body['diagnostics']['execStderr'] == 'Segmentation fault'
    assert body['diagnostics']['inputContent'].startswith('PathName')


def test_predict_no_rows_is_not_an_http_error():
    client = _client(FakeEngine(report='ITURHFProp: nothing to report\n'))

    response = client.get(f'/api/predict?{COORDS}&hour=9')

    assert response.status_code == 200
    body = response.get_json()
    assert body['frequencies'] == []
    assert body['error']
    assert body['raw'] == 'ITURHFProp: nothing to report\n'


def test_nan_columns_become_null():
    report = " Calculated Parameters\n06, 09, 14.100, n/a, 12.00, 80.00\n"
    client = _client(FakeEngine(report=report))

    body = client.get(f'/api/predict?{COORDS}&hour=9').get_json()

    assert body['frequencies'] == [{'freq': 14.1, 'sdbw': None, 'snr': 12.0, 'reliability': 80.0}]


def test_predict_hourly(engine):
    client = _client(FakeEngine(fail_hours={3, 17}))

    response = client.get(f'/api/predict/hourly?{COORDS}&month=1&year=2025&ssn=120&hour=5')

    assert response.status_code == 200
    body = response.get_json()
    assert body['month'] == 1
    assert body['year'] == 2025
    assert body['ssn'] == 120
    assert body['path']['rx'] == {'lat': 51.5074, 'lon': -0.1278}
    assert [entry['hour'] for entry in body['hourly']] == list(range(24))
    assert 'error' in body['hourly'][3] and 'error' in body['hourly'][17]
    assert body['hourly'][4]['muf'] == 18.5
    assert len(body['hourly'][4]['frequencies']) == 11


def test_predict_hourly_missing_coordinates(client):
    response = client.get('/api/predict/hourly?txLat=40')
    assert response.status_code == 400


def test_bands(client, engine):
    response = client.get(f'/api/bands?{COORDS}&month=6&hour=14&ssn=100&frequencies=3.5')

    assert response.status_code == 200
    body = response.get_json()
    assert body['model'] == 'ITU-R P.533-14'
    assert body['muf'] == 18.5
    assert list(body['bands']) == ['160m', '80m', '60m', '40m', '30m', '20m',
                                   '17m', '15m', '12m', '11m', '10m']
    assert body['bands']['20m'] == {
        'freq': 14.1, 'reliability': 80.0, 'snr': 12.5, 'sdbw': -100.0, 'status': 'GOOD'
    }
    assert body['debug']['freqCount'] == 11
    assert len(body['debug']['inputContent']) <= 1000
    assert 'timestamp' in body


def test_successful_predictions_are_cached(engine):
    client = _client(engine, CachingConfig)
    url = f'/api/predict?{COORDS}&month=6&hour=3'

    first = client.get(url).get_json()
    second = client.get(url).get_json()

    assert first == second
    assert len(engine.inputs) == 1


def test_failures_are_not_cached():
    engine = FakeEngine(fail_hours={3})
    client = _client(engine, CachingConfig)
    url = f'/api/predict?{COORDS}&month=6&hour=3'

    assert client.get(url).status_code == 500
    assert client.get(url).status_code == 500
    assert len(engine.inputs) == 2


def test_nonzero_exit_results_are_not_cached():
    engine = FakeEngine(exit_code=1)
    client = _client(engine, CachingConfig)
    url = f'/api/predict?{COORDS}&month=6&hour=3'

    first = client.get(url)
    second = client.get(url)

    assert first.status_code == second.status_code == 200
    assert first.get_json()['exitCode'] == 1
    assert len(engine.inputs) == 2


def test_nonzero_exit_bands_are_not_cached():
    engine = FakeEngine(exit_code=1)
    client = _client(engine, CachingConfig)
    url = f'/api/bands?{COORDS}&month=6&hour=3'

    assert client.get(url).status_code == 200
    assert client.get(url).status_code == 200
    assert len(engine.inputs) == 2


def test_health_reports_missing_engine(tmp_path):
    class MissingEngineConfig(TestingConfig):
        ITURHFPROP_PATH = str(tmp_path / 'ITURHFProp')
        ITURHFPROP_DATA = str(tmp_path)
        ITURHFPROP_LIB_DIR = str(tmp_path)

    client = _client(FakeEngine(), MissingEngineConfig)
    body = client.get('/api/health').get_json()

    assert body['status'] == 'degraded'
    assert body['binary'] == 'missing'
    assert body['ionosData'] == 'missing'
    assert body['paths']['binary'] == str(tmp_path / 'ITURHFProp')


def test_health_reports_complete_install(tmp_path):
    (tmp_path / 'ITURHFProp').write_text('')
    (tmp_path / 'libp533.so').write_text('')
    (tmp_path / 'libp372.so').write_text('')
    (tmp_path / 'Data').mkdir()
    (tmp_path / 'Data' / 'ionos12.bin').write_text('')

    class InstalledConfig(TestingConfig):
        ITURHFPROP_PATH = str(tmp_path / 'ITURHFProp')
        ITURHFPROP_DATA = str(tmp_path)
        ITURHFPROP_LIB_DIR = str(tmp_path)

    body = _client(FakeEngine(), InstalledConfig).get('/api/health').get_json()

    assert body['status'] == 'healthy'
    assert body['libp372'] == 'found'
    assert body['dataDir'] == 'found'


def test_diag_includes_test_run(tmp_path, engine):
    (tmp_path / 'libp533.so').write_text('')
    (tmp_path / 'Data').mkdir()
    (tmp_path / 'Data' / 'ionos12.bin').write_text('')
    (tmp_path / 'Data' / 'ISOTROPIC.ant').write_text('')

    class DiagConfig(TestingConfig):
        ITURHFPROP_PATH = str(tmp_path / 'ITURHFProp')
        ITURHFPROP_DATA = str(tmp_path)
        ITURHFPROP_LIB_DIR = str(tmp_path)

    body = _client(engine, DiagConfig).get('/api/diag').get_json()

    assert body['binary']['exists'] is False
    assert body['libraries']['found'] == ['libp533.so']
    assert body['libraries']['missing'] == ['libp372.so']
    assert body['data']['hasIonos'] is True
    assert body['data']['hasAnt'] is True
    assert body['data']['fileCount'] == 2
    assert body['testRun']['freqCount'] == 1
    assert body['testRun']['exitCode'] == 0
    assert 'Path.frequency 14.000' in engine.inputs[0]
