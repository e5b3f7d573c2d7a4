"""Tests for the prediction service pipeline."""

import pytest

from conftest import FakeEngine
from prediction.errors import EngineNonZeroExit, EngineTimeout
from prediction.models import EngineRun
from prediction.service import PredictionService


class TimingOutEngine:
    def invoke(self, input_text, timeout=None, cancel_event=None):
        raise EngineTimeout(f"ITURHFProp did not finish within {timeout:g}s", {'execStdout': ''})


def test_predict_attaches_diagnostics(base_request):
    engine = FakeEngine()
    service = PredictionService(engine, data_dir='/opt/iturhfprop')

    result = service.predict(base_request)

    assert len(result.frequencies) == 11
    assert result.muf == 18.5
    assert result.exit_code == 0
    assert result.engine_clean
    assert result.elapsed_ms == 42
    assert result.exec_stdout == 'ITURHFProp done'
    assert result.input_content == engine.inputs[0]
    assert result.params['txLat'] == 40.7128
    assert 'Path.hour 12' in result.input_content


def test_nonzero_exit_is_surfaced_not_hidden(base_request):
    service = PredictionService(FakeEngine(exit_code=1), data_dir='/opt/iturhfprop')

    result = service.predict(base_request)

    assert result.frequencies
    assert result.exit_code == 1
    assert not result.engine_clean


def test_empty_report_is_a_result_not_an_error(base_request):
    service = PredictionService(FakeEngine(report=''), data_dir='/opt/iturhfprop')

    result = service.predict(base_request)

    assert result.frequencies == ()
    assert result.error == "Engine report is empty"


def test_engine_errors_carry_input(base_request):
    service = PredictionService(TimingOutEngine(), data_dir='/opt/iturhfprop', timeout=30)

    with pytest.raises(EngineTimeout) as excinfo:
        service.predict(base_request)

    assert 'within 30s' in excinfo.value.message
    assert excinfo.value.diagnostics['inputContent'].startswith('PathName "OpenHamClock"')
    assert excinfo.value.diagnostics['params']['month'] == 6


def test_predict_bands_uses_band_table(base_request):
    engine = FakeEngine(reliability=55.0)
    service = PredictionService(engine, data_dir='/opt/iturhfprop',
                                band_table={'40m': 7.1, '20m': 14.1})

    band_result = service.predict_bands(base_request.with_frequencies((3.5,)))

    assert 'Path.frequency 7.100, 14.100' in engine.inputs[0]
    assert set(band_result.bands) == {'40m', '20m'}
    assert band_result.bands['20m'].status == 'FAIR'
    assert band_result.muf == 18.5


def test_band_prediction_propagates_engine_failure(base_request):
    service = PredictionService(FakeEngine(fail_hours={12}), data_dir='/opt/iturhfprop')

    with pytest.raises(EngineNonZeroExit):
        service.predict_bands(base_request)


def test_from_config_builds_runner():
    from config import TestingConfig
    from prediction.engine_runner import EngineRunner

    service = PredictionService.from_config(TestingConfig)

    assert isinstance(service.engine, EngineRunner)
    assert service.engine.engine_path == TestingConfig.ITURHFPROP_PATH
    assert service.timeout == TestingConfig.ENGINE_TIMEOUT
    assert service.max_workers == TestingConfig.HOURLY_MAX_WORKERS


def test_engine_run_defaults():
    run = EngineRun(report='x', exit_code=0)
    assert run.stdout == '' and run.stderr == ''
