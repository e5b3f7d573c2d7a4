"""
Pytest configuration and shared fixtures for the prediction service tests.
"""

import os
import re
import stat
import threading

import pytest

from prediction.errors import EngineNonZeroExit
from prediction.models import EngineRun, PredictionRequest

BANNER = '*' * 79

SAMPLE_REPORT = f"""{BANNER}
                    ITURHFProp (ITU-R P.533-14)
{BANNER}
 Path name : OpenHamClock
 BMUF = 21.35 MHz
{BANNER}
 Calculated Parameters
{BANNER}
 Month, Hour, Freq, Pr, SNR, BCR
06, 12,    7.100, -95.20,  22.31,  85.00
06, 12,   14.100, -98.75,  18.02,  72.50
06, 12,   21.100,-120.29, -16.04,   0.00
{BANNER}
 End Calculated Parameters
{BANNER}
"""


def build_report(frequencies, hour=12, muf=18.5, reliability=80.0):
    """Render a report with one row per frequency."""
    rows = '\n'.join(
        f"06, {hour:02d}, {freq:8.3f}, -100.00,  12.50, {reliability:6.2f}"
        for freq in frequencies
    )
    return (
        f"{BANNER}\n Operational MUF = {muf}\n{BANNER}\n"
        f" Calculated Parameters\n{BANNER}\n{rows}\n"
        f"{BANNER}\n End Calculated Parameters\n"
    )


class FakeEngine:
    """Stands in for EngineRunner: echoes the requested frequencies back as a report."""

    HOUR_PATTERN = re.compile(r'^Path\.hour (\d+)$', re.MULTILINE)
    FREQ_PATTERN = re.compile(r'^Path\.frequency (.+)$', re.MULTILINE)

    def __init__(self, fail_hours=(), exit_code=0, report=None, reliability=80.0):
        self.fail_hours = set(fail_hours)
        self.exit_code = exit_code
        self.report = report
        self.reliability = reliability
        self.inputs = []
        self.lock = threading.Lock()

    def invoke(self, input_text, timeout=None, cancel_event=None):
        with self.lock:
            self.inputs.append(input_text)

        hour = int(self.HOUR_PATTERN.search(input_text).group(1))
        if hour in self.fail_hours:
            raise EngineNonZeroExit(f"engine crashed at hour {hour}", 139, {'execStderr': 'Segmentation fault'})

        report = self.report
        if report is None:
            freqs = [float(f) for f in self.FREQ_PATTERN.search(input_text).group(1).split(',')]
            report = build_report(freqs, hour=hour % 24, reliability=self.reliability)

        return EngineRun(
            report=report,
            exit_code=self.exit_code,
            stdout='ITURHFProp done',
            stderr='',
            elapsed_ms=42,
            invocation_id='feedfacecafebeef'
        )


@pytest.fixture
def sample_report():
    return SAMPLE_REPORT


@pytest.fixture
def base_request():
    return PredictionRequest(
        tx_lat=40.7128, tx_lon=-74.006,
        rx_lat=51.5074, rx_lon=-0.1278,
        year=2025, month=6, hour=12
    )


@pytest.fixture
def fake_engine():
    return FakeEngine()


@pytest.fixture
def engine_script(tmp_path):
    """Factory writing an executable shell script that plays the engine."""
    def _make(body, name='ITURHFProp'):
        path = tmp_path / 'engine' / name
        path.parent.mkdir(exist_ok=True)
        path.write_text('#!/bin/sh\n' + body)
        path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return str(path)
    return _make


@pytest.fixture
def scratch_dir(tmp_path):
    return str(tmp_path / 'scratch')


def scratch_files(scratch_dir):
    if not os.path.isdir(scratch_dir):
        return []
    return sorted(os.listdir(scratch_dir))
