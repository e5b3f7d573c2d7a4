"""
ITURHFProp process runner.

Each invocation writes ``input_<id>.txt`` into the scratch directory, runs
``<engine> <input> <output>`` and reads ``output_<id>.txt`` back. The id is
a fresh random token per call, so concurrent invocations never share files.
Both files are removed before ``invoke`` returns or raises.
"""

import logging
import os
import secrets
import signal
import subprocess
import threading
import time
from typing import Optional, Protocol, Tuple

from .errors import EngineMissing, EngineNonZeroExit, EngineTimeout, ReportMissing
from .models import EngineRun

logger = logging.getLogger(__name__)

# How often a running engine checks its cancel event
CANCEL_POLL_INTERVAL = 0.1


class EnginePort(Protocol):
    """Anything that can turn engine input text into an EngineRun."""

    def invoke(self, input_text: str, timeout: Optional[float] = None,
               cancel_event: Optional[threading.Event] = None) -> EngineRun:
        ...


class EngineRunner:
    """Runs the ITURHFProp binary as a subprocess with a hard timeout."""

    def __init__(self, engine_path: str, scratch_dir: str,
                 lib_dir: Optional[str] = None, timeout: float = 30.0):
        self.engine_path = engine_path
        self.scratch_dir = scratch_dir
        self.lib_dir = lib_dir or os.path.dirname(engine_path)
        self.timeout = timeout

    def scratch_paths(self, invocation_id: str) -> Tuple[str, str]:
        """Input and output file paths for an invocation id."""
        return (
            os.path.join(self.scratch_dir, f"input_{invocation_id}.txt"),
            os.path.join(self.scratch_dir, f"output_{invocation_id}.txt"),
        )

    def invoke(self, input_text: str, timeout: Optional[float] = None,
               cancel_event: Optional[threading.Event] = None) -> EngineRun:
        """
        Run one prediction.

        A non-zero exit status is not fatal on its own: if the engine still
        wrote a report, the run is returned with its exit code so callers
        can tell a clean run from a tolerated one.

        Setting ``cancel_event`` kills a running engine (or stops one from
        starting) and raises EngineTimeout.

        Raises:
            EngineMissing: binary absent or not executable
            EngineTimeout: process outlived the timeout or was cancelled, and was killed
            EngineNonZeroExit: process failed and left no report
            ReportMissing: process succeeded but left no report
        """
        if timeout is None:
            timeout = self.timeout

        self._check_binary()
        if cancel_event is not None and cancel_event.is_set():
            raise EngineTimeout("ITURHFProp run cancelled before it started")
        os.makedirs(self.scratch_dir, exist_ok=True)

        invocation_id = secrets.token_hex(8)
        input_path, output_path = self.scratch_paths(invocation_id)

        try:
            with open(input_path, 'w', encoding='utf-8') as f:
                f.write(input_text)

            cmd = [self.engine_path, input_path, output_path]
            logger.info(f"[{invocation_id}] Running {' '.join(cmd)}")

            start_time = time.monotonic()
            exit_code, stdout, stderr = self._spawn(invocation_id, cmd, timeout, cancel_event)
            elapsed_ms = int((time.monotonic() - start_time) * 1000)
            logger.info(f"[{invocation_id}] Completed in {elapsed_ms}ms with exit code {exit_code}")

            diagnostics = {'execStdout': stdout, 'execStderr': stderr, 'elapsed': elapsed_ms}

            if exit_code != 0:
                logger.warning(f"[{invocation_id}] Engine exited with status {exit_code}: {stderr.strip()}")

            if not os.path.exists(output_path):
                logger.warning(f"[{invocation_id}] Output file not found at {output_path}")
                if exit_code != 0:
                    raise EngineNonZeroExit(
                        f"ITURHFProp exited with status {exit_code} and wrote no report",
                        exit_code,
                        diagnostics
                    )
                raise ReportMissing("ITURHFProp finished but wrote no report", diagnostics)

            with open(output_path, 'r', encoding='utf-8', errors='replace') as f:
                report = f.read()
            logger.debug(f"[{invocation_id}] Report size: {len(report)} chars")

            return EngineRun(
                report=report,
                exit_code=exit_code,
                stdout=stdout,
                stderr=stderr,
                elapsed_ms=elapsed_ms,
                invocation_id=invocation_id,
            )
        finally:
            self._cleanup(invocation_id, input_path, output_path)

    def _check_binary(self):
        if not os.path.isfile(self.engine_path):
            raise EngineMissing(f"ITURHFProp binary not found at {self.engine_path}")
        if not os.access(self.engine_path, os.X_OK):
            raise EngineMissing(f"ITURHFProp binary is not executable: {self.engine_path}")

    def _build_env(self) -> dict:
        env = os.environ.copy()
        env['LD_LIBRARY_PATH'] = f"{self.lib_dir}:{env.get('LD_LIBRARY_PATH', '')}"
        return env

    def _spawn(self, invocation_id: str, cmd, timeout: float,
               cancel_event: Optional[threading.Event] = None) -> Tuple[int, str, str]:
        try:
            proc = subprocess.Popen(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                errors='replace',
                env=self._build_env(),
                start_new_session=True
            )
        except OSError as e:
            raise EngineMissing(f"Could not start ITURHFProp: {e}")

        deadline = time.monotonic() + timeout
        try:
            while True:
                remaining = deadline - time.monotonic()
                wait = remaining if cancel_event is None else min(remaining, CANCEL_POLL_INTERVAL)
                try:
                    stdout, stderr = proc.communicate(timeout=max(wait, 0))
                    break
                except subprocess.TimeoutExpired:
                    if cancel_event is not None and cancel_event.is_set():
                        logger.warning(f"[{invocation_id}] Run cancelled, killing process group {proc.pid}")
                        message = "ITURHFProp run was cancelled"
                    elif time.monotonic() >= deadline:
                        logger.error(f"[{invocation_id}] Engine exceeded {timeout}s, killing process group {proc.pid}")
                        message = f"ITURHFProp did not finish within {timeout:g}s"
                    else:
                        continue
                    self._kill(proc)
                    stdout, stderr = proc.communicate()
                    raise EngineTimeout(message, {'execStdout': stdout, 'execStderr': stderr})
        except EngineTimeout:
            raise
        except BaseException:
            # Never leave the engine running behind an interrupted wait
            self._kill(proc)
            proc.wait()
            raise

        return proc.returncode, stdout, stderr

    @staticmethod
    def _kill(proc: subprocess.Popen):
        try:
            os.killpg(proc.pid, signal.SIGKILL)
        except ProcessLookupError:
            pass

    @staticmethod
    def _cleanup(invocation_id: str, *paths):
        for path in paths:
            try:
                os.remove(path)
            except FileNotFoundError:
                pass
            except OSError as e:
                logger.warning(f"[{invocation_id}] Could not remove scratch file {path}: {e}")
