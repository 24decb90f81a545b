import logging

import pytest

from swifi.engine import MeasurementEngine
from swifi.errors import EngineError, MeasurementFailed
from swifi.progress import ProgressSink
from swifi.server import Server
from swifi.session import Direction, MeasurementSession, SpeedMeasurement, TestResult, mbps

SERVER = Server(id=42, sponsor="Example ISP", name="Springfield", distance_km=4.2, url="http://s42.test/upload.php")


class ScriptedEngine(MeasurementEngine):
    """Returns (or raises) a fixed value per direction and records every call."""

    def __init__(self, download=None, upload=None, chunks=3):
        self.outcomes = {"download": download, "upload": upload}
        self.chunks = chunks
        self.calls = []

    def _run(self, name, server, progress):
        self.calls.append((name, server.id))
        for _ in range(self.chunks):
            progress.notify()
        outcome = self.outcomes[name]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def download(self, server, progress):
        return self._run("download", server, progress)

    def upload(self, server, progress):
        return self._run("upload", server, progress)


class CountingProgress(ProgressSink):
    def __init__(self):
        self.notified = 0
        self.completed = 0

    def notify(self):
        self.notified += 1

    def complete(self):
        self.completed += 1


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("bps", [0.0, 1.0, 999_999.0, 1_000_000.0, 42_000_000.0, 8.5e6, 1e12])
def test_mbps_exact_division(bps):
    assert mbps(bps) == bps / 1_000_000.0


def test_mbps_zero_and_monotonic():
    assert mbps(0) == 0
    samples = [0, 1, 10, 1_000, 123_456, 1_000_000, 9_999_999, 10**9]
    values = [mbps(b) for b in samples]
    assert values == sorted(values)


def test_speed_measurement_from_bps():
    assert SpeedMeasurement.from_bps(42_000_000.0) == SpeedMeasurement(mbps=42.0)


@pytest.mark.parametrize("down, up, expected", [
    (False, False, Direction.BOTH),
    (True, False, Direction.DOWNLOAD),
    (False, True, Direction.UPLOAD),
    (True, True, Direction.BOTH),
])
def test_direction_from_flags(down, up, expected):
    assert Direction.from_flags(down=down, up=up) is expected


def test_direction_wants():
    assert Direction.BOTH.wants_download and Direction.BOTH.wants_upload
    assert Direction.DOWNLOAD.wants_download and not Direction.DOWNLOAD.wants_upload
    assert Direction.UPLOAD.wants_upload and not Direction.UPLOAD.wants_download


# ---------------------------------------------------------------------------
# MeasurementSession
# ---------------------------------------------------------------------------

def test_session_both_directions():
    engine = ScriptedEngine(download=42_000_000.0, upload=8_500_000.0)
    progress = CountingProgress()
    result = MeasurementSession(SERVER, Direction.BOTH, engine).run(progress)

    assert result == TestResult(server=SERVER, download=SpeedMeasurement(42.0), upload=SpeedMeasurement(8.5))
    assert engine.calls == [("download", 42), ("upload", 42)]
    assert progress.notified == 6
    assert progress.completed == 2


def test_session_download_only():
    engine = ScriptedEngine(download=1_000_000.0, upload=RuntimeError("must not be called"))
    result = MeasurementSession(SERVER, Direction.DOWNLOAD, engine).run(CountingProgress())
    assert result.download == SpeedMeasurement(1.0)
    assert result.upload is None
    assert engine.calls == [("download", 42)]


def test_session_upload_only():
    engine = ScriptedEngine(download=RuntimeError("must not be called"), upload=2_500_000.0)
    result = MeasurementSession(SERVER, Direction.UPLOAD, engine).run(CountingProgress())
    assert result.download is None
    assert result.upload == SpeedMeasurement(2.5)
    assert engine.calls == [("upload", 42)]


def test_session_download_failure_skips_upload():
    cause = EngineError("connection reset")
    engine = ScriptedEngine(download=cause, upload=8_500_000.0)
    progress = CountingProgress()

    with pytest.raises(MeasurementFailed) as exc:
        MeasurementSession(SERVER, Direction.BOTH, engine).run(progress)

    assert exc.value.direction is Direction.DOWNLOAD
    assert exc.value.cause is cause
    assert str(exc.value) == "Download speed test failed: connection reset"
    assert engine.calls == [("download", 42)]
    # the marker line is still terminated
    assert progress.completed == 1


def test_session_upload_failure():
    engine = ScriptedEngine(download=5_000_000.0, upload=EngineError("timed out"))
    with pytest.raises(MeasurementFailed) as exc:
        MeasurementSession(SERVER, Direction.BOTH, engine).run(CountingProgress())
    assert exc.value.direction is Direction.UPLOAD
    assert engine.calls == [("download", 42), ("upload", 42)]


def test_session_logs_server_and_directions(caplog):
    caplog.set_level(logging.INFO)
    engine = ScriptedEngine(download=1.0, upload=1.0, chunks=0)
    MeasurementSession(SERVER, Direction.BOTH, engine).run(ProgressSink())
    text = caplog.text
    assert "Testing connection on server: 42 (Springfield)" in text
    assert "Performing download speed test..." in text
    assert "Performing upload speed test..." in text


def test_session_uses_given_logger(caplog):
    caplog.set_level(logging.INFO)
    log = logging.getLogger("swifi.tests.session")
    MeasurementSession(SERVER, Direction.DOWNLOAD, ScriptedEngine(download=1.0), logger=log).run(ProgressSink())
    assert {r.name for r in caplog.records} == {"swifi.tests.session"}
