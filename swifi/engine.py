"""
Measurement engines.

MeasurementEngine is the contract the session relies on: one call per
direction, returning bits per second, raising EngineError on failure.
SpeedtestEngine fulfils it with speedtest-cli.
"""

import logging

import speedtest

from .errors import EngineError
from .session import Direction
from .settings import DEFAULT_TIMEOUT

# speedtest-cli scores a failed latency request as 3600 s; all three failed
# gives round(3 * 3600 / 6 * 1000) ms
UNREACHABLE_LATENCY_MS = 1_800_000.0

logger = logging.getLogger(__name__)


class MeasurementEngine:
    def download(self, server, progress):
        raise NotImplementedError

    def upload(self, server, progress):
        raise NotImplementedError

    def measure(self, server, direction, progress):
        """Run a single direction (download or upload) and return bits per second."""
        if direction is Direction.DOWNLOAD:
            return self.download(server, progress)
        if direction is Direction.UPLOAD:
            return self.upload(server, progress)
        raise ValueError(f"measure() needs a single direction, got {direction.value!r}")


def chunk_callback(progress):
    """
    Adapt a ProgressSink to speedtest-cli's callback(i, total, start=, end=).

    speedtest-cli reports both the start and the end of each request; only
    finished chunks count as progress.
    """
    def inner(current, total, start=False, end=False):
        if end:
            progress.notify()

    return inner


def _checked(name, server, bps):
    # speedtest-cli swallows per-request errors, so a dead host shows up as 0 bps
    if bps <= 0:
        raise EngineError(f"{name} transfer to server {server.id} moved no data")
    return bps


class SpeedtestEngine(MeasurementEngine):
    """
    speedtest-cli backed engine.

    Each server gets its own client: creating one re-reads the speedtest.net
    configuration, then get_best_server() pins the client to that server.
    """

    def __init__(self, timeout=DEFAULT_TIMEOUT, secure=False):
        self.timeout = timeout
        self.secure = secure
        self._client = None
        self._server_id = None

    def _client_for(self, server):
        if self._client is not None and self._server_id == server.id:
            return self._client

        try:
            client = speedtest.Speedtest(timeout=self.timeout, secure=self.secure)
            best = client.get_best_server([server.to_speedtest_server()])
        except speedtest.ConfigRetrievalError as e:
            raise EngineError(f"Failed to retrieve speedtest configuration: {e!r}") from e
        except (speedtest.SpeedtestException, OSError) as e:
            raise EngineError(f"Unable to reach server {server.id}: {e!r}") from e

        latency = float(best.get("latency", 0.0))
        if latency >= UNREACHABLE_LATENCY_MS:
            raise EngineError(f"Unable to reach server {server.id}: every latency request failed")

        logger.debug("Pinned server %s, latency %.1f ms", server.id, latency)
        self._client = client
        self._server_id = server.id
        return client

    def download(self, server, progress):
        client = self._client_for(server)
        try:
            bps = float(client.download(callback=chunk_callback(progress)))
        except (speedtest.SpeedtestException, OSError) as e:
            raise EngineError(f"download transfer aborted: {e!r}") from e
        return _checked("download", server, bps)

    def upload(self, server, progress):
        client = self._client_for(server)
        try:
            bps = float(client.upload(callback=chunk_callback(progress)))
        except (speedtest.SpeedtestException, OSError) as e:
            raise EngineError(f"upload transfer aborted: {e!r}") from e
        return _checked("upload", server, bps)
