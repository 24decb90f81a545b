"""
One measurement session: every requested direction against a single server.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Optional

from .errors import EngineError, MeasurementFailed
from .server import Server
from .settings import MBPS_DIVISOR


class Direction(enum.Enum):
    DOWNLOAD = "download"
    UPLOAD = "upload"
    BOTH = "both"

    @classmethod
    def from_flags(cls, down: bool = False, up: bool = False) -> "Direction":
        if down and not up:
            return cls.DOWNLOAD
        if up and not down:
            return cls.UPLOAD
        return cls.BOTH

    @property
    def wants_download(self) -> bool:
        return self in (Direction.DOWNLOAD, Direction.BOTH)

    @property
    def wants_upload(self) -> bool:
        return self in (Direction.UPLOAD, Direction.BOTH)


def mbps(bps: float) -> float:
    """Bits per second -> megabits per second."""
    return bps / MBPS_DIVISOR


@dataclass(frozen=True)
class SpeedMeasurement:
    mbps: float

    @classmethod
    def from_bps(cls, bps: float) -> "SpeedMeasurement":
        return cls(mbps=mbps(bps))


@dataclass(frozen=True)
class TestResult:
    server: Server
    download: Optional[SpeedMeasurement] = None
    upload: Optional[SpeedMeasurement] = None

    # keep pytest from collecting this as a test class
    __test__ = False


class MeasurementSession:
    def __init__(self, server: Server, direction: Direction, engine, logger=None):
        self.server = server
        self.direction = direction
        self.engine = engine
        self.log = logger or logging.getLogger("swifi.session")

    def run(self, progress) -> TestResult:
        """
        Run download then upload (as requested) and return the combined result.

        The first failing direction raises MeasurementFailed; nothing after it runs.
        """
        self.log.info("Testing connection on server: %s (%s)", self.server.id, self.server.name)

        download = upload = None
        if self.direction.wants_download:
            download = self._measure(Direction.DOWNLOAD, progress)
        if self.direction.wants_upload:
            upload = self._measure(Direction.UPLOAD, progress)

        return TestResult(server=self.server, download=download, upload=upload)

    def _measure(self, direction: Direction, progress) -> SpeedMeasurement:
        self.log.info("Performing %s speed test...", direction.value)
        try:
            bps = self.engine.measure(self.server, direction, progress)
        except EngineError as e:
            raise MeasurementFailed(direction, e) from e
        finally:
            progress.complete()
        return SpeedMeasurement.from_bps(bps)
