"""
Command-line interface for swifi.

Examples:
  swifi --list
  swifi
  swifi --down
  swifi --up --server 12345
  python3 -m swifi --list
"""

import argparse
import logging
import sys
from dataclasses import dataclass
from typing import Optional

from . import __version__
from .catalog import ServerCatalog, SpeedtestDirectory
from .engine import SpeedtestEngine
from .errors import SwifiError
from .logging_setup import setup_logging
from .orchestrator import TestOrchestrator
from .progress import StdoutProgress
from .session import Direction
from .settings import get_secure, get_timeout

LOG = logging.getLogger("swifi.cli")


@dataclass(frozen=True)
class Configuration:
    list_only: bool = False
    server_id: Optional[str] = None
    direction: Direction = Direction.BOTH


def build_parser():
    p = argparse.ArgumentParser(
        prog="swifi",
        description="A CLI tool for testing wifi download and upload speeds.",
    )
    p.add_argument("-l", "--list", action="store_true", help="List available servers sorted by distance")
    p.add_argument("-s", "--server", default=None, help="Specify a specific server ID to use")
    p.add_argument("-d", "--down", action="store_true", help="Perform a download speed test")
    p.add_argument("-u", "--up", action="store_true", help="Perform an upload speed test")
    p.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")
    return p


def build_config(args):
    return Configuration(
        list_only=args.list,
        server_id=args.server,
        direction=Direction.from_flags(down=args.down, up=args.up),
    )


def build_catalog():
    return ServerCatalog(SpeedtestDirectory(timeout=get_timeout(), secure=get_secure()))


def build_engine():
    return SpeedtestEngine(timeout=get_timeout(), secure=get_secure())


def report(result):
    if result.download is not None:
        LOG.info("Download Speed: %.2f Mbps", result.download.mbps)
    if result.upload is not None:
        LOG.info("Upload Speed: %.2f Mbps", result.upload.mbps)


def main(argv=None):
    if argv is None:
        argv = sys.argv[1:]

    setup_logging()

    parser = build_parser()
    config = build_config(parser.parse_args(argv))

    try:
        catalog = build_catalog()
        if config.list_only:
            print(catalog.top_nearest().format_table(), end="")
            return 0

        orchestrator = TestOrchestrator(catalog, build_engine(), logger=logging.getLogger("swifi.orchestrator"))
        result = orchestrator.execute(config, StdoutProgress())
    except SwifiError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("Cancelled.", file=sys.stderr)
        return 130

    report(result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
