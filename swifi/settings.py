"""
Fixed constants and environment overrides for swifi.

Keep it simple:
 - catalog sizes and display widths are plain module constants
 - SWIFI_TIMEOUT / SWIFI_SECURE are read when the engine is built, not at import
"""

import logging
import os

LOG = logging.getLogger("swifi.settings")

# Catalog
LIST_COUNT = 10
DEFAULT_ATTEMPT_COUNT = 3
MAX_SERVER_ID = 2**32 - 1

# Display
MAX_SPONSOR_LENGTH = 20
MAX_NAME_LENGTH = 20
ELLIPSIS = "..."
PROGRESS_MARKER = "#"

# Units
MBPS_DIVISOR = 1_000_000.0

# Engine
DEFAULT_TIMEOUT = 10.0

TRUTHY = ("1", "true", "yes", "on")


def get_timeout():
    """
    Socket timeout (seconds) handed to speedtest-cli.

    Invalid or non-positive SWIFI_TIMEOUT values fall back to DEFAULT_TIMEOUT.
    """
    raw = os.environ.get("SWIFI_TIMEOUT")
    if raw is None or not raw.strip():
        return DEFAULT_TIMEOUT
    try:
        value = float(raw)
    except ValueError:
        LOG.warning("Ignoring SWIFI_TIMEOUT=%r (not a number)", raw)
        return DEFAULT_TIMEOUT
    if value <= 0:
        LOG.warning("Ignoring SWIFI_TIMEOUT=%r (must be positive)", raw)
        return DEFAULT_TIMEOUT
    return value


def get_secure():
    return os.environ.get("SWIFI_SECURE", "").strip().lower() in TRUTHY
