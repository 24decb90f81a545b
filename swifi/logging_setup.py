import logging
import os
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(level="INFO"):
    """
    Logging setup for the swifi CLI.
    - Uses SWIFI_LOG_LEVEL if set
    - Logs to stdout, where the speed lines follow the progress markers
    - Doesn't reconfigure if handlers already exist
    """
    root = logging.getLogger()
    if root.handlers:
        return

    level_name = os.environ.get("SWIFI_LOG_LEVEL", level).upper()
    level_value = getattr(logging, level_name, logging.INFO)

    logging.basicConfig(
        level=level_value,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )
