"""
Server catalog: nearest-first candidate lists for listing and testing.

ServerCatalog only ranks and filters; where the servers come from is the
source's business. SpeedtestDirectory is the speedtest.net source.
"""

import logging
import re

import speedtest

from .errors import CatalogUnavailable, InvalidServerId, ServerNotFound
from .server import Server, ServerList
from .settings import DEFAULT_ATTEMPT_COUNT, DEFAULT_TIMEOUT, LIST_COUNT, MAX_SERVER_ID

logger = logging.getLogger(__name__)

_ID_RE = re.compile(r"\+?[0-9]+")


def parse_server_id(text):
    """
    Parse a user-supplied server id as an unsigned 32-bit integer.

    Raises InvalidServerId for anything else (signs other than a leading '+',
    whitespace, non-ASCII digits, overflow).
    """
    if text is None or not _ID_RE.fullmatch(text):
        raise InvalidServerId(text)
    value = int(text)
    if value > MAX_SERVER_ID:
        raise InvalidServerId(text)
    return value


class SpeedtestDirectory:
    """Full speedtest.net server set, with distances from the detected client location."""

    def __init__(self, timeout=DEFAULT_TIMEOUT, secure=False):
        self.timeout = timeout
        self.secure = secure

    def servers(self):
        try:
            client = speedtest.Speedtest(timeout=self.timeout, secure=self.secure)
            by_distance = client.get_servers()
        except speedtest.ConfigRetrievalError as e:
            raise CatalogUnavailable(f"Failed to retrieve speedtest configuration: {e!r}") from e
        except (speedtest.SpeedtestException, OSError) as e:
            raise CatalogUnavailable(f"Failed to retrieve server list from speedtest API: {e!r}") from e

        out = []
        for entries in by_distance.values():
            for entry in entries:
                if "d" not in entry:
                    try:
                        origin = client.lat_lon
                        entry["d"] = speedtest.distance(origin, (float(entry["lat"]), float(entry["lon"])))
                    except (AttributeError, KeyError, ValueError) as e:
                        logger.debug("Dropping server %s: no usable distance (%r)", entry.get("id"), e)
                        continue
                try:
                    out.append(Server.from_speedtest(entry))
                except (KeyError, ValueError) as e:
                    logger.debug("Dropping malformed server entry %s: %r", entry.get("id"), e)
                    continue
        return out


class ServerCatalog:
    def __init__(self, source, logger=None):
        self.source = source
        self.log = logger or logging.getLogger("swifi.catalog")

    def fetch(self, limit):
        """
        Return the `limit` nearest servers, ascending by distance.

        Duplicate ids keep their first occurrence. Raises CatalogUnavailable
        when the source cannot be read.
        """
        seen = set()
        unique = []
        for server in self.source.servers():
            if server.id in seen:
                continue
            seen.add(server.id)
            unique.append(server)

        unique.sort(key=lambda s: s.distance_km)
        self.log.debug("Fetched %d servers, keeping %d nearest", len(unique), limit)
        return ServerList(unique[:limit])

    def top_nearest(self):
        return self.fetch(LIST_COUNT)

    def select_for_test(self, requested_id=None):
        """
        Candidates for one test run.

        - no id: the DEFAULT_ATTEMPT_COUNT nearest servers, tried in order
        - id: that server, but only if it is among the LIST_COUNT nearest
        """
        if requested_id is None:
            return self.fetch(DEFAULT_ATTEMPT_COUNT)

        server_id = parse_server_id(requested_id)
        matches = [s for s in self.fetch(LIST_COUNT) if s.id == server_id]
        if not matches:
            raise ServerNotFound(server_id)
        return ServerList(matches)
