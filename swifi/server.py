"""
Server descriptors and the fixed-width server table.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List

from .settings import ELLIPSIS, MAX_NAME_LENGTH, MAX_SPONSOR_LENGTH

TABLE_TITLE = "Available Servers:"
TABLE_RULE_WIDTH = 100


def ellipsize(text: str, max_len: int) -> str:
    """
    Truncate text to max_len characters, ending with "...".

    max_len is clamped to the marker length so the result never drops below it.
    """
    max_len = max(max_len, len(ELLIPSIS))
    if len(text) > max_len:
        return text[: max_len - len(ELLIPSIS)] + ELLIPSIS
    return text


@dataclass(frozen=True)
class Server:
    id: int
    sponsor: str
    name: str
    distance_km: float
    url: str

    def __str__(self) -> str:
        return (
            f"Server {self.id} - {ellipsize(self.sponsor, MAX_SPONSOR_LENGTH)} "
            f"({ellipsize(self.name, MAX_NAME_LENGTH)}) - {self.distance_km:.1f} km"
        )

    @classmethod
    def from_speedtest(cls, entry: Dict) -> "Server":
        """
        Build a Server from a speedtest-cli server dict.

        speedtest-cli keeps ids as strings and the distance under "d".
        """
        return cls(
            id=int(entry["id"]),
            sponsor=str(entry.get("sponsor") or ""),
            name=str(entry.get("name") or ""),
            distance_km=float(entry.get("d") or 0.0),
            url=str(entry["url"]),
        )

    def to_speedtest_server(self) -> Dict:
        """Return the dict shape speedtest-cli expects for a pinned server."""
        return {
            "id": str(self.id),
            "sponsor": self.sponsor,
            "name": self.name,
            "d": self.distance_km,
            "url": self.url,
            "country": "",
            "host": "",
        }


class ServerList:
    """Servers ordered nearest first. Never mutated after construction."""

    def __init__(self, servers: Iterable[Server] = ()):
        self._servers: List[Server] = list(servers)

    def __iter__(self) -> Iterator[Server]:
        return iter(self._servers)

    def __len__(self) -> int:
        return len(self._servers)

    def __getitem__(self, index):
        return self._servers[index]

    def __eq__(self, other) -> bool:
        if isinstance(other, ServerList):
            return self._servers == other._servers
        return NotImplemented

    def __repr__(self) -> str:
        return f"ServerList({self._servers!r})"

    @property
    def servers(self) -> List[Server]:
        return list(self._servers)

    def ids(self) -> List[int]:
        return [s.id for s in self._servers]

    def format_table(self) -> str:
        lines = [
            TABLE_TITLE,
            f"{'ID':<10} {'Sponsor':<30} {'Name':<40} {'Distance':<10}",
            "-" * TABLE_RULE_WIDTH,
        ]
        for server in self._servers:
            sponsor = ellipsize(server.sponsor, MAX_SPONSOR_LENGTH)
            name = ellipsize(server.name, MAX_NAME_LENGTH)
            lines.append(f"{server.id:<10} {sponsor:<30} {name:<40} {server.distance_km:<10.2f}")
        return "\n".join(lines) + "\n"
