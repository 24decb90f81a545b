"""swifi: test download and upload speeds against nearby speedtest.net servers."""

__version__ = "0.1.0"
