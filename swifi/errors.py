"""
Canonical error kinds and exceptions used across swifi.

Every failure the core can surface is a SwifiError subclass with a stable
`kind` string, so callers can branch on the category without matching on
message text.
"""

CATALOG_UNAVAILABLE = "catalog_unavailable"
INVALID_SERVER_ID = "invalid_server_id"
SERVER_NOT_FOUND = "server_not_found"
NO_SERVERS_AVAILABLE = "no_servers_available"
MEASUREMENT_FAILED = "measurement_failed"
ALL_ATTEMPTS_FAILED = "all_attempts_failed"
ENGINE_ERROR = "engine_error"


class SwifiError(Exception):
    kind = "swifi_error"


class CatalogUnavailable(SwifiError):
    """The speedtest.net configuration or server directory could not be fetched."""

    kind = CATALOG_UNAVAILABLE


class InvalidServerId(SwifiError):
    kind = INVALID_SERVER_ID

    def __init__(self, raw):
        self.raw = raw
        super().__init__("Server ID must be a valid number")


class ServerNotFound(SwifiError):
    kind = SERVER_NOT_FOUND

    def __init__(self, server_id):
        self.server_id = server_id
        super().__init__(f'Server with ID="{server_id}" not found in available servers.')


class NoServersAvailable(SwifiError):
    kind = NO_SERVERS_AVAILABLE

    def __init__(self, message="No servers available for testing"):
        super().__init__(message)


class EngineError(SwifiError):
    """Raised by measurement engines when a transfer cannot be completed."""

    kind = ENGINE_ERROR


class MeasurementFailed(SwifiError):
    kind = MEASUREMENT_FAILED

    def __init__(self, direction, cause):
        self.direction = direction
        self.cause = cause
        super().__init__(f"{direction.value.capitalize()} speed test failed: {cause}")


class AllAttemptsFailed(SwifiError):
    kind = ALL_ATTEMPTS_FAILED

    def __init__(self, attempts, message="All attempts failed. Please check your connection."):
        # list of (Server, MeasurementFailed) in the order they were tried
        self.attempts = list(attempts)
        super().__init__(message)
