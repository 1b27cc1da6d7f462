"""
ceedee Errors

Structured error kinds so callers never have to match on message text.
"""

from typing import Optional


class CeedeeError(Exception):
    """Base class for every error raised by ceedee."""

    kind = 'error'


class ConfigError(CeedeeError):
    kind = 'config'


class NotFound(CeedeeError):
    """No exact or partial match exists for a directory name."""

    kind = 'not_found'

    def __init__(self, name: str):
        super().__init__(f"No entry for directory {name}")
        self.name = name


class ServiceUnavailable(CeedeeError):
    """Nothing is listening on the configured port."""

    kind = 'unavailable'

    def __init__(self, port: int, cause: Optional[Exception] = None):
        super().__init__(f"There is no server listening on port {port}")
        self.port = port
        self.cause = cause


class HistoryWatchError(CeedeeError):
    kind = 'history_watch'
