"""Error kinds raised by the services and mapped to HTTP responses in main."""
from typing import Dict, Optional, Sequence


class LogiTrackError(Exception):
    status_code = 500

    def __init__(self, message: str, headers: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.message = message
        # extra response headers, e.g. X-Query-MS on a lookup that found nothing
        self.headers = dict(headers or {})


class ValidationError(LogiTrackError):
    status_code = 400

    def __init__(self, message: str, errors: Optional[Sequence[str]] = None, headers: Optional[Dict[str, str]] = None):
        super().__init__(message, headers=headers)
        self.errors = list(errors or [])


class Conflict(LogiTrackError):
    status_code = 409


class Unauthorized(LogiTrackError):
    status_code = 401


class Forbidden(LogiTrackError):
    status_code = 403


class NotFound(LogiTrackError):
    status_code = 404


class ConfigurationError(LogiTrackError):
    """Required configuration is missing or malformed; raised before serving traffic."""
