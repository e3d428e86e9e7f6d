# errors.py
"""Exception types shared by the proxy server and the client-side controllers."""

from typing import Optional


class SpeechProxyError(Exception):
    """Base error. `status_code` is the HTTP status the API responds with."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(SpeechProxyError):
    """Client input missing or malformed."""

    status_code = 400


class UpstreamError(SpeechProxyError):
    """The Azure Speech call failed (non-2xx or transport error)."""

    def __init__(self, message: str, status: Optional[int] = None, body: str = ""):
        super().__init__(message)
        self.status = status
        self.body = body


class ConfigurationError(SpeechProxyError):
    """Required Azure credentials/region are not configured."""


class CatalogError(SpeechProxyError):
    """Voice catalog file is malformed."""


class ClientFetchError(SpeechProxyError):
    """Network or decoding failure while the client fetches audio from the proxy."""


class PlaybackError(SpeechProxyError):
    """No usable audio player."""
