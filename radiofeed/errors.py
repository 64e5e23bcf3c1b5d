from typing import Optional


class RadioFeedError(Exception):
    """Base class for everything the catalog raises on purpose."""


class NetworkError(RadioFeedError):
    """Transport failure or a non-2xx answer from the directory service."""

    def __init__(self, url: str, message: str, status: Optional[int] = None):
        self.url = url
        self.status = status
        super().__init__(f"{message} ({url})")


class DecodeError(RadioFeedError):
    """Payload was not the JSON shape we expected. Keeps the raw bytes around."""

    def __init__(self, message: str, payload: bytes, url: Optional[str] = None):
        self.payload = payload
        self.url = url
        where = f" from {url}" if url else ""
        super().__init__(f"Failed to parse JSON{where}: {message}")


class UnsupportedOperation(RadioFeedError):
    pass
