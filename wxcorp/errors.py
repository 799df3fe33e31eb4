"""Structured exceptions raised by the corp API client."""

from __future__ import annotations

from typing import Any, Dict


class CorpClientError(Exception):
    """Base class for client-side failures."""

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable error payload."""
        return {"type": self.__class__.__name__, "message": str(self)}


class MultipartEncodeError(CorpClientError):
    """Raised when the multipart/form-data body cannot be built."""


class TransportError(CorpClientError):
    """Raised when the request never produced an HTTP response."""


class HttpStatusError(CorpClientError):
    """Raised when the server answers with a status other than 200."""

    def __init__(self, status: int, reason: str = ""):
        self.status = int(status)
        self.reason = reason
        super().__init__(f"http.Status: {self.status} {reason}".rstrip())

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        payload.update({"status": self.status, "reason": self.reason})
        return payload


class ResponseDecodeError(CorpClientError):
    """Raised when a response body is not the expected JSON document."""


class TokenError(CorpClientError):
    """Raised when an access token cannot be obtained."""


class CorpAPIError(CorpClientError):
    """A non-zero errcode, raised only when the caller asks for it."""

    def __init__(self, errcode: int, errmsg: str = ""):
        self.errcode = int(errcode)
        self.errmsg = errmsg
        super().__init__(f"errcode={self.errcode} errmsg={errmsg!r}")

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        payload.update({"errcode": self.errcode, "errmsg": self.errmsg})
        return payload
