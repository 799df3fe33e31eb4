from __future__ import annotations

import json
import ssl
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Protocol
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from wxcorp.errors import TransportError


@dataclass(frozen=True, slots=True)
class HttpResponse:
    """HTTP response wrapper.

    Security notes:
    - Treat `body_bytes` as untrusted.

    """

    status: int
    body_bytes: bytes
    reason: str = ""
    headers: Mapping[str, str] = field(default_factory=dict)

    def json(self) -> Any:
        """Decode body as JSON."""

        return json.loads(self.body_bytes.decode("utf-8", errors="strict"))


class HttpTransport(Protocol):
    """What the client needs from an HTTP stack.

    Implementations return non-2xx answers as an HttpResponse and raise
    TransportError only when no response was received.
    """

    def post(self, url: str, content_type: str, body: bytes) -> HttpResponse: ...

    def get(self, url: str) -> HttpResponse: ...


class UrllibTransport:
    """Stdlib-only transport.

    Security notes:
    - Does NOT disable TLS verification.
    - URLs carry the access token in the query string; never log them whole.

    """

    def __init__(self, timeout_sec: Optional[float] = None):
        self.timeout_sec = timeout_sec

    def post(self, url: str, content_type: str, body: bytes) -> HttpResponse:
        """HTTP POST of a pre-encoded body."""

        req = Request(url=url, data=body, method="POST")
        req.add_header("Content-Type", content_type)
        req.add_header("Content-Length", str(len(body)))
        return self._do_request(req)

    def get(self, url: str) -> HttpResponse:
        """HTTP GET."""

        return self._do_request(Request(url=url, method="GET"))

    def _do_request(self, req: Request) -> HttpResponse:
        ctx = ssl.create_default_context()
        kwargs: dict = {"context": ctx}
        if self.timeout_sec is not None:
            kwargs["timeout"] = self.timeout_sec
        try:
            with urlopen(req, **kwargs) as resp:
                body = resp.read()
                headers = {k: v for k, v in resp.headers.items()}
                return HttpResponse(
                    status=int(resp.status),
                    reason=str(getattr(resp, "reason", "") or ""),
                    headers=headers,
                    body_bytes=body,
                )
        except HTTPError as e:
            body = e.read() if hasattr(e, "read") else b""
            headers = dict(getattr(e, "headers", {}) or {})
            return HttpResponse(
                status=int(getattr(e, "code", 0) or 0),
                reason=str(getattr(e, "reason", "") or ""),
                headers=headers,
                body_bytes=body,
            )
        except URLError as e:
            raise TransportError(f"network error: {e.reason}") from e
        except TimeoutError as e:
            raise TransportError(f"network timeout: {e}") from e
