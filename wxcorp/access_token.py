from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from threading import Lock
from typing import Optional
from urllib.parse import urlencode

from pydantic import ValidationError

from wxcorp.client.http import HttpTransport, UrllibTransport
from wxcorp.errors import TokenError, TransportError
from wxcorp.models import AccessTokenInfo

log = logging.getLogger("wxcorp.access_token")

DEFAULT_BASE_URL = "https://qyapi.weixin.qq.com/cgi-bin/"


class AccessTokenServer(ABC):
    """Source of access tokens for CorpClient."""

    @abstractmethod
    def token(self) -> str:
        """Return the current access token, fetching one if needed."""

    @abstractmethod
    def refresh_token(self) -> str:
        """Discard the current token and return a freshly issued one."""


class DefaultAccessTokenServer(AccessTokenServer):
    """In-memory token cache backed by the gettoken endpoint.

    Policy:
    - A cached token is reused until `expiry_margin_sec` before it expires.
    - `refresh_token()` always asks the server.

    Security notes:
    - The corp secret travels in the gettoken query string; the URL is never logged.
    - Memory-only: every process holds its own token. For multi-process
      deployments, plug in a shared AccessTokenServer implementation.

    """

    def __init__(
        self,
        corp_id: str,
        corp_secret: str,
        *,
        transport: Optional[HttpTransport] = None,
        base_url: str = DEFAULT_BASE_URL,
        expiry_margin_sec: int = 300,
    ):
        self.corp_id = corp_id
        self._corp_secret = corp_secret
        self._transport = transport or UrllibTransport()
        self.base_url = base_url.rstrip("/") + "/"
        self._margin = max(0, int(expiry_margin_sec))

        self._token: Optional[str] = None
        self._expires_at = 0.0
        self._lock = Lock()

    @property
    def expires_at(self) -> float:
        """Monotonic deadline of the cached token (0 when nothing is cached)."""
        return self._expires_at

    def token(self) -> str:
        with self._lock:
            if self._token and time.monotonic() < self._expires_at:
                return self._token
            return self._fetch_locked()

    def refresh_token(self) -> str:
        with self._lock:
            return self._fetch_locked()

    def _fetch_locked(self) -> str:
        query = urlencode({"corpid": self.corp_id, "corpsecret": self._corp_secret})
        try:
            resp = self._transport.get(f"{self.base_url}gettoken?{query}")
        except TransportError as e:
            raise TokenError(f"gettoken failed: {e}") from e
        if resp.status != 200:
            raise TokenError(f"gettoken failed: http.Status: {resp.status} {resp.reason}".rstrip())

        try:
            info = AccessTokenInfo.model_validate(resp.json())
        except (ValueError, ValidationError) as e:
            raise TokenError(f"gettoken returned an undecodable body: {e}") from e

        if not info.ok:
            raise TokenError(f"gettoken failed: errcode={info.errcode} errmsg={info.errmsg!r}")
        if not info.access_token:
            raise TokenError("gettoken response has no access_token")

        now = time.monotonic()
        ttl = max(0, info.expires_in - self._margin)
        self._token = info.access_token
        self._expires_at = now + ttl
        log.info(
            "access_token_fetched",
            extra={"corp_id": self.corp_id, "expires_in": info.expires_in},
        )
        return info.access_token
