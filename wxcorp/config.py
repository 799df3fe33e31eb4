from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

from wxcorp.access_token import DEFAULT_BASE_URL, DefaultAccessTokenServer
from wxcorp.client.corp import DEFAULT_MAX_UPLOAD_BYTES, CorpClient
from wxcorp.client.http import HttpTransport, UrllibTransport


@dataclass(frozen=True, slots=True)
class ClientConfig:
    """Configuration for a CorpClient.

    Security notes:
    - corp_secret is a credential; keep it out of logs and repr.

    """

    corp_id: str = ""
    corp_secret: str = ""
    base_url: str = DEFAULT_BASE_URL
    timeout_sec: Optional[float] = None
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES
    log_level: str = "INFO"

    def __repr__(self) -> str:
        return (
            f"ClientConfig(corp_id={self.corp_id!r}, corp_secret='***', base_url={self.base_url!r}, "
            f"timeout_sec={self.timeout_sec!r}, max_upload_bytes={self.max_upload_bytes!r}, "
            f"log_level={self.log_level!r})"
        )

    @staticmethod
    def from_env() -> "ClientConfig":
        """Create a config from environment variables.

        - WXCORP_CORP_ID, WXCORP_CORP_SECRET
        - WXCORP_BASE_URL (default https://qyapi.weixin.qq.com/cgi-bin/)
        - WXCORP_TIMEOUT_SEC (default: transport default, no timeout)
        - WXCORP_MAX_UPLOAD_BYTES (default 20 MiB)
        - WXCORP_LOG_LEVEL (default INFO)

        """

        return ClientConfig(
            corp_id=os.environ.get("WXCORP_CORP_ID", "").strip(),
            corp_secret=os.environ.get("WXCORP_CORP_SECRET", "").strip(),
            base_url=(os.environ.get("WXCORP_BASE_URL") or DEFAULT_BASE_URL).strip(),
            timeout_sec=_env_float("WXCORP_TIMEOUT_SEC", None),
            max_upload_bytes=_env_int("WXCORP_MAX_UPLOAD_BYTES", DEFAULT_MAX_UPLOAD_BYTES),
            log_level=_env_log_level("WXCORP_LOG_LEVEL", "INFO"),
        )


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return int(default)
    try:
        return int(raw)
    except Exception:
        return int(default)


def _env_log_level(name: str, default: str) -> str:
    raw = os.environ.get(name, "").strip().upper()
    # getLevelName maps known names to their numeric level
    if raw and isinstance(logging.getLevelName(raw), int):
        return raw
    return default


def _env_float(name: str, default: Optional[float]) -> Optional[float]:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except Exception:
        return default
    return value if value > 0 else default


def build_client(cfg: ClientConfig, *, transport: Optional[HttpTransport] = None) -> CorpClient:
    """Wire transport, token server and client from a config."""

    # Logging: host applications may configure handlers; we only set the level.
    logging.getLogger("wxcorp").setLevel(cfg.log_level)

    transport = transport or UrllibTransport(timeout_sec=cfg.timeout_sec)
    token_server = DefaultAccessTokenServer(
        cfg.corp_id,
        cfg.corp_secret,
        transport=transport,
        base_url=cfg.base_url,
    )
    return CorpClient(token_server, transport=transport, max_upload_bytes=cfg.max_upload_bytes)
