from __future__ import annotations

from typing import FrozenSet, Optional

from pydantic import BaseModel, ConfigDict

from wxcorp.errors import CorpAPIError

ERR_CODE_OK = 0
ERR_CODE_INVALID_CREDENTIAL = 40014
ERR_CODE_TIMEOUT = 42001

# Codes that mean "the access token is stale": refresh once and resend.
TOKEN_ERROR_CODES: FrozenSet[int] = frozenset({ERR_CODE_TIMEOUT, ERR_CODE_INVALID_CREDENTIAL})


class CorpError(BaseModel):
    """Envelope shared by every corp API response.

    Endpoint-specific response models derive from this class so the client can
    read `errcode` without knowing the rest of the payload. Unknown fields are
    kept on the instance.
    """

    model_config = ConfigDict(extra="allow")

    errcode: int = ERR_CODE_OK
    errmsg: str = ""

    @property
    def ok(self) -> bool:
        return self.errcode == ERR_CODE_OK

    def raise_for_errcode(self) -> None:
        """Raise CorpAPIError if the server reported a failure."""

        if not self.ok:
            raise CorpAPIError(self.errcode, self.errmsg)


class AccessTokenInfo(CorpError):
    """Response of the gettoken endpoint."""

    access_token: Optional[str] = None
    expires_in: int = 0


class MediaInfo(CorpError):
    """Temporary media upload result (valid for three days)."""

    type: Optional[str] = None
    media_id: Optional[str] = None
    created_at: Optional[int] = None


class ImageURL(CorpError):
    """Permanent URL of an image uploaded for use inside messages."""

    url: Optional[str] = None


class MaterialInfo(CorpError):
    """Permanent material upload result."""

    media_id: Optional[str] = None


class VideoDescription(BaseModel):
    """Description part sent alongside a video material."""

    title: str
    introduction: str = ""
