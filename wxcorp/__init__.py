"""Client for the WeChat Work (corp) server API.

The core is `CorpClient.upload`: a multipart upload authenticated by an
access token, retried once when the server reports the token as stale.
"""

from .client.corp import CorpClient  # noqa: F401
from .client.http import HttpResponse, HttpTransport, UrllibTransport  # noqa: F401
from .config import ClientConfig, build_client  # noqa: F401
from .errors import (  # noqa: F401
    CorpAPIError,
    CorpClientError,
    HttpStatusError,
    MultipartEncodeError,
    ResponseDecodeError,
    TokenError,
    TransportError,
)
from .models import (  # noqa: F401
    ERR_CODE_INVALID_CREDENTIAL,
    ERR_CODE_OK,
    ERR_CODE_TIMEOUT,
    TOKEN_ERROR_CODES,
    CorpError,
    ImageURL,
    MaterialInfo,
    MediaInfo,
    VideoDescription,
)
from .access_token import AccessTokenServer, DefaultAccessTokenServer  # noqa: F401
