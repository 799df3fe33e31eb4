from __future__ import annotations

import logging
import time
from typing import Optional, Type, TypeVar, Union
from urllib.parse import quote_plus, urlsplit

from pydantic import ValidationError

from wxcorp.access_token import AccessTokenServer
from wxcorp.client.http import HttpTransport, UrllibTransport
from wxcorp.client.multipart import UploadContent, encode_upload_form
from wxcorp.errors import HttpStatusError, ResponseDecodeError
from wxcorp.models import TOKEN_ERROR_CODES, CorpError

log = logging.getLogger("wxcorp.client")

T = TypeVar("T", bound=CorpError)

DEFAULT_MAX_UPLOAD_BYTES = 20 * 1024 * 1024


class CorpClient:
    """Access-token authenticated client for the corp API.

    Every request URL is built as `incomplete_url + access_token`, so callers
    pass URLs ending in `access_token=`.

    Security notes:
    - Access tokens and file bytes are never logged.
    - Uploads are built fully in memory; a size cap is enforced.

    """

    def __init__(
        self,
        token_server: AccessTokenServer,
        *,
        transport: Optional[HttpTransport] = None,
        max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
    ):
        self.token_server = token_server
        self.transport = transport or UrllibTransport()
        self.max_upload_bytes = int(max_upload_bytes)

    def token(self) -> str:
        return self.token_server.token()

    def refresh_token(self) -> str:
        return self.token_server.refresh_token()

    def upload(
        self,
        incomplete_url: str,
        file_field: str,
        filename: str,
        content: UploadContent,
        *,
        extra_field: Optional[str] = None,
        extra_value: Union[str, bytes, None] = None,
        response_model: Type[T] = CorpError,  # type: ignore[assignment]
    ) -> T:
        """POST a multipart upload and decode the JSON answer.

        A response whose errcode says the token is stale is retried exactly
        once with a refreshed token. Any other errcode is returned to the
        caller inside the model; use `raise_for_errcode()` to turn it into an
        exception.

        Raises:
          MultipartEncodeError: the body could not be built
          TokenError: no token could be obtained or refreshed
          TransportError: no HTTP response was received
          HttpStatusError: status other than 200
          ResponseDecodeError: body is not a valid `response_model` document
        """

        if not (isinstance(response_model, type) and issubclass(response_model, CorpError)):
            raise TypeError("response_model must be a CorpError subclass")

        body, content_type = encode_upload_form(
            file_field,
            filename,
            content,
            extra_field=extra_field,
            extra_value=extra_value,
            max_bytes=self.max_upload_bytes,
        )
        path = urlsplit(incomplete_url).path

        token = self.token()
        has_retried = False
        while True:
            start = time.monotonic()
            resp = self.transport.post(incomplete_url + quote_plus(token), content_type, body)
            dur_ms = int((time.monotonic() - start) * 1000)

            if resp.status != 200:
                log.warning(
                    "corp_upload_http_error",
                    extra={"path": path, "status_code": resp.status, "duration_ms": dur_ms},
                )
                raise HttpStatusError(resp.status, resp.reason)

            result = _decode(resp.body_bytes, response_model)
            log.info(
                "corp_upload",
                extra={
                    "path": path,
                    "body_bytes": len(body),
                    "errcode": result.errcode,
                    "retried": has_retried,
                    "duration_ms": dur_ms,
                },
            )

            if result.errcode in TOKEN_ERROR_CODES and not has_retried:
                has_retried = True
                log.warning("corp_token_rejected", extra={"path": path, "errcode": result.errcode})
                token = self.refresh_token()
                continue
            return result


def _decode(body: bytes, response_model: Type[T]) -> T:
    try:
        return response_model.model_validate_json(body)
    except ValidationError as e:
        raise ResponseDecodeError(f"cannot decode response as {response_model.__name__}: {e}") from e
