from __future__ import annotations

import os
import uuid
from typing import BinaryIO, List, Optional, Tuple, Union

from wxcorp.errors import MultipartEncodeError

UploadContent = Union[bytes, bytearray, BinaryIO]

CRLF = b"\r\n"


def encode_upload_form(
    file_field: str,
    filename: str,
    content: UploadContent,
    *,
    extra_field: Optional[str] = None,
    extra_value: Union[str, bytes, None] = None,
    max_bytes: Optional[int] = None,
) -> Tuple[bytes, str]:
    """Encode a one-file multipart/form-data body.

    Layout:

      --BOUNDARY
      Content-Disposition: form-data; name="FILE_FIELD"; filename="FILENAME"
      Content-Type: application/octet-stream

      FILE-CONTENT
      --BOUNDARY
      Content-Disposition: form-data; name="EXTRA_FIELD"

      EXTRA-VALUE
      --BOUNDARY--

    The second part is written only when both `extra_field` and
    `extra_value` are non-empty.

    Returns (body, content_type).
    """

    data = _read_content(content, max_bytes)

    boundary = "----wxcorp-" + uuid.uuid4().hex
    delimiter = f"--{boundary}".encode("ascii")
    parts: List[bytes] = []

    parts.append(delimiter + CRLF)
    parts.append(
        (
            f'Content-Disposition: form-data; name="{_escape_quotes(file_field)}"; '
            f'filename="{_escape_quotes(filename)}"'
        ).encode("utf-8")
        + CRLF
    )
    parts.append(b"Content-Type: application/octet-stream" + CRLF + CRLF)
    parts.append(data)
    parts.append(CRLF)

    if extra_field and extra_value:
        value = extra_value.encode("utf-8") if isinstance(extra_value, str) else bytes(extra_value)
        parts.append(delimiter + CRLF)
        parts.append(
            f'Content-Disposition: form-data; name="{_escape_quotes(extra_field)}"'.encode("utf-8")
            + CRLF
            + CRLF
        )
        parts.append(value)
        parts.append(CRLF)

    parts.append(delimiter + b"--" + CRLF)
    return b"".join(parts), f"multipart/form-data; boundary={boundary}"


def read_file_bounded(path: str, max_bytes: int) -> bytes:
    """Read file bytes up to a maximum."""

    try:
        st = os.stat(path)
        if st.st_size > max_bytes:
            raise MultipartEncodeError(f"file too large for client upload cap: {st.st_size} > {max_bytes}")
        with open(path, "rb") as f:
            data = f.read()
    except OSError as e:
        raise MultipartEncodeError(f"cannot read upload file: {e}") from e
    if len(data) > max_bytes:
        raise MultipartEncodeError("file too large for client upload cap")
    return data


def _read_content(content: UploadContent, max_bytes: Optional[int]) -> bytes:
    if isinstance(content, (bytes, bytearray)):
        data = bytes(content)
    elif hasattr(content, "read"):
        try:
            data = content.read() if max_bytes is None else content.read(max_bytes + 1)
        except OSError as e:
            raise MultipartEncodeError(f"cannot read upload content: {e}") from e
        if isinstance(data, str):
            raise MultipartEncodeError("upload content reader must be opened in binary mode")
    else:
        raise MultipartEncodeError(f"unsupported upload content type: {type(content).__name__}")

    if max_bytes is not None and len(data) > max_bytes:
        raise MultipartEncodeError(f"upload content exceeds client upload cap of {max_bytes} bytes")
    return data


def _escape_quotes(value: str) -> str:
    """Escape a header parameter value; CR/LF cannot be represented."""

    if "\r" in value or "\n" in value:
        raise MultipartEncodeError("multipart header values must not contain CR or LF")
    return value.replace("\\", "\\\\").replace('"', '\\"')
