"""A fake corp API server (FastAPI) and a transport that talks to it in-process."""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Tuple

import pytest
from fastapi import FastAPI, File, Form, UploadFile
from fastapi.testclient import TestClient
from starlette.responses import Response

from wxcorp.access_token import DefaultAccessTokenServer
from wxcorp.client.corp import CorpClient
from wxcorp.client.http import HttpResponse

BASE_URL = "http://testserver/cgi-bin/"
CORP_ID = "wx-corp-1"
CORP_SECRET = "s3cret"


class FakeCorp:
    """In-memory stand-in for qyapi.weixin.qq.com.

    - `gettoken` issues tok-1, tok-2, ...; only issued tokens are accepted.
    - `expire_tokens()` makes every issued token stale (errcode 42001).
    - `queue_raw()` forces the next upload answers (status, body).
    """

    def __init__(self) -> None:
        self.valid_tokens: set = set()
        self.issued = 0
        self.gettoken_calls = 0
        self.expires_in = 7200
        self.uploads: List[Dict[str, Any]] = []
        self.raw_queue: List[Tuple[int, bytes]] = []
        self.app = self._build_app()

    def expire_tokens(self) -> None:
        self.valid_tokens.clear()

    def queue_raw(self, status: int, body: Any) -> None:
        if not isinstance(body, bytes):
            body = json.dumps(body).encode("utf-8")
        self.raw_queue.append((status, body))

    def _check(self, access_token: str) -> Optional[Response]:
        if self.raw_queue:
            status, body = self.raw_queue.pop(0)
            return Response(content=body, status_code=status, media_type="application/json")
        if access_token not in self.valid_tokens:
            return _json({"errcode": 42001, "errmsg": "access_token expired"})
        return None

    def _build_app(self) -> FastAPI:
        app = FastAPI(title="fake corp api")

        @app.get("/cgi-bin/gettoken")
        def gettoken(corpid: str, corpsecret: str):
            self.gettoken_calls += 1
            if corpid != CORP_ID or corpsecret != CORP_SECRET:
                return {"errcode": 40001, "errmsg": "invalid credential"}
            self.issued += 1
            token = f"tok-{self.issued}"
            self.valid_tokens.add(token)
            return {"errcode": 0, "errmsg": "ok", "access_token": token, "expires_in": self.expires_in}

        @app.post("/cgi-bin/media/upload")
        async def media_upload(type: str, access_token: str, media: UploadFile = File(...)):
            forced = self._check(access_token)
            if forced is not None:
                return forced
            data = await media.read()
            self.uploads.append(
                {
                    "endpoint": "media/upload",
                    "type": type,
                    "token": access_token,
                    "filename": media.filename,
                    "content_type": media.content_type,
                    "data": data,
                }
            )
            return {
                "errcode": 0,
                "errmsg": "ok",
                "type": type,
                "media_id": f"m-{len(self.uploads)}",
                "created_at": "1380000000",
            }

        @app.post("/cgi-bin/media/uploadimg")
        async def media_uploadimg(access_token: str, media: UploadFile = File(...)):
            forced = self._check(access_token)
            if forced is not None:
                return forced
            data = await media.read()
            self.uploads.append(
                {"endpoint": "media/uploadimg", "token": access_token, "filename": media.filename, "data": data}
            )
            return {"errcode": 0, "errmsg": "ok", "url": f"http://p.qpic.cn/img/{len(self.uploads)}"}

        @app.post("/cgi-bin/material/add_material")
        async def add_material(
            agentid: int,
            type: str,
            access_token: str,
            media: UploadFile = File(...),
            description: Optional[str] = Form(None),
        ):
            forced = self._check(access_token)
            if forced is not None:
                return forced
            data = await media.read()
            self.uploads.append(
                {
                    "endpoint": "material/add_material",
                    "agentid": agentid,
                    "type": type,
                    "token": access_token,
                    "filename": media.filename,
                    "data": data,
                    "description": json.loads(description) if description else None,
                }
            )
            return {"errcode": 0, "errmsg": "ok", "media_id": f"mat-{len(self.uploads)}"}

        return app


def _json(payload: Dict[str, Any]) -> Response:
    return Response(content=json.dumps(payload), status_code=200, media_type="application/json")


class AppTransport:
    """HttpTransport backed by a starlette TestClient; records every URL."""

    def __init__(self, client: TestClient):
        self.client = client
        self.urls: List[str] = []

    def post(self, url: str, content_type: str, body: bytes) -> HttpResponse:
        self.urls.append(url)
        r = self.client.post(url, content=body, headers={"Content-Type": content_type})
        return _wrap(r)

    def get(self, url: str) -> HttpResponse:
        self.urls.append(url)
        return _wrap(self.client.get(url))


def _wrap(r) -> HttpResponse:
    return HttpResponse(
        status=r.status_code,
        reason=r.reason_phrase,
        headers=dict(r.headers),
        body_bytes=r.content,
    )


@pytest.fixture
def fake_corp() -> FakeCorp:
    return FakeCorp()


@pytest.fixture
def transport(fake_corp: FakeCorp) -> AppTransport:
    return AppTransport(TestClient(fake_corp.app))


@pytest.fixture
def token_server(transport: AppTransport) -> DefaultAccessTokenServer:
    return DefaultAccessTokenServer(CORP_ID, CORP_SECRET, transport=transport, base_url=BASE_URL)


@pytest.fixture
def corp_client(token_server: DefaultAccessTokenServer, transport: AppTransport) -> CorpClient:
    return CorpClient(token_server, transport=transport)
