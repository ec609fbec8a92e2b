"""pytest 공용 fixture.

모든 API 테스트는 in-memory SQLite DB와 가짜 호스팅 API를 사용하여 격리된다.
- session: 테스트마다 새 in-memory DB 세션
- fake_host: httpx.MockTransport 뒤에서 pic.in.th 역할을 하는 가짜 서버
- hosting_client: fake_host로 요청을 보내는 HostingClient
- client: 세션과 HostingClient를 오버라이드한 TestClient
"""

import asyncio
import io
import os
import sys
from pathlib import Path

import httpx
import pytest
from fastapi.testclient import TestClient
from PIL import Image
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine
from starlette.datastructures import UploadFile as StarletteUploadFile
from starlette.requests import Request

# src/ 디렉토리를 import path에 추가
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

# lifespan이 작업 디렉토리에 DB 파일을 만들지 않도록 한다
os.environ.setdefault("DATABASE_URL", "sqlite://")

from core.dependencies import get_hosting_client
from main import app
from model.database import get_session
from service.hosting_client import HostingClient

HOSTING_URL = "https://pic.test/api/1/upload"
API_KEY = "test-api-key"


def make_image_bytes(
    width: int = 100, height: int = 100, fmt: str = "PNG", mode: str = "RGB"
) -> bytes:
    """테스트용 이미지를 메모리에서 생성한다."""
    color = (0, 0, 255, 128) if mode == "RGBA" else "blue"
    buf = io.BytesIO()
    Image.new(mode, (width, height), color=color).save(buf, format=fmt)
    return buf.getvalue()


def parse_multipart(request: httpx.Request) -> dict[str, dict]:
    """httpx가 만든 multipart 본문을 {필드명: {filename, content_type, body}}로 푼다.

    서버와 같은 파서(Starlette Request.form → python-multipart)를 그대로 쓴다.
    """
    scope = {
        "type": "http",
        "method": request.method,
        "path": request.url.path,
        "headers": [(key.lower(), value) for key, value in request.headers.raw],
    }
    body = request.content

    async def receive():
        return {"type": "http.request", "body": body, "more_body": False}

    async def _parse() -> dict[str, dict]:
        parts = {}
        async with Request(scope, receive).form() as form:
            for name, value in form.multi_items():
                if isinstance(value, StarletteUploadFile):
                    parts[name] = {
                        "filename": value.filename,
                        "content_type": value.content_type,
                        "body": await value.read(),
                    }
                else:
                    parts[name] = {
                        "filename": None,
                        "content_type": None,
                        "body": value.encode(),
                    }
        return parts

    return asyncio.run(_parse())


class FakeHost:
    """pic.in.th 대역. 받은 요청을 기록하고 설정한 응답을 돌려준다."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.status_code = 200
        self.json: object | None = {
            "status_code": 200,
            "image": {"url": "https://img.pic.test/abc/photo.webp"},
        }
        self.text: str | None = None
        self.error: Exception | None = None

    def respond(self, status_code: int = 200, json=None, text: str | None = None):
        self.status_code = status_code
        self.json = json
        self.text = text

    def fail_with(self, error: Exception):
        self.error = error

    def handler(self, request: httpx.Request) -> httpx.Response:
        request.read()
        self.requests.append(request)
        if self.error:
            raise self.error
        if self.text is not None:
            return httpx.Response(self.status_code, text=self.text)
        return httpx.Response(self.status_code, json=self.json)


@pytest.fixture()
def session():
    """테스트마다 새 in-memory SQLite DB를 생성한다.

    StaticPool을 사용해야 모든 커넥션이 같은 in-memory DB를 공유한다.
    (기본값은 커넥션마다 별도 DB가 생성되어 테이블이 안 보임)
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    with Session(engine) as s:
        yield s


@pytest.fixture()
def fake_host():
    return FakeHost()


@pytest.fixture()
def hosting_client(fake_host):
    client = HostingClient(
        api_key=API_KEY,
        endpoint=HOSTING_URL,
        transport=httpx.MockTransport(fake_host.handler),
    )
    yield client
    client.close()


@pytest.fixture()
def client(session, hosting_client):
    """get_session, get_hosting_client를 테스트용으로 오버라이드한 TestClient."""

    def _override_session():
        yield session

    app.dependency_overrides[get_session] = _override_session
    app.dependency_overrides[get_hosting_client] = lambda: hosting_client
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
