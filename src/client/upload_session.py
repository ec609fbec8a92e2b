"""업로드 화면의 상태 관리 (드래그앤드롭 UI가 들고 있던 로컬 상태).

상태 전이:
    idle ──select──▶ file-pending ──confirm──▶ uploading ──▶ success
      ▲                  │  ▲                      │
      └─────cancel───────┘  └──── (재시도) ◀── error

업로드가 실패해도 PendingUpload를 버리지 않는다.
사용자는 포맷/이름을 바꾸고 confirm()을 다시 호출할 수 있다.
"""

import mimetypes
from dataclasses import dataclass
from enum import Enum

import httpx
from loguru import logger


class UploadState(str, Enum):
    IDLE = "idle"
    FILE_PENDING = "file-pending"
    UPLOADING = "uploading"
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class PendingUpload:
    """확정 전 업로드 후보. 서버에 저장되지 않는다."""

    filename: str
    content: bytes
    content_type: str
    format: str = "webp"
    custom_name: str = ""


class UploadSession:
    """/upload API를 호출하는 클라이언트 측 상태 보관자.

    http에는 base_url이 설정된 httpx.Client를 넘긴다 (테스트에서는 TestClient).
    """

    def __init__(self, http: httpx.Client, endpoint: str = "/upload"):
        self.http = http
        self.endpoint = endpoint

        self.state = UploadState.IDLE
        self.format = "webp"
        self.custom_name = ""
        self.pending: PendingUpload | None = None
        self.last_uploaded: dict | None = None
        self.error: str | None = None
        self.history: list[dict] = []

    # --- 파일 선택 ---

    def select(
        self, filename: str, content: bytes, content_type: str | None = None
    ) -> PendingUpload | None:
        """파일을 업로드 후보로 올린다. 이미지가 아니면 error 상태로 바꾸고 None."""
        content_type = content_type or mimetypes.guess_type(filename)[0] or ""
        if not content_type.startswith("image/"):
            self.error = "Please upload an image file."
            self.state = UploadState.ERROR
            return None

        self.pending = PendingUpload(
            filename=filename,
            content=content,
            content_type=content_type,
            format=self.format,
            custom_name=self.custom_name,
        )
        self.error = None
        self.state = UploadState.FILE_PENDING
        return self.pending

    def configure(self, format: str | None = None, custom_name: str | None = None) -> None:
        if format is not None:
            self.format = format
        if custom_name is not None:
            self.custom_name = custom_name
        if self.pending:
            self.pending.format = self.format
            self.pending.custom_name = self.custom_name

    def cancel(self) -> None:
        self.pending = None
        self.error = None
        self.state = UploadState.IDLE

    # --- 업로드 ---

    def confirm(self) -> dict | None:
        """보류 중인 파일을 업로드한다. 성공하면 서버가 돌려준 레코드를 반환."""
        if not self.pending or self.state == UploadState.UPLOADING:
            return None

        pending = self.pending
        self.state = UploadState.UPLOADING
        self.error = None
        self.last_uploaded = None

        data = {"format": pending.format}
        if pending.custom_name:
            data["name"] = pending.custom_name

        try:
            resp = self.http.post(
                self.endpoint,
                files={"file": (pending.filename, pending.content, pending.content_type)},
                data=data,
            )
            body = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Upload request failed: {e!r}")
            return self._fail("An unexpected error occurred")

        if not resp.is_success:
            message = body.get("error") if isinstance(body, dict) else None
            return self._fail(message or "Upload failed")

        self.last_uploaded = body["image"]
        self.pending = None
        self.custom_name = ""
        self.state = UploadState.SUCCESS
        self.refresh_history()
        return self.last_uploaded

    def _fail(self, message: str) -> None:
        self.error = message
        self.state = UploadState.ERROR
        return None

    # --- 이력 ---

    def refresh_history(self) -> list[dict]:
        try:
            resp = self.http.get(self.endpoint)
        except httpx.HTTPError as e:
            logger.error(f"Failed to fetch history: {e!r}")
            return self.history
        if resp.is_success:
            self.history = resp.json()
        return self.history

    def delete(self, record_id: int) -> bool:
        try:
            resp = self.http.request("DELETE", self.endpoint, json={"id": record_id})
        except httpx.HTTPError as e:
            logger.error(f"Error deleting {record_id}: {e!r}")
            return False
        if not resp.is_success:
            logger.error(f"Failed to delete {record_id} ({resp.status_code})")
            return False
        self.history = [item for item in self.history if item["id"] != record_id]
        return True
