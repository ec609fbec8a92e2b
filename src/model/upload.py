from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from sqlmodel import Field, SQLModel


class UploadRecord(SQLModel, table=True):
    """호스팅 업로드에 성공한 이미지 한 건. 생성 후에는 삭제만 가능하다."""

    id: int | None = Field(default=None, primary_key=True)
    original_name: str
    url: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC), index=True)


# --- 응답 스키마 (프론트엔드는 camelCase 키를 사용) ---


class UploadRecordRead(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )

    id: int
    original_name: str
    url: str
    created_at: datetime


class UploadResponse(BaseModel):
    success: bool = True
    image: UploadRecordRead


class DeleteRequest(BaseModel):
    id: int


class DeleteResponse(BaseModel):
    success: bool = True
    deleted: bool
