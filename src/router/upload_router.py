from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlmodel import Session

from core.dependencies import get_hosting_client
from core.exceptions import ValidationError
from model.database import get_session
from model.upload import (
    DeleteRequest,
    DeleteResponse,
    UploadRecordRead,
    UploadResponse,
)
from service import upload_service
from service.hosting_client import HostingClient

router = APIRouter(prefix="/upload", tags=["upload"])


@router.post("", response_model=UploadResponse)
def upload_image(
    file: UploadFile | None = File(None),
    fmt: str | None = Form(None, alias="format"),
    name: str | None = Form(None),
    hosting: HostingClient = Depends(get_hosting_client),
    session: Session = Depends(get_session),
):
    """이미지 업로드: 변환 → pic.in.th 업로드 → 이력 저장."""
    if file is None or not file.filename:
        raise ValidationError("No file provided")

    record = upload_service.upload_image(
        file.file.read(),
        original_name=file.filename,
        fmt=fmt,
        custom_name=name,
        hosting=hosting,
        session=session,
    )
    return UploadResponse(image=UploadRecordRead.model_validate(record))


@router.get("", response_model=list[UploadRecordRead])
def list_uploads(session: Session = Depends(get_session)):
    """업로드 이력 (최신순, 페이지네이션 없음)."""
    records = upload_service.list_records(session)
    return [UploadRecordRead.model_validate(r) for r in records]


@router.delete("", response_model=DeleteResponse)
def delete_upload(req: DeleteRequest, session: Session = Depends(get_session)):
    """이력 삭제. 없는 id도 200으로 응답한다 (deleted=false)."""
    deleted = upload_service.delete_record(req.id, session)
    return DeleteResponse(deleted=deleted)
