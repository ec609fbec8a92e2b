import re

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, col, select

from core.exceptions import PersistenceError
from model.upload import UploadRecord
from processor.transform import transform_image
from service.hosting_client import HostingClient
from utility.timer import timer

# 마지막 "." 뒤에 "/"나 "."가 없는 글자가 1개 이상 있으면 확장자로 본다
_EXTENSION_RE = re.compile(r"\.[^/.]+$")


def derive_title(custom_name: str | None, original_name: str) -> str:
    """업로드 제목을 정한다.

    - 사용자가 이름을 지정했으면 그대로 사용
    - 아니면 원본 파일명에서 마지막 확장자만 제거 (확장자가 없으면 원본 그대로)
    - ".hidden"처럼 제거 후 빈 문자열이 되면 원본 파일명을 사용
    """
    if custom_name:
        return custom_name
    return _EXTENSION_RE.sub("", original_name) or original_name


def build_filename(title: str, extension: str) -> str:
    return f"{title}.{extension}"


def create_record(original_name: str, url: str, session: Session) -> UploadRecord:
    record = UploadRecord(original_name=original_name, url=url)
    try:
        session.add(record)
        session.commit()
        session.refresh(record)
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Failed to save upload record for {url}: {e}")
        raise PersistenceError(details=str(e)) from e
    return record


def upload_image(
    data: bytes,
    original_name: str,
    fmt: str | None,
    custom_name: str | None,
    hosting: HostingClient,
    session: Session,
) -> UploadRecord:
    """변환 → 호스팅 업로드 → DB 기록.

    업로드가 실패하면 예외가 그대로 올라가므로 레코드는 만들어지지 않는다.
    """
    with timer("transform"):
        result = transform_image(data, fmt)

    title = derive_title(custom_name, original_name)
    filename = build_filename(title, result.extension)

    with timer(f"upload {filename}"):
        url = hosting.upload(result.data, filename, result.mime_type, title)

    record = create_record(original_name, url, session)
    logger.info(
        f"Uploaded {original_name} as {filename} "
        f"({result.width}x{result.height}, {len(result.data)} bytes) -> {url}"
    )
    return record


def list_records(session: Session) -> list[UploadRecord]:
    """업로드 이력 전체를 최신순으로 반환한다."""
    statement = select(UploadRecord).order_by(
        col(UploadRecord.created_at).desc(), col(UploadRecord.id).desc()
    )
    try:
        return list(session.exec(statement).all())
    except SQLAlchemyError as e:
        logger.error(f"Failed to fetch history: {e}")
        raise PersistenceError("Failed to fetch history") from e


def delete_record(record_id: int, session: Session) -> bool:
    """레코드를 삭제한다. 없는 id여도 에러 없이 False를 반환한다."""
    try:
        record = session.get(UploadRecord, record_id)
        if not record:
            return False
        session.delete(record)
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Failed to delete upload record {record_id}: {e}")
        raise PersistenceError("Failed to delete upload record") from e
    logger.info(f"Deleted upload record {record_id}")
    return True
