"""앱 전역 커스텀 예외 클래스.

AppException을 상속하면 전역 핸들러(error_handlers.py)가 자동으로
{"error_code": "...", "error": "...", "details": "..."} 형식의 JSON 응답을 생성한다.
details는 업스트림 응답 본문처럼 추가 정보가 있을 때만 포함된다.
"""


class AppException(Exception):
    """앱 전역 베이스 예외.

    서브클래스에서 status_code, error_code, message를 클래스 변수로 정의하면
    전역 핸들러가 해당 값을 읽어 HTTP 응답을 생성한다.
    """

    status_code: int = 500
    error_code: str = "INTERNAL_ERROR"
    message: str = "Internal server error"

    def __init__(self, message: str | None = None, details: str | None = None):
        if message:
            self.message = message
        self.details = details
        super().__init__(self.message)


# --- 요청 검증 ---


class ValidationError(AppException):
    status_code = 400
    error_code = "VALIDATION_ERROR"
    message = "Invalid request"


# --- 서버 설정 ---


class ConfigurationError(AppException):
    status_code = 500
    error_code = "CONFIGURATION_ERROR"
    message = "Server configuration error: Missing API Key"


# --- 이미지 변환 ---


class DecodeError(AppException):
    status_code = 500
    error_code = "DECODE_ERROR"
    message = "Failed to process image"


# --- 외부 호스팅 API ---


class UpstreamError(AppException):
    status_code = 502
    error_code = "UPSTREAM_ERROR"
    message = "Upload to pic.in.th failed"


class UpstreamParseError(UpstreamError):
    error_code = "UPSTREAM_PARSE_ERROR"
    message = "Failed to parse upload response"


# --- 저장소 ---


class PersistenceError(AppException):
    status_code = 500
    error_code = "PERSISTENCE_ERROR"
    message = "Failed to save upload record"
