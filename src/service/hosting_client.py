"""pic.in.th (Chevereto) 업로드 API 클라이언트.

요청 한 번에 외부 호출 한 번. 재시도하지 않고, 타임아웃도 httpx 기본값을 쓴다.
실패는 모두 예외로 올려서 레코드가 만들어지지 않게 한다.
"""

from typing import Any

import httpx
from loguru import logger

from core.exceptions import ConfigurationError, UpstreamError, UpstreamParseError

# 성공 응답에서 공개 URL을 찾는 순서.
# Chevereto는 {"image": {"url": ...}}를 돌려주지만 {"url": ...} 형태도 받아준다.
URL_PATHS: tuple[tuple[str, ...], ...] = (
    ("image", "url"),
    ("url",),
)


def extract_url(
    payload: Any, paths: tuple[tuple[str, ...], ...] = URL_PATHS
) -> str | None:
    """후보 경로를 순서대로 따라가서 처음 나오는 비어있지 않은 문자열을 반환한다."""
    for path in paths:
        node = payload
        for key in path:
            if not isinstance(node, dict):
                node = None
                break
            node = node.get(key)
        if isinstance(node, str) and node:
            return node
    return None


class HostingClient:
    """외부 이미지 호스팅 업로드.

    API 키와 엔드포인트는 생성 시 주입받는다 (lifespan에서 settings로 한 번 생성).
    테스트에서는 transport에 httpx.MockTransport를 넘긴다.
    """

    def __init__(
        self,
        api_key: str | None,
        endpoint: str,
        transport: httpx.BaseTransport | None = None,
        url_paths: tuple[tuple[str, ...], ...] = URL_PATHS,
    ):
        self.api_key = api_key
        self.endpoint = endpoint
        self.url_paths = url_paths
        self._http = httpx.Client(transport=transport)

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def upload(self, data: bytes, filename: str, mime_type: str, title: str) -> str:
        """인코딩된 이미지를 업로드하고 공개 URL을 반환한다.

        Raises:
            ConfigurationError: API 키가 설정되지 않음 (네트워크 호출 전에 실패)
            UpstreamError: 네트워크 오류 또는 2xx가 아닌 응답
            UpstreamParseError: 성공 응답에서 URL을 찾지 못함
        """
        if not self.api_key:
            raise ConfigurationError

        try:
            response = self._http.post(
                self.endpoint,
                headers={"X-API-Key": self.api_key},
                files={"source": (filename, data, mime_type)},
                data={"title": title},
            )
        except httpx.HTTPError as e:
            logger.error(f"Upload request failed: {e!r}")
            raise UpstreamError(details=str(e) or type(e).__name__) from e

        if not response.is_success:
            logger.error(f"Upload failed ({response.status_code}): {response.text}")
            raise UpstreamError(details=response.text)

        try:
            payload = response.json()
        except ValueError as e:
            logger.error(f"Upload response is not JSON: {response.text[:500]}")
            raise UpstreamParseError from e

        url = extract_url(payload, self.url_paths)
        if not url:
            logger.error(f"Unexpected response structure: {payload}")
            raise UpstreamParseError
        return url

    def close(self) -> None:
        self._http.close()
