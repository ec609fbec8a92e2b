from fastapi import Request

from service.hosting_client import HostingClient


def get_hosting_client(request: Request) -> HostingClient:
    """lifespan에서 만든 HostingClient를 꺼낸다.

    테스트에서는 app.dependency_overrides로 가짜 transport를 쓰는 클라이언트로 바꾼다.
    """
    return request.app.state.hosting_client
