"""
요청 컨텍스트 관리 모듈

contextvars를 사용하여 비동기 환경에서도 안전하게 request_id를 관리
"""

import uuid
from contextvars import ContextVar

request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)


def generate_id(length: int | None = None) -> str:
    """고유 식별자 생성

    순서나 예측 불가능성은 보장하지 않으며 충돌만 피한다.
    """
    value = uuid.uuid4().hex
    return value[:length] if length else value


def get_request_id() -> str | None:
    """현재 컨텍스트의 request_id 반환"""
    return request_id_var.get()


def set_request_id(request_id: str | None = None) -> str:
    """
    request_id 설정

    인자가 없으면 8자리 ID 자동 생성
    """
    if request_id is None:
        request_id = generate_id(8)
    request_id_var.set(request_id)
    return request_id


def clear_context() -> None:
    """모든 컨텍스트 변수 초기화"""
    request_id_var.set(None)
