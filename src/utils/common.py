"""src.utils.common
공통 유틸리티 함수 (Spring의 CommonUtil 스타일)
"""
import logging
from typing import Any

import httpx

from src.core.exceptions import UpstreamError

logger = logging.getLogger(__name__)


# ============================================================
# HTTP 클라이언트 유틸리티
# ============================================================

DEFAULT_HTTP_TIMEOUT = 10.0  # 기본 타임아웃 (초)
LLM_HTTP_TIMEOUT = 60.0  # LLM API 타임아웃 (초, 응답 생성이 길어질 수 있음)


def _raise_for_upstream_status(response: httpx.Response, service_name: str) -> None:
    """
    2xx가 아닌 응답을 UpstreamError로 변환

    메시지 형식: "<service_name> error (<status>): <본문 또는 reason>"
    """
    if response.is_success:
        return
    body = response.text.strip()
    logger.error(f"HTTP 응답 오류: service={service_name}, status={response.status_code}, url={response.request.url.path}")
    raise UpstreamError(
        f"{service_name} error ({response.status_code}): {body or response.reason_phrase}",
        upstream_status=response.status_code
    )


def _decode_json(response: httpx.Response, service_name: str) -> Any:
    try:
        return response.json()
    except ValueError:
        logger.error(f"JSON 응답 파싱 실패: service={service_name}")
        raise UpstreamError(
            f"{service_name} error ({response.status_code}): invalid JSON response",
            upstream_status=response.status_code
        )


async def http_get_json(
    url: str,
    params: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
    timeout: float = DEFAULT_HTTP_TIMEOUT,
    service_name: str = "HTTP"
) -> Any:
    """
    HTTP GET 요청 후 JSON 응답 반환

    Args:
        url: 요청 URL
        params: 쿼리 파라미터
        headers: 요청 헤더
        timeout: 타임아웃 (초, 기본 10초)
        service_name: 에러 메시지에 표시할 외부 서비스 이름

    Returns:
        JSON 응답

    Raises:
        UpstreamError: 요청 실패, 타임아웃 또는 2xx가 아닌 응답
    """
    try:
        async with httpx.AsyncClient(timeout=timeout) as client:
            response = await client.get(url, params=params, headers=headers)

    except httpx.TimeoutException:
        logger.error(f"HTTP 요청 타임아웃: service={service_name}")
        raise UpstreamError(f"{service_name} error: request timed out after {timeout}s")

    except httpx.RequestError as error:
        logger.error(f"HTTP 연결 실패: service={service_name}, error={error}")
        raise UpstreamError(f"{service_name} error: connection failed ({error.__class__.__name__})")

    _raise_for_upstream_status(response, service_name)
    return _decode_json(response, service_name)


async def http_post_json(
    url: str,
    json_body: dict[str, Any],
    headers: dict[str, str] | None = None,
    timeout: float = LLM_HTTP_TIMEOUT,
    service_name: str = "HTTP"
) -> Any:
    """
    HTTP POST 요청 후 JSON 응답 반환

    Args:
        url: 요청 URL
        json_body: 요청 바디 (JSON)
        headers: 요청 헤더
        timeout: 타임아웃 (초, 기본 60초 - LLM용)
        service_name: 에러 메시지에 표시할 외부 서비스 이름

    Returns:
        JSON 응답

    Raises:
        UpstreamError: 요청 실패, 타임아웃 또는 2xx가 아닌 응답
    """
    try:
        async with httpx.AsyncClient(timeout=timeout) as client:
            response = await client.post(url, json=json_body, headers=headers)

    except httpx.TimeoutException:
        logger.error(f"HTTP POST 요청 타임아웃: service={service_name}")
        raise UpstreamError(f"{service_name} error: request timed out after {timeout}s")

    except httpx.RequestError as error:
        logger.error(f"HTTP POST 연결 실패: service={service_name}, error={error}")
        raise UpstreamError(f"{service_name} error: connection failed ({error.__class__.__name__})")

    _raise_for_upstream_status(response, service_name)
    return _decode_json(response, service_name)


def mask_sensitive_data(data: str, show_chars: int = 2) -> str:
    """
    민감 데이터 마스킹 (로그 출력 시 사용)

    Args:
        data: 마스킹할 문자열
        show_chars: 앞뒤로 보여줄 문자 수

    Returns:
        str: 마스킹된 문자열

    Examples:
        >>> mask_sensitive_data("my_secret_key_12345")
        'my***************45'
    """
    if not data or len(data) <= show_chars * 2:
        return "****"

    return data[:show_chars] + "*" * (len(data) - show_chars * 2) + data[-show_chars:]
