"""src.core.exceptions
애플리케이션 공통 예외 정의

CustomError를 최상위로 두고, 라우터의 예외 핸들러가 status_code를 보고 응답 코드를 결정합니다.
"""


class CustomError(Exception):
    """서비스 공통 예외 (기본 500)"""
    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ClientInputError(CustomError):
    """잘못된 요청 (메서드 오류, 필수값 누락 등)"""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


class ServerConfigError(CustomError):
    """서버 설정 누락 (API 키 등)"""
    status_code = 500


class UpstreamError(CustomError):
    """외부 API(OpenAI, Mapbox) 호출 실패"""
    status_code = 500

    def __init__(self, message: str, upstream_status: int | None = None):
        super().__init__(message)
        self.upstream_status = upstream_status


class ContentFormatError(CustomError):
    """LLM 응답을 JSON으로 해석할 수 없음"""
    status_code = 500
