"""src.services.request_validator
장소 조사 요청 body 검증 및 서버 설정 확인
"""
import logging
from typing import Any

from src.core.config import settings
from src.core.exceptions import ClientInputError, ServerConfigError
from src.models.research_models import (
    DEFAULT_MAX_PLACES,
    MAX_INTERESTS,
    MAX_MAX_PLACES,
    MIN_MAX_PLACES,
    ResearchOptions,
    TripRequest,
)
from src.utils.common import mask_sensitive_data
from src.utils.sanitize import clamp_int

logger = logging.getLogger(__name__)

REQUIRED_CREDENTIALS = ("OPENAI_API_KEY", "MAPBOX_TOKEN")


def _as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def validate_research_request(body: Any) -> tuple[TripRequest, ResearchOptions]:
    """
    요청 body를 TripRequest / ResearchOptions로 변환

    body 형식: {"trip": {"destination_query", "interests"?, "ask"?}, "options"?: {"max_places"?}}

    Raises:
        ClientInputError: destination_query가 없거나 공백뿐일 때 (400)
    """
    payload = _as_dict(body)
    trip = _as_dict(payload.get("trip"))
    options = _as_dict(payload.get("options"))

    destination_query = trip.get("destination_query")
    destination_query = destination_query.strip() if isinstance(destination_query, str) else ""
    if not destination_query:
        raise ClientInputError("Missing trip.destination_query")

    interests = trip.get("interests")
    interests = [item for item in interests[:MAX_INTERESTS] if isinstance(item, str)] if isinstance(interests, list) else []

    ask = trip.get("ask")
    ask = ask.strip() if isinstance(ask, str) else ""

    max_places = clamp_int(options.get("max_places"), MIN_MAX_PLACES, MAX_MAX_PLACES, DEFAULT_MAX_PLACES)

    return (
        TripRequest(destination_query=destination_query, interests=interests, ask=ask),
        ResearchOptions(max_places=max_places)
    )


def require_credentials() -> None:
    """
    외부 API 키 설정 확인

    Raises:
        ServerConfigError: OPENAI_API_KEY 또는 MAPBOX_TOKEN이 비어 있을 때
    """
    for name in REQUIRED_CREDENTIALS:
        value = getattr(settings, name, "")
        if not value:
            logger.error(f"서버 설정 누락: {name}")
            raise ServerConfigError(f"Server missing {name}")
        logger.debug(f"{name} 확인: {mask_sensitive_data(value)}")
