"""src.models.research_models
여행지 장소 조사(research) API 요청/응답 스키마
"""
from typing import Optional

from pydantic import BaseModel, Field

from src.models.place import Place

DEFAULT_MAX_PLACES = 15
MIN_MAX_PLACES = 5
MAX_MAX_PLACES = 25
MAX_INTERESTS = 12


class TripRequest(BaseModel):
    """요청 body의 trip 정보 (검증 후 생성)"""
    destination_query: str = Field(..., description="여행지 검색어", min_length=1)
    interests: list[str] = Field(default_factory=list, description="관심사 태그 (최대 12개)")
    ask: str = Field(default="", description="자유 입력 요청")


class ResearchOptions(BaseModel):
    """요청 body의 options 정보"""
    max_places: int = Field(
        default=DEFAULT_MAX_PLACES,
        ge=MIN_MAX_PLACES,
        le=MAX_MAX_PLACES,
        description="최대 장소 수"
    )


class DestinationInfo(BaseModel):
    """여행지 정보 (후보가 없으면 bbox 생략)"""
    query: str = Field(..., description="여행지 검색어")
    bbox: Optional[list[float]] = Field(default=None, description="[minLng, minLat, maxLng, maxLat]")


class ResearchMeta(BaseModel):
    """응답 메타데이터"""
    generated_at: str = Field(..., description="생성 시각 (ISO-8601, UTC)")
    geocode_provider: Optional[str] = Field(default=None, description="geocoding 제공자")
    cache_hit: bool = Field(default=False, description="캐시 사용 여부 (항상 false)")


class ResearchResponse(BaseModel):
    """
    장소 조사 응답

    exclude_unset으로 직렬화하므로 명시적으로 넣은 필드만 응답에 포함됩니다.
    """
    destination: DestinationInfo
    places: list[Place] = Field(default_factory=list)
    meta: ResearchMeta
