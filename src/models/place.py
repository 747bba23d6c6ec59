"""src.models.place
지도에 표시할 장소(Place) 스키마

각 필드는 BeforeValidator로 정규화 규칙을 선언합니다.
LLM이 만든 후보 값을 그대로 넣어도 길이/범위/허용값이 보장됩니다.
"""
from typing import Annotated, Any, Literal, Optional, get_args

from pydantic import BaseModel, BeforeValidator, Field

from src.utils.sanitize import (
    safe_enum,
    safe_id,
    safe_number,
    safe_string,
    safe_string_list,
)

PlaceCategory = Literal["sight", "museum", "neighborhood", "food", "viewpoint", "day_trip", "nature", "activity"]
TimeOfDay = Literal["morning", "afternoon", "evening", "late_afternoon", "night"]

CATEGORIES: tuple[str, ...] = get_args(PlaceCategory)
TIMES_OF_DAY: tuple[str, ...] = get_args(TimeOfDay)

DEFAULT_CATEGORY = "sight"
DEFAULT_TIME_OF_DAY = "afternoon"

# 필드별 정규화 규칙
Category = Annotated[PlaceCategory, BeforeValidator(lambda v: safe_enum(v, CATEGORIES, DEFAULT_CATEGORY))]
BestTimeOfDay = Annotated[TimeOfDay, BeforeValidator(lambda v: safe_enum(v, TIMES_OF_DAY, DEFAULT_TIME_OF_DAY))]
Highlights = Annotated[list[str], BeforeValidator(lambda v: safe_string_list(v, 6, 80))]
Tags = Annotated[list[str], BeforeValidator(lambda v: safe_string_list(v, 8, 30))]
WhyGo = Annotated[str, BeforeValidator(lambda v: safe_string(v, 260))]
HoursNeeded = Annotated[Optional[float], BeforeValidator(lambda v: safe_number(v, 0.5, 12))]


class Place(BaseModel):
    """
    좌표가 확정된 장소

    Snippet
    {
      "id": "belem-tower",
      "name": "Belém Tower",
      "category": "sight",
      "lat": 38.6916,
      "lng": -9.216,
      "highlights": ["16th-century fortress", "River views"],
      "why_go": "Iconic Manueline landmark on the Tagus.",
      "time_needed_hours": 1.5,
      "best_time_of_day": "morning",
      "tags": ["history"],
      "confidence": 0.78
    }
    """
    id: str = Field(..., description="slug 형태의 장소 ID")
    name: str = Field(..., description="장소명")
    category: Category = Field(default=DEFAULT_CATEGORY, description="카테고리")
    lat: float = Field(..., allow_inf_nan=False, description="위도")
    lng: float = Field(..., allow_inf_nan=False, description="경도")
    highlights: Highlights = Field(default_factory=list, description="주요 포인트 (최대 6개, 각 80자)")
    why_go: WhyGo = Field(default="", description="추천 이유 (최대 260자)")
    time_needed_hours: HoursNeeded = Field(default=None, description="소요 시간 (0.5 ~ 12시간)")
    best_time_of_day: BestTimeOfDay = Field(default=DEFAULT_TIME_OF_DAY, description="추천 방문 시간대")
    tags: Tags = Field(default_factory=list, description="태그 (최대 8개, 각 30자)")
    confidence: float = Field(..., ge=0, le=1, description="geocoding 신뢰도")

    @classmethod
    def from_candidate(cls, candidate: dict[str, Any], name: str, lat: float, lng: float, confidence: float) -> "Place":
        """LLM 후보 + geocoding 결과로 Place 생성"""
        return cls(
            id=safe_id(candidate.get("id"), name),
            name=name,
            category=candidate.get("category"),
            lat=lat,
            lng=lng,
            highlights=candidate.get("highlights"),
            why_go=candidate.get("why_go"),
            time_needed_hours=candidate.get("time_needed_hours"),
            best_time_of_day=candidate.get("best_time_of_day"),
            tags=candidate.get("tags"),
            confidence=confidence,
        )
