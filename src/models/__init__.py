"""src.models
API 요청/응답에 사용되는 Pydantic 스키마 정의
"""
from src.models.place import Place, CATEGORIES, TIMES_OF_DAY
from src.models.research_models import (
    TripRequest,
    ResearchOptions,
    DestinationInfo,
    ResearchMeta,
    ResearchResponse
)

__all__ = [
    # 요청 모델
    "TripRequest",
    "ResearchOptions",
    # 장소 모델
    "Place",
    "CATEGORIES",
    "TIMES_OF_DAY",
    # 응답 모델
    "DestinationInfo",
    "ResearchMeta",
    "ResearchResponse",
]
