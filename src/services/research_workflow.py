"""src.services.research_workflow.py
여행지 장소 조사 워크플로우

여행지 + 관심사를 입력받아 지도에 표시할 장소 목록을 만드는 파이프라인:
1. LLM 후보 장소 생성 (OpenAI)
2. 여행지 bbox 조회 (Mapbox)
3. 후보별 geocoding → 정규화 → 중복 제거
"""

import logging
from datetime import datetime, timezone

from src.models.research_models import (
    DestinationInfo,
    ResearchMeta,
    ResearchOptions,
    ResearchResponse,
    TripRequest,
)
from src.services.geocoding_service import PROVIDER, geocode_candidates, resolve_destination_bbox
from src.services.modules.openai_llm import generate_candidate_places
from src.utils.sanitize import dedupe_places

logger = logging.getLogger(__name__)


def utc_timestamp() -> str:
    """ISO-8601 UTC 시각 (밀리초, 'Z' 접미사)"""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


async def run_research_workflow(trip: TripRequest, options: ResearchOptions) -> ResearchResponse:
    """
    장소 조사 워크플로우 실행

    Args:
        trip: 검증된 여행 요청
        options: 검증된 옵션 (max_places)

    Returns:
        ResearchResponse: 좌표가 확정된 장소 목록

    Raises:
        UpstreamError: OpenAI / Mapbox 호출 실패 시
        ContentFormatError: LLM 응답을 JSON으로 해석할 수 없을 때
    """
    destination_query = trip.destination_query
    logger.info(f"[장소 조사] 시작 - destination='{destination_query}', max_places={options.max_places}")

    # Step 1: LLM 후보 장소 생성
    logger.info("[장소 조사] Step 1/3: LLM 후보 장소 생성 시작")
    candidates = await generate_candidate_places(trip, options.max_places)
    logger.info(f"[장소 조사] Step 1/3: LLM 후보 장소 생성 완료 - 후보 수={len(candidates)}")

    if not candidates:
        logger.info("[장소 조사] 후보가 없어 geocoding 스킵")
        return ResearchResponse(
            destination=DestinationInfo(query=destination_query),
            places=[],
            meta=ResearchMeta(generated_at=utc_timestamp(), cache_hit=False)
        )

    # Step 2: 여행지 bbox 조회
    logger.info("[장소 조사] Step 2/3: 여행지 bbox 조회 시작")
    bbox = await resolve_destination_bbox(destination_query)

    # Step 3: 후보별 geocoding + 중복 제거
    logger.info("[장소 조사] Step 3/3: 후보 장소 geocoding 시작")
    places = dedupe_places(await geocode_candidates(candidates, destination_query, bbox, options.max_places))
    logger.info(f"[장소 조사] 완료 - destination='{destination_query}', 후보={len(candidates)}, 최종={len(places)}")

    return ResearchResponse(
        destination=DestinationInfo(query=destination_query, bbox=bbox),
        places=places,
        meta=ResearchMeta(generated_at=utc_timestamp(), geocode_provider=PROVIDER, cache_hit=False)
    )
