"""src.services.geocoding_service
장소명 → 위도/경도 변환 (Mapbox Geocoding) 서비스
"""
import asyncio
import logging
import math
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

from src.core.config import settings
from src.models.place import Place
from src.utils.common import http_get_json
from src.utils.sanitize import clamp

logger = logging.getLogger(__name__)

PROVIDER = "mapbox"
SERVICE_NAME = "Mapbox geocode"

DESTINATION_TYPES = "place,region,country"
PLACE_TYPES = "poi,neighborhood,place,address"

# relevance가 없을 때 결과 유형별 기본 신뢰도
POI_CONFIDENCE = 0.78
NEIGHBORHOOD_CONFIDENCE = 0.72
DEFAULT_CONFIDENCE = 0.65


@dataclass
class GeocodingResult:
    """Geocoding 결과"""
    latitude: float
    longitude: float
    confidence: float


def _is_finite_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def normalize_bbox(value: Any) -> list[float] | None:
    """[minLng, minLat, maxLng, maxLat] 형태가 아니면 None"""
    if isinstance(value, list) and len(value) == 4 and all(_is_finite_number(v) for v in value):
        return [float(v) for v in value]
    return None


def extract_center(feature: Any) -> tuple[float, float] | None:
    """feature.center에서 (lng, lat) 추출, 유한한 숫자 2개가 아니면 None"""
    center = feature.get("center") if isinstance(feature, dict) else None
    if not isinstance(center, list) or len(center) != 2:
        return None
    if not all(_is_finite_number(v) for v in center):
        return None
    return float(center[0]), float(center[1])


def geocode_confidence(feature: dict[str, Any]) -> float:
    """
    geocoding 결과의 신뢰도 계산

    relevance(0~1)가 있으면 그대로 사용하고,
    없으면 결과 유형별 고정값 (poi 0.78 > neighborhood 0.72 > 기타 0.65)
    """
    relevance = feature.get("relevance")
    if _is_finite_number(relevance):
        return clamp(float(relevance), 0.0, 1.0)

    place_types = feature.get("place_type") or []
    if "poi" in place_types:
        return POI_CONFIDENCE
    if "neighborhood" in place_types:
        return NEIGHBORHOOD_CONFIDENCE
    return DEFAULT_CONFIDENCE


async def mapbox_geocode(
    query: str,
    types: str | None = None,
    bbox: list[float] | None = None,
    limit: int = 1
) -> dict[str, Any]:
    """
    Mapbox Geocoding API (v5 forward) 호출

    https://docs.mapbox.com/api/search/geocoding-v5/

    Raises:
        UpstreamError: 2xx가 아닌 응답, 타임아웃, 연결 실패 시
    """
    url = f"{settings.MAPBOX_GEOCODING_URL}/{quote(query, safe='')}.json"
    params = {
        "access_token": settings.MAPBOX_TOKEN,
        "limit": str(limit),
        "autocomplete": "false",
    }
    if types:
        params["types"] = types
    if bbox and len(bbox) == 4:
        params["bbox"] = ",".join(str(v) for v in bbox)

    data = await http_get_json(
        url,
        params=params,
        timeout=settings.GEOCODE_HTTP_TIMEOUT,
        service_name=SERVICE_NAME
    )
    return data if isinstance(data, dict) else {}


def _first_feature(data: dict[str, Any]) -> dict[str, Any] | None:
    features = data.get("features")
    if isinstance(features, list) and features and isinstance(features[0], dict):
        return features[0]
    return None


async def resolve_destination_bbox(destination_query: str) -> list[float] | None:
    """
    여행지 자체를 geocoding하여 bbox 획득

    bbox가 없어도 오류가 아니며, 이후 장소 검색은 범위 제한 없이 진행됩니다.
    """
    logger.info(f"Mapbox 여행지 geocoding 요청: query='{destination_query}'")
    data = await mapbox_geocode(destination_query, types=DESTINATION_TYPES)

    feature = _first_feature(data)
    bbox = normalize_bbox(feature.get("bbox")) if feature else None
    logger.info(f"여행지 bbox: {bbox}")
    return bbox


async def geocode_place(name: str, destination_query: str, bbox: list[float] | None) -> GeocodingResult | None:
    """
    "<장소명>, <여행지>"를 geocoding하여 첫 번째 결과 반환

    Returns:
        GeocodingResult | None: 결과가 없거나 좌표가 잘못된 경우 None (오류 아님)
    """
    data = await mapbox_geocode(f"{name}, {destination_query}", types=PLACE_TYPES, bbox=bbox)

    feature = _first_feature(data)
    center = extract_center(feature)
    if center is None:
        logger.info(f"Mapbox Geocoding 결과 없음: name='{name}'")
        return None

    longitude, latitude = center
    return GeocodingResult(
        latitude=latitude,
        longitude=longitude,
        confidence=geocode_confidence(feature)
    )


async def _lookup_all(
    names: list[str],
    destination_query: str,
    bbox: list[float] | None
) -> list[GeocodingResult | None]:
    """
    이름 목록을 geocoding하여 같은 순서의 결과 리스트 반환

    GEOCODE_CONCURRENCY가 1이면 순차 조회, 첫 오류에서 즉시 중단합니다.
    2 이상이면 동시에 조회하고, 첫 오류가 나면 남은 조회를 취소한 뒤
    후보 순서상 가장 앞선 오류를 다시 발생시킵니다.
    """
    concurrency = max(1, settings.GEOCODE_CONCURRENCY)
    if concurrency == 1 or len(names) <= 1:
        return [await geocode_place(name, destination_query, bbox) for name in names]

    semaphore = asyncio.Semaphore(concurrency)

    async def lookup(name: str) -> GeocodingResult | None:
        async with semaphore:
            return await geocode_place(name, destination_query, bbox)

    tasks = [asyncio.create_task(lookup(name)) for name in names]
    try:
        await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
    finally:
        pending = [task for task in tasks if not task.done()]
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)

    for task in tasks:
        if not task.cancelled() and task.exception() is not None:
            raise task.exception()
    return [task.result() for task in tasks]


async def geocode_candidates(
    candidates: list[Any],
    destination_query: str,
    bbox: list[float] | None,
    max_places: int
) -> list[Place]:
    """
    후보 장소를 geocoding하여 Place 리스트로 변환

    - 앞에서부터 max_places개만 처리, 이름이 빈 후보는 건너뜀
    - 좌표를 찾지 못한 후보는 조용히 제외
    - 결과는 후보 순서대로 반환
    - UpstreamError가 나면 남은 조회를 하지 않고 요청 전체를 중단

    Raises:
        UpstreamError: Mapbox API 호출 실패 시
    """
    named: list[tuple[dict[str, Any], str]] = []
    for candidate in candidates[:max_places]:
        if not isinstance(candidate, dict):
            continue
        name = candidate.get("name")
        name = name.strip() if isinstance(name, str) else ""
        if name:
            named.append((candidate, name))

    results = await _lookup_all([name for _, name in named], destination_query, bbox)

    places: list[Place] = []
    for (candidate, name), result in zip(named, results):
        if result is None:
            continue
        places.append(Place.from_candidate(
            candidate,
            name=name,
            lat=result.latitude,
            lng=result.longitude,
            confidence=result.confidence
        ))

    logger.info(f"장소 geocoding 완료: 요청={len(named)}, 성공={len(places)}")
    return places
