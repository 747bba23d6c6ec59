"""src.services.modules.openai_llm
OpenAI Chat Completions API로 여행지의 후보 장소 목록을 생성합니다.

좌표는 LLM에게 받지 않습니다. 위치 정보는 geocoding 결과만 사용합니다.
"""

import json
import logging
from typing import Any

from src.core.config import settings
from src.core.exceptions import ContentFormatError
from src.models.place import CATEGORIES, TIMES_OF_DAY
from src.models.research_models import TripRequest
from src.utils.common import http_post_json

logger = logging.getLogger(__name__)

SERVICE_NAME = "OpenAI"


# =============================================
# 응답 스키마 힌트 (프롬프트 예시용)
# =============================================
CANDIDATE_SCHEMA_HINT = {
    "places": [{
        "id": "string_slug",
        "name": "string",
        "category": "|".join(CATEGORIES),
        "highlights": ["string", "string"],
        "why_go": "string",
        "time_needed_hours": 1.5,
        "best_time_of_day": "|".join(TIMES_OF_DAY),
        "tags": ["string"]
    }]
}


# =============================================
# 프롬프트 템플릿
# =============================================
SYSTEM_PROMPT = "You output strict JSON only."

CANDIDATE_PLACES_PROMPT = """You are generating candidate travel places to pin on a map.
Return ONLY valid JSON. No markdown. No commentary. No coordinates.

Destination: {destination}
Interests: {interests}
User ask: {ask}
Count: {count}

Rules:
- Output shape must be: {{ "places": [ ... ] }}
- Each place must have: id, name, category, highlights (3-5), why_go (1-2 sentences), time_needed_hours (number), best_time_of_day, tags (1-6)
- Names must be searchable (common/official name). Include neighborhoods if relevant.
- Do NOT include latitude/longitude or addresses.
- Avoid duplicates and overly niche entries.

Example schema (for reference only): {schema}"""


def build_candidate_prompt(trip: TripRequest, max_places: int) -> str:
    """사용자 요청을 LLM 프롬프트로 변환"""
    return CANDIDATE_PLACES_PROMPT.format(
        destination=trip.destination_query,
        interests=", ".join(str(interest) for interest in trip.interests) or "none specified",
        ask=trip.ask or "(none)",
        count=max_places,
        schema=json.dumps(CANDIDATE_SCHEMA_HINT, ensure_ascii=False)
    )


# =============================================
# 응답 파싱
# =============================================
def extract_json_object(text: str) -> str:
    """
    LLM 응답 텍스트에서 JSON 객체 부분만 잘라냅니다. (best-effort)

    모델이 JSON을 설명 문장이나 코드 펜스로 감싸는 경우를 대비합니다.
    1. 문자열 리터럴 내부를 제외하고 괄호 균형이 맞는 {...} 구간 중 가장 긴 구간
    2. 균형 구간이 없으면 첫 '{' ~ 마지막 '}' 구간
    3. 그것도 없으면 원문 그대로

    Examples:
        >>> extract_json_object('Sure! ```json\\n{"places": []}\\n```')
        '{"places": []}'
    """
    stripped = (text or "").strip()

    best_span: str | None = None
    depth = 0
    start = -1
    in_string = False
    escaped = False

    for index, char in enumerate(stripped):
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue

        if char == '"' and depth > 0:
            in_string = True
        elif char == "{":
            if depth == 0:
                start = index
            depth += 1
        elif char == "}" and depth > 0:
            depth -= 1
            if depth == 0:
                span = stripped[start:index + 1]
                if best_span is None or len(span) > len(best_span):
                    best_span = span

    if best_span is not None:
        return best_span

    first = stripped.find("{")
    last = stripped.rfind("}")
    if first >= 0 and last > first:
        return stripped[first:last + 1]
    return stripped


def parse_candidate_reply(content: str) -> list[Any]:
    """
    LLM 응답에서 후보 장소 리스트 추출

    Returns:
        list: places 배열 (없거나 배열이 아니면 빈 리스트)

    Raises:
        ContentFormatError: 응답을 JSON으로 전혀 해석할 수 없을 때
    """
    try:
        parsed = json.loads(extract_json_object(content))
    except json.JSONDecodeError as json_error:
        logger.warning(f"LLM 응답 JSON 파싱 실패: {json_error}")
        raise ContentFormatError("LLM did not return valid JSON.")

    # null, false, 0, "" 는 JSON이지만 응답으로 인정하지 않음
    if not parsed and not isinstance(parsed, (dict, list)):
        raise ContentFormatError("LLM did not return valid JSON.")

    places = parsed.get("places") if isinstance(parsed, dict) else None
    if not isinstance(places, list):
        logger.warning("LLM 응답에 places 배열이 없어 후보 0개로 처리합니다.")
        return []
    return places


# =============================================
# OpenAI API 호출 함수
# =============================================
async def generate_candidate_places(trip: TripRequest, max_places: int) -> list[Any]:
    """
    OpenAI API로 여행지 후보 장소를 생성합니다.

    Args:
        trip: 검증된 여행 요청
        max_places: 요청할 장소 수

    Returns:
        list: 검증 전 후보 장소 리스트 (LLM 출력 그대로)

    Raises:
        UpstreamError: OpenAI API 호출 실패 시
        ContentFormatError: 응답을 JSON으로 해석할 수 없을 때
    """
    request_body = {
        "model": settings.OPENAI_MODEL,
        "temperature": settings.OPENAI_TEMPERATURE,
        "messages": [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": build_candidate_prompt(trip, max_places)}
        ]
    }

    headers = {
        "Authorization": f"Bearer {settings.OPENAI_API_KEY}",
        "Content-Type": "application/json"
    }

    logger.info(f"OpenAI API 호출 (model={settings.OPENAI_MODEL}, destination='{trip.destination_query}', count={max_places})")

    response = await http_post_json(
        url=settings.OPENAI_API_URL,
        json_body=request_body,
        headers=headers,
        timeout=settings.LLM_HTTP_TIMEOUT,
        service_name=SERVICE_NAME
    )

    # 응답에서 content 추출
    choices = response.get("choices") if isinstance(response, dict) else None
    first_choice = choices[0] if isinstance(choices, list) and choices else None
    message = first_choice.get("message") if isinstance(first_choice, dict) else None
    content = message.get("content") if isinstance(message, dict) else None
    if not isinstance(content, str):
        content = ""

    candidates = parse_candidate_reply(content)
    logger.info(f"후보 장소 생성 완료: {len(candidates)}개")
    return candidates
