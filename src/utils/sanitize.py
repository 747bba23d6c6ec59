"""src.utils.sanitize
LLM이 생성한 후보 필드를 안전한 형태로 정규화하는 함수 모음

LLM 출력은 신뢰할 수 없는 입력으로 취급합니다.
모든 함수는 멱등(두 번 적용해도 결과 동일)이며 예외를 던지지 않습니다.
"""
import math
import re
import secrets
from typing import Any, Iterable

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")
_NON_ALNUM = re.compile(r"[^a-z0-9]+")

SLUG_MAX_LENGTH = 64


def clamp(value: float, minimum: float, maximum: float) -> float:
    return max(minimum, min(maximum, value))


def clamp_int(value: Any, minimum: int, maximum: int, fallback: int) -> int:
    """
    앞부분의 정수만 해석하여 범위 안으로 보정

    "12abc" → 12, 7.9 → 7, "abc" / None / bool → fallback

    Examples:
        >>> clamp_int(99, 5, 25, 15)
        25
        >>> clamp_int("abc", 5, 25, 15)
        15
    """
    if value is None or isinstance(value, bool):
        return fallback
    match = _LEADING_INT.match(str(value))
    if not match:
        return fallback
    return int(clamp(int(match.group(1)), minimum, maximum))


def _as_text(value: Any) -> str:
    """문자열/숫자만 텍스트로 인정, 나머지는 빈 문자열"""
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool) and value:
        return str(value)
    return ""


def safe_string(value: Any, max_length: int) -> str:
    """
    앞뒤 공백 제거 후 최대 길이 제한

    max_length를 넘으면 max_length - 1 글자로 자른 뒤 다시 공백을 제거합니다.
    """
    text = _as_text(value).strip()
    if len(text) > max_length:
        return text[:max_length - 1].strip()
    return text


def safe_string_list(value: Any, max_items: int, max_item_length: int) -> list[str]:
    """리스트의 각 항목을 safe_string으로 정리, 빈 항목 제외, 최대 개수 제한"""
    if not isinstance(value, list):
        return []
    result: list[str] = []
    for item in value:
        text = safe_string(item, max_item_length)
        if text:
            result.append(text)
        if len(result) >= max_items:
            break
    return result


def safe_number(value: Any, minimum: float, maximum: float) -> float | None:
    """숫자로 변환 가능하면 범위 안으로 보정, 불가능하거나 유한하지 않으면 None"""
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return clamp(number, minimum, maximum)


def safe_enum(value: Any, allowed: Iterable[str], fallback: str) -> str:
    """허용 목록에 정확히 일치하는 값만 통과, 아니면 fallback"""
    text = _as_text(value).strip()
    return text if text in tuple(allowed) else fallback


def slugify(value: Any) -> str:
    """
    소문자화 후 영숫자가 아닌 구간을 '-' 하나로 치환, 앞뒤 '-' 제거, 64자 제한

    Examples:
        >>> slugify("Belém Tower")
        'bel-m-tower'
    """
    text = _NON_ALNUM.sub("-", _as_text(value).lower()).strip("-")
    return text[:SLUG_MAX_LENGTH]


def safe_id(candidate_id: Any, name: str) -> str:
    """후보가 준 id(없으면 이름)를 slug로 변환, 결과가 비면 임의 id 생성"""
    slug = slugify(candidate_id if _as_text(candidate_id).strip() else name)
    return slug or f"place-{secrets.token_hex(6)}"


def dedupe_places(places: Iterable) -> list:
    """소문자 'id|name' 키 기준 중복 제거 (처음 등장한 항목 유지, 순서 보존)"""
    seen: set[str] = set()
    result = []
    for place in places:
        key = f"{(place.id or '').lower()}|{(place.name or '').lower()}"
        if key in seen:
            continue
        seen.add(key)
        result.append(place)
    return result
