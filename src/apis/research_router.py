"""src.apis.research_router
여행지 장소 조사 API 라우터
"""
import logging
from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from src.core.exceptions import CustomError
from src.services.request_validator import require_credentials, validate_research_request
from src.services.research_workflow import run_research_workflow

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["장소 조사 API"])


async def _read_json_body(request: Request) -> Any:
    """JSON이 아닌 body는 빈 body로 취급"""
    try:
        return await request.json()
    except ValueError:
        logger.warning("요청 body가 JSON이 아닙니다.")
        return None


@router.post("/research", status_code=200)
async def research(request: Request):
    """
    인증: 불필요

    기능
    여행지 검색어와 관심사를 입력받아 LLM이 추천한 장소를 Mapbox로 geocoding하여
    좌표가 확정된 장소 목록을 반환합니다.

    ------------------------------------------------------------
    요청 body
    ```json
    {
      "trip": {
        "destination_query": "Lisbon",
        "interests": ["food", "history"],
        "ask": "first time visit"
      },
      "options": {"max_places": 15}
    }
    ```

    ------------------------------------------------------------
    반환값
    ```json
    {
      "destination": {"query": "Lisbon", "bbox": [-9.5, 38.6, -9.0, 38.8]},
      "places": [
        {
          "id": "belem-tower",
          "name": "Belém Tower",
          "category": "sight",
          "lat": 38.7,
          "lng": -9.2,
          "highlights": ["..."],
          "why_go": "...",
          "time_needed_hours": 1.5,
          "best_time_of_day": "morning",
          "tags": ["history"],
          "confidence": 0.78
        }
      ],
      "meta": {"generated_at": "2024-05-01T10:00:00.000Z", "geocode_provider": "mapbox", "cache_hit": false}
    }
    ```
    후보가 하나도 없으면 destination.bbox, meta.geocode_provider는 생략됩니다.

    ------------------------------------------------------------
    에러 코드 (text/plain)
    - 405: POST 이외의 메서드
    - 400: trip.destination_query 누락
    - 500: 서버 설정 누락 (OPENAI_API_KEY, MAPBOX_TOKEN), 외부 API 오류, LLM 응답 파싱 실패
    """
    body = await _read_json_body(request)
    trip, options = validate_research_request(body)
    require_credentials()

    try:
        result = await run_research_workflow(trip, options)
    except CustomError:
        raise
    except Exception as error:
        logger.exception("장소 조사 처리 중 예기치 않은 오류 발생")
        raise CustomError(str(error) or "Server error") from error

    return JSONResponse(content=result.model_dump(mode="json", exclude_unset=True))
