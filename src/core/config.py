"""src.core.config.py
.env 파일에서 API키를 할당합니다.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    ENVIRONMENT: str = "dev"  # dev: 로컬, prod: 서버환경
    LOG_LEVEL: str = "INFO"

    # OpenAI API (키가 없어도 앱은 기동, 요청 시 500 처리)
    OPENAI_API_KEY: str = ""
    OPENAI_MODEL: str = "gpt-4o-mini"
    OPENAI_API_URL: str = "https://api.openai.com/v1/chat/completions"
    OPENAI_TEMPERATURE: float = 0.6

    # Mapbox Geocoding API
    MAPBOX_TOKEN: str = ""
    MAPBOX_GEOCODING_URL: str = "https://api.mapbox.com/geocoding/v5/mapbox.places"

    # 외부 호출 타임아웃 (초)
    LLM_HTTP_TIMEOUT: float = 60.0
    GEOCODE_HTTP_TIMEOUT: float = 10.0

    # 장소별 geocoding 동시 실행 수 (1 = 순차 실행)
    GEOCODE_CONCURRENCY: int = 1

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")
settings = Settings()
