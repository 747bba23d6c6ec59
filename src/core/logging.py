"""src.core.logging
Python 표준 logging 모듈 설정
"""
import logging
import sys
from pathlib import Path
from logging.handlers import TimedRotatingFileHandler
from src.core.config import settings

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def _rotating_handler(path: Path, formatter: logging.Formatter, level: int | None = None) -> TimedRotatingFileHandler:
    """자정마다 교체되는 파일 핸들러 (30일 보관)"""
    handler = TimedRotatingFileHandler(
        filename=str(path),
        when='midnight',
        interval=1,
        backupCount=30,
        encoding='utf-8'
    )
    if level is not None:
        handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging(log_level: str | None = None, log_dir: str = "logs"):
    """
    애플리케이션 로깅 설정

    Args:
        log_level: 로그 레벨 (DEBUG, INFO, WARNING, ERROR, CRITICAL), 미지정 시 settings.LOG_LEVEL
        log_dir: 로그 디렉토리 (prod 환경에서만 사용)
    """
    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    # 콘솔 핸들러 (모든 환경에서 사용)
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel((log_level or settings.LOG_LEVEL).upper())

    # 기존 핸들러 제거 (중복 방지)
    root_logger.handlers.clear()
    root_logger.addHandler(console_handler)

    # httpx 요청 로그는 URL에 토큰이 포함되므로 WARNING 이상만 출력
    logging.getLogger("httpx").setLevel(logging.WARNING)

    environment = settings.ENVIRONMENT.lower()

    if environment == 'prod':
        # 프로덕션 환경: 일반 로그 + 에러 로그 파일 저장
        directory = Path(log_dir)
        directory.mkdir(parents=True, exist_ok=True)
        root_logger.addHandler(_rotating_handler(directory / 'research.log', formatter))
        root_logger.addHandler(_rotating_handler(directory / 'research.error.log', formatter, logging.ERROR))
        logging.info(f"로깅 시스템 초기화 완료 (환경: {environment}, 로그 경로: {directory})")
    else:
        logging.info(f"로깅 시스템 초기화 완료 (환경: {environment}, 파일 로그 비활성화)")
