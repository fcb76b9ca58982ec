"""
logging.py

애플리케이션 로깅 설정 파일.

루트 로거에 stdout 핸들러 하나를 붙이고,
레벨은 settings.LOG_LEVEL 값을 따른다.
각 모듈은 logging.getLogger(__name__) 으로 자신의 로거를 사용한다.

관련 파일:
- app.main                    : 앱 시작 시 setup_logging() 호출
- app.services.generator      : 생성 결과 로그 이벤트
- app.services.scheduler      : 스케줄러 tick 결과 로그 이벤트

"""

import logging
import sys

from app.core.config import settings

LOG_LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def get_log_level(level_name: str | None = None) -> int:
    level_str = (level_name or settings.LOG_LEVEL).upper()
    return LOG_LEVEL_MAP.get(level_str, logging.INFO)


"""
루트 로거 설정 함수

- 기존 핸들러를 제거하여 uvicorn reload 시 중복 출력 방지
- [YYYY-MM-DD HH:MM:SS] logger - LEVEL - message 형식

"""

def setup_logging(level_name: str | None = None) -> None:
    formatter = logging.Formatter(
        fmt="[%(asctime)s] %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    log_level = get_log_level(level_name)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setLevel(log_level)
    stdout_handler.setFormatter(formatter)
    root_logger.addHandler(stdout_handler)
