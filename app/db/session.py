"""
session.py

데이터베이스 엔진 및 세션(Session) 관리 파일.

이 파일은 SQLAlchemy Engine과 SessionLocal을 생성하여
애플리케이션 전반에서 공통으로 사용하는 DB 연결을 관리한다.

FastAPI 의존성(get_db)과 월별 회비 스케줄러가
모두 이 SessionLocal 팩토리로 세션을 만든다.

관련 파일:
- app.core.config          : DATABASE_URL 설정
- app.core.deps            : get_db 의존성
- app.services.scheduler   : tick 마다 새 세션 생성

"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.core.config import settings


"""
URL별 드라이버 연결 옵션

- SQLite는 스케줄러 스레드풀 / 요청 스레드에서 같은 커넥션을
  사용할 수 있도록 check_same_thread=False 필요

"""

def connect_args_for(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


# SQLAlchemy Engine 생성
# pool_pre_ping=True:
#   장시간 idle 후 끊어진 DB 커넥션을 자동으로 감지/재연결
engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
    connect_args=connect_args_for(settings.DATABASE_URL),
)

# 요청 / 스케줄러 tick 단위로 사용할 세션 팩토리
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)
