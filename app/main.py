"""
main.py

FastAPI 애플리케이션 진입점(Entry Point).

이 파일은 서버 실행 시 가장 먼저 로드되며,
애플리케이션 전반의 설정과 라우터 등록을 담당한다.

주요 역할:
- FastAPI 앱 인스턴스 생성
- 로깅 / CORS 미들웨어 설정
- lifespan 에서 월별 회비 스케줄러 시작 / 종료
- 각 도메인별 라우터(auth, contributions, admin_contributions) 등록
- 헬스 체크 및 DB 연결 상태 확인용 엔드포인트 제공

설계 원칙:
- 비즈니스 로직은 포함하지 않고 설정/조립 역할만 수행
- 스케줄러 인스턴스는 프로세스당 하나, app.state.scheduler 로 공유

관련 파일:
- app.core.config           : 환경 변수 및 설정 로드
- app.core.logging          : 로깅 설정
- app.services.scheduler    : 월별 회비 자동 생성 스케줄러
- app.routers.*             : 기능별 API 라우터

"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Depends
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session
from sqlalchemy import text

from app.core.config import settings
from app.core.deps import get_db
from app.core.logging import setup_logging
from app.db.session import SessionLocal
from app.routers import auth, contributions, admin_contributions
from app.services.scheduler import MonthlyContributionScheduler

setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    scheduler = None
    if settings.SCHEDULER_ENABLED:
        scheduler = MonthlyContributionScheduler(
            SessionLocal,
            interval_seconds=settings.SCHEDULER_INTERVAL_SECONDS,
            timezone=settings.SCHEDULER_TIMEZONE,
        )
        scheduler.start()
    app.state.scheduler = scheduler

    yield

    if scheduler is not None:
        await scheduler.stop()


app = FastAPI(title="Club Contributions Backend", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(contributions.router)
app.include_router(admin_contributions.router)

"""
서버 헬스 체크 엔드포인트

- 애플리케이션 프로세스가 정상 동작 중인지 확인

"""
@app.get("/health")
def health():
    return {"status": "ok"}

"""
데이터베이스 연결 상태 확인 엔드포인트

- 간단한 SELECT 1 쿼리를 통해 DB 연결 여부 확인

"""
@app.get("/db-ping")
def db_ping(db: Session = Depends(get_db)):
    value = db.execute(text("SELECT 1")).scalar_one()
    return {"db": "ok", "value": value}
