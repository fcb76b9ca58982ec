"""
services/scheduler.py

월별 회비 자동 생성 스케줄러.

프로세스 시작 시 한 번, 이후 interval_seconds 마다 tick 을 실행하고,
오늘이 매월 1일이며 이번 달이 아직 처리되지 않았을 때만
운영진 → 일반 회원 순서로 generate_contributions 를 호출한다.

상태 전이:
- IDLE → CHECKING                       : tick
- CHECKING → IDLE                       : 1일이 아님 / 이미 처리한 월
- CHECKING → GENERATING                 : 1일 + 미처리 월
- GENERATING → RECORDED → IDLE          : 두 유형 모두 생성 또는 skip 완료, 가드 갱신
- GENERATING → IDLE                     : 오류, 가드 유지 (다음 tick 에 재시도)

설계 원칙:
- last_generated_period 는 인스턴스 필드 (프로세스 메모리, 재시작 시 초기화)
- 실제 중복 방지는 generator 의 period 존재 검사와 DB 유니크 제약이 담당
- tick 은 예외를 밖으로 던지지 않는다 (HTTP 서비스와 같은 프로세스)
- 한 tick 의 생성이 끝나야 다음 sleep 이 시작되므로 생성이 겹치지 않는다

관련 파일:
- app.services.generator     : 실제 생성 로직
- app.main                   : lifespan 에서 start / stop
- app.routers.admin_contributions : 스케줄러 상태 조회 API

"""

import asyncio
import contextlib
import logging
from datetime import date, datetime
from enum import Enum
from typing import Awaitable, Callable, Sequence
from zoneinfo import ZoneInfo

from starlette.concurrency import run_in_threadpool

from app.services.generator import GenerationResult, generate_contributions
from app.services.populations import Population

logger = logging.getLogger(__name__)


class SchedulerState(str, Enum):
    IDLE = "IDLE"
    CHECKING = "CHECKING"
    GENERATING = "GENERATING"
    RECORDED = "RECORDED"


class MonthlyContributionScheduler:
    def __init__(
        self,
        session_factory: Callable,
        *,
        interval_seconds: int = 3600,
        timezone: str = "UTC",
        clock: Callable[[], datetime] | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        populations: Sequence[Population] = (Population.TEAM, Population.ADHERENT),
    ):
        self.session_factory = session_factory
        self.interval_seconds = interval_seconds
        self.tz = ZoneInfo(timezone)
        self._clock = clock or (lambda: datetime.now(self.tz))
        self._sleep = sleep
        self.populations = tuple(populations)

        self.state = SchedulerState.IDLE
        self.last_generated_period: date | None = None
        self.last_checked_at: datetime | None = None
        self.last_results: list[GenerationResult] = []
        self.last_error: str | None = None

        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    """
    tick 1회 실행

    - 생성이 수행되면 GenerationResult 목록, 아니면 None 반환
    - 어떤 예외도 밖으로 던지지 않음 (로그만 남김)

    """

    def check_and_generate(self) -> list[GenerationResult] | None:
        self.state = SchedulerState.CHECKING
        try:
            now = self._clock()
            self.last_checked_at = now

            if now.day != 1:
                return None

            period = date(now.year, now.month, 1)
            if self.last_generated_period == period:
                logger.debug("contributions for %s already generated in this process", period.isoformat())
                return None

            self.state = SchedulerState.GENERATING
            logger.info("monthly contribution generation started period=%s", period.isoformat())

            results = []
            with self.session_factory() as db:
                for population in self.populations:
                    results.append(
                        generate_contributions(db, population, year=period.year, month=period.month)
                    )

            logger.info(
                "monthly contribution generation recorded period=%s %s total_expected=%d",
                period.isoformat(),
                " ".join(f"{r.population.value}={r.created}" for r in results),
                sum(r.total_expected for r in results),
                extra={
                    "event": "monthly_contribution_generation",
                    "outcome": "recorded",
                    "period": period.isoformat(),
                    "records_created": {r.population.value: r.created for r in results},
                    "total_expected": sum(r.total_expected for r in results),
                },
            )

            # 로그까지 끝난 뒤에만 가드 갱신
            self.last_generated_period = period
            self.last_results = results
            self.last_error = None
            self.state = SchedulerState.RECORDED
            return results

        except Exception as e:
            self.last_error = f"{type(e).__name__}: {e}"
            logger.exception(
                "monthly contribution generation failed, guard left at %s",
                self.last_generated_period.isoformat() if self.last_generated_period else None,
                extra={"event": "monthly_contribution_generation", "outcome": "failed"},
            )
            return None

        finally:
            self.state = SchedulerState.IDLE

    async def run(self) -> None:
        logger.info("contribution scheduler started (interval=%ss)", self.interval_seconds)
        while True:
            # 동기 SQLAlchemy 세션을 사용하므로 이벤트 루프 밖에서 실행
            await run_in_threadpool(self.check_and_generate)
            await self._sleep(self.interval_seconds)

    def start(self) -> asyncio.Task:
        if not self.running:
            self._task = asyncio.get_running_loop().create_task(
                self.run(), name="monthly-contribution-scheduler"
            )
        return self._task

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        logger.info("contribution scheduler stopped")

    def status(self) -> dict:
        return {
            "running": self.running,
            "state": self.state.value,
            "interval_seconds": self.interval_seconds,
            "timezone": str(self.tz),
            "last_generated_period": self.last_generated_period,
            "last_checked_at": self.last_checked_at,
            "last_error": self.last_error,
            "last_results": [
                {
                    "population": r.population.value,
                    "period": r.period,
                    "created": r.created,
                    "total_expected": r.total_expected,
                    "skipped": r.skipped.value if r.skipped else None,
                }
                for r in self.last_results
            ],
        }
