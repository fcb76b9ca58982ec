"""
services/generator.py

월별 회비 레코드 생성(Generation) 로직.

특정 구성원 유형(population)과 월(period)에 대해
활성 구성원 1명당 PENDING 회비 레코드 1건을 생성한다.

생성 절차:
1. (year, month) → 해당 월 1일 date 로 정규화
2. 해당 population / period 레코드가 하나라도 있으면 전체 건너뜀 (ALREADY_GENERATED)
3. 활성 구성원 조회, 없으면 건너뜀 (EMPTY_POPULATION)
4. 구성원별 레코드 생성 (amount_due=기본 금액, amount_paid=0, penalty_amount=0, PENDING)
5. 전체 레코드를 하나의 트랜잭션으로 commit (전부 생성 or 전부 미생성)

설계 원칙:
- 중복 여부는 구성원 단위가 아니라 period 단위로 판단
- 내부 재시도 없음, 저장소 오류는 GenerationStorageFailure 로 즉시 전파
- 건너뜀(skip)은 오류가 아니라 GenerationResult.skipped 값으로 반환
- 이 함수가 commit / rollback 까지 책임진다 (스케줄러와 라우터가 같은 계약 사용)

관련 파일:
- app.services.populations   : 유형별 기본 금액 / 모델 선택
- app.services.scheduler     : 매월 1일 자동 호출
- app.routers.admin_contributions : 관리자 수동 생성 API

"""

import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.contribution import ContributionStatus
from app.services.populations import Population, PopulationConfig, get_population_config

logger = logging.getLogger(__name__)


class SkipReason(str, Enum):
    ALREADY_GENERATED = "ALREADY_GENERATED"
    EMPTY_POPULATION = "EMPTY_POPULATION"


class GenerationStorageFailure(Exception):
    """생성 중 DB 조회 / 저장 실패. 이 예외가 발생하면 레코드는 하나도 남지 않는다."""

    def __init__(self, population: Population, period: date, stage: str, cause: Exception):
        self.population = population
        self.period = period
        self.stage = stage
        self.cause = cause
        super().__init__(
            f"contribution generation failed for {population.value} {period.isoformat()} "
            f"during {stage}: {type(cause).__name__}"
        )


@dataclass(frozen=True)
class GenerationResult:
    population: Population
    period: date
    created: int
    total_expected: int
    skipped: SkipReason | None = None


"""
(year, month) → 해당 월 1일

- month 는 1 ~ 12 범위만 허용, 벗어나면 ValueError

"""

def normalize_period(year: int, month: int) -> date:
    if month < 1 or month > 12:
        raise ValueError("month must be between 1 and 12")
    return date(year, month, 1)


def count_records(db: Session, config: PopulationConfig, period: date) -> int:
    model = config.record_model
    return db.scalar(
        select(func.count()).select_from(model).where(model.period == period)
    ) or 0


def list_active_members(db: Session, config: PopulationConfig) -> list:
    model = config.member_model
    return list(
        db.scalars(select(model).where(model.is_active.is_(True)).order_by(model.id)).all()
    )


"""
레코드 일괄 저장

- add_all → flush → commit 을 하나의 트랜잭션으로 수행
- 실패 시 rollback 후 원래 예외를 그대로 전파 (호출 측에서 감싼다)

"""

def insert_records_atomically(db: Session, records: list) -> None:
    try:
        db.add_all(records)
        db.flush()
        db.commit()
    except Exception:
        db.rollback()
        raise


def _skip(config: PopulationConfig, period: date, reason: SkipReason) -> GenerationResult:
    logger.info(
        "contribution generation skipped population=%s period=%s reason=%s",
        config.population.value,
        period.isoformat(),
        reason.value,
        extra={
            "event": "contribution_generation",
            "outcome": "skipped",
            "population": config.population.value,
            "period": period.isoformat(),
            "reason": reason.value,
        },
    )
    return GenerationResult(
        population=config.population,
        period=period,
        created=0,
        total_expected=0,
        skipped=reason,
    )


def _fail(config: PopulationConfig, period: date, stage: str, exc: Exception) -> GenerationStorageFailure:
    logger.error(
        "contribution generation failed population=%s period=%s stage=%s error=%s",
        config.population.value,
        period.isoformat(),
        stage,
        exc,
        extra={
            "event": "contribution_generation",
            "outcome": "failed",
            "population": config.population.value,
            "period": period.isoformat(),
            "stage": stage,
        },
    )
    return GenerationStorageFailure(config.population, period, stage, exc)


"""
월별 회비 생성 진입점

- population : Population.TEAM / Population.ADHERENT (또는 "team" / "adherent")
- year/month : 대상 월
- 반환       : GenerationResult (created, total_expected, skipped)
- 예외       : ValueError (잘못된 month), GenerationStorageFailure (DB 오류)

"""

def generate_contributions(
    db: Session,
    population: Population | str,
    *,
    year: int,
    month: int,
) -> GenerationResult:
    config = get_population_config(population)
    period = normalize_period(year, month)

    try:
        existing = count_records(db, config, period)
    except SQLAlchemyError as e:
        db.rollback()
        raise _fail(config, period, "existence_check", e) from e

    if existing > 0:
        return _skip(config, period, SkipReason.ALREADY_GENERATED)

    try:
        members = list_active_members(db, config)
    except SQLAlchemyError as e:
        db.rollback()
        raise _fail(config, period, "member_lookup", e) from e

    if not members:
        return _skip(config, period, SkipReason.EMPTY_POPULATION)

    records = [
        config.record_model(
            member_id=m.id,
            period=period,
            amount_due=config.default_amount,
            amount_paid=0,
            penalty_amount=0,
            status=ContributionStatus.PENDING,
        )
        for m in members
    ]

    try:
        insert_records_atomically(db, records)
    except SQLAlchemyError as e:
        raise _fail(config, period, "batch_insert", e) from e

    created = len(records)
    total_expected = created * config.default_amount

    logger.info(
        "contribution generation created population=%s period=%s created=%d total_expected=%d",
        config.population.value,
        period.isoformat(),
        created,
        total_expected,
        extra={
            "event": "contribution_generation",
            "outcome": "created",
            "population": config.population.value,
            "period": period.isoformat(),
            "records_created": created,
            "total_expected": total_expected,
        },
    )

    return GenerationResult(
        population=config.population,
        period=period,
        created=created,
        total_expected=total_expected,
    )
