"""
services/contributions.py

회비(Contribution) 납부 / 조회 비즈니스 로직 모음.

월별 회비 레코드가 생성된 이후의 모든 규칙을 담당한다.
라우터는 이 파일의 함수를 호출하여 결과를 받아 응답만 처리한다.

주요 기능:
- 납부 기록 (부분 납부 / 잔액 일괄 납부) 및 장부 거래 생성
- 월별 회비 목록 조회 및 표시용 납부 상태 계산
- 월별 통계 (납부율, 징수 금액 등)
- 'YYYY-MM' period 문자열 검증

설계 원칙:
- HTTP / FastAPI 의존성 없음
- 검증 실패는 ValueError, 대상 없음은 LookupError, 권한 위반은 PermissionError
- 트랜잭션 제어(commit / rollback)는 라우터에서 수행

관련 파일:
- app.models.contribution        : 회비 레코드 모델
- app.models.transaction         : 장부 거래 모델
- app.routers.contributions      : 조회 / 납부 API
- app.routers.admin_contributions : 내보내기 API

"""

import calendar
import re
import uuid
from datetime import date

from sqlalchemy import select, func, case, extract
from sqlalchemy.orm import Session, joinedload

from app.models.contribution import ContributionStatus
from app.models.transaction import Transaction, TransactionType
from app.models.user import User, Role
from app.services.populations import Population, PopulationConfig, get_population_config


_PERIOD_RE = re.compile(r"^\d{4}-\d{2}$")

PAYMENT_MODES = ("CASH", "BANK_TRANSFER", "MOBILE_MONEY", "CHECK")

FRENCH_MONTHS = (
    "janvier", "février", "mars", "avril", "mai", "juin",
    "juillet", "août", "septembre", "octobre", "novembre", "décembre",
)


"""
회비 period 형식 검증

- 'YYYY-MM' 형식만 허용
- 월(month)은 01 ~ 12 범위만 허용
- 검증 통과 시 해당 월 1일 date 반환

"""

def parse_period(period: str) -> date:
    if not _PERIOD_RE.match(period):
        raise ValueError("period must be in 'YYYY-MM' format")
    year, month = (int(p) for p in period.split("-"))

    if month < 1 or month > 12:
        raise ValueError("month must be between 01 and 12")
    return date(year, month, 1)


def period_end(period: date) -> date:
    return date(period.year, period.month, calendar.monthrange(period.year, period.month)[1])


"""
표시용 납부 상태

- PAID    : 완납
- PARTIAL : 일부 납부 (선납 / 부분 납부)
- LATE    : 미납 상태로 해당 월 말일이 지남
- PENDING : 미납, 아직 기한 내

"""

def payment_status(record, *, today: date | None = None) -> str:
    today = today or date.today()
    if record.status == ContributionStatus.PAID:
        return "PAID"
    if (record.amount_paid or 0) > 0:
        return "PARTIAL"
    if today > period_end(record.period):
        return "LATE"
    return "PENDING"


"""
연체 일수

- 해당 월 말일 다음 날부터 센 일수
- 완납 건이거나 아직 말일이 지나지 않았으면 0

"""

def days_late(record, *, today: date | None = None) -> int:
    if record.status == ContributionStatus.PAID:
        return 0
    today = today or date.today()
    return max((today - period_end(record.period)).days, 0)


def contribution_query(config: PopulationConfig, contribution_id: int, *, for_update: bool = False):
    model = config.record_model
    stmt = select(model).options(joinedload(model.member)).where(model.id == contribution_id)
    if for_update:
        # member 쪽은 outer join 이므로 회비 행만 잠금
        stmt = stmt.with_for_update(of=model)
    return stmt


def get_contribution(db: Session, config: PopulationConfig, contribution_id: int, *, for_update: bool = False):
    return db.scalar(contribution_query(config, contribution_id, for_update=for_update))


def _period_filter(model, year: int | None, month: int | None) -> list:
    conditions = []
    if year is not None:
        conditions.append(extract("year", model.period) == year)
    if month is not None:
        conditions.append(extract("month", model.period) == month)
    return conditions


"""
회비 목록 조회

- year / month 로 필터 (둘 다 생략 시 전체)
- period 내림차순, 구성원 이름 오름차순 정렬

"""

def list_contributions(
    db: Session,
    population: Population | str,
    *,
    year: int | None = None,
    month: int | None = None,
) -> list:
    config = get_population_config(population)
    model = config.record_model
    member_model = config.member_model

    stmt = (
        select(model)
        .join(model.member)
        .options(joinedload(model.member))
        .where(*_period_filter(model, year, month))
        .order_by(model.period.desc(), member_model.name)
    )
    return list(db.scalars(stmt).all())


"""
회비 통계

- total / paid / pending / partial 건수
- total_collected : amount_paid 합계
- total_expected  : amount_due 합계
- collection_rate : 징수율(%) 소수점 1자리, 청구액이 0이면 0

"""

def contribution_stats(
    db: Session,
    population: Population | str,
    *,
    year: int | None = None,
    month: int | None = None,
) -> dict:
    config = get_population_config(population)
    model = config.record_model

    row = db.execute(
        select(
            func.count(model.id),
            func.coalesce(func.sum(case((model.status == ContributionStatus.PAID, 1), else_=0)), 0),
            func.coalesce(func.sum(case((model.status == ContributionStatus.PENDING, 1), else_=0)), 0),
            func.coalesce(
                func.sum(case(((model.amount_paid > 0) & (model.amount_paid < model.amount_due), 1), else_=0)),
                0,
            ),
            func.coalesce(func.sum(model.amount_paid), 0),
            func.coalesce(func.sum(model.amount_due), 0),
        ).where(*_period_filter(model, year, month))
    ).one()

    total, paid, pending, partial, collected, expected = (int(v or 0) for v in row)
    rate = round(collected / expected * 100, 1) if expected > 0 else 0.0

    return {
        "total_contributions": total,
        "paid_count": paid,
        "pending_count": pending,
        "partial_payments": partial,
        "total_collected": collected,
        "total_expected": expected,
        "collection_rate": rate,
    }


def _transaction_reference(config: PopulationConfig, on: date) -> str:
    return f"{config.reference_prefix}-{on.year}-{uuid.uuid4().hex[:8].upper()}"


def _transaction_description(config: PopulationConfig, record) -> str:
    month_name = FRENCH_MONTHS[record.period.month - 1]
    return f"{config.label} {month_name} {record.period.year} - {record.member.name}"


"""
회비 납부 기록

- partial_amount 지정 : 누적 납부액에 더함, 청구액 초과 시 ValueError
- partial_amount 없음 : 남은 잔액 전액 납부
- 누적 납부액 >= 청구액 이면 PAID, 아니면 PENDING 유지
- 이미 PAID 인 레코드는 ADMIN 만 수정 가능 (PermissionError)
- 실제 납부 금액이 0보다 크면 장부에 INCOME 거래 1건 추가

NOTE:
- db.commit()은 호출 측(라우터)에서 수행
- 대상 레코드는 SELECT ... FOR UPDATE 로 잠근 뒤 누적 납부액을 검사 (동시 부분 납부 방지)
- 반환값: (갱신된 레코드, 이번에 납부된 금액)

"""

def record_payment(
    db: Session,
    population: Population | str,
    *,
    contribution_id: int,
    actor: User,
    partial_amount: int | None = None,
    payment_date: date | None = None,
    payment_mode: str | None = None,
    notes: str | None = None,
):
    config = get_population_config(population)

    record = get_contribution(db, config, contribution_id, for_update=True)
    if not record:
        raise LookupError("contribution not found")

    if record.status == ContributionStatus.PAID and actor.role != Role.ADMIN:
        raise PermissionError("only an admin can modify a contribution that is already paid")

    mode = payment_mode or "CASH"
    if mode not in PAYMENT_MODES:
        raise ValueError(f"payment_mode must be one of {', '.join(PAYMENT_MODES)}")

    paid_on = payment_date or date.today()
    already_paid = record.amount_paid or 0

    if partial_amount is not None and partial_amount > 0:
        payment_amount = partial_amount
        new_amount_paid = already_paid + payment_amount
        if new_amount_paid > record.amount_due:
            raise ValueError("total paid cannot exceed amount due")
    else:
        payment_amount = record.amount_due - already_paid
        new_amount_paid = record.amount_due

    record.amount_paid = new_amount_paid
    record.status = (
        ContributionStatus.PAID if new_amount_paid >= record.amount_due else ContributionStatus.PENDING
    )
    record.payment_date = paid_on
    record.payment_mode = mode
    if notes:
        record.notes = f"{record.notes}\n{notes}" if record.notes else notes

    if payment_amount > 0:
        db.add(
            Transaction(
                reference=_transaction_reference(config, paid_on),
                type=TransactionType.INCOME,
                amount=payment_amount,
                description=_transaction_description(config, record),
                transaction_date=paid_on,
                payment_mode=mode,
                created_by=actor.id,
            )
        )

    db.flush()
    return record, payment_amount
