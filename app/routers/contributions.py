"""
contributions.py

회비 조회 / 납부 기록 API 모음.

로그인한 모든 대시보드 사용자(AUDITOR 이상)가 사용하는 기능을 담당한다.
회비 생성 / 내보내기 같은 관리자 전용 기능은 admin_contributions 로 분리했다.

주요 기능:
- 구성원 유형별 월 회비 목록 + 통계 조회
- 회비 납부 기록 (부분 납부 / 잔액 납부)

설계 원칙:
- 비즈니스 로직은 service 계층(app.services.contributions)에 위임
- 서비스 예외를 HTTP 상태 코드로 변환
  (ValueError → 400, PermissionError → 403, LookupError → 404)
- commit / rollback 은 이 라우터에서 수행

관련 파일:
- app.services.contributions : 납부 / 조회 / 통계 로직
- app.schemas.contributions  : 요청/응답 스키마 정의

"""

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.core.deps import get_db, get_current_staff
from app.models.contribution import ContributionStatus
from app.models.user import User
from app.services.contributions import (
    contribution_stats,
    days_late,
    list_contributions,
    payment_status,
    record_payment,
)
from app.services.populations import Population
from app.schemas.contributions import (
    ContributionListResponse,
    ContributionResponse,
    ContributionStats,
    PaymentRequest,
    PaymentResponse,
)

router = APIRouter(prefix="/contributions", tags=["contributions"])


def to_contribution_response(record, *, today: date | None = None) -> ContributionResponse:
    return ContributionResponse(
        id=record.id,
        member_id=record.member_id,
        member_name=record.member.name,
        period=record.period,
        amount_due=record.amount_due,
        amount_paid=record.amount_paid or 0,
        penalty_amount=record.penalty_amount or 0,
        remaining_amount=record.remaining_amount,
        status=record.status.value,
        payment_status=payment_status(record, today=today),
        days_late=days_late(record, today=today),
        payment_date=record.payment_date,
        payment_mode=record.payment_mode,
        notes=record.notes,
    )


"""
회비 목록 + 통계 조회 API

- population: team / adherent
- year, month 지정 시 해당 월만, year 만 지정 시 해당 연도 전체
- month 만 지정하는 것은 허용하지 않음

"""
@router.get("/{population}", response_model=ContributionListResponse)
def get_contributions(
    population: Population,
    year: int | None = Query(default=None, ge=2000, le=2100, description="예: 2025"),
    month: int | None = Query(default=None, ge=1, le=12, description="예: 6"),
    db: Session = Depends(get_db),
    _: User = Depends(get_current_staff),
):
    if month is not None and year is None:
        raise HTTPException(status_code=400, detail="month filter requires year")

    records = list_contributions(db, population, year=year, month=month)
    stats = contribution_stats(db, population, year=year, month=month)

    return ContributionListResponse(
        contributions=[to_contribution_response(r) for r in records],
        stats=ContributionStats(**stats),
    )


"""
회비 납부 기록 API

- partial_amount 지정 시 부분 납부(선납), 생략 시 잔액 전액 납부
- 누적 납부액이 청구액을 넘으면 400
- 이미 완납된 회비는 ADMIN 만 수정 가능 (403)
- 납부 금액만큼 장부(transactions)에 수입 거래가 함께 기록됨

"""
@router.put("/{population}/{contribution_id}/pay", response_model=PaymentResponse)
def pay_contribution(
    population: Population,
    contribution_id: int,
    body: PaymentRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_staff),
):
    try:
        record, payment_amount = record_payment(
            db,
            population,
            contribution_id=contribution_id,
            actor=current_user,
            partial_amount=body.partial_amount,
            payment_date=body.payment_date,
            payment_mode=body.payment_mode,
            notes=body.notes,
        )
        db.commit()
        db.refresh(record)
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))
    except PermissionError as e:
        db.rollback()
        raise HTTPException(status_code=403, detail=str(e))
    except LookupError as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=str(e))
    except Exception:
        db.rollback()
        raise

    if record.status == ContributionStatus.PAID:
        message = "contribution fully paid"
    else:
        message = f"advance of {payment_amount} FCFA recorded"

    return PaymentResponse(
        contribution=to_contribution_response(record),
        payment_amount=payment_amount,
        message=message,
    )
