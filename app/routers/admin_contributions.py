"""
admin_contributions.py

관리자 전용 회비 관리 API 모음.

이 파일은 월별 회비에 대한 "관리자 권한" 기능만을 담당한다.

주요 기능:
- 월별 회비 수동 생성 (운영진 / 일반 회원 / 이번 달 전체)
- 월별 회비 자동 생성 스케줄러 상태 조회
- 관리자용 CSV / Excel(xlsx) 데이터 내보내기

설계 원칙:
- 모든 엔드포인트는 관리자 권한(get_current_admin)을 요구
- 생성 로직은 스케줄러와 같은 service(generate_contributions)를 그대로 사용
- 생성 중 DB 오류(GenerationStorageFailure)는 500 + 설명 메시지로 반환

관련 파일:
- app.services.generator       : 월별 회비 생성 로직
- app.services.scheduler       : 자동 생성 스케줄러
- app.services.contributions   : 목록 / period 검증
- app.schemas.contributions    : 요청/응답 스키마 정의
"""

import csv
import io
from datetime import datetime
from zoneinfo import ZoneInfo

from starlette.responses import StreamingResponse, Response
from openpyxl import Workbook

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.deps import get_db, get_current_admin, get_scheduler
from app.models.user import User
from app.routers.contributions import to_contribution_response
from app.services.contributions import list_contributions, parse_period
from app.services.generator import GenerationResult, GenerationStorageFailure, generate_contributions
from app.services.populations import Population
from app.schemas.contributions import (
    CurrentMonthGenerationResponse,
    GenerateRequest,
    GenerationResponse,
    SchedulerStatusResponse,
)

router = APIRouter(prefix="/admin/contributions", tags=["admin-contributions"])

EXPORT_COLUMNS = [
    "period", "member_id", "member_name", "status", "payment_status",
    "amount_due", "amount_paid", "penalty_amount", "remaining_amount",
    "payment_date", "payment_mode", "days_late",
]


def to_generation_response(result: GenerationResult) -> GenerationResponse:
    return GenerationResponse(
        population=result.population,
        period=result.period,
        created=result.created,
        total_expected=result.total_expected,
        skipped=result.skipped.value if result.skipped else None,
    )


def _generate_or_500(db: Session, population: Population, *, year: int, month: int) -> GenerationResult:
    try:
        return generate_contributions(db, population, year=year, month=month)
    except GenerationStorageFailure as e:
        raise HTTPException(status_code=500, detail=str(e))


"""
구성원 유형별 월 회비 수동 생성 API

- body: { month, year }
- 해당 월 레코드가 이미 있으면 created=0, skipped=ALREADY_GENERATED
- 활성 구성원이 없으면 created=0, skipped=EMPTY_POPULATION
- 새로 생성되면 201, 건너뛰면 200

"""
@router.post("/generate/{population}", response_model=GenerationResponse, status_code=201)
def generate_for_population(
    population: Population,
    body: GenerateRequest,
    response: Response,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_admin),
):
    result = _generate_or_500(db, population, year=body.year, month=body.month)
    if result.skipped:
        response.status_code = 200
    return to_generation_response(result)


"""
이번 달 전체(운영진 + 일반 회원) 회비 수동 생성 API

- 스케줄러가 놓친 달(1일 내내 서버 중단 등)을 관리자가 직접 보충할 때 사용
- "이번 달"은 SCHEDULER_TIMEZONE 기준

"""
@router.post("/generate-current", response_model=CurrentMonthGenerationResponse, status_code=201)
def generate_current_month(
    response: Response,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_admin),
):
    now = datetime.now(ZoneInfo(settings.SCHEDULER_TIMEZONE))

    team = _generate_or_500(db, Population.TEAM, year=now.year, month=now.month)
    adherents = _generate_or_500(db, Population.ADHERENT, year=now.year, month=now.month)
    if team.created == 0 and adherents.created == 0:
        response.status_code = 200

    return CurrentMonthGenerationResponse(
        month=now.month,
        year=now.year,
        team_members=to_generation_response(team),
        adherents=to_generation_response(adherents),
        total_expected=team.total_expected + adherents.total_expected,
    )


@router.get("/scheduler", response_model=SchedulerStatusResponse)
def scheduler_status(
    scheduler=Depends(get_scheduler),
    _: User = Depends(get_current_admin),
):
    if scheduler is None:
        return SchedulerStatusResponse(enabled=False)
    return SchedulerStatusResponse(enabled=True, **scheduler.status())


def _export_rows(db: Session, population: Population, period: str) -> list[list]:
    p = parse_period(period)
    records = list_contributions(db, population, year=p.year, month=p.month)
    rows = []
    for r in records:
        c = to_contribution_response(r)
        rows.append([
            period,
            c.member_id,
            c.member_name,
            c.status,
            c.payment_status,
            c.amount_due,
            c.amount_paid,
            c.penalty_amount,
            c.remaining_amount,
            c.payment_date.isoformat() if c.payment_date else "",
            c.payment_mode or "",
            c.days_late,
        ])
    return rows


"""
관리자용 월별 회비 현황 CSV 다운로드 API

- 지정한 population / period(YYYY-MM)의 구성원별 납부 상태를 CSV 로 반환
- UTF-8 BOM을 추가하여 Excel에서 악센트 문자가 깨지지 않도록 처리

"""
@router.get("/{population}/export")
def export_csv(
    population: Population,
    period: str = Query(..., description="예: 2025-06"),
    db: Session = Depends(get_db),
    _: User = Depends(get_current_admin),
):
    try:
        rows = _export_rows(db, population, period)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    def generate():
        # Excel에서 UTF-8 CSV 깨짐 방지를 위해 BOM(Byte Order Mark) 먼저 출력
        yield "\ufeff"

        output = io.StringIO()
        writer = csv.writer(output)

        writer.writerow(EXPORT_COLUMNS)
        yield output.getvalue()
        output.seek(0)
        output.truncate(0)

        for row in rows:
            writer.writerow(row)
            yield output.getvalue()
            output.seek(0)
            output.truncate(0)

    filename = f"contributions_{population.value}_{period}.csv"
    headers = {
        "Content-Disposition": f'attachment; filename="{filename}"'
    }

    return StreamingResponse(
        generate(),
        media_type="text/csv; charset=utf-8",
        headers=headers,
    )


"""
관리자용 월별 회비 현황 Excel(xlsx) 다운로드 API

- CSV 대신 Excel 형식이 필요한 경우를 위한 엔드포인트
- openpyxl을 사용하여 XLSX 파일 생성

"""
@router.get("/{population}/export.xlsx")
def export_xlsx(
    population: Population,
    period: str = Query(..., description="예: 2025-06"),
    db: Session = Depends(get_db),
    _: User = Depends(get_current_admin),
):
    try:
        rows = _export_rows(db, population, period)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    wb = Workbook()
    ws = wb.active
    ws.title = f"{population.value}_{period}"

    ws.append(EXPORT_COLUMNS)
    for row in rows:
        ws.append(row)

    buf = io.BytesIO()
    wb.save(buf)
    data = buf.getvalue()

    filename = f"contributions_{population.value}_{period}.xlsx"
    headers = {
        "Content-Disposition": f'attachment; filename="{filename}"'
    }

    return Response(
        content=data,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers=headers,
    )

# NOTE:
# CSV는 엑셀 호환성 문제로 BOM + UTF-8 스트리밍 방식 사용
# XLSX는 Excel에서 바로 열기 위한 대안 포맷
