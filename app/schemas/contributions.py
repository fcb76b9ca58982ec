from datetime import date, datetime
from typing import Literal, Optional, List

from pydantic import BaseModel, Field, ConfigDict

from app.services.populations import Population


SkipReasonStr = Literal["ALREADY_GENERATED", "EMPTY_POPULATION"]

PaymentMode = Literal["CASH", "BANK_TRANSFER", "MOBILE_MONEY", "CHECK"]

PaymentStatus = Literal["PAID", "PARTIAL", "LATE", "PENDING"]


class GenerateRequest(BaseModel):
    month: int = Field(..., ge=1, le=12, examples=[6])
    year: int = Field(..., ge=2000, le=2100, examples=[2025])


class GenerationResponse(BaseModel):
    population: Population
    period: date
    created: int
    total_expected: int
    skipped: Optional[SkipReasonStr] = None


class CurrentMonthGenerationResponse(BaseModel):
    month: int
    year: int
    team_members: GenerationResponse
    adherents: GenerationResponse
    total_expected: int


class PaymentRequest(BaseModel):
    partial_amount: Optional[int] = Field(default=None, gt=0, examples=[1000])
    payment_date: Optional[date] = None
    payment_mode: PaymentMode = "CASH"
    notes: Optional[str] = Field(default=None, max_length=500)


class ContributionResponse(BaseModel):
    id: int
    member_id: int
    member_name: str
    period: date
    amount_due: int
    amount_paid: int
    penalty_amount: int
    remaining_amount: int
    status: Literal["PENDING", "PAID"]
    payment_status: PaymentStatus
    days_late: int = 0
    payment_date: Optional[date]
    payment_mode: Optional[str]
    notes: Optional[str]


class PaymentResponse(BaseModel):
    contribution: ContributionResponse
    payment_amount: int
    message: str


class ContributionStats(BaseModel):
    total_contributions: int = 0
    paid_count: int = 0
    pending_count: int = 0
    partial_payments: int = 0
    total_collected: int = 0
    total_expected: int = 0
    collection_rate: float = 0.0


class ContributionListResponse(BaseModel):
    contributions: List[ContributionResponse]
    stats: ContributionStats


class SchedulerResultResponse(BaseModel):
    population: Population
    period: date
    created: int
    total_expected: int
    skipped: Optional[SkipReasonStr] = None


class SchedulerStatusResponse(BaseModel):
    enabled: bool
    running: bool = False
    state: Optional[str] = None
    interval_seconds: Optional[int] = None
    timezone: Optional[str] = None
    last_generated_period: Optional[date] = None
    last_checked_at: Optional[datetime] = None
    last_error: Optional[str] = None
    last_results: List[SchedulerResultResponse] = []

    model_config = ConfigDict(from_attributes=True)
