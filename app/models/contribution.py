"""
contribution.py

월별 회비(Contribution) 레코드 모델 정의 파일.

구성원 1명의 특정 월(period) 납부 의무 1건을 나타낸다.
운영진 회비와 일반 회원 구독료는 서로 독립된 두 테이블로 관리되며,
공통 컬럼은 ContributionColumns 믹스인에 모아 둔다.

- period         : 해당 월의 1일 (DATE, 문자열 아님)
- amount_due     : 생성 시점의 구성원 유형별 기본 금액
- amount_paid    : 누적 납부 금액, 생성 시 0
- penalty_amount : 연체료, 생성 시 0
- status         : PENDING → PAID (납부 기록 API에서만 전이)

(member_id, period) 유니크 제약으로 같은 월에 같은 구성원 레코드가
두 번 생기는 것을 DB 레벨에서 막는다.

"""

from datetime import date, datetime, timezone
from enum import Enum

from sqlalchemy import Date, DateTime, Enum as SAEnum, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base
from app.models.member import Adherent, TeamMember


class ContributionStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ContributionColumns:
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    period: Mapped[date] = mapped_column(Date, nullable=False)

    amount_due: Mapped[int] = mapped_column(Integer, nullable=False)
    amount_paid: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    penalty_amount: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    status: Mapped[ContributionStatus] = mapped_column(
        SAEnum(ContributionStatus, name="contribution_status"),
        nullable=False,
        default=ContributionStatus.PENDING,
    )

    payment_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    payment_mode: Mapped[str | None] = mapped_column(String(20), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False
    )

    @property
    def remaining_amount(self) -> int:
        return self.amount_due - (self.amount_paid or 0)


class TeamMemberContribution(ContributionColumns, Base):
    """운영진 월 회비 (cotisation)"""

    __tablename__ = "team_member_contributions"
    __table_args__ = (
        UniqueConstraint("team_member_id", "period", name="uq_team_member_contributions_member_period"),
        Index("ix_team_member_contributions_period", "period"),
    )

    member_id: Mapped[int] = mapped_column(
        "team_member_id", Integer, ForeignKey("team_members.id"), nullable=False
    )
    member: Mapped[TeamMember] = relationship()


class AdherentContribution(ContributionColumns, Base):
    """일반 회원 월 구독료 (abonnement)"""

    __tablename__ = "adherent_contributions"
    __table_args__ = (
        UniqueConstraint("adherent_id", "period", name="uq_adherent_contributions_member_period"),
        Index("ix_adherent_contributions_period", "period"),
    )

    member_id: Mapped[int] = mapped_column(
        "adherent_id", Integer, ForeignKey("adherents.id"), nullable=False
    )
    member: Mapped[Adherent] = relationship()
