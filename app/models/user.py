"""
user.py

관리자 대시보드 사용자(User) 및 권한(Role) 모델 정의 파일.

회비 생성 / 납부 / 내보내기 API 접근 권한의 기준이 되는 모델이다.
동아리 구성원(TeamMember / Adherent)과는 별개의 테이블이다.

"""

import datetime
from enum import Enum

from sqlalchemy import String, Integer, Boolean, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base



"""
사용자 권한(Role) 정의

- AUDITOR    : 조회 및 납부 기록 (commissaire)
- TREASURER  : 회계 담당 (trésorier)
- ADMIN      : 관리자, 회비 생성 / 내보내기 / 납부 완료 건 수정 가능

"""

class Role(str, Enum):
    AUDITOR = "AUDITOR"
    TREASURER = "TREASURER"
    ADMIN = "ADMIN"



class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    name: Mapped[str] = mapped_column(String(100), nullable=False)

    role: Mapped[Role] = mapped_column(default=Role.AUDITOR)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.datetime.now(datetime.timezone.utc),
        nullable=False,
    )
