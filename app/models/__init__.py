# Base.metadata 에 모든 테이블을 등록하기 위한 import
from app.models.user import User, Role  # noqa: F401
from app.models.member import TeamMember, Adherent  # noqa: F401
from app.models.contribution import (  # noqa: F401
    ContributionStatus,
    TeamMemberContribution,
    AdherentContribution,
)
from app.models.transaction import Transaction, TransactionType  # noqa: F401
