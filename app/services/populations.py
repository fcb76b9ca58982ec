"""
services/populations.py

회비 대상 구성원 유형(Population) 정의.

운영진(team)과 일반 회원(adherent)은 같은 생성 / 납부 알고리즘을 공유하며,
유형별로 달라지는 값만 PopulationConfig 하나에 모은다.

- default_amount     : 생성 시 amount_due 로 들어가는 기본 금액
- member_model       : 활성 구성원을 조회할 모델
- record_model       : 회비 레코드를 저장할 모델(테이블)
- reference_prefix   : 납부 시 생성되는 장부 거래 참조번호 접두어
- label              : 장부 거래 설명에 쓰이는 명칭

관련 파일:
- app.services.generator      : 월별 회비 생성
- app.services.contributions  : 납부 기록 / 조회 / 통계

"""

from dataclasses import dataclass
from enum import Enum

from app.core.config import settings
from app.models.contribution import AdherentContribution, TeamMemberContribution
from app.models.member import Adherent, TeamMember


class Population(str, Enum):
    TEAM = "team"
    ADHERENT = "adherent"


@dataclass(frozen=True)
class PopulationConfig:
    population: Population
    default_amount: int
    member_model: type
    record_model: type
    reference_prefix: str
    label: str


def get_population_config(population: Population | str) -> PopulationConfig:
    population = Population(population)
    if population is Population.TEAM:
        return PopulationConfig(
            population=population,
            default_amount=settings.TEAM_CONTRIBUTION_AMOUNT,
            member_model=TeamMember,
            record_model=TeamMemberContribution,
            reference_prefix="COT",
            label="Cotisation",
        )
    return PopulationConfig(
        population=population,
        default_amount=settings.ADHERENT_CONTRIBUTION_AMOUNT,
        member_model=Adherent,
        record_model=AdherentContribution,
        reference_prefix="ABN",
        label="Abonnement",
    )
