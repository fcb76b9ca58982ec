"""

월별 회비 수동 생성 스크립트.

- 서버가 매월 1일 내내 내려가 있어 스케줄러가 해당 월을 놓쳤을 때
  관리자가 직접 보충 생성하는 용도
- 이미 생성된 월은 ALREADY_GENERATED 로 건너뛰므로 여러 번 실행해도 안전
- --year / --month 생략 시 SCHEDULER_TIMEZONE 기준 이번 달

사용 방법
- (.venv) ~\backend~$ python -m scripts.generate_contributions
- (.venv) ~\backend~$ python -m scripts.generate_contributions --year 2025 --month 6 --population team

"""

import argparse
import sys
from datetime import datetime
from zoneinfo import ZoneInfo

from dotenv import load_dotenv
load_dotenv()

from app.core.config import settings
from app.core.logging import setup_logging
from app.db.session import SessionLocal
from app.services.generator import GenerationStorageFailure, generate_contributions
from app.services.populations import Population


def parse_args(argv=None):
    now = datetime.now(ZoneInfo(settings.SCHEDULER_TIMEZONE))
    parser = argparse.ArgumentParser(description="Generate monthly contribution records")
    parser.add_argument("--year", type=int, default=now.year)
    parser.add_argument("--month", type=int, default=now.month, choices=range(1, 13), metavar="1-12")
    parser.add_argument(
        "--population",
        choices=[p.value for p in Population],
        help="only this population (default: team and adherent)",
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    setup_logging()
    args = parse_args(argv)

    populations = [Population(args.population)] if args.population else list(Population)

    with SessionLocal() as db:
        for population in populations:
            try:
                result = generate_contributions(db, population, year=args.year, month=args.month)
            except GenerationStorageFailure as e:
                print(f"❌ {e}", file=sys.stderr)
                return 1

            if result.skipped:
                print(f"⚠️ {population.value} {result.period.isoformat()}: skipped ({result.skipped.value})")
            else:
                print(
                    f"✅ {population.value} {result.period.isoformat()}: "
                    f"{result.created} created ({result.total_expected} FCFA)"
                )
    return 0


if __name__ == "__main__":
    sys.exit(main())
