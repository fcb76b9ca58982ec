"""

회비 납부 기록 / 목록 조회 API 테스트.
- 부분 납부(선납) 후 잔액 납부, 청구액 초과 400, 완납 건 수정 권한(ADMIN 만),
  납부 시 장부(transactions)에 INCOME 거래 생성, 목록 필터와 통계 확인.

"""

from datetime import date

from sqlalchemy import select
from sqlalchemy.dialects import postgresql

from app.models.contribution import ContributionStatus, TeamMemberContribution
from app.models.transaction import Transaction, TransactionType
from app.services.contributions import contribution_query, days_late, payment_status
from app.services.generator import generate_contributions
from app.services.populations import Population, get_population_config
from tests.helpers import add_adherents, add_team_members, count_rows, setup_staff


def _team_contributions(db_session, names, *, year=2025, month=6):
    add_team_members(db_session, names)
    generate_contributions(db_session, Population.TEAM, year=year, month=month)
    return db_session.scalars(select(TeamMemberContribution).order_by(TeamMemberContribution.id)).all()


def test_partial_then_full_payment(client, db_session):
    ctx = setup_staff(db_session)
    (record,) = _team_contributions(db_session, ["Awa"])

    r = client.put(
        f"/contributions/team/{record.id}/pay",
        headers=ctx["treasurer_headers"],
        json={"partial_amount": 500, "payment_date": "2025-06-05", "payment_mode": "MOBILE_MONEY", "notes": "avance"},
    )
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["payment_amount"] == 500
    assert body["message"] == "advance of 500 FCFA recorded"
    assert body["contribution"]["amount_paid"] == 500
    assert body["contribution"]["remaining_amount"] == 1500
    assert body["contribution"]["status"] == "PENDING"
    assert body["contribution"]["payment_status"] == "PARTIAL"

    # partial_amount 생략 → 잔액 전액 납부
    r = client.put(
        f"/contributions/team/{record.id}/pay",
        headers=ctx["treasurer_headers"],
        json={"payment_date": "2025-06-20", "notes": "solde"},
    )
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["payment_amount"] == 1500
    assert body["message"] == "contribution fully paid"
    assert body["contribution"]["status"] == "PAID"
    assert body["contribution"]["remaining_amount"] == 0
    assert body["contribution"]["payment_mode"] == "CASH"
    assert body["contribution"]["notes"] == "avance\nsolde"

    txs = db_session.scalars(select(Transaction).order_by(Transaction.id)).all()
    assert [t.amount for t in txs] == [500, 1500]
    assert all(t.type == TransactionType.INCOME for t in txs)
    assert all(t.reference.startswith("COT-2025-") for t in txs)
    assert txs[0].description == "Cotisation juin 2025 - Awa"
    assert txs[0].created_by == ctx["treasurer"].id


def test_adherent_payment_uses_subscription_label(client, db_session):
    ctx = setup_staff(db_session)
    add_adherents(db_session, ["Koffi"])
    generate_contributions(db_session, Population.ADHERENT, year=2025, month=8)

    r = client.get("/contributions/adherent", headers=ctx["auditor_headers"])
    contribution_id = r.json()["contributions"][0]["id"]

    r = client.put(
        f"/contributions/adherent/{contribution_id}/pay",
        headers=ctx["auditor_headers"],
        json={"payment_date": "2025-08-02"},
    )
    assert r.status_code == 200, r.text
    assert r.json()["payment_amount"] == 500

    tx = db_session.scalar(select(Transaction))
    assert tx.reference.startswith("ABN-2025-")
    assert tx.description == "Abonnement août 2025 - Koffi"


def test_overpayment_is_rejected(client, db_session):
    ctx = setup_staff(db_session)
    (record,) = _team_contributions(db_session, ["Awa"])

    r = client.put(
        f"/contributions/team/{record.id}/pay",
        headers=ctx["treasurer_headers"],
        json={"partial_amount": 2500},
    )
    assert r.status_code == 400, r.text
    assert r.json()["detail"] == "total paid cannot exceed amount due"
    assert count_rows(db_session, Transaction) == 0

    db_session.expire_all()
    assert db_session.get(TeamMemberContribution, record.id).amount_paid == 0


def test_paid_contribution_only_editable_by_admin(client, db_session):
    ctx = setup_staff(db_session)
    (record,) = _team_contributions(db_session, ["Awa"])

    r = client.put(f"/contributions/team/{record.id}/pay", headers=ctx["treasurer_headers"], json={})
    assert r.status_code == 200, r.text

    r = client.put(
        f"/contributions/team/{record.id}/pay",
        headers=ctx["treasurer_headers"],
        json={"notes": "correction"},
    )
    assert r.status_code == 403, r.text

    r = client.put(
        f"/contributions/team/{record.id}/pay",
        headers=ctx["admin_headers"],
        json={"notes": "correction", "payment_mode": "BANK_TRANSFER"},
    )
    assert r.status_code == 200, r.text
    assert r.json()["payment_amount"] == 0
    assert r.json()["contribution"]["payment_mode"] == "BANK_TRANSFER"
    # 추가 납부 금액이 없으면 장부 거래도 추가되지 않음
    assert count_rows(db_session, Transaction) == 1


def test_unknown_contribution_is_404(client, db_session):
    ctx = setup_staff(db_session)

    r = client.put("/contributions/team/9999/pay", headers=ctx["treasurer_headers"], json={})
    assert r.status_code == 404, r.text


def test_invalid_payment_body_is_422(client, db_session):
    ctx = setup_staff(db_session)
    (record,) = _team_contributions(db_session, ["Awa"])

    for body in ({"partial_amount": 0}, {"partial_amount": -100}, {"payment_mode": "BITCOIN"}):
        r = client.put(f"/contributions/team/{record.id}/pay", headers=ctx["treasurer_headers"], json=body)
        assert r.status_code == 422, r.text


def test_list_filters_and_stats(client, db_session):
    ctx = setup_staff(db_session)
    add_team_members(db_session, ["Binta", "Awa", "Chris"])
    generate_contributions(db_session, Population.TEAM, year=2025, month=5)
    generate_contributions(db_session, Population.TEAM, year=2025, month=6)

    june = client.get("/contributions/team?year=2025&month=6", headers=ctx["auditor_headers"]).json()
    awa_june = next(c for c in june["contributions"] if c["member_name"] == "Awa")

    client.put(f"/contributions/team/{awa_june['id']}/pay", headers=ctx["treasurer_headers"], json={})
    binta_june = next(c for c in june["contributions"] if c["member_name"] == "Binta")
    client.put(
        f"/contributions/team/{binta_june['id']}/pay",
        headers=ctx["treasurer_headers"],
        json={"partial_amount": 1000},
    )

    r = client.get("/contributions/team?year=2025&month=6", headers=ctx["auditor_headers"])
    assert r.status_code == 200, r.text
    body = r.json()
    assert [c["member_name"] for c in body["contributions"]] == ["Awa", "Binta", "Chris"]
    assert body["stats"] == {
        "total_contributions": 3,
        "paid_count": 1,
        "pending_count": 2,
        "partial_payments": 1,
        "total_collected": 3000,
        "total_expected": 6000,
        "collection_rate": 50.0,
    }

    # 연도 전체: 최신 월이 먼저
    r = client.get("/contributions/team?year=2025", headers=ctx["auditor_headers"])
    periods = [c["period"] for c in r.json()["contributions"]]
    assert periods == ["2025-06-01"] * 3 + ["2025-05-01"] * 3

    r = client.get("/contributions/team?month=6", headers=ctx["auditor_headers"])
    assert r.status_code == 400
    assert r.json()["detail"] == "month filter requires year"


def test_empty_list_has_zero_rate(client, db_session):
    ctx = setup_staff(db_session)

    r = client.get("/contributions/adherent?year=2030&month=1", headers=ctx["auditor_headers"])
    assert r.status_code == 200, r.text
    assert r.json()["contributions"] == []
    assert r.json()["stats"]["collection_rate"] == 0.0


def test_payment_status_labels(db_session):
    (record,) = _team_contributions(db_session, ["Awa"], year=2025, month=2)

    assert payment_status(record, today=date(2025, 2, 28)) == "PENDING"
    assert payment_status(record, today=date(2025, 3, 1)) == "LATE"

    record.amount_paid = 500
    assert payment_status(record, today=date(2025, 3, 1)) == "PARTIAL"

    record.amount_paid = 2000
    record.status = ContributionStatus.PAID
    assert payment_status(record, today=date(2025, 3, 1)) == "PAID"


def test_days_late_counts_from_end_of_period(db_session):
    (record,) = _team_contributions(db_session, ["Awa"], year=2025, month=2)

    assert days_late(record, today=date(2025, 2, 10)) == 0
    assert days_late(record, today=date(2025, 2, 28)) == 0
    assert days_late(record, today=date(2025, 3, 1)) == 1
    assert days_late(record, today=date(2025, 3, 31)) == 31

    record.amount_paid = 500
    assert days_late(record, today=date(2025, 3, 31)) == 31

    record.amount_paid = 2000
    record.status = ContributionStatus.PAID
    assert days_late(record, today=date(2025, 3, 31)) == 0


def test_listing_reports_days_late(client, db_session):
    ctx = setup_staff(db_session)
    _team_contributions(db_session, ["Awa"], year=2025, month=1)

    r = client.get("/contributions/team?year=2025&month=1", headers=ctx["auditor_headers"])
    assert r.status_code == 200, r.text
    row = r.json()["contributions"][0]
    assert row["payment_status"] == "LATE"
    assert row["days_late"] == (date.today() - date(2025, 1, 31)).days


def test_payment_locks_contribution_row():
    config = get_population_config(Population.TEAM)

    locked = str(contribution_query(config, 1, for_update=True).compile(dialect=postgresql.dialect()))
    assert "FOR UPDATE OF team_member_contributions" in locked

    plain = str(contribution_query(config, 1).compile(dialect=postgresql.dialect()))
    assert "FOR UPDATE" not in plain
