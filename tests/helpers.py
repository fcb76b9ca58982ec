# tests/helpers.py
import uuid
from sqlalchemy.orm import Session
from sqlalchemy import select, func

from app.core.security import create_access_token, get_password_hash
from app.models.member import TeamMember, Adherent
from app.models.user import User, Role


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def create_user_in_db(db: Session, *, role: Role, email: str | None = None, password: str = "Passw0rd!") -> User:
    user = User(
        email=email or f"{role.value.lower()}_{uuid.uuid4().hex[:6]}@club.com",
        password_hash=get_password_hash(password),
        name=role.value.title(),
        role=role,
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def token_for(user: User) -> str:
    return create_access_token(subject=str(user.id), role=user.role.value)


def setup_staff(db: Session) -> dict:
    """
    ADMIN / TREASURER / AUDITOR 계정 + 각 Bearer 헤더 세팅
    """
    admin = create_user_in_db(db, role=Role.ADMIN)
    treasurer = create_user_in_db(db, role=Role.TREASURER)
    auditor = create_user_in_db(db, role=Role.AUDITOR)
    return {
        "admin": admin,
        "treasurer": treasurer,
        "auditor": auditor,
        "admin_headers": auth_header(token_for(admin)),
        "treasurer_headers": auth_header(token_for(treasurer)),
        "auditor_headers": auth_header(token_for(auditor)),
    }


def add_team_members(db: Session, names, *, is_active: bool = True) -> list[TeamMember]:
    members = [TeamMember(name=n, position="Membre du bureau", is_active=is_active) for n in names]
    db.add_all(members)
    db.commit()
    for m in members:
        db.refresh(m)
    return members


def add_adherents(db: Session, names, *, is_active: bool = True) -> list[Adherent]:
    adherents = [Adherent(name=n, is_active=is_active) for n in names]
    db.add_all(adherents)
    db.commit()
    for a in adherents:
        db.refresh(a)
    return adherents


def count_rows(db: Session, model, **filters) -> int:
    stmt = select(func.count()).select_from(model)
    for attr, value in filters.items():
        stmt = stmt.where(getattr(model, attr) == value)
    return db.scalar(stmt) or 0
