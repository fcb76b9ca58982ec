"""
auth.py

관리자 대시보드 로그인 API.

주요 기능:
- 이메일 / 비밀번호 로그인 → Access Token 발급
- 현재 로그인 사용자 조회

설계 원칙:
- 계정 생성 / 권한 변경은 scripts.create_admin 등 운영 스크립트에서 수행
- 비활성화(is_active=False) 계정은 로그인 불가

관련 파일:
- app.core.security      : 비밀번호 검증 / 토큰 생성
- app.core.deps          : 토큰 검증 의존성

"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from sqlalchemy import select

from app.core.deps import get_db, get_current_user
from app.core.security import verify_password, create_access_token
from app.models.user import User
from app.schemas.auth import LoginRequest, TokenResponse
from app.schemas.user import UserResponse

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=TokenResponse)
def login(data: LoginRequest, db: Session = Depends(get_db)):

    user = db.scalar(select(User).where(User.email == data.email))

    if not user or not verify_password(data.password, user.password_hash):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account disabled")

    access = create_access_token(subject=str(user.id), role=user.role.value)
    return TokenResponse(access_token=access)


@router.get("/me", response_model=UserResponse)
def me(current_user: User = Depends(get_current_user)):
    return current_user
