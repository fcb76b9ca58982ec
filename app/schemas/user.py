from pydantic import BaseModel, ConfigDict

from app.models.user import Role


# 🔹 로그인한 사용자 응답용 (필요한 필드만)
class UserResponse(BaseModel):
    id: int
    email: str
    name: str
    role: Role

    model_config = ConfigDict(from_attributes=True)  # SQLAlchemy → Pydantic 변환
