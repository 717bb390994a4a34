from __future__ import annotations
from typing import Annotated, Optional
from datetime import date
from pydantic import BaseModel, Field, EmailStr, StringConstraints

# --- 인증 ---
class SessionUser(BaseModel):
    """세션에 들어가는 최소 사용자 정보 (id + email)"""
    id: str
    email: str

class Session(BaseModel):
    user: SessionUser

class AuthError(BaseModel):
    message: str

class AuthResponse(BaseModel):
    """
    AuthStub 의 모든 호출 결과.
    실패해도 예외를 던지지 않고 error 에 담아서 돌려준다.
    """
    user: Optional[SessionUser] = None
    session: Optional[Session] = None
    error: Optional[AuthError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

class RegisterRequest(BaseModel):
    """
    /auth/register 요청 스키마.
    가입 후 users 테이블에 role='staff' 로 프로필이 생성된다.
    """
    email: EmailStr
    password: str = Field(..., min_length=1)
    # 비밀번호는 건드리지 않고 이름만 trim
    name: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]

class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: SessionUser

class SessionState(BaseModel):
    session: Optional[Session] = None

# --- 사용자 ---
class ProfileUpdate(BaseModel):
    name: str = Field(..., min_length=1, description="이름은 비워둘 수 없습니다.")

    class Config:
        str_strip_whitespace = True

class StaffOption(BaseModel):
    id: str
    name: str

# --- 고객 ---
class ClientCreate(BaseModel):
    name: str = Field(..., min_length=1)
    contact: Optional[str] = None
    notes: str = ""
    primary_staff_id: Optional[str] = None

    class Config:
        str_strip_whitespace = True

class ClientUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    contact: Optional[str] = None
    notes: Optional[str] = None
    primary_staff_id: Optional[str] = None

    class Config:
        str_strip_whitespace = True

# --- 카르테(방문 기록) ---
class VisitCreate(BaseModel):
    client_id: str = Field(..., min_length=1)
    visit_date: date = Field(default_factory=date.today)
    service_menu: str = Field(..., min_length=1)
    notes: str = ""

    class Config:
        str_strip_whitespace = True

class VisitUpdate(BaseModel):
    client_id: Optional[str] = Field(None, min_length=1)
    visit_date: Optional[date] = None
    service_menu: Optional[str] = Field(None, min_length=1)
    notes: Optional[str] = None

    class Config:
        str_strip_whitespace = True

# --- 체중 ---
class MeasurementCreate(BaseModel):
    client_id: str = Field(..., min_length=1)
    value: float = Field(..., gt=0, le=300, description="체중(kg)")
    measured_at: date = Field(default_factory=date.today)

class MeasurementSummary(BaseModel):
    count: int
    first: Optional[float] = None
    latest: Optional[float] = None
    diff: Optional[float] = None
    is_decrease: Optional[bool] = None
