from __future__ import annotations
from typing import Optional

from pydantic import BaseModel

# 테이블 이름
USERS = "users"
CLIENTS = "clients"
VISITS = "visits"
MEASUREMENTS = "measurements"

ROLE_ADMIN = "admin"
ROLE_STAFF = "staff"


class NameRef(BaseModel):
    """조회 시점에 join 으로 붙는 {name: ...} 조각"""
    name: Optional[str] = None


class User(BaseModel):
    id: str
    email: str
    name: str
    # role 은 화면 분기에만 쓰이고 권한 검증은 하지 않는다
    role: str = ROLE_STAFF
    active: bool = True
    created_at: Optional[str] = None


class Client(BaseModel):
    id: str
    name: str
    contact: Optional[str] = None
    notes: str = ""
    primary_staff_id: Optional[str] = None
    created_at: Optional[str] = None

    staff: Optional[NameRef] = None


class Visit(BaseModel):
    id: str
    client_id: str
    visit_date: str
    service_menu: str
    notes: str = ""
    created_by: str
    created_at: Optional[str] = None

    client: Optional[NameRef] = None
    staff: Optional[NameRef] = None


class Measurement(BaseModel):
    id: str
    client_id: str
    type: str = "weight"  # 현재는 체중만 기록
    value: float
    measured_at: str
    created_by: str
    created_at: Optional[str] = None

    client: Optional[NameRef] = None
