from typing import List

from fastapi import APIRouter, Depends

from salon.db import RecordStore, get_db
from salon.models import USERS, User
from salon.schemas import ProfileUpdate, StaffOption
from salon.services.auth_service import get_current_user, require_admin

# user 라우터 정의
router = APIRouter(prefix="/user", tags=["user"])

# [1] 프로필 조회
@router.get("/profile", response_model=User)
async def get_user_profile(
    current_user: User = Depends(get_current_user)
):
    return current_user

# [2] 프로필 업데이트 (이름)
@router.put("/profile", response_model=User)
async def update_user_profile(
    profile_in: ProfileUpdate,
    db: RecordStore = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    # 가입 계정들은 id 를 공유하므로 email 로 row 를 특정한다
    update_data = profile_in.model_dump(exclude_unset=True)
    await db.from_(USERS).update(update_data).eq("email", current_user.email)
    return current_user.model_copy(update=update_data)

# [3] 담당 스태프 선택지 (관리자 전용)
@router.get("/staff", response_model=List[StaffOption])
async def list_staff(
    db: RecordStore = Depends(get_db),
    _admin: User = Depends(require_admin),
):
    """활성 사용자 목록 (이름순). 고객 등록 시 담당자 선택에 사용"""
    return await (
        db.from_(USERS).select("id", "name")
        .eq("active", True)
        .order("name")
    )
