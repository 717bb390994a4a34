from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status

from salon.db import RecordStore, get_db
from salon.models import CLIENTS, ROLE_ADMIN, USERS, Client, User
from salon.query import Query
from salon.schemas import ClientCreate, ClientUpdate
from salon.services.auth_service import get_current_user

router = APIRouter(prefix="/clients", tags=["clients"])


def client_query(db: RecordStore) -> Query:
    # 담당 스태프 이름은 조회 시점에 users 에서 붙인다
    return db.from_(CLIENTS).select().join("staff", USERS, "primary_staff_id")


def _matches_keyword(client: dict, keyword: str) -> bool:
    kw = keyword.lower()
    contact = client.get("contact") or ""
    return kw in client["name"].lower() or kw in contact.lower()


async def get_client_or_404(db: RecordStore, client_id: str) -> dict:
    client = await client_query(db).eq("id", client_id).single()
    if client is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Client not found")
    return client


@router.get("", response_model=List[Client])
async def list_clients(
    keyword: Optional[str] = None,
    db: RecordStore = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """고객 목록 (등록일 최신순). keyword 는 이름/연락처 부분 일치"""
    clients = await client_query(db).order("created_at", ascending=False)
    if keyword:
        clients = [c for c in clients if _matches_keyword(c, keyword)]
    return clients


@router.post("", response_model=Client, status_code=status.HTTP_201_CREATED)
async def create_client(
    client_in: ClientCreate,
    db: RecordStore = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    data = client_in.model_dump()
    data["contact"] = data["contact"] or None
    # 담당자 지정은 관리자만. 스태프가 등록하면 본인이 담당
    if current_user.role != ROLE_ADMIN or not data["primary_staff_id"]:
        data["primary_staff_id"] = current_user.id

    created = await db.from_(CLIENTS).insert(data)
    return await get_client_or_404(db, created["id"])


@router.get("/{client_id}", response_model=Client)
async def get_client(
    client_id: str,
    db: RecordStore = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await get_client_or_404(db, client_id)


@router.put("/{client_id}", response_model=Client)
async def update_client(
    client_id: str,
    client_in: ClientUpdate,
    db: RecordStore = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    await get_client_or_404(db, client_id)

    update_data = {
        k: v for k, v in client_in.model_dump(exclude_unset=True).items()
        # contact / primary_staff_id 는 null 로 비울 수 있음
        if v is not None or k in ("contact", "primary_staff_id")
    }
    if "contact" in update_data:
        update_data["contact"] = update_data["contact"] or None
    if current_user.role != ROLE_ADMIN:
        update_data.pop("primary_staff_id", None)
    if not update_data:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="업데이트할 내용이 없습니다."
        )

    await db.from_(CLIENTS).update(update_data).eq("id", client_id)
    return await get_client_or_404(db, client_id)
