from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status

from salon.config import SERVICE_MENU_OPTIONS
from salon.db import RecordStore, get_db
from salon.models import CLIENTS, USERS, VISITS, User, Visit
from salon.query import Query
from salon.schemas import VisitCreate, VisitUpdate
from salon.services.auth_service import get_current_user

router = APIRouter(prefix="/visits", tags=["visits"])


def visit_query(db: RecordStore) -> Query:
    return (
        db.from_(VISITS).select()
        .join("client", CLIENTS, "client_id")
        .join("staff", USERS, "created_by")
    )


def _matches_keyword(visit: dict, keyword: str) -> bool:
    kw = keyword.lower()
    client_name = (visit.get("client") or {}).get("name") or ""
    return kw in client_name.lower() or kw in visit["service_menu"].lower()


async def _ensure_client(db: RecordStore, client_id: str) -> None:
    if await db.find_by(CLIENTS, "id", client_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Client not found")


async def get_visit_or_404(db: RecordStore, visit_id: str) -> dict:
    visit = await visit_query(db).eq("id", visit_id).single()
    if visit is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Visit not found")
    return visit


@router.get("/menus", response_model=List[str])
async def list_service_menus():
    return SERVICE_MENU_OPTIONS


@router.get("", response_model=List[Visit])
async def list_visits(
    client_id: Optional[str] = None,
    keyword: Optional[str] = None,
    db: RecordStore = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """카르테 목록 (방문일 최신순)"""
    q = visit_query(db)
    if client_id:
        q = q.eq("client_id", client_id)
    visits = await q.order("visit_date", ascending=False)
    if keyword:
        visits = [v for v in visits if _matches_keyword(v, keyword)]
    return visits


@router.post("", response_model=Visit, status_code=status.HTTP_201_CREATED)
async def create_visit(
    visit_in: VisitCreate,
    db: RecordStore = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    await _ensure_client(db, visit_in.client_id)

    data = visit_in.model_dump()
    data["visit_date"] = visit_in.visit_date.isoformat()
    data["created_by"] = current_user.id

    created = await db.from_(VISITS).insert([data])
    return await get_visit_or_404(db, created["id"])


@router.get("/{visit_id}", response_model=Visit)
async def get_visit(
    visit_id: str,
    db: RecordStore = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await get_visit_or_404(db, visit_id)


@router.put("/{visit_id}", response_model=Visit)
async def update_visit(
    visit_id: str,
    visit_in: VisitUpdate,
    db: RecordStore = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    await get_visit_or_404(db, visit_id)

    update_data = visit_in.model_dump(exclude_unset=True, exclude_none=True)
    if update_data.get("client_id"):
        await _ensure_client(db, update_data["client_id"])
    if "visit_date" in update_data:
        update_data["visit_date"] = update_data["visit_date"].isoformat()
    # 수정한 사람이 작성자가 된다
    update_data["created_by"] = current_user.id

    await db.from_(VISITS).update(update_data).eq("id", visit_id)
    return await get_visit_or_404(db, visit_id)
