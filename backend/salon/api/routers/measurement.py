from datetime import date, datetime, time, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status

from salon.db import RecordStore, get_db
from salon.models import CLIENTS, MEASUREMENTS, Measurement, User
from salon.query import Query
from salon.schemas import MeasurementCreate, MeasurementSummary
from salon.services.auth_service import get_current_user
from salon.services.measurement_stats import default_window, range_bounds, summarize

router = APIRouter(prefix="/measurements", tags=["measurements"])

WEIGHT = "weight"


def weight_query(
    db: RecordStore,
    client_id: str,
    start: Optional[date],
    end: Optional[date],
) -> Query:
    """고객 한 명의 체중 기록을 기간 조건으로 (측정일 오름차순)"""
    default_start, default_end = default_window()
    lower, upper = range_bounds(start or default_start, end or default_end)
    if lower > upper:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="start must be on or before end",
        )
    return (
        db.from_(MEASUREMENTS).select()
        .join("client", CLIENTS, "client_id")
        .eq("client_id", client_id)
        .eq("type", WEIGHT)
        .gte("measured_at", lower)
        .lte("measured_at", upper)
        .order("measured_at", ascending=True)
    )


@router.get("", response_model=List[Measurement])
async def list_measurements(
    client_id: str,
    start: Optional[date] = None,
    end: Optional[date] = None,
    db: RecordStore = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await weight_query(db, client_id, start, end)


@router.get("/summary", response_model=MeasurementSummary)
async def measurement_summary(
    client_id: str,
    start: Optional[date] = None,
    end: Optional[date] = None,
    db: RecordStore = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """기간 내 첫 기록 대비 최근 기록의 증감"""
    rows = await weight_query(db, client_id, start, end)
    return summarize(rows)


@router.post("", response_model=Measurement, status_code=status.HTTP_201_CREATED)
async def create_measurement(
    measurement_in: MeasurementCreate,
    db: RecordStore = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if await db.find_by(CLIENTS, "id", measurement_in.client_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Client not found")

    measured_at = datetime.combine(measurement_in.measured_at, time.min, tzinfo=timezone.utc)
    created = await db.from_(MEASUREMENTS).insert([{
        "client_id": measurement_in.client_id,
        "type": WEIGHT,
        "value": measurement_in.value,
        "measured_at": measured_at.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
        "created_by": current_user.id,
    }])
    return await (
        db.from_(MEASUREMENTS).select()
        .join("client", CLIENTS, "client_id")
        .eq("id", created["id"])
        .single()
    )
