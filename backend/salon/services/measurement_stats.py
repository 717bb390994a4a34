from __future__ import annotations
import calendar
from datetime import date
from typing import Optional, Sequence, Tuple

from salon.config import DEFAULT_MEASUREMENT_WINDOW_MONTHS
from salon.schemas import MeasurementSummary


def months_before(day: date, months: int) -> date:
    # 말일 보정: 5/31 의 3개월 전 -> 2/28(29)
    total = day.year * 12 + (day.month - 1) - months
    year, month = divmod(total, 12)
    month += 1
    last = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last))


def default_window(today: Optional[date] = None) -> Tuple[date, date]:
    """기본 조회 기간: 오늘 기준 최근 N개월"""
    today = today or date.today()
    return months_before(today, DEFAULT_MEASUREMENT_WINDOW_MONTHS), today


def range_bounds(start: date, end: date) -> Tuple[str, str]:
    # measured_at 은 ISO 문자열이라 종료일은 그날 23:59:59 까지 포함시킨다
    return start.isoformat(), f"{end.isoformat()}T23:59:59"


def summarize(rows: Sequence[dict]) -> MeasurementSummary:
    """측정일 오름차순 row 들로 체중 변화 요약을 만든다."""
    if not rows:
        return MeasurementSummary(count=0)

    first = rows[0]["value"]
    latest = rows[-1]["value"]
    summary = MeasurementSummary(count=len(rows), first=first, latest=latest)
    if len(rows) >= 2:
        diff = round(latest - first, 1)
        summary.diff = diff
        summary.is_decrease = diff < 0
    return summary
