# backend/salon/db.py
"""
메모리 기반 RecordStore.

실제 DB 대신 테이블 이름 -> row(dict) 리스트 매핑을 들고 있다.
프로세스가 재시작되면 seed 데이터로 되돌아간다. 삭제 연산은 없다.
"""
from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from fastapi import Request

from salon.query import Query
from salon.seed_data import seed_tables

logger = logging.getLogger(__name__)

RecordInput = Union[Mapping[str, Any], Sequence[Mapping[str, Any]]]


def utc_now_iso() -> str:
    """
    2024-01-25T10:00:00.000Z 형식 (seed 데이터와 문자열 비교 가능).
    밀리초 아래는 올림하므로 호출 시각보다 이르지 않다.
    """
    now = datetime.now(timezone.utc)
    if now.microsecond % 1000:
        now += timedelta(microseconds=1000 - now.microsecond % 1000)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class RecordStore:
    def __init__(self, seed: Optional[Mapping[str, List[dict]]] = None):
        self._tables: Dict[str, List[dict]] = {
            name: [dict(r) for r in rows] for name, rows in (seed or {}).items()
        }

    @classmethod
    def seeded(cls) -> "RecordStore":
        return cls(seed_tables())

    def table(self, name: str) -> List[dict]:
        # 없는 테이블은 빈 리스트처럼 읽힌다 (insert 시점에 생성)
        return self._tables.get(name, [])

    def table_names(self) -> List[str]:
        return list(self._tables)

    def from_(self, table: str) -> "TableRef":
        return TableRef(self, table)

    def query(self, table: str) -> Query:
        return Query(self, table)

    async def insert(self, table: str, data: RecordInput) -> dict:
        """
        dict 하나 또는 원소 하나짜리 리스트를 받는다 (리스트면 첫 원소만 사용).
        id / created_at 은 항상 새로 부여된다.
        """
        if isinstance(data, Mapping):
            record = dict(data)
        else:
            if not data:
                raise ValueError("insert requires at least one record")
            record = dict(data[0])

        record["id"] = str(uuid.uuid4())
        record["created_at"] = utc_now_iso()
        self._tables.setdefault(table, []).append(record)
        logger.info("inserted %s id=%s", table, record["id"])
        return dict(record)

    async def update(self, table: str, data: Mapping[str, Any], column: str, value: Any) -> Mapping[str, Any]:
        """
        column == value 인 첫 row 에 data 를 병합한다.
        반환값은 병합된 전체 row 가 아니라 넘겨받은 data 그대로다.
        일치하는 row 가 없으면 아무것도 바꾸지 않는다.
        """
        rows = self._tables.get(table, [])
        for index, row in enumerate(rows):
            if row.get(column) == value:
                rows[index] = {**row, **data}
                return data
        logger.warning("update on %s matched nothing (%s=%r)", table, column, value)
        return data

    async def find_by(self, table: str, column: str, value: Any) -> Optional[dict]:
        return await self.query(table).eq(column, value).single()


class UpdateBuilder:
    def __init__(self, store: RecordStore, table: str, data: Mapping[str, Any]):
        self._store = store
        self._table = table
        self._data = data

    async def eq(self, column: str, value: Any) -> Mapping[str, Any]:
        return await self._store.update(self._table, self._data, column, value)


class TableRef:
    """store.from_("clients").select()... 형태로 쓰기 위한 얇은 래퍼"""

    def __init__(self, store: RecordStore, table: str):
        self._store = store
        self._table = table

    def select(self, *columns: str) -> Query:
        return self._store.query(self._table).select(*columns)

    async def insert(self, data: RecordInput) -> dict:
        return await self._store.insert(self._table, data)

    def update(self, data: Mapping[str, Any]) -> UpdateBuilder:
        return UpdateBuilder(self._store, self._table, data)


async def get_db(request: Request):
    # lifespan 에서 만든 스토어를 그대로 주입
    yield request.app.state.store
