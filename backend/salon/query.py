# backend/salon/query.py
"""
RecordStore 위에서 동작하는 체이닝 방식 조회 빌더.

    rows = await (
        store.from_("measurements").select()
        .eq("client_id", "client-1")
        .gte("measured_at", "2024-01-01")
        .order("measured_at")
    )

- 조건(eq/gte/lte)은 붙인 순서대로 AND 로 적용된다. OR 는 없다.
- 정렬은 하나만 유지된다 (order 를 다시 부르면 덮어씀).
- 평가 순서: 조건 -> 정렬 -> join -> 컬럼 선택.
- 모든 메서드는 새 Query 를 돌려주므로 중간 단계 객체를 재사용해도 안전하다.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from functools import cmp_to_key
from typing import TYPE_CHECKING, Any, Literal, Optional, Sequence, Tuple

if TYPE_CHECKING:
    from salon.db import RecordStore

FilterOp = Literal["eq", "gte", "lte"]


@dataclass(frozen=True)
class Filter:
    op: FilterOp
    column: str
    value: Any

    def matches(self, row: dict) -> bool:
        # 필드가 없는 row 는 어떤 조건에도 걸리지 않음
        if self.column not in row:
            return False
        current = row[self.column]
        if self.op == "eq":
            return current == self.value
        if current is None:
            return False
        if self.op == "gte":
            return current >= self.value
        return current <= self.value


@dataclass(frozen=True)
class OrderBy:
    column: str
    ascending: bool = True


@dataclass(frozen=True)
class Join:
    """local_key 로 다른 테이블의 row 를 찾아 {alias: {...}} 로 붙인다."""
    alias: str
    table: str
    local_key: str
    foreign_key: str = "id"
    columns: Tuple[str, ...] = ("name",)


def _compare(a: Any, b: Any) -> int:
    # 비교할 수 없는 타입끼리는 같은 값으로 본다
    try:
        return (a > b) - (a < b)
    except TypeError:
        return 0


def _sort_rows(rows: list[dict], order_by: OrderBy) -> list[dict]:
    """
    값이 없거나 None 인 row 는 방향과 상관없이 맨 뒤에 (테이블 순서대로) 붙는다.
    sorted 는 stable 이라 동일 값의 순서는 원래 테이블 순서를 따른다.
    """
    column = order_by.column
    present = [r for r in rows if r.get(column) is not None]
    missing = [r for r in rows if r.get(column) is None]
    present = sorted(
        present,
        key=cmp_to_key(lambda x, y: _compare(x[column], y[column])),
        reverse=not order_by.ascending,
    )
    return present + missing


@dataclass(frozen=True)
class Query:
    store: "RecordStore" = field(repr=False)
    table: str
    filters: Tuple[Filter, ...] = ()
    order_by: Optional[OrderBy] = None
    joins: Tuple[Join, ...] = ()
    columns: Optional[Tuple[str, ...]] = None

    # --- 조건 ---
    def eq(self, column: str, value: Any) -> "Query":
        return self._with_filter("eq", column, value)

    def gte(self, column: str, value: Any) -> "Query":
        return self._with_filter("gte", column, value)

    def lte(self, column: str, value: Any) -> "Query":
        return self._with_filter("lte", column, value)

    def _with_filter(self, op: FilterOp, column: str, value: Any) -> "Query":
        return replace(self, filters=self.filters + (Filter(op, column, value),))

    # --- 정렬 / 선택 / 조인 ---
    def order(self, column: str, ascending: bool = True) -> "Query":
        return replace(self, order_by=OrderBy(column, ascending))

    def select(self, *columns: str) -> "Query":
        if not columns or "*" in columns:
            return replace(self, columns=None)
        return replace(self, columns=tuple(columns))

    def join(
        self,
        alias: str,
        table: str,
        local_key: str,
        columns: Sequence[str] = ("name",),
        foreign_key: str = "id",
    ) -> "Query":
        link = Join(alias, table, local_key, foreign_key, tuple(columns))
        return replace(self, joins=self.joins + (link,))

    # --- 실행 ---
    def _materialize(self) -> list[dict]:
        rows = list(self.store.table(self.table))
        for f in self.filters:
            rows = [r for r in rows if f.matches(r)]

        if self.order_by is not None:
            rows = _sort_rows(rows, self.order_by)

        out = []
        for row in rows:
            item = dict(row)
            for j in self.joins:
                item[j.alias] = self._lookup(j, row.get(j.local_key))
            if self.columns is not None:
                keep = set(self.columns) | {j.alias for j in self.joins}
                item = {k: v for k, v in item.items() if k in keep}
            out.append(item)
        return out

    def _lookup(self, j: Join, ref: Any) -> Optional[dict]:
        if ref is None:
            return None
        for other in self.store.table(j.table):
            if other.get(j.foreign_key) == ref:
                return {c: other.get(c) for c in j.columns}
        return None

    async def all(self) -> list[dict]:
        return self._materialize()

    async def single(self) -> Optional[dict]:
        """첫 번째 결과 또는 None. 결과가 없어도 에러가 아니다."""
        rows = self._materialize()
        return rows[0] if rows else None

    def __await__(self):
        return self.all().__await__()
