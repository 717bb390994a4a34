"""Tests for the chainable Query builder over the seeded RecordStore."""
from __future__ import annotations

import pytest

from salon.db import RecordStore


@pytest.mark.asyncio
async def test_order_by_measured_at_ascending(store):
    rows = await (
        store.from_("measurements").select()
        .eq("client_id", "client-1")
        .order("measured_at", ascending=True)
        .all()
    )
    assert [r["value"] for r in rows] == [55.5, 54.8, 54.2]
    assert [r["measured_at"][:10] for r in rows] == ["2024-01-15", "2024-01-22", "2024-01-29"]


@pytest.mark.asyncio
async def test_order_descending(store):
    rows = await store.from_("measurements").select().order("measured_at", ascending=False)
    assert [r["value"] for r in rows] == [54.2, 54.8, 55.5]


@pytest.mark.asyncio
async def test_predicates_compose_as_and(store):
    rows = await (
        store.from_("measurements").select()
        .eq("client_id", "client-1")
        .gte("measured_at", "2024-01-20")
        .lte("measured_at", "2024-01-25T23:59:59")
    )
    assert [r["id"] for r in rows] == ["measurement-2"]


@pytest.mark.asyncio
async def test_equality_and_range_on_other_client_is_empty(store):
    rows = await (
        store.from_("measurements").select()
        .eq("client_id", "client-2")
        .gte("measured_at", "2024-01-01")
    )
    assert rows == []


@pytest.mark.asyncio
async def test_single_returns_first_match_or_none(store):
    first = await store.from_("measurements").select().eq("client_id", "client-1").single()
    assert first["id"] == "measurement-1"

    missing = await store.from_("clients").select().eq("id", "nope").single()
    assert missing is None


@pytest.mark.asyncio
async def test_single_respects_ordering(store):
    latest = await (
        store.from_("measurements").select()
        .order("measured_at", ascending=False)
        .single()
    )
    assert latest["value"] == 54.2


@pytest.mark.asyncio
async def test_later_order_replaces_earlier(store):
    rows = await (
        store.from_("clients").select()
        .order("name")
        .order("created_at", ascending=False)
    )
    assert [r["id"] for r in rows] == ["client-2", "client-1"]


@pytest.mark.asyncio
async def test_select_projects_columns(store):
    rows = await store.from_("users").select("id", "name").order("name")
    assert all(set(r) == {"id", "name"} for r in rows)


@pytest.mark.asyncio
async def test_select_star_keeps_all_fields(store):
    row = await store.from_("users").select("*").eq("id", "mock-admin-id").single()
    assert row["email"] == "admin@salon.com"
    assert row["role"] == "admin"


@pytest.mark.asyncio
async def test_predicate_on_missing_field_never_matches(store):
    rows = await store.from_("clients").select().eq("nickname", None)
    assert rows == []


@pytest.mark.asyncio
async def test_range_predicate_skips_null_values():
    store = RecordStore({"items": [{"id": "a", "n": None}, {"id": "b", "n": 3}]})
    rows = await store.from_("items").select().gte("n", 1)
    assert [r["id"] for r in rows] == ["b"]


@pytest.mark.asyncio
async def test_ties_keep_table_order():
    store = RecordStore({"items": [
        {"id": "a", "rank": 1},
        {"id": "b", "rank": 0},
        {"id": "c", "rank": 1},
    ]})
    asc = await store.from_("items").select().order("rank")
    desc = await store.from_("items").select().order("rank", ascending=False)
    assert [r["id"] for r in asc] == ["b", "a", "c"]
    assert [r["id"] for r in desc] == ["a", "c", "b"]


@pytest.mark.asyncio
async def test_order_by_nullable_column_puts_nulls_last(store):
    await store.insert("clients", {"name": "連絡先なし", "contact": None, "notes": ""})
    await store.insert("clients", {"name": "項目なし", "notes": ""})

    asc = await store.from_("clients").select().order("contact")
    desc = await store.from_("clients").select().order("contact", ascending=False)

    asc_contacts = [r.get("contact") for r in asc]
    desc_contacts = [r.get("contact") for r in desc]
    assert asc_contacts[-2:] == [None, None]
    assert desc_contacts[-2:] == [None, None]
    assert asc_contacts[:-2] == sorted(asc_contacts[:-2])
    assert desc_contacts[:-2] == sorted(desc_contacts[:-2], reverse=True)
    assert [r["name"] for r in asc][-2:] == ["連絡先なし", "項目なし"]


@pytest.mark.asyncio
async def test_incomparable_values_sort_as_ties():
    store = RecordStore({"items": [
        {"id": "a", "v": "x"},
        {"id": "b", "v": 1},
        {"id": "c", "v": 0},
    ]})
    rows = await store.from_("items").select().order("v")
    assert [r["id"] for r in rows] == ["a", "c", "b"]


@pytest.mark.asyncio
async def test_join_attaches_referenced_name(store):
    visit = await (
        store.from_("visits").select()
        .join("client", "clients", "client_id")
        .join("staff", "users", "created_by")
        .eq("id", "visit-1")
        .single()
    )
    assert visit["client"] == {"name": "田中 花子"}
    assert visit["staff"] == {"name": "スタッフ"}


@pytest.mark.asyncio
async def test_join_with_dangling_reference_is_none():
    store = RecordStore({
        "users": [],
        "clients": [{"id": "c1", "name": "x", "primary_staff_id": "ghost"}],
    })
    row = await store.from_("clients").select().join("staff", "users", "primary_staff_id").single()
    assert row["staff"] is None


@pytest.mark.asyncio
async def test_projection_keeps_join_alias(store):
    row = await (
        store.from_("clients").select("id")
        .join("staff", "users", "primary_staff_id")
        .eq("id", "client-2")
        .single()
    )
    assert row == {"id": "client-2", "staff": {"name": "管理者"}}


@pytest.mark.asyncio
async def test_builder_is_reusable(store):
    base = store.from_("measurements").select().eq("client_id", "client-1")
    narrowed = base.gte("measured_at", "2024-01-25")

    assert len(await base) == 3
    assert len(await narrowed) == 1
    assert len(await base) == 3


@pytest.mark.asyncio
async def test_results_are_copies(store):
    row = await store.from_("clients").select().eq("id", "client-1").single()
    row["name"] = "changed"

    again = await store.from_("clients").select().eq("id", "client-1").single()
    assert again["name"] == "田中 花子"


@pytest.mark.asyncio
async def test_unknown_table_reads_empty(store):
    assert await store.from_("nothing").select() == []
