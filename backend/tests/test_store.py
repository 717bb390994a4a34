"""Tests for RecordStore insert/update semantics."""
from __future__ import annotations

import copy
from datetime import datetime, timezone

import pytest

from salon.db import RecordStore, utc_now_iso


def _parse(ts: str) -> datetime:
    return datetime.fromisoformat(ts.replace("Z", "+00:00"))


@pytest.mark.asyncio
async def test_insert_assigns_fresh_ids(store):
    existing = {r["id"] for r in store.table("visits")}
    new_ids = set()
    for i in range(50):
        row = await store.insert("visits", {"client_id": "client-1", "service_menu": f"m{i}"})
        new_ids.add(row["id"])

    assert len(new_ids) == 50
    assert not new_ids & existing


@pytest.mark.asyncio
async def test_insert_timestamp_not_before_call(store):
    before = datetime.now(timezone.utc)
    row = await store.insert("clients", {"name": "新規"})
    assert _parse(row["created_at"]) >= before
    assert row["created_at"].endswith("Z")


@pytest.mark.asyncio
async def test_insert_appends_and_is_visible(store):
    row = await store.insert("clients", {"name": "新規", "notes": ""})
    assert store.table("clients")[-1]["id"] == row["id"]

    found = await store.from_("clients").select().eq("id", row["id"]).single()
    assert found["name"] == "新規"


@pytest.mark.asyncio
async def test_insert_accepts_one_element_list(store):
    row = await store.from_("users").insert([{"email": "a@b.c", "name": "A"}])
    assert row["email"] == "a@b.c"
    assert len(store.table("users")) == 3


@pytest.mark.asyncio
async def test_insert_overrides_supplied_id(store):
    row = await store.insert("clients", {"id": "client-1", "name": "dup"})
    assert row["id"] != "client-1"


@pytest.mark.asyncio
async def test_insert_does_not_mutate_caller_dict(store):
    data = {"name": "x"}
    await store.insert("clients", data)
    assert data == {"name": "x"}


@pytest.mark.asyncio
async def test_insert_empty_list_rejected(store):
    with pytest.raises(ValueError):
        await store.insert("clients", [])


@pytest.mark.asyncio
async def test_insert_creates_unknown_table():
    store = RecordStore()
    await store.insert("notes", {"text": "hi"})
    assert store.table_names() == ["notes"]


@pytest.mark.asyncio
async def test_update_changes_only_first_match():
    store = RecordStore({"items": [
        {"id": "a", "group": "x", "v": 0},
        {"id": "b", "group": "y", "v": 0},
        {"id": "c", "group": "y", "v": 0},
        {"id": "d", "group": "z", "v": 0},
    ]})
    await store.update("items", {"v": 1}, "group", "y")
    assert [r["v"] for r in store.table("items")] == [0, 1, 0, 0]


@pytest.mark.asyncio
async def test_update_returns_partial_not_merged_row(store):
    result = await store.from_("clients").update({"notes": "更新"}).eq("id", "client-1")
    assert result == {"notes": "更新"}

    row = await store.from_("clients").select().eq("id", "client-1").single()
    assert row["notes"] == "更新"
    assert row["name"] == "田中 花子"


@pytest.mark.asyncio
async def test_update_without_match_is_noop(store):
    before = copy.deepcopy(store.table("clients"))
    result = await store.update("clients", {"name": "誰か"}, "id", "missing")
    assert result == {"name": "誰か"}
    assert store.table("clients") == before


@pytest.mark.asyncio
async def test_update_on_unknown_table_is_noop(store):
    await store.update("nothing", {"a": 1}, "id", "x")
    assert "nothing" not in store.table_names()


@pytest.mark.asyncio
async def test_find_by(store):
    assert (await store.find_by("users", "email", "staff@salon.com"))["id"] == "mock-staff-id"
    assert await store.find_by("users", "email", "nobody@salon.com") is None


@pytest.mark.asyncio
async def test_seeded_stores_are_independent():
    a = RecordStore.seeded()
    b = RecordStore.seeded()
    await a.update("clients", {"name": "changed"}, "id", "client-1")
    assert b.table("clients")[0]["name"] == "田中 花子"


def test_seed_has_four_tables(store):
    assert sorted(store.table_names()) == ["clients", "measurements", "users", "visits"]
    assert [u["id"] for u in store.table("users")] == ["mock-admin-id", "mock-staff-id"]


def test_utc_now_iso_format():
    ts = utc_now_iso()
    parsed = _parse(ts)
    assert parsed.tzinfo == timezone.utc
    assert len(ts) == len("2024-01-25T10:00:00.000Z")


def test_utc_now_iso_never_earlier_than_now():
    for _ in range(200):
        before = datetime.now(timezone.utc)
        assert _parse(utc_now_iso()) >= before
