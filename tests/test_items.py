import httpx
import pytest
import respx
from httpx import Response

from hn_fetch.constants import HN_API_BASE
from hn_fetch.errors import ItemStoreError
from hn_fetch.items import ItemStore, item_time_ts, normalize_time


class TestNormalizeTime:
    def test_unix_seconds(self):
        assert normalize_time(1700000000) == "2023-11-14T22:13:20.000Z"

    def test_iso_string_with_offset(self):
        assert normalize_time("2023-11-14T23:13:20+01:00") == "2023-11-14T22:13:20.000Z"

    def test_naive_iso_string_is_utc(self):
        assert normalize_time("2023-11-14T22:13:20") == "2023-11-14T22:13:20.000Z"

    def test_unparseable_values(self):
        assert normalize_time(None) is None
        assert normalize_time("") is None
        assert normalize_time("yesterday") is None
        assert normalize_time(True) is None
        assert normalize_time([1]) is None

    def test_item_time_ts(self):
        assert item_time_ts(1700000000) == 1700000000
        assert item_time_ts("2023-11-14T22:13:20.000Z") == 1700000000
        assert item_time_ts(None) == 0


@pytest.mark.asyncio
@respx.mock
async def test_get_item_returns_payload():
    respx.get(f"{HN_API_BASE}/item/8863.json").mock(
        return_value=Response(200, json={"id": 8863, "type": "story"})
    )
    async with httpx.AsyncClient() as client:
        item = await ItemStore(client).get_item(8863)
    assert item == {"id": 8863, "type": "story"}


@pytest.mark.asyncio
@respx.mock
async def test_get_item_absent_cases_collapse_to_none():
    respx.get(f"{HN_API_BASE}/item/1.json").mock(return_value=Response(200, text="null"))
    respx.get(f"{HN_API_BASE}/item/2.json").mock(return_value=Response(500))
    respx.get(f"{HN_API_BASE}/item/3.json").mock(
        side_effect=httpx.ConnectError("connection refused")
    )
    respx.get(f"{HN_API_BASE}/item/4.json").mock(
        return_value=Response(200, text="not json")
    )
    respx.get(f"{HN_API_BASE}/item/5.json").mock(
        side_effect=httpx.ReadTimeout("timed out")
    )
    async with httpx.AsyncClient() as client:
        store = ItemStore(client)
        for item_id in (1, 2, 3, 4, 5):
            assert await store.get_item(item_id) is None


@pytest.mark.asyncio
@respx.mock
async def test_custom_base_url():
    respx.get("http://hn.test/v0/item/7.json").mock(
        return_value=Response(200, json={"id": 7})
    )
    async with httpx.AsyncClient() as client:
        store = ItemStore(client, base_url="http://hn.test/v0/")
        assert await store.get_item(7) == {"id": 7}


@pytest.mark.asyncio
@respx.mock
async def test_list_top_ids():
    respx.get(f"{HN_API_BASE}/topstories.json").mock(
        return_value=Response(200, json=[3, 1, 2])
    )
    async with httpx.AsyncClient() as client:
        assert await ItemStore(client).list_top_ids() == [3, 1, 2]


@pytest.mark.asyncio
@respx.mock
async def test_list_top_ids_failure_surfaces():
    respx.get(f"{HN_API_BASE}/topstories.json").mock(return_value=Response(503))
    async with httpx.AsyncClient() as client:
        with pytest.raises(ItemStoreError):
            await ItemStore(client).list_top_ids()


@pytest.mark.asyncio
@respx.mock
async def test_list_top_ids_unexpected_payload():
    respx.get(f"{HN_API_BASE}/topstories.json").mock(
        return_value=Response(200, json={"error": "nope"})
    )
    async with httpx.AsyncClient() as client:
        with pytest.raises(ItemStoreError):
            await ItemStore(client).list_top_ids()
