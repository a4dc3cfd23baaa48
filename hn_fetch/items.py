from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Optional, cast

import httpx

from hn_fetch.constants import HN_API_BASE, HN_REQUEST_TIMEOUT
from hn_fetch.errors import ItemStoreError
from hn_fetch.models import Item

logger = logging.getLogger(__name__)


def normalize_time(value: object) -> Optional[str]:
    """
    Normalize an item timestamp to ISO-8601 UTC with millisecond precision.

    Accepts unix seconds (the HN API format) or an ISO string; anything
    unparseable yields None.
    """
    if value is None or value == "":
        return None
    try:
        if isinstance(value, bool):
            return None
        if isinstance(value, (int, float)):
            dt = datetime.fromtimestamp(value, tz=UTC)
        elif isinstance(value, str):
            dt = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
            if dt.tzinfo is None:
                dt = dt.replace(tzinfo=UTC)
        else:
            return None
    except (ValueError, OverflowError, OSError):
        return None
    return dt.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def item_time_ts(value: object) -> int:
    """Unix seconds for an item's raw or normalized time; 0 when unknown."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return int(value)
    iso = normalize_time(value)
    if iso is None:
        return 0
    return int(datetime.fromisoformat(iso.replace("Z", "+00:00")).timestamp())


class ItemStore:
    """
    Read access to the Hacker News item API.

    Single-item lookups never raise: a missing item, an error status and a
    transport failure all come back as None. The top-story listing raises
    ItemStoreError instead, since callers have nothing to fall back to.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        base_url: str = HN_API_BASE,
        timeout: float = HN_REQUEST_TIMEOUT,
    ) -> None:
        self.client = client
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    async def get_item(self, item_id: int) -> Optional[Item]:
        try:
            resp: httpx.Response = await self.client.get(
                f"{self.base_url}/item/{item_id}.json", timeout=self.timeout
            )
            if resp.status_code != 200:
                logger.debug(f"Item {item_id} lookup returned {resp.status_code}")
                return None
            data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.debug(f"Failed to fetch item {item_id}: {e}")
            return None
        if not isinstance(data, dict):
            return None
        return cast(Item, data)

    async def list_top_ids(self) -> list[int]:
        try:
            resp: httpx.Response = await self.client.get(
                f"{self.base_url}/topstories.json", timeout=self.timeout
            )
            resp.raise_for_status()
            data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            raise ItemStoreError(f"Failed to fetch top stories: {e}") from e
        if not isinstance(data, list):
            raise ItemStoreError("Failed to fetch top stories: unexpected payload")
        return [i for i in data if isinstance(i, int)]
