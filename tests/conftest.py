import asyncio
from typing import Optional

import pytest


def make_comment(cid, score=None, kids=(), parent=None, **fields):
    item = {
        "id": cid,
        "type": "comment",
        "by": f"user{cid}",
        "time": 1700000000 + cid,
        "text": f"Comment {cid}",
        "kids": list(kids),
    }
    if score is not None:
        item["score"] = score
    if parent is not None:
        item["parent"] = parent
    item.update(fields)
    return item


def make_story(sid, kids=(), **fields):
    item = {
        "id": sid,
        "type": "story",
        "by": "author",
        "title": f"Story {sid}",
        "url": f"https://example.com/{sid}",
        "score": 100,
        "time": 1700000000,
        "descendants": len(kids),
        "kids": list(kids),
    }
    item.update(fields)
    return item


class FakeItemStore:
    """In-memory stand-in for ItemStore that records lookups."""

    def __init__(self, items, top_ids=None, failing=(), delays=None):
        self.items = {item["id"]: item for item in items}
        self.top_ids = list(top_ids or [])
        self.failing = set(failing)
        self.delays = delays or {}
        self.calls: list[int] = []

    async def get_item(self, item_id: int) -> Optional[dict]:
        self.calls.append(item_id)
        if item_id in self.delays:
            await asyncio.sleep(self.delays[item_id])
        if item_id in self.failing:
            raise RuntimeError(f"lookup for {item_id} blew up")
        return self.items.get(item_id)

    async def list_top_ids(self) -> list[int]:
        return self.top_ids


@pytest.fixture
def public_resolver():
    calls: list[str] = []

    async def resolve(host: str) -> list[str]:
        calls.append(host)
        return ["93.184.216.34"]

    resolve.calls = calls
    return resolve
