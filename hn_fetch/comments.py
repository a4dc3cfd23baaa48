from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import Optional

from hn_fetch.constants import COMMENT_FANOUT_CAP
from hn_fetch.items import ItemStore, normalize_time
from hn_fetch.models import Comment, Item

logger = logging.getLogger(__name__)


def _is_live_comment(item: Item) -> bool:
    return (
        item.get("type") == "comment"
        and not item.get("deleted")
        and not item.get("dead")
    )


def sort_by_score(comments: Sequence[Comment]) -> list[Comment]:
    """
    Order siblings by descending score.

    The sort is stable, so equal scores keep their fan-out position rather
    than fetch completion order.
    """
    return sorted(comments, key=lambda c: -c.rank_score)


class CommentTreeBuilder:
    """
    Builds a bounded, score-ordered comment tree from candidate ids.

    Each level fetches at most `fanout` ids concurrently. Lookups that fail,
    return nothing, or return a deleted/dead/non-comment item are dropped
    without affecting their siblings.
    """

    def __init__(self, store: ItemStore, fanout: int = COMMENT_FANOUT_CAP) -> None:
        self.store = store
        self.fanout = fanout

    async def build(
        self,
        ids: Sequence[int],
        max_depth: int,
        min_score: int = 0,
        depth: int = 0,
    ) -> list[Comment]:
        if depth >= max_depth or not ids:
            return []

        candidates = list(ids)[: self.fanout]
        results = await asyncio.gather(
            *[self._build_node(cid, max_depth, min_score, depth) for cid in candidates],
            return_exceptions=True,
        )

        comments: list[Comment] = []
        for cid, res in zip(candidates, results):
            if isinstance(res, BaseException):
                if not isinstance(res, Exception):
                    raise res
                logger.debug(f"Dropping comment {cid}: {res}")
                continue
            if res is not None:
                comments.append(res)
        return sort_by_score(comments)

    async def _build_node(
        self, comment_id: int, max_depth: int, min_score: int, depth: int
    ) -> Optional[Comment]:
        item = await self.store.get_item(comment_id)
        if item is None or not _is_live_comment(item):
            return None

        score = item.get("score")
        if (score or 0) < min_score:
            return None

        kids = tuple(item.get("kids") or ())
        replies: list[Comment] = []
        if kids and depth < max_depth - 1:
            replies = await self.build(kids, max_depth, min_score, depth + 1)

        return Comment(
            id=int(item.get("id", comment_id)),
            depth=depth,
            by=item.get("by"),
            time=normalize_time(item.get("time")),
            score=score,
            text=item.get("text"),
            parent=item.get("parent"),
            kids=kids,
            replies=tuple(replies),
        )
