"""
Story tools: top stories, story details, comment threads and keyword search.

These sit on top of ItemStore, CommentTreeBuilder and ContentRetriever and
clamp caller parameters to the ranges the tools advertise.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any, Optional

from hn_fetch.comments import CommentTreeBuilder
from hn_fetch.constants import (
    COMMENT_FANOUT_CAP,
    COMMENTS_LIMIT_DEFAULT,
    COMMENTS_LIMIT_MAX,
    COMMENTS_MAX_DEPTH_DEFAULT,
    COMMENTS_MAX_DEPTH_MAX,
    COMMENTS_MIN_SCORE_DEFAULT,
    DETAILS_COMMENT_DEPTH,
    SEARCH_HOURS_DEFAULT,
    SEARCH_HOURS_MAX,
    SEARCH_LIMIT_DEFAULT,
    SEARCH_LIMIT_MAX,
    SEARCH_SCAN_COUNT,
    TOP_STORIES_DEFAULT,
    TOP_STORIES_MAX,
)
from hn_fetch.errors import StoryNotFoundError
from hn_fetch.items import ItemStore, item_time_ts, normalize_time
from hn_fetch.logging_config import get_logger
from hn_fetch.models import FetchRequest, Item, Story
from hn_fetch.render import render_thread
from hn_fetch.retriever import ContentRetriever

logger = get_logger(__name__)


def _clamp(value: Optional[int], default: int, upper: int, lower: int = 1) -> int:
    if not value:
        value = default
    return max(lower, min(int(value), upper))


def story_from_item(item: Item) -> Story:
    return Story(
        id=int(item.get("id", 0)),
        title=str(item.get("title") or ""),
        url=item.get("url") or None,
        by=item.get("by"),
        score=int(item.get("score") or 0),
        time=normalize_time(item.get("time")),
        descendants=int(item.get("descendants") or 0),
        text=item.get("text") or None,
        kids=list(item.get("kids") or []),
    )


def _is_live_story(item: Optional[Item]) -> bool:
    return bool(
        item
        and item.get("type") == "story"
        and not item.get("deleted")
        and not item.get("dead")
    )


async def _fetch_stories(store: ItemStore, ids: list[int]) -> list[Item]:
    items = await asyncio.gather(*[store.get_item(sid) for sid in ids])
    return [item for item in items if _is_live_story(item)]


async def get_top_stories(
    store: ItemStore,
    count: Optional[int] = TOP_STORIES_DEFAULT,
    include_text: bool = False,
) -> list[dict[str, Any]]:
    count = _clamp(count, TOP_STORIES_DEFAULT, TOP_STORIES_MAX)
    ids = (await store.list_top_ids())[:count]
    items = await _fetch_stories(store, ids)
    logger.info("top_stories_fetched", requested=count, returned=len(items))
    return [story_from_item(i).to_dict(include_text=include_text) for i in items]


async def get_story(store: ItemStore, story_id: int) -> Story:
    item = await store.get_item(story_id)
    if item is None or not _is_live_story(item):
        raise StoryNotFoundError(story_id)
    return story_from_item(item)


async def get_story_details(
    store: ItemStore,
    retriever: Optional[ContentRetriever],
    story_id: int,
    include_comments: bool = False,
    include_markdown: bool = False,
) -> dict[str, Any]:
    story = await get_story(store, story_id)

    if include_comments and story.kids:
        builder = CommentTreeBuilder(store)
        story.comments = await builder.build(
            story.kids[:COMMENT_FANOUT_CAP], DETAILS_COMMENT_DEPTH
        )

    if include_markdown and story.url and retriever is not None:
        result = await retriever.fetch_markdown(FetchRequest(url=story.url))
        if result.is_error:
            logger.warning("story_markdown_failed", story_id=story_id, error=result.content)
        else:
            story.text = result.content

    return story.to_dict()


async def get_story_comments(
    store: ItemStore,
    story_id: int,
    min_score: Optional[int] = COMMENTS_MIN_SCORE_DEFAULT,
    max_depth: Optional[int] = COMMENTS_MAX_DEPTH_DEFAULT,
    limit: Optional[int] = COMMENTS_LIMIT_DEFAULT,
) -> str:
    max_depth = _clamp(max_depth, COMMENTS_MAX_DEPTH_DEFAULT, COMMENTS_MAX_DEPTH_MAX)
    limit = _clamp(limit, COMMENTS_LIMIT_DEFAULT, COMMENTS_LIMIT_MAX)
    story = await get_story(store, story_id)

    builder = CommentTreeBuilder(store)
    tree = await builder.build(story.kids, max_depth, min_score or 0)
    return render_thread(tree[:limit], story.title, story.id, story.descendants)


async def search_stories(
    store: ItemStore,
    query: str,
    limit: Optional[int] = SEARCH_LIMIT_DEFAULT,
    time_range_hours: Optional[int] = SEARCH_HOURS_DEFAULT,
) -> dict[str, Any]:
    limit = _clamp(limit, SEARCH_LIMIT_DEFAULT, SEARCH_LIMIT_MAX)
    hours = _clamp(time_range_hours, SEARCH_HOURS_DEFAULT, SEARCH_HOURS_MAX)

    ids = (await store.list_top_ids())[:SEARCH_SCAN_COUNT]
    items = await _fetch_stories(store, ids)

    cutoff = time.time() - hours * 3600
    needle = query.lower()
    matches: list[dict[str, Any]] = []
    for item in items:
        if item_time_ts(item.get("time")) < cutoff:
            continue
        if not any(
            needle in str(item.get(key) or "").lower()
            for key in ("title", "text", "url")
        ):
            continue
        matches.append(story_from_item(item).to_dict(include_text=False))
        if len(matches) >= limit:
            break

    return {
        "query": query,
        "time_range_hours": hours,
        "results_count": len(matches),
        "stories": matches,
    }
