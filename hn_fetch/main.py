from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import httpx
from fastapi import Depends, FastAPI, HTTPException
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field

from hn_fetch import stories
from hn_fetch.config import Settings, get_settings
from hn_fetch.constants import DEFAULT_MAX_LENGTH, DEFAULT_START_INDEX
from hn_fetch.errors import ItemStoreError, StoryNotFoundError
from hn_fetch.items import ItemStore
from hn_fetch.logging_config import configure_logging, get_logger
from hn_fetch.models import FetchRequest
from hn_fetch.retriever import ContentRetriever

logger = get_logger(__name__)

FETCH_MODES = ("html", "json", "text", "markdown")


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    configure_logging()
    yield


app = FastAPI(title="HN Fetch API", lifespan=lifespan)


class FetchBody(BaseModel):
    url: str
    headers: Optional[dict[str, str]] = None
    max_length: int = Field(DEFAULT_MAX_LENGTH, ge=0)
    start_index: int = Field(DEFAULT_START_INDEX, ge=0)


def load_settings() -> Settings:
    return get_settings()


async def get_client(
    settings: Settings = Depends(load_settings),
) -> AsyncIterator[httpx.AsyncClient]:
    async with httpx.AsyncClient(timeout=settings.timeout) as client:
        yield client


def get_store(
    client: httpx.AsyncClient = Depends(get_client),
    settings: Settings = Depends(load_settings),
) -> ItemStore:
    return ItemStore(client, base_url=settings.base_url, timeout=settings.timeout)


def get_retriever(
    client: httpx.AsyncClient = Depends(get_client),
    settings: Settings = Depends(load_settings),
) -> ContentRetriever:
    return ContentRetriever(
        client, user_agent=settings.user_agent, timeout=settings.fetch_timeout
    )


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/stories/top")
async def top_stories_route(
    count: int = 30,
    include_text: bool = False,
    store: ItemStore = Depends(get_store),
):
    try:
        return await stories.get_top_stories(store, count, include_text)
    except ItemStoreError as e:
        logger.warning("top_stories_failed", error=str(e))
        raise HTTPException(status_code=502, detail=str(e))


@app.get("/stories/search")
async def search_route(
    query: str,
    limit: int = 20,
    time_range_hours: int = 24,
    store: ItemStore = Depends(get_store),
):
    try:
        return await stories.search_stories(store, query, limit, time_range_hours)
    except ItemStoreError as e:
        logger.warning("search_failed", query=query, error=str(e))
        raise HTTPException(status_code=502, detail=str(e))


@app.get("/stories/{story_id}")
async def story_details_route(
    story_id: int,
    include_comments: bool = False,
    include_markdown: bool = False,
    store: ItemStore = Depends(get_store),
    retriever: ContentRetriever = Depends(get_retriever),
):
    try:
        return await stories.get_story_details(
            store, retriever, story_id, include_comments, include_markdown
        )
    except StoryNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@app.get("/stories/{story_id}/comments", response_class=PlainTextResponse)
async def story_comments_route(
    story_id: int,
    min_score: int = 0,
    max_depth: int = 3,
    limit: int = 20,
    store: ItemStore = Depends(get_store),
):
    try:
        return await stories.get_story_comments(
            store, story_id, min_score, max_depth, limit
        )
    except StoryNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@app.post("/fetch/{mode}")
async def fetch_route(
    mode: str,
    body: FetchBody,
    retriever: ContentRetriever = Depends(get_retriever),
):
    if mode not in FETCH_MODES:
        raise HTTPException(status_code=404, detail=f"Unknown fetch mode: {mode}")
    fetch = getattr(retriever, f"fetch_{mode}")
    result = await fetch(
        FetchRequest(
            url=body.url,
            headers=body.headers,
            max_length=body.max_length,
            start_index=body.start_index,
        )
    )
    return result.to_dict()
