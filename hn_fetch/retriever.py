from __future__ import annotations

import enum
import json
import logging
import re
from collections.abc import Callable
from typing import Optional

import httpx
from bs4 import BeautifulSoup
from bs4.element import Comment, NavigableString, PageElement, Tag
from markdownify import ATX, MarkdownConverter

from hn_fetch.constants import (
    CHROME_CLASSES,
    CHROME_TAGS,
    CONTENT_SELECTORS,
    DEFAULT_MAX_LENGTH,
    DEFAULT_START_INDEX,
    DEFAULT_USER_AGENT,
    FETCH_MAX_REDIRECTS,
    FETCH_TIMEOUT,
    HEAD_ONLY_TAGS,
    NON_RENDERED_TAGS,
)
from hn_fetch.errors import ExtractionError, FetchError
from hn_fetch.models import FetchRequest, FetchResult
from hn_fetch.security import Resolver, check_url
from hn_fetch.url_utils import normalize_url

logger = logging.getLogger(__name__)


def apply_length_limits(
    text: str,
    max_length: int = DEFAULT_MAX_LENGTH,
    start_index: int = DEFAULT_START_INDEX,
) -> str:
    """Return the window text[start_index:start_index + max_length]."""
    start_index = max(start_index, 0)
    if start_index >= len(text):
        return ""
    end = min(start_index + max(max_length, 0), len(text))
    return text[start_index:end]


class NodeKind(enum.Enum):
    """How a parsed node is treated during content extraction."""

    ELEMENT = "element"
    TEXT = "text"
    COMMENT = "comment"
    NON_RENDERED = "non_rendered"  # script, style, noscript
    CHROME = "chrome"  # navigation, headers, footers, sidebars
    OTHER = "other"  # doctype, declarations, processing instructions


def _css_classes(tag: Tag) -> set[str]:
    classes = tag.get("class") or []
    if isinstance(classes, str):
        classes = classes.split()
    return {c.lower() for c in classes}


def classify_node(node: PageElement) -> NodeKind:
    if isinstance(node, Comment):
        return NodeKind.COMMENT
    if isinstance(node, NavigableString):
        return NodeKind.TEXT if type(node) is NavigableString else NodeKind.OTHER
    if not isinstance(node, Tag):
        return NodeKind.OTHER
    name = (node.name or "").lower()
    if name in NON_RENDERED_TAGS:
        return NodeKind.NON_RENDERED
    if name in CHROME_TAGS or _css_classes(node) & CHROME_CLASSES:
        return NodeKind.CHROME
    return NodeKind.ELEMENT


def prune(root: Tag, drop: frozenset[NodeKind]) -> None:
    """Remove every descendant of root whose kind is in drop, subtree included."""
    stack: list[Tag] = [root]
    while stack:
        tag = stack.pop()
        for child in list(tag.children):
            kind = classify_node(child)
            if kind in drop:
                child.extract()
            elif isinstance(child, Tag):
                stack.append(child)


class PageConverter(MarkdownConverter):
    """Markdown converter with ATX headings, hyphen bullets and fenced code."""

    def __init__(self, **options) -> None:
        options.setdefault("heading_style", ATX)
        options.setdefault("bullets", "-")
        options.setdefault("code_language", "")
        super().__init__(**options)


def document_body(soup: BeautifulSoup) -> Tag:
    """
    Return the <body> element, or the document itself when the optional
    <html>/<body> tags were omitted. In the latter case head metadata such
    as <title> is removed so only rendered content remains.
    """
    if isinstance(soup.body, Tag):
        return soup.body
    for tag in soup(list(HEAD_ONLY_TAGS)):
        tag.decompose()
    return soup.html if isinstance(soup.html, Tag) else soup


def _has_content(tag: Tag) -> bool:
    return bool(tag.get_text(strip=True)) or tag.find(True) is not None


def select_content_region(soup: BeautifulSoup) -> Tag:
    for selector in CONTENT_SELECTORS:
        el = soup.select_one(selector)
        if isinstance(el, Tag):
            return el
    body = document_body(soup)
    if not _has_content(body):
        raise ExtractionError("No content element found in HTML document")
    return body


def html_to_text(html_text: str) -> str:
    soup = BeautifulSoup(html_text, "html.parser")
    for tag in soup(["script", "style"]):
        tag.decompose()
    # Text nodes are joined as-is so inline markup never splits words.
    text = document_body(soup).get_text()
    return re.sub(r"\s+", " ", text).strip()


def html_to_markdown(html_text: str) -> str:
    soup = BeautifulSoup(html_text, "html.parser")
    prune(soup, frozenset({NodeKind.NON_RENDERED, NodeKind.COMMENT}))
    region = select_content_region(soup)
    prune(region, frozenset({NodeKind.CHROME}))

    markdown = PageConverter().convert_soup(region)
    markdown = re.sub(r"\n\s*\n\s*\n", "\n\n", markdown)
    markdown = markdown.strip()
    markdown = re.sub(r"\[\]\([^)]*\)", "", markdown)
    return markdown


def _pin_address(url: httpx.URL, address: str) -> httpx.URL:
    """Point url at an already vetted IP address, keeping path and query."""
    if url.host == address:
        return url
    return url.copy_with(host=address)


def _json_compact(resp: httpx.Response) -> str:
    try:
        data = resp.json()
    except ValueError as e:
        raise FetchError(f"Failed to parse JSON from {resp.url}: {e}") from e
    return json.dumps(data, separators=(",", ":"), ensure_ascii=False)


class ContentRetriever:
    """
    Fetches arbitrary URLs behind the request-forgery guard and renders the
    body as raw HTML, compact JSON, plain text or markdown.

    The fetch_* methods never raise; every failure comes back as a
    FetchResult with is_error set and a readable message.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        resolver: Optional[Resolver] = None,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float = FETCH_TIMEOUT,
        max_redirects: int = FETCH_MAX_REDIRECTS,
    ) -> None:
        self.client = client
        self.resolver = resolver
        self.user_agent = user_agent
        self.timeout = timeout
        self.max_redirects = max_redirects

    async def fetch_html(self, request: FetchRequest) -> FetchResult:
        return await self._run(request, lambda resp: resp.text)

    async def fetch_json(self, request: FetchRequest) -> FetchResult:
        return await self._run(request, _json_compact)

    async def fetch_text(self, request: FetchRequest) -> FetchResult:
        return await self._run(request, lambda resp: html_to_text(resp.text))

    async def fetch_markdown(self, request: FetchRequest) -> FetchResult:
        return await self._run(request, lambda resp: html_to_markdown(resp.text))

    async def _run(
        self, request: FetchRequest, convert: Callable[[httpx.Response], str]
    ) -> FetchResult:
        try:
            resp = await self._fetch(request)
            content = convert(resp)
        except FetchError as e:
            logger.warning(f"Fetch of {request.url} failed: {e}")
            return FetchResult(str(e), is_error=True)
        except Exception as e:
            logger.warning(f"Unexpected error processing {request.url}: {e}")
            return FetchResult(f"Failed to process {request.url}: {e}", is_error=True)
        return FetchResult(
            apply_length_limits(content, request.max_length, request.start_index)
        )

    async def _fetch(self, request: FetchRequest) -> httpx.Response:
        url = normalize_url(request.url)
        headers = httpx.Headers({"User-Agent": self.user_agent})
        headers.update(request.headers or {})

        # Redirects are followed by hand so that every hop passes the guard.
        for _ in range(self.max_redirects + 1):
            address = await check_url(url, self.resolver)
            target = httpx.URL(url)
            headers["Host"] = target.netloc.decode("ascii")
            try:
                resp: httpx.Response = await self.client.get(
                    _pin_address(target, address),
                    headers=headers,
                    timeout=self.timeout,
                    follow_redirects=False,
                    extensions={"sni_hostname": target.raw_host.decode("ascii")},
                )
            except httpx.HTTPError as e:
                raise FetchError(
                    f"Failed to fetch {url}: {str(e) or type(e).__name__}"
                ) from e

            location = resp.headers.get("location")
            if resp.is_redirect and location:
                url = str(target.join(location))
                logger.debug(f"Following redirect to {url}")
                continue
            if not resp.is_success:
                raise FetchError(f"Failed to fetch {url}: HTTP error: {resp.status_code}")
            return resp

        raise FetchError(
            f"Failed to fetch {request.url}: more than {self.max_redirects} redirects"
        )
