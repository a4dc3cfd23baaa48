"""Typed data models for HN fetch tools."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, TypedDict

from hn_fetch.constants import DEFAULT_MAX_LENGTH, DEFAULT_START_INDEX


class Item(TypedDict, total=False):
    """Raw item payload as returned by the Hacker News API."""

    id: int
    type: str
    by: str
    time: int | str
    score: int
    title: str
    text: str
    url: str
    kids: list[int]
    parent: int
    descendants: int
    deleted: bool
    dead: bool


class CommentDict(TypedDict):
    """Serialized Comment payload for API boundaries."""

    id: int
    by: Optional[str]
    time: Optional[str]
    score: Optional[int]
    text: Optional[str]
    parent: Optional[int]
    depth: int
    replies: list["CommentDict"]


@dataclass(frozen=True)
class Comment:
    """A comment node in a built thread."""

    id: int
    depth: int
    by: Optional[str] = None
    time: Optional[str] = None  # ISO-8601, UTC
    score: Optional[int] = None
    text: Optional[str] = None
    parent: Optional[int] = None
    kids: tuple[int, ...] = ()
    replies: tuple[Comment, ...] = ()

    @property
    def rank_score(self) -> int:
        """Score used for ordering; missing scores count as 0."""
        return self.score or 0

    def to_dict(self) -> CommentDict:
        return {
            "id": self.id,
            "by": self.by,
            "time": self.time,
            "score": self.score,
            "text": self.text,
            "parent": self.parent,
            "depth": self.depth,
            "replies": [r.to_dict() for r in self.replies],
        }


@dataclass
class Story:
    """A Hacker News story."""

    id: int
    title: str
    url: Optional[str] = None
    by: Optional[str] = None
    score: int = 0
    time: Optional[str] = None
    descendants: int = 0
    text: Optional[str] = None
    kids: list[int] = field(default_factory=list)
    comments: list[Comment] = field(default_factory=list)

    def to_dict(self, include_text: bool = True) -> dict[str, Any]:
        """Serialize for tool output, omitting empty optional sections."""
        d: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "url": self.url,
            "by": self.by,
            "score": self.score,
            "time": self.time,
            "descendants": self.descendants,
        }
        if include_text and self.text:
            d["text"] = self.text
        if self.comments:
            d["comments"] = [c.to_dict() for c in self.comments]
        return d


@dataclass(frozen=True)
class FetchRequest:
    url: str
    headers: Optional[dict[str, str]] = None
    max_length: int = DEFAULT_MAX_LENGTH
    start_index: int = DEFAULT_START_INDEX


@dataclass(frozen=True)
class FetchResult:
    """Outcome of a content fetch. Errors carry a readable message in content."""

    content: str
    is_error: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "content": [{"type": "text", "text": self.content}],
            "isError": self.is_error,
        }
