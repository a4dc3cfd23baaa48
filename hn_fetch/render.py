from __future__ import annotations

import html
import re
from collections.abc import Sequence
from typing import Optional

from hn_fetch.models import Comment

NO_COMMENTS_LINE = "No comments found matching the criteria."
UNKNOWN_STORY = "Unknown Story"
UNKNOWN_AUTHOR = "[deleted]"
DIVIDER = "---"
ROOT_MARKER = "💬"
REPLY_MARKER = "↳"


def clean_comment_text(txt: Optional[str]) -> str:
    """Turn HN comment HTML into plain text, keeping paragraph breaks."""
    if not txt:
        return ""
    # HN separates paragraphs with a bare <p>
    txt = re.sub(r"<\s*/?\s*p\b[^>]*>", "\n\n", txt, flags=re.IGNORECASE)
    txt = re.sub(r"<\s*br\s*/?\s*>", "\n", txt, flags=re.IGNORECASE)
    txt = re.sub(r"<a\b[^>]*>|</a\s*>", "", txt, flags=re.IGNORECASE)
    txt = re.sub(r"<[^>]+>", "", txt)
    txt = html.unescape(txt)
    txt = re.sub(r"\n\s*\n", "\n\n", txt)
    return txt.strip()


def _format_comment(comment: Comment, depth: int = 0) -> str:
    indent = "  " * depth
    marker = ROOT_MARKER if depth == 0 else REPLY_MARKER * depth
    score_text = f" ({comment.score} points)" if comment.score else ""
    body = clean_comment_text(comment.text).split("\n")

    out = f"{indent}{marker} **{comment.by or UNKNOWN_AUTHOR}**{score_text}\n"
    out += f"{indent}   " + f"\n{indent}   ".join(body) + "\n\n"
    for reply in comment.replies:
        out += _format_comment(reply, depth + 1)
    return out


def render_thread(
    tree: Sequence[Comment],
    title: Optional[str],
    story_id: int,
    total_count: Optional[int],
) -> str:
    """
    Render a comment tree as a readable report.

    Roots and replies are emitted in the order given; the tree builder is
    responsible for ordering.
    """
    output = f"# Hacker News Comments for Story {story_id}\n"
    output += f'## "{title or UNKNOWN_STORY}"\n'
    output += f"📊 Total Comments: {total_count or 0} | Showing: {len(tree)}\n\n"

    if not tree:
        return output + NO_COMMENTS_LINE + "\n"

    output += f"{DIVIDER}\n\n"
    for comment in tree:
        output += _format_comment(comment)
        output += f"{DIVIDER}\n\n"
    return output
