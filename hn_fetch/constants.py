"""
Constants and configuration values for HN fetch tools.
"""

# Hacker News API
HN_API_BASE = "https://hacker-news.firebaseio.com/v0"
HN_REQUEST_TIMEOUT = 10.0  # Seconds, per call

# Comment Tree
COMMENT_FANOUT_CAP = 10  # Max sibling ids expanded per level
DETAILS_COMMENT_DEPTH = 2  # Depth used when story details include comments

# Tool Parameter Bounds
TOP_STORIES_DEFAULT = 30
TOP_STORIES_MAX = 100
COMMENTS_MIN_SCORE_DEFAULT = 0  # HN API does not expose comment scores
COMMENTS_MAX_DEPTH_DEFAULT = 3
COMMENTS_MAX_DEPTH_MAX = 10
COMMENTS_LIMIT_DEFAULT = 20
COMMENTS_LIMIT_MAX = 100
SEARCH_LIMIT_DEFAULT = 20
SEARCH_LIMIT_MAX = 50
SEARCH_HOURS_DEFAULT = 24
SEARCH_HOURS_MAX = 168
SEARCH_SCAN_COUNT = 200  # Top stories scanned per search

# Content Retrieval
FETCH_TIMEOUT = 15.0
FETCH_MAX_REDIRECTS = 5
DEFAULT_MAX_LENGTH = 5000
DEFAULT_START_INDEX = 0
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

# Markdown Extraction
CONTENT_SELECTORS = (
    "main",
    "article",
    '[role="main"]',
    ".content",
    "#content",
    ".post",
    ".entry",
)
NON_RENDERED_TAGS = ("script", "style", "noscript")
# Document metadata that html.parser leaves in place when <html>/<body> are omitted
HEAD_ONLY_TAGS = ("head", "title", "meta", "link", "base")
CHROME_TAGS = frozenset({"nav", "header", "footer", "aside"})
CHROME_CLASSES = frozenset({"navigation", "sidebar", "widget"})
