"""Exception hierarchy for HN fetch tools."""


class HNFetchError(Exception):
    """Base class for all errors raised by hn_fetch."""


class ItemStoreError(HNFetchError):
    """The story id listing could not be retrieved."""


class StoryNotFoundError(HNFetchError):
    def __init__(self, story_id: int) -> None:
        super().__init__(f"Story {story_id} not found")
        self.story_id = story_id


class FetchError(HNFetchError):
    """A content fetch failed (transport, status code or decoding)."""


class SecurityError(FetchError):
    """A content fetch target points at a non-public network address."""


class ExtractionError(FetchError):
    """No usable content region was found in a fetched document."""
