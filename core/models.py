from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Union

from pydantic import BaseModel, ConfigDict

NOT_AVAILABLE = "N/A"
NO_CONTENT = "(no content)"
EMPTY_CONTENT_ERROR = "Scraped content was unexpectedly empty."

# An upstream counter is either a number or the "N/A" sentinel, so a
# missing value never collapses into a zero.
Count = Union[int, str]


class Category(str, Enum):
    TWEET = "Tweet"
    PROFILE = "Profile"
    COMMUNITY = "Community"
    GENERIC = "Generic"
    UNKNOWN = "Unknown"


@dataclass(frozen=True)
class ClassifiedUrl:
    """A URL together with the category and identifier read from its path."""

    original_url: str
    category: Category
    identifier: str | None = None


class RecordKind(str, Enum):
    TWEET = "tweet"
    PROFILE = "profile"
    PLACEHOLDER = "placeholder"


@dataclass(frozen=True)
class RawRecord:
    """What the upstream adapter hands to the normalizer.

    ``data`` is a flat mapping for tweets and profiles and a plain string
    for placeholders.
    """

    kind: RecordKind
    data: dict[str, Any] | str

    @classmethod
    def placeholder(cls, text: str) -> RawRecord:
        return cls(kind=RecordKind.PLACEHOLDER, data=text)


# ── normalized output ────────────────────────────────────────────────


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class VideoRef(_Frozen):
    preview: str
    url: str


class PlaceInfo(_Frozen):
    id: str
    name: str
    full_name: str
    place_type: str


class PollInfo(_Frozen):
    options: list[str]
    duration_minutes: Count
    end_datetime: str
    voting_status: str


class NormalizedTweet(_Frozen):
    id: str
    text: str
    username: str
    name: str
    user_id: str
    permanent_url: str
    conversation_id: str
    in_reply_to_status_id: str
    quoted_status_id: str
    retweeted_status_id: str
    created_at: str
    likes: Count
    retweets: Count
    quotes: Count
    replies: Count
    views: Count
    bookmark_count: Count
    is_retweet: bool
    is_reply: bool
    is_quote: bool
    is_pin: bool
    is_self_thread: bool
    sensitive_content: bool
    mentions: list[str]
    hashtags: list[str]
    urls: list[str]
    photos: list[str]
    videos: list[VideoRef]
    place: PlaceInfo | None
    poll: PollInfo | None


class NormalizedProfile(_Frozen):
    user_id: str
    username: str
    name: str
    biography: str
    avatar: str
    banner: str
    location: str
    url: str
    website: str
    joined: str
    followers_count: Count
    following_count: Count
    tweets_count: Count
    media_count: Count
    listed_count: Count
    likes_count: Count
    is_verified: bool
    is_blue_verified: bool
    is_private: bool
    pinned_tweet_ids: list[str]


NormalizedRecord = Union[NormalizedTweet, NormalizedProfile]


@dataclass
class ScrapeResult:
    """Outcome of scraping a single URL."""

    url: str
    category: Category
    content: NormalizedRecord | str | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"url": self.url, "category": self.category.value}
        if self.error is not None:
            out["error"] = self.error
        elif isinstance(self.content, str):
            out["content"] = self.content
        elif isinstance(self.content, BaseModel):
            out["content"] = self.content.model_dump(mode="json")
        else:
            out["content"] = None
            out["error"] = EMPTY_CONTENT_ERROR
        return out
