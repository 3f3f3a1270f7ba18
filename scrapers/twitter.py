from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from datetime import datetime
from typing import Any, TypeVar

import twikit

from config.settings import settings
from core.models import Category, ClassifiedUrl, RawRecord, RecordKind
from scrapers.base import (
    FetchError,
    IdentifierMissingError,
    UpstreamFetchError,
    UpstreamSession,
)

log = logging.getLogger(__name__)

T = TypeVar("T")

_TWITTER_TIME_FORMAT = "%a %b %d %H:%M:%S %z %Y"


def _attr(obj: Any, name: str) -> Any:
    """Read ``obj.name``; ``None`` when absent.

    twikit exposes many fields as properties that index the GraphQL
    payload directly, so a missing upstream key surfaces as ``KeyError``.
    """
    if obj is None:
        return None
    try:
        return getattr(obj, name)
    except (AttributeError, KeyError, IndexError, TypeError):
        return None


def _parse_time(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if not value:
        return None
    try:
        return datetime.strptime(str(value), _TWITTER_TIME_FORMAT)
    except ValueError:
        return None


def _to_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _best_variant(video_info: dict) -> str | None:
    mp4s = [
        v for v in video_info.get("variants", [])
        if v.get("content_type") == "video/mp4" and v.get("url")
    ]
    if not mp4s:
        return None
    return max(mp4s, key=lambda v: v.get("bitrate", 0))["url"]


def _expanded_urls(entries: Any) -> list[str]:
    out = []
    for entry in entries or []:
        url = entry.get("expanded_url") if isinstance(entry, dict) else entry
        if url:
            out.append(str(url))
    return out


def _place_to_raw(place: Any) -> dict[str, Any] | None:
    if place is None:
        return None
    return {
        "id": _attr(place, "id"),
        "name": _attr(place, "name"),
        "full_name": _attr(place, "full_name"),
        "place_type": _attr(place, "place_type"),
        "country": _attr(place, "country"),
    }


def _poll_to_raw(poll: Any) -> dict[str, Any] | None:
    if poll is None:
        return None
    return {
        "options": [
            {"label": c.get("label"), "votes": c.get("count")}
            for c in _attr(poll, "choices") or []
            if isinstance(c, dict)
        ],
        "duration_minutes": _to_int(_attr(poll, "duration_minutes")),
        "end_datetime": _attr(poll, "end_datetime_utc"),
        "voting_status": "closed" if _attr(poll, "counts_are_final") else "open",
    }


def tweet_to_raw(tweet: Any) -> dict[str, Any]:
    """Flatten a ``twikit.Tweet`` into the raw tweet vocabulary.

    Hashtags and urls come from twikit's public properties.  Mentions and
    media variants have no stable public wrapper across twikit releases and
    are read from the GraphQL ``legacy`` payload.  Anything the upstream did
    not send is left as ``None``.
    """
    data = _attr(tweet, "_data") or {}
    legacy = data.get("legacy") or {}
    entities = legacy.get("entities") or {}
    user = _attr(tweet, "user")

    tweet_id = _attr(tweet, "id")
    user_id = _attr(user, "id")
    username = _attr(user, "screen_name")
    in_reply_to = _attr(tweet, "in_reply_to")
    retweeted = _attr(tweet, "retweeted_tweet")
    pinned = _attr(user, "pinned_tweet_ids") or []
    parsed = _parse_time(_attr(tweet, "created_at"))

    photos, videos = [], []
    for media in (legacy.get("extended_entities") or {}).get("media", []):
        if media.get("type") == "photo":
            photos.append({"url": media.get("media_url_https")})
        elif media.get("type") in ("video", "animated_gif"):
            videos.append(
                {
                    "preview": media.get("media_url_https"),
                    "url": _best_variant(media.get("video_info") or {}),
                }
            )

    return {
        "id": tweet_id,
        "text": _attr(tweet, "full_text") or _attr(tweet, "text"),
        "username": username,
        "name": _attr(user, "name"),
        "user_id": user_id,
        "permanent_url": (
            f"https://x.com/{username}/status/{tweet_id}"
            if username and tweet_id
            else None
        ),
        "conversation_id": legacy.get("conversation_id_str"),
        "in_reply_to_status_id": in_reply_to,
        "quoted_status_id": legacy.get("quoted_status_id_str"),
        "retweeted_status_id": _attr(retweeted, "id"),
        "time_parsed": parsed,
        "timestamp": int(parsed.timestamp()) if parsed else None,
        "likes": _to_int(_attr(tweet, "favorite_count")),
        "retweets": _to_int(_attr(tweet, "retweet_count")),
        "quotes": _to_int(_attr(tweet, "quote_count")),
        "replies": _to_int(_attr(tweet, "reply_count")),
        "views": _to_int(_attr(tweet, "view_count")),
        "bookmark_count": _to_int(_attr(tweet, "bookmark_count")),
        "is_retweet": retweeted is not None,
        "is_reply": in_reply_to is not None,
        "is_quoted": _attr(tweet, "is_quote_status"),
        "is_pin": tweet_id in pinned if tweet_id else None,
        "is_self_thread": (
            in_reply_to is not None
            and user_id is not None
            and legacy.get("in_reply_to_user_id_str") == user_id
        ),
        "sensitive_content": _attr(tweet, "possibly_sensitive"),
        "mentions": [
            {"id": m.get("id_str"), "username": m.get("screen_name"), "name": m.get("name")}
            for m in entities.get("user_mentions", [])
        ],
        "hashtags": [str(h) for h in _attr(tweet, "hashtags") or [] if h],
        "urls": _expanded_urls(_attr(tweet, "urls")),
        "photos": photos,
        "videos": videos,
        "place": _place_to_raw(_attr(tweet, "place")),
        "poll": _poll_to_raw(_attr(tweet, "poll")),
    }


def user_to_raw(user: Any) -> dict[str, Any]:
    """Flatten a ``twikit.User`` into the raw profile vocabulary."""
    joined = _parse_time(_attr(user, "created_at"))
    websites = _expanded_urls(_attr(user, "urls"))
    username = _attr(user, "screen_name")

    return {
        "user_id": _attr(user, "id"),
        "username": username,
        "name": _attr(user, "name"),
        "biography": _attr(user, "description"),
        "avatar": _attr(user, "profile_image_url"),
        "banner": _attr(user, "profile_banner_url"),
        "location": _attr(user, "location"),
        "url": f"https://x.com/{username}" if username else None,
        "website": websites[0] if websites else None,
        "joined": joined,
        "joined_timestamp": int(joined.timestamp()) if joined else None,
        "followers_count": _to_int(_attr(user, "followers_count")),
        "following_count": _to_int(_attr(user, "following_count")),
        "tweets_count": _to_int(_attr(user, "statuses_count")),
        "media_count": _to_int(_attr(user, "media_count")),
        "listed_count": _to_int(_attr(user, "listed_count")),
        "likes_count": _to_int(_attr(user, "favourites_count")),
        "is_verified": _attr(user, "verified"),
        "is_blue_verified": _attr(user, "is_blue_verified"),
        "is_private": _attr(user, "protected"),
        "pinned_tweet_ids": [str(i) for i in _attr(user, "pinned_tweet_ids") or []],
    }


class TwikitSession(UpstreamSession):
    """Upstream session backed by ``twikit.Client``.

    Credentials come from settings.  Without a username and password the
    session stays anonymous and fetches run degraded.
    """

    def __init__(
        self,
        username: str | None = None,
        password: str | None = None,
        email: str | None = None,
        client: twikit.Client | None = None,
    ) -> None:
        self._username = settings.TWITTER_USERNAME if username is None else username
        self._password = settings.TWITTER_PASSWORD if password is None else password
        self._email = settings.TWITTER_EMAIL if email is None else email
        self._client = client or twikit.Client(settings.TWITTER_LANGUAGE)
        self._logged_in = False

    @property
    def authenticated(self) -> bool:
        return self._logged_in

    async def login(self) -> bool:
        if not self._username or not self._password:
            log.warning(
                "Twitter username or password not configured; "
                "scraping will run anonymously and may fail or be limited."
            )
            return False
        log.info("Attempting login as %s…", self._username)
        await self._client.login(
            auth_info_1=self._username,
            auth_info_2=self._email or None,
            password=self._password,
        )
        self._logged_in = True
        log.info("Login successful.")
        return True

    async def logout(self) -> None:
        await self._client.logout()
        self._logged_in = False

    async def get_tweet(self, tweet_id: str) -> dict[str, Any] | None:
        tweet = await self._client.get_tweet_by_id(tweet_id)
        return tweet_to_raw(tweet) if tweet is not None else None

    async def get_profile(self, handle: str) -> dict[str, Any] | None:
        user = await self._client.get_user_by_screen_name(handle)
        return user_to_raw(user) if user is not None else None


class TwitterFetcher:
    """Turns a classified URL into a raw record.

    Only tweets and profiles touch the network; the other categories
    resolve to a fixed placeholder text.
    """

    def __init__(self, session: UpstreamSession, timeout: float | None = None) -> None:
        self._session = session
        self._timeout = settings.UPSTREAM_TIMEOUT_SECONDS if timeout is None else timeout

    async def fetch(self, classified: ClassifiedUrl) -> RawRecord | None:
        category = classified.category
        identifier = classified.identifier

        if category is Category.TWEET:
            if not identifier:
                raise IdentifierMissingError("Could not extract Tweet ID.")
            data = await self._call(self._session.get_tweet(identifier))
            log.info("Scraped Tweet: %s", identifier)
            return RawRecord(RecordKind.TWEET, data) if data is not None else None

        if category is Category.PROFILE:
            if not identifier:
                raise IdentifierMissingError("Could not extract Username.")
            data = await self._call(self._session.get_profile(identifier))
            log.info("Scraped Profile: %s", identifier)
            return RawRecord(RecordKind.PROFILE, data) if data is not None else None

        if category is Category.COMMUNITY:
            return RawRecord.placeholder(
                f"Community page identified (ID: {identifier}). "
                "Retrieving community content is not supported."
            )

        if category is Category.GENERIC:
            return RawRecord.placeholder(
                f"Generic Twitter page ({identifier}). No specific content to scrape."
            )

        return RawRecord.placeholder(
            "URL is not recognized as a standard Tweet, Profile, or Community "
            "page, or is not a Twitter URL."
        )

    async def _call(self, call: Awaitable[T]) -> T:
        try:
            return await asyncio.wait_for(call, timeout=self._timeout)
        except asyncio.TimeoutError as e:
            raise UpstreamFetchError(
                f"Upstream request timed out after {self._timeout:g}s"
            ) from e
        except FetchError:
            raise
        except Exception as e:
            raise UpstreamFetchError(str(e) or "Scraping failed") from e
