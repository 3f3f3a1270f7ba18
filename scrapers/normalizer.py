"""Raw upstream records -> JSON-safe normalized records.

Each record variant is described by one table of ``FieldRule`` entries
(output name, extractor, default).  An extractor returns ``None`` when the
upstream value is missing, in which case the default is used, so every
output field is always present.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from datetime import datetime, timezone
from typing import Any, NamedTuple

from core.models import (
    NO_CONTENT,
    NOT_AVAILABLE,
    NormalizedProfile,
    NormalizedRecord,
    NormalizedTweet,
    RawRecord,
    RecordKind,
)

Raw = Mapping[str, Any]


class FieldRule(NamedTuple):
    name: str
    extract: Callable[[Raw], Any]
    default: Callable[[], Any]


# ── extractors ───────────────────────────────────────────────────────


def _text(key: str) -> Callable[[Raw], str | None]:
    def extract(raw: Raw) -> str | None:
        value = raw.get(key)
        if value is None or value == "":
            return None
        return str(value)

    return extract


def _count(key: str) -> Callable[[Raw], int | None]:
    def extract(raw: Raw) -> int | None:
        value = raw.get(key)
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, int):
            return value
        if isinstance(value, float):
            return int(value)
        if isinstance(value, str) and value.strip().isdigit():
            return int(value.strip())
        return None

    return extract


def _flag(key: str) -> Callable[[Raw], bool | None]:
    def extract(raw: Raw) -> bool | None:
        value = raw.get(key)
        return None if value is None else bool(value)

    return extract


def _timestamp(parsed_key: str, unix_key: str) -> Callable[[Raw], str | None]:
    def extract(raw: Raw) -> str | None:
        parsed = raw.get(parsed_key)
        if isinstance(parsed, datetime):
            return parsed.isoformat()
        seconds = raw.get(unix_key)
        if isinstance(seconds, (int, float)) and not isinstance(seconds, bool):
            return datetime.fromtimestamp(seconds, tz=timezone.utc).isoformat()
        return None

    return extract


def _strings(key: str) -> Callable[[Raw], list[str] | None]:
    def extract(raw: Raw) -> list[str] | None:
        values = raw.get(key)
        if not values:
            return None
        return [str(v) for v in values if v]

    return extract


def _mentions(raw: Raw) -> list[str] | None:
    mentions = raw.get("mentions")
    if not mentions:
        return None
    out = []
    for m in mentions:
        handle = m.get("username") or m.get("id")
        if handle:
            out.append(f"@{handle}")
    return out


def _photos(raw: Raw) -> list[str] | None:
    photos = raw.get("photos")
    if not photos:
        return None
    return [p["url"] for p in photos if p.get("url")]


def _videos(raw: Raw) -> list[dict[str, str]] | None:
    videos = raw.get("videos")
    if not videos:
        return None
    return [
        {
            "preview": v.get("preview") or NOT_AVAILABLE,
            "url": v.get("url") or NOT_AVAILABLE,
        }
        for v in videos
    ]


def _place(raw: Raw) -> dict[str, str] | None:
    place = raw.get("place")
    if not place:
        return None
    return {
        key: str(place.get(key) or NOT_AVAILABLE)
        for key in ("id", "name", "full_name", "place_type")
    }


def _poll(raw: Raw) -> dict[str, Any] | None:
    poll = raw.get("poll")
    if not poll:
        return None
    end = poll.get("end_datetime")
    duration = _count("duration_minutes")(poll)
    return {
        "options": [
            str(o.get("label")) for o in poll.get("options") or [] if o.get("label")
        ],
        "duration_minutes": NOT_AVAILABLE if duration is None else duration,
        "end_datetime": end.isoformat() if isinstance(end, datetime) else str(end or NOT_AVAILABLE),
        "voting_status": str(poll.get("voting_status") or NOT_AVAILABLE),
    }


def _na() -> str:
    return NOT_AVAILABLE


def _no_content() -> str:
    return NO_CONTENT


def _false() -> bool:
    return False


def _none() -> None:
    return None


def text_field(name: str, key: str | None = None) -> FieldRule:
    return FieldRule(name, _text(key or name), _na)


def count_field(name: str, key: str | None = None) -> FieldRule:
    return FieldRule(name, _count(key or name), _na)


def flag_field(name: str, key: str | None = None) -> FieldRule:
    return FieldRule(name, _flag(key or name), _false)


# ── field tables ─────────────────────────────────────────────────────

TWEET_FIELDS: tuple[FieldRule, ...] = (
    text_field("id"),
    FieldRule("text", _text("text"), _no_content),
    text_field("username"),
    text_field("name"),
    text_field("user_id"),
    text_field("permanent_url"),
    text_field("conversation_id"),
    text_field("in_reply_to_status_id"),
    text_field("quoted_status_id"),
    text_field("retweeted_status_id"),
    FieldRule("created_at", _timestamp("time_parsed", "timestamp"), _na),
    count_field("likes"),
    count_field("retweets"),
    count_field("quotes"),
    count_field("replies"),
    count_field("views"),
    count_field("bookmark_count"),
    flag_field("is_retweet"),
    flag_field("is_reply"),
    flag_field("is_quote", "is_quoted"),
    flag_field("is_pin"),
    flag_field("is_self_thread"),
    flag_field("sensitive_content"),
    FieldRule("mentions", _mentions, list),
    FieldRule("hashtags", _strings("hashtags"), list),
    FieldRule("urls", _strings("urls"), list),
    FieldRule("photos", _photos, list),
    FieldRule("videos", _videos, list),
    FieldRule("place", _place, _none),
    FieldRule("poll", _poll, _none),
)

PROFILE_FIELDS: tuple[FieldRule, ...] = (
    text_field("user_id"),
    text_field("username"),
    text_field("name"),
    FieldRule("biography", _text("biography"), _no_content),
    text_field("avatar"),
    text_field("banner"),
    text_field("location"),
    text_field("url"),
    text_field("website"),
    FieldRule("joined", _timestamp("joined", "joined_timestamp"), _na),
    count_field("followers_count"),
    count_field("following_count"),
    count_field("tweets_count"),
    count_field("media_count"),
    count_field("listed_count"),
    count_field("likes_count"),
    flag_field("is_verified"),
    flag_field("is_blue_verified"),
    flag_field("is_private"),
    FieldRule("pinned_tweet_ids", _strings("pinned_tweet_ids"), list),
)


def apply_fields(rules: tuple[FieldRule, ...], raw: Raw) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for rule in rules:
        value = rule.extract(raw)
        out[rule.name] = rule.default() if value is None else value
    return out


def normalize_tweet(raw: Raw) -> NormalizedTweet:
    return NormalizedTweet.model_validate(apply_fields(TWEET_FIELDS, raw))


def normalize_profile(raw: Raw) -> NormalizedProfile:
    return NormalizedProfile.model_validate(apply_fields(PROFILE_FIELDS, raw))


def normalize(record: RawRecord | None) -> NormalizedRecord | str | None:
    """Normalize whatever the adapter produced.

    Placeholders pass through unchanged and a missing record stays ``None``.
    """
    if record is None:
        return None
    if record.kind is RecordKind.PLACEHOLDER:
        return record.data
    if record.kind is RecordKind.TWEET:
        return normalize_tweet(record.data)
    if record.kind is RecordKind.PROFILE:
        return normalize_profile(record.data)
    raise ValueError(f"Unsupported record kind: {record.kind}")
