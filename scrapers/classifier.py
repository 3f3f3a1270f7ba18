"""Map an X / Twitter URL to a category and the identifier in its path."""

from __future__ import annotations

import logging
import re
from urllib.parse import urlsplit

from core.models import Category, ClassifiedUrl

log = logging.getLogger(__name__)

PLATFORM_HOSTS = frozenset({"twitter.com", "x.com"})

# Top-level navigation pages
GENERIC_PAGES = frozenset({"home", "explore", "notifications", "messages", "settings"})

# First path segments that can never be a handle
RESERVED_PATHS = GENERIC_PAGES | {"i", "search", "hashtag", "compose"}

_HANDLE_RE = re.compile(r"[A-Za-z0-9_]{1,15}")
_DIGITS_RE = re.compile(r"[0-9]+")


def classify(url: str) -> ClassifiedUrl:
    """Classify ``url``.  Never raises; anything unparseable is Unknown.

    Rules are checked in order and the first match wins:
    generic page, community, tweet, profile, unknown.
    """
    try:
        parts = urlsplit(url)
        host = (parts.hostname or "").removeprefix("www.")
    except (AttributeError, TypeError, ValueError) as e:
        log.debug("Could not parse URL %r: %s", url, e)
        return ClassifiedUrl(url, Category.UNKNOWN)

    if host not in PLATFORM_HOSTS:
        return ClassifiedUrl(url, Category.UNKNOWN)

    segments = [s for s in parts.path.split("/") if s]

    if len(segments) == 1 and segments[0] in GENERIC_PAGES:
        return ClassifiedUrl(url, Category.GENERIC, segments[0])

    if len(segments) >= 3 and segments[0] == "i" and segments[1] == "communities":
        return ClassifiedUrl(url, Category.COMMUNITY, segments[2])

    if (
        len(segments) >= 3
        and segments[1] == "status"
        and _DIGITS_RE.fullmatch(segments[2])
    ):
        return ClassifiedUrl(url, Category.TWEET, segments[2])

    if (
        len(segments) == 1
        and segments[0] not in RESERVED_PATHS
        and _HANDLE_RE.fullmatch(segments[0])
    ):
        return ClassifiedUrl(url, Category.PROFILE, segments[0])

    return ClassifiedUrl(url, Category.UNKNOWN)
