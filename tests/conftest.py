from __future__ import annotations

from typing import Any

import pytest

from scrapers.base import UpstreamSession


class FakeSession(UpstreamSession):
    """In-memory upstream.  Values that are exceptions are raised on fetch."""

    def __init__(
        self,
        tweets: dict[str, Any] | None = None,
        profiles: dict[str, Any] | None = None,
        *,
        login_error: Exception | None = None,
        logout_error: Exception | None = None,
    ) -> None:
        self.tweets = tweets or {}
        self.profiles = profiles or {}
        self.login_error = login_error
        self.logout_error = logout_error
        self.calls: list[tuple[str, ...]] = []
        self._logged_in = False

    @property
    def authenticated(self) -> bool:
        return self._logged_in

    async def login(self) -> bool:
        self.calls.append(("login",))
        if self.login_error is not None:
            raise self.login_error
        self._logged_in = True
        return True

    async def logout(self) -> None:
        self.calls.append(("logout",))
        if self.logout_error is not None:
            raise self.logout_error
        self._logged_in = False

    async def get_tweet(self, tweet_id: str):
        self.calls.append(("get_tweet", tweet_id))
        return self._lookup(self.tweets, tweet_id)

    async def get_profile(self, handle: str):
        self.calls.append(("get_profile", handle))
        return self._lookup(self.profiles, handle)

    @staticmethod
    def _lookup(table: dict[str, Any], key: str):
        value = table.get(key)
        if isinstance(value, BaseException):
            raise value
        return value


@pytest.fixture
def fake_session_cls():
    return FakeSession


@pytest.fixture
def tweet_raw() -> dict[str, Any]:
    return {
        "id": "20",
        "text": "just setting up my twttr",
        "username": "jack",
        "name": "jack",
        "user_id": "12",
        "permanent_url": "https://x.com/jack/status/20",
        "likes": 250000,
        "retweets": 120000,
        "views": "1000",
        "is_reply": False,
        "hashtags": ["history"],
    }


@pytest.fixture
def profile_raw() -> dict[str, Any]:
    return {
        "user_id": "12",
        "username": "jack",
        "name": "jack",
        "biography": "no state is the best state",
        "followers_count": 6000000,
        "following_count": 0,
        "is_verified": False,
        "is_blue_verified": True,
    }
