from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class FetchError(Exception):
    """A single URL could not be fetched."""


class IdentifierMissingError(FetchError):
    pass


class UpstreamFetchError(FetchError):
    pass


class UpstreamSession(ABC):
    """Handle on the upstream data source, authenticated or anonymous.

    ``get_tweet`` and ``get_profile`` return flat raw mappings (or ``None``
    when the upstream has nothing for the key).  A session is owned by one
    batch run and is not safe for concurrent use.
    """

    @property
    @abstractmethod
    def authenticated(self) -> bool: ...

    @abstractmethod
    async def login(self) -> bool:
        """Authenticate; returns whether the session is now logged in."""
        ...

    @abstractmethod
    async def logout(self) -> None: ...

    @abstractmethod
    async def get_tweet(self, tweet_id: str) -> dict[str, Any] | None: ...

    @abstractmethod
    async def get_profile(self, handle: str) -> dict[str, Any] | None: ...
