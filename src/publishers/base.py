"""Base publisher interface for Hoarder Social Relay.

This module defines the abstract base class for all social platform
publishers. The dispatcher only talks to publishers through this interface.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from src.core.bookmark import IntermediatePost


class BasePublisher(ABC):
    """Abstract base class for platform publishers.

    Subclasses set `platform` and implement `is_configured` and `publish`.
    publish() raises on failure (RemoteCallError and friends); isolating one
    platform's failure from the others is the dispatcher's job.

    Example:
        class MastodonPublisher(BasePublisher):
            platform = "mastodon"

            @property
            def is_configured(self) -> bool:
                return bool(self.token)

            async def publish(self, post: IntermediatePost) -> dict[str, Any]:
                ...
    """

    platform: str = ""

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """True when credentials for this platform are present."""

    @abstractmethod
    async def publish(self, post: "IntermediatePost") -> dict[str, Any]:
        """Format and submit a post.

        Args:
            post: The platform-neutral post. Must not be modified.

        Returns:
            The platform's decoded JSON response.
        """
