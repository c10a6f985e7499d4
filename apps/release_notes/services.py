"""
apps.release_notes.services
~~~~~~~~~~~~~~~~~~~~~~~~~~~
Client for the platform's release-notes feed.

The feed is a JSON document served by the cloud-services endpoint at
``settings.RELEASE_NOTES_URL``::

    {"data": {"nodes": [
        {"tagName": "v1.6.1", "name": "...", "url": "...", "publishedAt": "..."},
        ...
    ]}}

Nodes are ordered newest first.  Parsed nodes are cached in the Django
cache for ``settings.RELEASE_NOTES_CACHE_SECONDS`` so that the homepage
does not hit the feed on every request.

Public API
----------
ReleaseNode                    – One release entry
ReleaseNotesUnavailableError   – Raised on transport / HTTP / payload failure
ReleaseNotesService            – Fetching, caching and "new since" counting
"""
from __future__ import annotations

from dataclasses import asdict, dataclass

import httpx
import structlog
from django.conf import settings
from django.core.cache import cache
from rest_framework import status

from common.exceptions import AppError

logger = structlog.get_logger(__name__)

CACHE_KEY_PREFIX = "release_notes:nodes"


def cache_key() -> str:
    """Cache key for the nodes fetched with the current ``version`` and ``instanceId`` query."""
    return f"{CACHE_KEY_PREFIX}:{settings.APP_VERSION}:{settings.INSTANCE_ID}"


@dataclass(frozen=True)
class ReleaseNode:
    """A single release, as listed in the feed."""

    tag_name: str
    name: str = ""
    url: str = ""
    published_at: str | None = None

    @classmethod
    def from_feed(cls, node: dict) -> "ReleaseNode":
        """Build from a feed entry; ``tagName`` is mandatory."""
        return cls(
            tag_name=node["tagName"],
            name=node.get("name") or "",
            url=node.get("url") or "",
            published_at=node.get("publishedAt"),
        )


class ReleaseNotesUnavailableError(AppError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_code = "release_notes_unavailable"
    default_detail = "Release notes could not be fetched."


class ReleaseNotesService:
    """
    Fetches release nodes from the feed and counts releases newer than a
    user's last-seen version.

    Args:
        base_url: Feed URL; defaults to ``settings.RELEASE_NOTES_URL``.  An
            empty URL disables fetching.
        transport: Optional :class:`httpx.BaseTransport`, used by tests to
            stub the feed.
    """

    def __init__(
        self,
        base_url: str | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = settings.RELEASE_NOTES_URL if base_url is None else base_url
        self.transport = transport

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------

    def get_release_nodes(self) -> list[ReleaseNode]:
        """
        Return the release nodes, newest first.

        Served from the cache when present.  Returns ``[]`` without any
        network call when the feed URL is not configured.  A cache backend
        that is down or holds an unreadable entry only costs a refetch.

        Raises:
            ReleaseNotesUnavailableError: The feed could not be reached,
                answered with an error status, or returned an unexpected
                payload.
        """
        if not self.base_url:
            return []

        key = cache_key()
        cached = self._read_cache(key)
        if cached is not None:
            return cached

        nodes = self._fetch()
        try:
            cache.set(
                key,
                [asdict(node) for node in nodes],
                timeout=settings.RELEASE_NOTES_CACHE_SECONDS,
            )
        except Exception as exc:  # noqa: BLE001 - any backend failure
            logger.warning("release_notes_cache_write_failed", error=repr(exc))
        logger.info("release_notes_fetched", count=len(nodes))
        return nodes

    @staticmethod
    def _read_cache(key: str) -> list[ReleaseNode] | None:
        try:
            cached = cache.get(key)
        except Exception as exc:  # noqa: BLE001 - any backend failure
            logger.warning("release_notes_cache_read_failed", error=repr(exc))
            return None
        if cached is None:
            return None
        try:
            return [ReleaseNode(**node) for node in cached]
        except TypeError as exc:
            logger.warning("release_notes_cache_entry_invalid", key=key, error=repr(exc))
            return None

    def _fetch(self) -> list[ReleaseNode]:
        params = {"instanceId": settings.INSTANCE_ID, "version": settings.APP_VERSION}
        try:
            with httpx.Client(
                timeout=settings.RELEASE_NOTES_TIMEOUT_SECONDS,
                transport=self.transport,
            ) as client:
                response = client.get(self.base_url, params=params)
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPStatusError as exc:
            logger.warning(
                "release_notes_http_error",
                status_code=exc.response.status_code,
                url=self.base_url,
            )
            raise ReleaseNotesUnavailableError(
                f"Release-notes feed answered {exc.response.status_code}."
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("release_notes_fetch_failed", error=str(exc), url=self.base_url)
            raise ReleaseNotesUnavailableError(str(exc)) from exc

        try:
            return [ReleaseNode.from_feed(node) for node in payload["data"]["nodes"]]
        except (KeyError, TypeError) as exc:
            logger.warning("release_notes_payload_invalid", error=repr(exc))
            raise ReleaseNotesUnavailableError("Unexpected release-notes payload.") from exc

    # ------------------------------------------------------------------
    # Counting
    # ------------------------------------------------------------------

    @staticmethod
    def compute_new_from(version: str | None, nodes: list[ReleaseNode]) -> str:
        """
        Count the releases published after *version*.

        Returns:
            ``"0"`` when *version* is ``None`` or *nodes* is empty; the index
            of the first node tagged *version* (i.e. how many newer nodes
            precede it); otherwise ``"<len(nodes)>+"``, meaning at least
            that many releases are new.
        """
        if version is None or not nodes:
            return "0"

        for index, node in enumerate(nodes):
            if node.tag_name == version:
                return str(index)
        return f"{len(nodes)}+"
