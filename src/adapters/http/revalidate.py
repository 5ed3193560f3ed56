"""
Frontend cache revalidation notifier.

Tells the statically rendered frontend that a post changed, so its blog pages
are regenerated. Best effort: outcomes are logged, never raised, never retried.
"""

from __future__ import annotations

import logging

import httpx

logger = logging.getLogger(__name__)

REVALIDATE_ENDPOINT = "/api/revalidate"


class HttpRevalidationNotifier:
    """POSTs {path, slug} to the frontend's revalidate endpoint with a bearer token."""

    def __init__(
        self,
        frontend_url: str,
        token: str,
        path: str = "/blog",
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._url = frontend_url.rstrip("/") + REVALIDATE_ENDPOINT
        self._token = token
        self._path = path
        self._timeout = timeout_seconds
        self._transport = transport

    @property
    def url(self) -> str:
        return self._url

    async def notify(self, slug: str, language: str) -> bool:
        """
        Send one revalidation request.

        Returns True on a 2xx response, False otherwise. Never raises for
        HTTP or network failures.
        """
        headers = {
            "Authorization": f"Bearer {self._token}",
            "Content-Type": "application/json",
        }
        payload = {"path": self._path, "slug": slug}

        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.post(self._url, json=payload, headers=headers)
        except httpx.TimeoutException:
            logger.warning(
                "Cache revalidation timed out for %s (%s) after %.1fs",
                slug,
                language,
                self._timeout,
            )
            return False
        except httpx.HTTPError as e:
            logger.warning("Cache revalidation failed for %s (%s): %s", slug, language, e)
            return False

        if response.is_success:
            logger.info("Cache revalidated for %s (%s)", slug, language)
            return True

        logger.warning(
            "Cache revalidation failed for %s (%s): HTTP %d",
            slug,
            language,
            response.status_code,
        )
        return False


class NoOpNotifier:
    """Used when revalidation is disabled in rules.yaml."""

    async def notify(self, slug: str, language: str) -> bool:
        logger.debug("Revalidation disabled, skipping %s (%s)", slug, language)
        return False
