"""Publish component - the scheduled publication sweep."""

from __future__ import annotations

import asyncio
import logging

from src.components.publish.models import PublishedPost, SweepError, SweepOutput
from src.components.publish.ports import ClockPort, DuePostRepoPort, NotifierPort
from src.domain.entities import Post

logger = logging.getLogger(__name__)


class PublishSweeper:
    """
    Flips due scheduled posts to published and notifies the frontend.

    The due query is re-run on every sweep; nothing is carried between sweeps.
    Each transition is a conditional update, so overlapping sweeps (or an
    editor touching the same post) publish and notify a post at most once.
    """

    def __init__(
        self,
        repo: DuePostRepoPort,
        notifier: NotifierPort,
        clock: ClockPort,
    ) -> None:
        self._repo = repo
        self._notifier = notifier
        self._clock = clock
        self._pending: set[asyncio.Task[None]] = set()

    @property
    def pending_notifications(self) -> int:
        return len(self._pending)

    async def run_sweep(self) -> SweepOutput:
        """Run one sweep. Never raises."""
        now = self._clock.now_utc()

        try:
            due = self._repo.list_due(now)
        except Exception as e:
            logger.exception("Failed to query scheduled posts")
            return SweepOutput(
                due=0,
                errors=[SweepError(code="QUERY_FAILED", message=str(e))],
                success=False,
            )

        if not due:
            return SweepOutput(due=0)

        logger.info("Found %d scheduled post(s) to publish", len(due))

        published: list[PublishedPost] = []
        errors: list[SweepError] = []
        skipped = 0

        for post in due:
            try:
                applied = self._repo.mark_published(post.id, now)
            except Exception as e:
                logger.exception("Failed to publish post %s (%s)", post.slug, post.language)
                errors.append(
                    SweepError(code="UPDATE_FAILED", message=str(e), post_id=post.id)
                )
                continue

            if not applied:
                logger.info(
                    "Post %s (%s) no longer due, skipping", post.slug, post.language
                )
                skipped += 1
                continue

            logger.info("Published scheduled post: %s (%s)", post.title, post.language)
            published.append(
                PublishedPost(post_id=post.id, slug=post.slug, language=post.language)
            )
            self._dispatch_notification(post)

        return SweepOutput(
            due=len(due),
            published=published,
            skipped=skipped,
            failed=len(errors),
            errors=errors,
            success=not errors,
        )

    async def drain(self) -> None:
        """Wait for in-flight notifications to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def _dispatch_notification(self, post: Post) -> None:
        # Detached: the sweep does not wait on the frontend
        task = asyncio.create_task(self._notify(post.slug, post.language))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _notify(self, slug: str, language: str) -> None:
        try:
            await self._notifier.notify(slug, language)
        except Exception:
            logger.warning(
                "Revalidation notifier raised for %s (%s)", slug, language, exc_info=True
            )
