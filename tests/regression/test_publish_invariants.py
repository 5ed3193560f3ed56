"""
Scheduled publication properties, checked against the real SQLite gateway.

1. Past-scheduled unpublished posts end up published, stamped, unscheduled.
2. Back-to-back sweeps never notify the same post twice.
3. Future-scheduled posts are untouched.
4. Posts without scheduled_at are never selected.
5. A post due one second ago is published and notified exactly once.
6. A failing notifier does not stop the batch or undo the publication.
7. Overlapping sweeps apply exactly one update and notify at most once.
8. An editor save racing the sweep never reverts the publication.
"""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime, timedelta

import pytest

from src.adapters.sqlite.repos import SQLitePostRepo
from src.components.posts import UpdatePostInput, run_update
from src.components.publish import PublishSweeper, SweepOutput
from src.domain.entities import Post
from src.rules.models import Rules

NOW = datetime(2025, 6, 1, 12, 0, 0, tzinfo=UTC)


class Clock:
    def now_utc(self) -> datetime:
        return NOW


class Notifier:
    def __init__(self, fail_slugs: set[str] | None = None) -> None:
        self.calls: list[tuple[str, str]] = []
        self.fail_slugs = fail_slugs or set()

    async def notify(self, slug: str, language: str) -> bool:
        self.calls.append((slug, language))
        if slug in self.fail_slugs:
            raise TimeoutError("revalidate timed out")
        return True


@pytest.fixture
def repo(db_path) -> SQLitePostRepo:
    return SQLitePostRepo(db_path)


def _add(repo: SQLitePostRepo, slug: str, language: str = "en", **kwargs) -> Post:
    return repo.create(
        Post(slug=slug, language=language, title=slug, excerpt="e", content="c",
             created_at=NOW - timedelta(days=1), updated_at=NOW - timedelta(days=1), **kwargs)
    )


def _sweep(*sweepers: PublishSweeper) -> list[SweepOutput]:
    async def run() -> list[SweepOutput]:
        results = await asyncio.gather(*(s.run_sweep() for s in sweepers))
        for s in sweepers:
            await s.drain()
        return list(results)

    return asyncio.run(run())


def test_past_scheduled_posts_are_published(repo):
    ids = [
        _add(repo, "a", scheduled_at=NOW - timedelta(days=3)).id,
        _add(repo, "b", "it", scheduled_at=NOW - timedelta(minutes=1)).id,
    ]

    _sweep(PublishSweeper(repo, Notifier(), Clock()))

    for post_id in ids:
        post = repo.get_by_id(post_id)
        assert post.published is True
        assert post.published_at == NOW
        assert post.scheduled_at is None


def test_back_to_back_sweeps_notify_once(repo):
    _add(repo, "once", scheduled_at=NOW - timedelta(seconds=30))
    notifier = Notifier()
    sweeper = PublishSweeper(repo, notifier, Clock())

    first, = _sweep(sweeper)
    second, = _sweep(sweeper)

    assert first.due == 1
    assert second.due == 0
    assert notifier.calls == [("once", "en")]


def test_future_post_untouched(repo):
    post = _add(repo, "later", scheduled_at=NOW + timedelta(seconds=1))

    _sweep(PublishSweeper(repo, Notifier(), Clock()))

    assert repo.get_by_id(post.id) == post


@pytest.mark.parametrize("published", [False, True])
def test_unscheduled_never_selected(repo, published):
    post = _add(repo, "plain", published=published, published_at=NOW if published else None)
    notifier = Notifier()

    result, = _sweep(PublishSweeper(repo, notifier, Clock()))

    assert result.due == 0
    assert repo.get_by_id(post.id) == post
    assert notifier.calls == []


def test_post_due_one_second_ago(repo):
    post = _add(repo, "p", "it", scheduled_at=NOW - timedelta(seconds=1))
    notifier = Notifier()

    _sweep(PublishSweeper(repo, notifier, Clock()))

    stored = repo.get_by_id(post.id)
    assert stored.published is True
    assert stored.scheduled_at is None
    assert notifier.calls == [("p", "it")]


def test_notifier_failure_keeps_publication(repo):
    first = _add(repo, "first", scheduled_at=NOW - timedelta(minutes=2))
    second = _add(repo, "second", scheduled_at=NOW - timedelta(minutes=1))
    notifier = Notifier(fail_slugs={"first"})

    result, = _sweep(PublishSweeper(repo, notifier, Clock()))

    assert result.success is True
    assert repo.get_by_id(first.id).published is True
    assert repo.get_by_id(second.id).published is True
    assert ("second", "en") in notifier.calls


def test_concurrent_sweeps_apply_once(repo):
    _add(repo, "race", scheduled_at=NOW - timedelta(seconds=1))
    notifier = Notifier()

    # Both sweeps read the due list before either updates
    snapshot = repo.list_due(NOW)

    class SnapshotRepo:
        def list_due(self, now: datetime) -> list[Post]:
            return list(snapshot)

        def mark_published(self, post_id, now: datetime) -> bool:
            return repo.mark_published(post_id, now)

    a, b = _sweep(
        PublishSweeper(SnapshotRepo(), notifier, Clock()),
        PublishSweeper(SnapshotRepo(), notifier, Clock()),
    )

    assert a.due == b.due == 1
    assert len(a.published) + len(b.published) == 1
    assert notifier.calls == [("race", "en")]


class SweepAfterReadRepo(SQLitePostRepo):
    """Runs a sweep right after an editor's read, before their write lands."""

    def __init__(self, db_path: str, sweeper_notifier: Notifier) -> None:
        super().__init__(db_path)
        self.sweeper = PublishSweeper(SQLitePostRepo(db_path), sweeper_notifier, Clock())
        self.armed = True

    def get_by_id(self, post_id):
        post = super().get_by_id(post_id)
        if self.armed:
            self.armed = False
            _sweep(self.sweeper)
        return post


def test_edit_racing_sweep_keeps_publication(db_path, rules: Rules):
    notifier = Notifier()
    repo = SweepAfterReadRepo(db_path, notifier)
    post = _add(repo, "racy", scheduled_at=NOW - timedelta(seconds=1))

    result = run_update(
        UpdatePostInput(post_id=post.id, updates={"title": "Edited"}),
        repo=repo,
        time=Clock(),
        rules=rules.content,
    )

    assert result.success
    stored = repo.get_by_id(post.id)
    assert stored.title == "Edited"
    assert stored.published is True
    assert stored.scheduled_at is None
    assert result.post.published is True

    class NextMinute:
        def now_utc(self) -> datetime:
            return NOW + timedelta(minutes=1)

    _sweep(PublishSweeper(SQLitePostRepo(db_path), notifier, NextMinute()))
    assert notifier.calls == [("racy", "en")]
