from datetime import UTC, datetime, timedelta

from src.domain.entities import Post
from src.domain.state import apply_publication_fields, post_state

NOW = datetime(2025, 6, 1, 12, 0, 0, tzinfo=UTC)


def _post(**kwargs) -> Post:
    defaults = dict(slug="hello", language="en", title="Hello", excerpt="E", content="C")
    defaults.update(kwargs)
    return Post(**defaults)


def test_post_state():
    assert post_state(_post()) == "draft"
    assert post_state(_post(scheduled_at=NOW)) == "scheduled"
    assert post_state(_post(published=True, published_at=NOW)) == "published"


class TestApplyPublicationFields:
    def test_publish_stamps_published_at_and_clears_schedule(self):
        post = _post(scheduled_at=NOW + timedelta(days=1))
        updated = apply_publication_fields(post, {"published": True}, NOW)

        assert updated.published is True
        assert updated.published_at == NOW
        assert updated.scheduled_at is None

    def test_explicit_published_at_is_kept(self):
        earlier = NOW - timedelta(days=3)
        updated = apply_publication_fields(
            _post(), {"published": True, "published_at": earlier}, NOW
        )
        assert updated.published_at == earlier

    def test_republishing_keeps_original_published_at(self):
        first = NOW - timedelta(days=10)
        post = _post(published=True, published_at=first)
        updated = apply_publication_fields(post, {"title": "New title"}, NOW)

        assert updated.published_at == first
        assert updated.title == "New title"
        assert updated.updated_at == NOW

    def test_unpublish_clears_published_at(self):
        post = _post(published=True, published_at=NOW - timedelta(days=1))
        updated = apply_publication_fields(post, {"published": False}, NOW)

        assert updated.published is False
        assert updated.published_at is None

    def test_schedule_on_published_post_is_dropped(self):
        post = _post(published=True, published_at=NOW)
        updated = apply_publication_fields(
            post, {"scheduled_at": NOW + timedelta(days=1)}, NOW
        )
        assert updated.scheduled_at is None

    def test_draft_can_be_scheduled(self):
        when = NOW + timedelta(hours=2)
        updated = apply_publication_fields(_post(), {"scheduled_at": when}, NOW)
        assert post_state(updated) == "scheduled"
        assert updated.scheduled_at == when
