"""
Posts component tests.

- create applies defaults and publication rules
- (slug, language) is unique; the same slug is allowed per language
- partial updates never touch id/created_at
- drafts are hidden from public reads
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from uuid import UUID, uuid4

import pytest

from src.components.posts import (
    CreatePostInput,
    DeletePostInput,
    GetPostInput,
    ListPostsInput,
    ListTranslationsInput,
    UpdatePostInput,
    missing_required,
    run_create,
    run_delete,
    run_get,
    run_list,
    run_list_translations,
    run_update,
)
from src.domain.entities import Post
from src.domain.errors import DuplicateSlugError
from src.rules.models import ContentRules

NOW = datetime(2025, 6, 1, 12, 0, 0, tzinfo=UTC)


class MockPostRepo:
    def __init__(self) -> None:
        self.posts: dict[UUID, Post] = {}

    def _conflict(self, post: Post) -> bool:
        return any(
            p.slug == post.slug and p.language == post.language and p.id != post.id
            for p in self.posts.values()
        )

    def create(self, post: Post) -> Post:
        if self._conflict(post):
            raise DuplicateSlugError(post.slug, post.language)
        self.posts[post.id] = post
        return post

    def update(self, post: Post, fields) -> Post:
        if self._conflict(post):
            raise DuplicateSlugError(post.slug, post.language)
        stored = self.posts[post.id]
        changes = {name: getattr(post, name) for name in {*fields, "updated_at"}}
        self.posts[post.id] = stored.model_copy(update=changes)
        return self.posts[post.id]

    def get_by_id(self, post_id: UUID) -> Post | None:
        return self.posts.get(post_id)

    def get_by_slug(self, slug: str, language: str) -> Post | None:
        for p in self.posts.values():
            if p.slug == slug and p.language == language:
                return p
        return None

    def list_posts(self, language=None, published_only=True, tag=None, search=None,
                   translation_group=None) -> list[Post]:
        items = [
            p for p in self.posts.values()
            if (language is None or p.language == language)
            and (not published_only or p.published)
            and (tag is None or tag in p.tags)
            and (search is None or search in p.title)
            and (translation_group is None or p.translation_group == translation_group)
        ]
        return sorted(items, key=lambda p: p.created_at, reverse=True)

    def list_translations(self, group: str, exclude_id: UUID | None = None) -> list[Post]:
        return sorted(
            (p for p in self.posts.values() if p.translation_group == group and p.id != exclude_id),
            key=lambda p: p.language,
        )

    def delete(self, post_id: UUID) -> bool:
        return self.posts.pop(post_id, None) is not None


class FakeTime:
    def __init__(self) -> None:
        self.now = NOW

    def now_utc(self) -> datetime:
        return self.now


@pytest.fixture
def content_rules() -> ContentRules:
    return ContentRules(
        languages=["it", "en"],
        default_language="it",
        slug_pattern=r"^[a-z0-9]+(?:-[a-z0-9]+)*$",
    )


@pytest.fixture
def repo() -> MockPostRepo:
    return MockPostRepo()


@pytest.fixture
def time() -> FakeTime:
    return FakeTime()


def _create(repo, time, rules, **overrides):
    fields = dict(
        slug="hello-world", language="en", title="Hello", excerpt="Short", content="Body"
    )
    fields.update(overrides)
    return run_create(CreatePostInput(**fields), repo=repo, time=time, rules=rules)


class TestCreate:
    def test_draft_with_defaults(self, repo, time, content_rules):
        out = _create(repo, time, content_rules)

        assert out.success is True
        post = out.post
        assert post.author == "Editorial Team"
        assert post.read_time == "5 min"
        assert post.published is False
        assert post.published_at is None
        assert post.scheduled_at is None
        assert post.created_at == post.updated_at == NOW

    def test_published_stamps_published_at(self, repo, time, content_rules):
        post = _create(repo, time, content_rules, published=True).post

        assert post.published is True
        assert post.published_at == NOW

    def test_published_with_schedule_drops_schedule(self, repo, time, content_rules):
        post = _create(
            repo, time, content_rules, published=True, scheduled_at=NOW + timedelta(days=1)
        ).post
        assert post.scheduled_at is None

    def test_scheduled_naive_datetime_is_utc(self, repo, time, content_rules):
        post = _create(repo, time, content_rules, scheduled_at=datetime(2025, 7, 1, 9, 0)).post

        assert post.scheduled_at == datetime(2025, 7, 1, 9, 0, tzinfo=UTC)
        assert post.published is False

    def test_same_slug_other_language_is_allowed(self, repo, time, content_rules):
        assert _create(repo, time, content_rules, language="en").success
        assert _create(repo, time, content_rules, language="it").success

    def test_duplicate_slug_language(self, repo, time, content_rules):
        _create(repo, time, content_rules)
        out = _create(repo, time, content_rules)

        assert out.success is False
        assert out.errors[0].code == "slug_exists"

    @pytest.mark.parametrize(
        ("overrides", "code"),
        [
            ({"slug": "Bad Slug"}, "slug_invalid"),
            ({"language": "fr"}, "language_unsupported"),
            ({"title": "x" * 201}, "title_too_long"),
            ({"content": "   "}, "required"),
        ],
    )
    def test_validation(self, repo, time, content_rules, overrides, code):
        out = _create(repo, time, content_rules, **overrides)

        assert out.success is False
        assert out.errors[0].code == code
        assert repo.posts == {}


def test_missing_required():
    assert missing_required({"slug": "a", "language": "en", "title": "t", "excerpt": "e",
                             "content": "c"}) == []
    assert missing_required({"slug": "a", "title": ""}) == ["language", "title", "excerpt",
                                                           "content"]


class TestUpdate:
    def test_partial_update_keeps_identity(self, repo, time, content_rules):
        original = _create(repo, time, content_rules).post
        time.now = NOW + timedelta(hours=1)

        out = run_update(
            UpdatePostInput(post_id=original.id, updates={"title": "New", "id": uuid4(),
                                                         "created_at": NOW - timedelta(days=9)}),
            repo=repo, time=time, rules=content_rules,
        )

        assert out.success is True
        assert out.post.id == original.id
        assert out.post.created_at == original.created_at
        assert out.post.title == "New"
        assert out.post.excerpt == original.excerpt
        assert out.post.updated_at == NOW + timedelta(hours=1)

    def test_explicit_null_on_required_field_is_ignored(self, repo, time, content_rules):
        original = _create(repo, time, content_rules).post
        out = run_update(
            UpdatePostInput(post_id=original.id, updates={"title": None, "tags": None}),
            repo=repo, time=time, rules=content_rules,
        )
        assert out.post.title == "Hello"
        assert out.post.tags == []

    def test_publish_then_unpublish(self, repo, time, content_rules):
        post = _create(repo, time, content_rules).post

        published = run_update(UpdatePostInput(post_id=post.id, updates={"published": True}),
                               repo=repo, time=time, rules=content_rules).post
        assert published.published_at == NOW

        unpublished = run_update(UpdatePostInput(post_id=post.id, updates={"published": False}),
                                 repo=repo, time=time, rules=content_rules).post
        assert unpublished.published is False
        assert unpublished.published_at is None

    def test_clear_schedule_returns_to_draft(self, repo, time, content_rules):
        post = _create(repo, time, content_rules, scheduled_at=NOW + timedelta(days=1)).post
        out = run_update(UpdatePostInput(post_id=post.id, updates={"scheduled_at": None}),
                         repo=repo, time=time, rules=content_rules)

        assert out.post.scheduled_at is None
        assert out.post.published is False

    def test_slug_collision(self, repo, time, content_rules):
        _create(repo, time, content_rules, slug="taken")
        post = _create(repo, time, content_rules, slug="free").post

        out = run_update(UpdatePostInput(post_id=post.id, updates={"slug": "taken"}),
                         repo=repo, time=time, rules=content_rules)

        assert out.success is False
        assert out.errors[0].code == "slug_exists"
        assert repo.posts[post.id].slug == "free"

    def test_not_found(self, repo, time, content_rules):
        out = run_update(UpdatePostInput(post_id=uuid4(), updates={"title": "x"}),
                         repo=repo, time=time, rules=content_rules)
        assert out.errors[0].code == "not_found"

    def test_invalid_update_is_not_saved(self, repo, time, content_rules):
        post = _create(repo, time, content_rules).post
        out = run_update(UpdatePostInput(post_id=post.id, updates={"language": "de"}),
                         repo=repo, time=time, rules=content_rules)

        assert out.success is False
        assert repo.posts[post.id].language == "en"


class TestReads:
    def test_draft_hidden_from_public(self, repo, time, content_rules):
        _create(repo, time, content_rules)

        public = run_get(GetPostInput(slug="hello-world", language="en"), repo=repo)
        editor = run_get(
            GetPostInput(slug="hello-world", language="en", include_unpublished=True), repo=repo
        )

        assert public.success is False and public.errors[0].code == "not_found"
        assert editor.success is True

    def test_list_is_per_language_and_published_only(self, repo, time, content_rules):
        _create(repo, time, content_rules, slug="a", published=True)
        _create(repo, time, content_rules, slug="b")
        _create(repo, time, content_rules, slug="c", language="it", published=True)

        out = run_list(ListPostsInput(language="en"), repo=repo)
        assert [p.slug for p in out.items] == ["a"]

        everything = run_list(ListPostsInput(language="en", published_only=False), repo=repo)
        assert {p.slug for p in everything.items} == {"a", "b"}

    def test_translations(self, repo, time, content_rules):
        _create(repo, time, content_rules, slug="hello", translation_group="g1", published=True)
        _create(repo, time, content_rules, slug="ciao", language="it", translation_group="g1",
                published=True)

        out = run_list_translations(ListTranslationsInput(slug="hello", language="en"), repo=repo)

        assert [(p.slug, p.language) for p in out.items] == [("ciao", "it")]

    def test_translations_without_group(self, repo, time, content_rules):
        _create(repo, time, content_rules, published=True)
        out = run_list_translations(
            ListTranslationsInput(slug="hello-world", language="en"), repo=repo
        )
        assert out.success is True
        assert out.items == []


def test_delete(repo, time, content_rules):
    post = _create(repo, time, content_rules).post

    assert run_delete(DeletePostInput(post_id=post.id), repo=repo).success is True
    again = run_delete(DeletePostInput(post_id=post.id), repo=repo)
    assert again.success is False
    assert again.errors[0].code == "not_found"
