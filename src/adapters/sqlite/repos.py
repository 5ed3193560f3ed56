"""
SQLite repositories for posts, users, settings and analytics events.

Timestamps are written as UTC ISO-8601 strings with fixed microsecond
precision, so string comparison in SQL matches chronological order.
"""

from __future__ import annotations

import json
import sqlite3
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from src.domain.entities import AnalyticsEvent, Post, Setting, User
from src.domain.errors import DuplicateEmailError, DuplicateSlugError

# -----------------------------------------------------------------------------
# Helper functions
# -----------------------------------------------------------------------------


def dict_factory(cursor: sqlite3.Cursor, row: tuple[Any, ...]) -> dict[str, Any]:
    """Convert SQLite row to dictionary."""
    return {col[0]: row[idx] for idx, col in enumerate(cursor.description)}


def to_db_dt(dt: datetime | None) -> str | None:
    """Serialise a datetime as a sortable UTC string. Naive values are taken as UTC."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC).isoformat(timespec="microseconds")


def parse_dt(s: str | None) -> datetime | None:
    """Parse ISO datetime string."""
    return datetime.fromisoformat(s) if s else None


# -----------------------------------------------------------------------------
# Base SQLite Repository
# -----------------------------------------------------------------------------


class SQLiteRepoBase:
    """Base class for SQLite repositories."""

    def __init__(self, db_path: str, connection: sqlite3.Connection | None = None):
        self.db_path = db_path
        self._external_conn = connection

    def _get_conn(self) -> sqlite3.Connection:
        """Get database connection (uses external if provided)."""
        if self._external_conn is not None:
            return self._external_conn

        conn = sqlite3.connect(self.db_path)
        conn.row_factory = dict_factory
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn

    def _should_close(self) -> bool:
        """Whether to close connection after use."""
        return self._external_conn is None

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        conn = self._get_conn()
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            if self._should_close():
                conn.close()


# -----------------------------------------------------------------------------
# Posts
# -----------------------------------------------------------------------------

_DUE_PREDICATE = "published = 0 AND scheduled_at IS NOT NULL AND scheduled_at <= ?"


class SQLitePostRepo(SQLiteRepoBase):
    """SQLite implementation of the post gateway."""

    _COLUMNS = (
        "id, slug, language, title, excerpt, content, author, read_time, "
        "tags_json, keywords_json, image, translation_group, published, "
        "published_at, scheduled_at, created_at, updated_at"
    )

    def _params(self, post: Post) -> tuple[Any, ...]:
        return (
            str(post.id),
            post.slug,
            post.language,
            post.title,
            post.excerpt,
            post.content,
            post.author,
            post.read_time,
            json.dumps(post.tags),
            json.dumps(post.keywords),
            post.image,
            post.translation_group,
            1 if post.published else 0,
            to_db_dt(post.published_at),
            to_db_dt(post.scheduled_at),
            to_db_dt(post.created_at),
            to_db_dt(post.updated_at),
        )

    def _map_row(self, row: dict[str, Any]) -> Post:
        return Post(
            id=UUID(row["id"]),
            slug=row["slug"],
            language=row["language"],
            title=row["title"],
            excerpt=row["excerpt"],
            content=row["content"],
            author=row["author"],
            read_time=row["read_time"],
            tags=json.loads(row["tags_json"] or "[]"),
            keywords=json.loads(row["keywords_json"] or "[]"),
            image=row["image"],
            translation_group=row["translation_group"],
            published=bool(row["published"]),
            published_at=parse_dt(row["published_at"]),
            scheduled_at=parse_dt(row["scheduled_at"]),
            created_at=parse_dt(row["created_at"]) or datetime.min.replace(tzinfo=UTC),
            updated_at=parse_dt(row["updated_at"]) or datetime.min.replace(tzinfo=UTC),
        )

    def create(self, post: Post) -> Post:
        """Insert a new post. Raises DuplicateSlugError on (slug, language) conflict."""
        try:
            with self._connection() as conn:
                conn.execute(
                    f"INSERT INTO blog_posts ({self._COLUMNS}) "
                    "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                    self._params(post),
                )
        except sqlite3.IntegrityError as e:
            raise DuplicateSlugError(post.slug, post.language) from e
        return post

    # Post fields that map to a differently named column
    _FIELD_COLUMNS = {"tags": "tags_json", "keywords": "keywords_json"}

    def _column_values(self, post: Post) -> dict[str, Any]:
        columns = [c.strip() for c in self._COLUMNS.split(",")]
        return dict(zip(columns, self._params(post), strict=True))

    def update(self, post: Post, fields: Iterable[str]) -> Post:
        """
        Write only the named fields (plus updated_at) and return the stored row.

        Columns not named keep whatever is in the database, so a concurrent
        publish by the sweep is never overwritten by an unrelated edit.
        Raises DuplicateSlugError on (slug, language) conflict.
        """
        values = self._column_values(post)
        columns = sorted(
            ({self._FIELD_COLUMNS.get(f, f) for f in fields} | {"updated_at"})
            - {"id", "created_at"}
        )
        unknown = [c for c in columns if c not in values]
        if unknown:
            raise ValueError(f"Unknown post fields: {', '.join(unknown)}")

        assignments = ", ".join(f"{c} = ?" for c in columns)
        try:
            with self._connection() as conn:
                conn.execute(
                    f"UPDATE blog_posts SET {assignments} WHERE id = ?",
                    (*[values[c] for c in columns], str(post.id)),
                )
        except sqlite3.IntegrityError as e:
            raise DuplicateSlugError(post.slug, post.language) from e

        return self.get_by_id(post.id) or post

    def get_by_id(self, post_id: UUID) -> Post | None:
        with self._connection() as conn:
            row = conn.execute(
                "SELECT * FROM blog_posts WHERE id = ?", (str(post_id),)
            ).fetchone()
        return self._map_row(row) if row else None

    def get_by_slug(self, slug: str, language: str) -> Post | None:
        with self._connection() as conn:
            row = conn.execute(
                "SELECT * FROM blog_posts WHERE slug = ? AND language = ?", (slug, language)
            ).fetchone()
        return self._map_row(row) if row else None

    def list_posts(
        self,
        language: str | None = None,
        published_only: bool = True,
        tag: str | None = None,
        search: str | None = None,
        translation_group: str | None = None,
    ) -> list[Post]:
        query = "SELECT * FROM blog_posts WHERE 1=1"
        params: list[Any] = []

        if language:
            query += " AND language = ?"
            params.append(language)
        if published_only:
            query += " AND published = 1"
        if tag:
            query += " AND EXISTS (SELECT 1 FROM json_each(blog_posts.tags_json) WHERE value = ?)"
            params.append(tag)
        if search:
            like = f"%{search}%"
            query += " AND (title LIKE ? OR excerpt LIKE ? OR content LIKE ?)"
            params.extend([like, like, like])
        if translation_group:
            query += " AND translation_group = ?"
            params.append(translation_group)

        query += " ORDER BY created_at DESC"

        with self._connection() as conn:
            rows = conn.execute(query, params).fetchall()
        return [self._map_row(r) for r in rows]

    def list_translations(self, group: str, exclude_id: UUID | None = None) -> list[Post]:
        """Posts sharing a translation group, ordered by language."""
        query = "SELECT * FROM blog_posts WHERE translation_group = ?"
        params: list[Any] = [group]
        if exclude_id is not None:
            query += " AND id != ?"
            params.append(str(exclude_id))
        query += " ORDER BY language"

        with self._connection() as conn:
            rows = conn.execute(query, params).fetchall()
        return [self._map_row(r) for r in rows]

    def delete(self, post_id: UUID) -> bool:
        with self._connection() as conn:
            cur = conn.execute("DELETE FROM blog_posts WHERE id = ?", (str(post_id),))
            return cur.rowcount > 0

    # --- Scheduled publication ---

    def list_due(self, now: datetime) -> list[Post]:
        """Posts not yet published whose scheduled_at is at or before now."""
        with self._connection() as conn:
            rows = conn.execute(
                f"SELECT * FROM blog_posts WHERE {_DUE_PREDICATE} ORDER BY scheduled_at",
                (to_db_dt(now),),
            ).fetchall()
        return [self._map_row(r) for r in rows]

    def mark_published(self, post_id: UUID, now: datetime) -> bool:
        """
        Flip a due post to published.

        The UPDATE re-checks the due predicate, so a row already published by an
        overlapping sweep (or unscheduled by an editor) is left untouched.
        Returns True only when this call performed the transition.
        """
        stamp = to_db_dt(now)
        with self._connection() as conn:
            cur = conn.execute(
                f"""
                UPDATE blog_posts
                SET published = 1, published_at = ?, scheduled_at = NULL, updated_at = ?
                WHERE id = ? AND {_DUE_PREDICATE}
                """,
                (stamp, stamp, str(post_id), stamp),
            )
            return cur.rowcount == 1

    # --- Maintenance ---

    def replace_in_content(self, old: str, new: str, now: datetime) -> list[Post]:
        """Replace a substring in every post body. Returns the posts that changed."""
        with self._connection() as conn:
            rows = conn.execute(
                "SELECT * FROM blog_posts WHERE instr(content, ?) > 0", (old,)
            ).fetchall()
            conn.execute(
                "UPDATE blog_posts SET content = replace(content, ?, ?), updated_at = ? "
                "WHERE instr(content, ?) > 0",
                (old, new, to_db_dt(now), old),
            )
        return [self._map_row(r) for r in rows]

    def set_keywords(self, slug: str, language: str, keywords: list[str], now: datetime) -> bool:
        with self._connection() as conn:
            cur = conn.execute(
                "UPDATE blog_posts SET keywords_json = ?, updated_at = ? "
                "WHERE slug = ? AND language = ?",
                (json.dumps(keywords), to_db_dt(now), slug, language),
            )
            return cur.rowcount > 0

    def set_translation_group(self, post_id: UUID, group: str | None, now: datetime) -> None:
        with self._connection() as conn:
            conn.execute(
                "UPDATE blog_posts SET translation_group = ?, updated_at = ? WHERE id = ?",
                (group, to_db_dt(now), str(post_id)),
            )


# -----------------------------------------------------------------------------
# Users
# -----------------------------------------------------------------------------


class SQLiteUserRepo(SQLiteRepoBase):
    def _map_row(self, row: dict[str, Any]) -> User:
        return User(
            id=UUID(row["id"]),
            email=row["email"],
            password_hash=row["password_hash"],
            name=row["name"],
            role=row["role"],
            created_at=parse_dt(row["created_at"]) or datetime.min.replace(tzinfo=UTC),
            updated_at=parse_dt(row["updated_at"]) or datetime.min.replace(tzinfo=UTC),
        )

    def get_by_id(self, user_id: UUID) -> User | None:
        with self._connection() as conn:
            row = conn.execute("SELECT * FROM users WHERE id = ?", (str(user_id),)).fetchone()
        return self._map_row(row) if row else None

    def get_by_email(self, email: str) -> User | None:
        with self._connection() as conn:
            row = conn.execute(
                "SELECT * FROM users WHERE email = ? COLLATE NOCASE", (email,)
            ).fetchone()
        return self._map_row(row) if row else None

    def save(self, user: User) -> User:
        try:
            with self._connection() as conn:
                conn.execute(
                    """
                    INSERT INTO users (id, email, password_hash, name, role, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?)
                    ON CONFLICT(id) DO UPDATE SET
                        email=excluded.email,
                        password_hash=excluded.password_hash,
                        name=excluded.name,
                        role=excluded.role,
                        updated_at=excluded.updated_at
                    """,
                    (
                        str(user.id),
                        user.email,
                        user.password_hash,
                        user.name,
                        user.role,
                        to_db_dt(user.created_at),
                        to_db_dt(user.updated_at),
                    ),
                )
        except sqlite3.IntegrityError as e:
            raise DuplicateEmailError(user.email) from e
        return user

    def count(self) -> int:
        with self._connection() as conn:
            row = conn.execute("SELECT COUNT(*) AS n FROM users").fetchone()
        return int(row["n"])


# -----------------------------------------------------------------------------
# Settings
# -----------------------------------------------------------------------------


class SQLiteSettingRepo(SQLiteRepoBase):
    def _map_row(self, row: dict[str, Any]) -> Setting:
        return Setting(
            key=row["key"],
            value=json.loads(row["value_json"]),
            updated_at=parse_dt(row["updated_at"]) or datetime.min.replace(tzinfo=UTC),
        )

    def get(self, key: str) -> Setting | None:
        with self._connection() as conn:
            row = conn.execute("SELECT * FROM admin_settings WHERE key = ?", (key,)).fetchone()
        return self._map_row(row) if row else None

    def list_all(self) -> list[Setting]:
        with self._connection() as conn:
            rows = conn.execute("SELECT * FROM admin_settings ORDER BY key").fetchall()
        return [self._map_row(r) for r in rows]

    def upsert(self, setting: Setting) -> Setting:
        with self._connection() as conn:
            conn.execute(
                """
                INSERT INTO admin_settings (key, value_json, updated_at) VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value_json=excluded.value_json,
                    updated_at=excluded.updated_at
                """,
                (setting.key, json.dumps(setting.value), to_db_dt(setting.updated_at)),
            )
        return setting

    def delete(self, key: str) -> bool:
        with self._connection() as conn:
            cur = conn.execute("DELETE FROM admin_settings WHERE key = ?", (key,))
            return cur.rowcount > 0


# -----------------------------------------------------------------------------
# Analytics
# -----------------------------------------------------------------------------

# Columns that may be used in GROUP BY breakdowns
_GROUPABLE = frozenset({"path", "device_type", "browser", "os", "referrer", "tool_name"})


class SQLiteAnalyticsRepo(SQLiteRepoBase):
    """Append-only event store plus the aggregate queries behind the stats endpoints."""

    def store(self, event: AnalyticsEvent) -> None:
        with self._connection() as conn:
            conn.execute(
                """
                INSERT INTO analytics_events (
                    id, session_id, user_id, path, event, referrer, country, city,
                    device_type, browser, os, language, tool_name, metadata_json, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    str(event.id),
                    event.session_id,
                    event.user_id,
                    event.path,
                    event.event,
                    event.referrer,
                    event.country,
                    event.city,
                    event.device_type,
                    event.browser,
                    event.os,
                    event.language,
                    event.tool_name,
                    json.dumps(event.metadata) if event.metadata is not None else None,
                    to_db_dt(event.created_at),
                ),
            )

    def _window(
        self, start: datetime, end: datetime | None, event: str | None = None
    ) -> tuple[str, list[Any]]:
        clause = "created_at >= ?"
        params: list[Any] = [to_db_dt(start)]
        if end is not None:
            clause += " AND created_at <= ?"
            params.append(to_db_dt(end))
        if event is not None:
            clause += " AND event = ?"
            params.append(event)
        return clause, params

    def count_events(
        self, start: datetime, end: datetime | None = None, event: str | None = None
    ) -> int:
        where, params = self._window(start, end, event)
        with self._connection() as conn:
            row = conn.execute(
                f"SELECT COUNT(*) AS n FROM analytics_events WHERE {where}", params
            ).fetchone()
        return int(row["n"])

    def count_distinct(
        self, column: str, start: datetime, end: datetime | None = None
    ) -> int:
        if column not in ("session_id", "user_id"):
            raise ValueError(f"Unsupported distinct column: {column}")
        where, params = self._window(start, end)
        with self._connection() as conn:
            row = conn.execute(
                f"SELECT COUNT(DISTINCT {column}) AS n FROM analytics_events "
                f"WHERE {where} AND {column} IS NOT NULL",
                params,
            ).fetchone()
        return int(row["n"])

    def group_counts(
        self,
        column: str,
        start: datetime,
        end: datetime | None = None,
        event: str | None = None,
        limit: int | None = None,
    ) -> list[tuple[str | None, int]]:
        """Count events per value of `column`, most frequent first. Nulls are skipped."""
        if column not in _GROUPABLE:
            raise ValueError(f"Unsupported group column: {column}")
        where, params = self._window(start, end, event)
        query = (
            f"SELECT {column} AS value, COUNT(*) AS n FROM analytics_events "
            f"WHERE {where} AND {column} IS NOT NULL "
            f"GROUP BY {column} ORDER BY n DESC, {column}"
        )
        if limit is not None:
            query += " LIMIT ?"
            params.append(limit)
        with self._connection() as conn:
            rows = conn.execute(query, params).fetchall()
        return [(r["value"], int(r["n"])) for r in rows]

    def daily_pageviews(self, start: datetime, limit: int = 30) -> list[dict[str, Any]]:
        """Pageviews and distinct sessions per UTC date, newest first."""
        with self._connection() as conn:
            rows = conn.execute(
                """
                SELECT substr(created_at, 1, 10) AS date,
                       COUNT(*) AS pageviews,
                       COUNT(DISTINCT session_id) AS sessions
                FROM analytics_events
                WHERE event = 'pageview' AND created_at >= ?
                GROUP BY substr(created_at, 1, 10)
                ORDER BY date DESC
                LIMIT ?
                """,
                (to_db_dt(start), limit),
            ).fetchall()
        return [
            {"date": r["date"], "pageviews": int(r["pageviews"]), "sessions": int(r["sessions"])}
            for r in rows
        ]
