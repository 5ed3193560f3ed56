from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from src.adapters.sqlite.migrator import SQLiteMigrator
from src.rules.loader import load_rules
from src.rules.models import Rules

PROJECT_ROOT = Path(__file__).resolve().parents[1]


class FixedClock:
    """Deterministic clock; tests move it forward explicitly."""

    def __init__(self, now: datetime | None = None) -> None:
        self._now = now or datetime(2025, 6, 1, 12, 0, 0, tzinfo=UTC)

    def now_utc(self) -> datetime:
        return self._now

    def advance(self, **delta: float) -> None:
        self._now = self._now + timedelta(**delta)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def rules() -> Rules:
    """The real rules file from the project root."""
    return load_rules(PROJECT_ROOT / "rules.yaml")


@pytest.fixture
def db_path(tmp_path: Path) -> str:
    """Temporary SQLite database built from the real migrations."""
    path = str(tmp_path / "data" / "blog.db")
    SQLiteMigrator(path, PROJECT_ROOT / "migrations").run_migrations()
    return path
