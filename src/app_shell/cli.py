import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Any

import yaml

from src.adapters.auth.crypto import JWTAuthAdapter
from src.adapters.clock import SystemClock
from src.adapters.sqlite.migrator import SQLiteMigrator
from src.adapters.sqlite.repos import SQLitePostRepo, SQLiteUserRepo
from src.api.deps import Settings, build_notifier
from src.components.publish import PublishSweeper, SweepOutput
from src.domain.entities import User
from src.domain.errors import DuplicateEmailError
from src.rules.loader import load_rules
from src.rules.models import Rules

logger = logging.getLogger("cli")


def _load_yaml_list(path: Path, key: str) -> list[dict[str, Any]]:
    """A YAML file holding either a list or a mapping with the list under `key`."""
    if not path.exists():
        logger.error("File %s not found.", path)
        sys.exit(1)
    data = yaml.safe_load(path.read_text()) or []
    if isinstance(data, dict):
        data = data.get(key, [])
    if not isinstance(data, list):
        logger.error("%s must contain a list of entries", path)
        sys.exit(1)
    return data


def handle_migrate(settings: Settings, rules: Rules, args: argparse.Namespace) -> None:
    applied = SQLiteMigrator(settings.db_path, settings.migrations_dir).run_migrations()
    print(f"Applied {len(applied)} migration(s).")


async def _sweep_once(sweeper: PublishSweeper) -> SweepOutput:
    result = await sweeper.run_sweep()
    await sweeper.drain()
    return result


def handle_publish_due(settings: Settings, rules: Rules, args: argparse.Namespace) -> None:
    sweeper = PublishSweeper(
        repo=SQLitePostRepo(settings.db_path),
        notifier=build_notifier(settings, rules),
        clock=SystemClock(),
    )
    result = asyncio.run(_sweep_once(sweeper))
    print(f"Published {len(result.published)} post(s).")
    if not result.success:
        for err in result.errors:
            logger.error("%s: %s", err.code, err.message)
        sys.exit(1)


def handle_create_admin(settings: Settings, rules: Rules, args: argparse.Namespace) -> None:
    if len(args.password) < rules.auth.min_password_length:
        logger.error(
            "Password must be at least %d characters", rules.auth.min_password_length
        )
        sys.exit(1)

    repo = SQLiteUserRepo(settings.db_path)
    if repo.get_by_email(args.email):
        logger.error("User %s already exists.", args.email)
        sys.exit(1)

    now = SystemClock().now_utc()
    user = User(
        email=args.email,
        password_hash=JWTAuthAdapter(settings.secret_key).hash_password(args.password),
        name=args.name,
        role="admin",
        created_at=now,
        updated_at=now,
    )
    try:
        repo.save(user)
    except DuplicateEmailError:
        logger.error("User %s already exists.", args.email)
        sys.exit(1)
    print(f"Admin created: {user.email}")


def handle_link_translations(settings: Settings, rules: Rules, args: argparse.Namespace) -> None:
    repo = SQLitePostRepo(settings.db_path)
    clock = SystemClock()
    linked = 0

    for pair in _load_yaml_list(Path(args.file), "pairs"):
        source = repo.get_by_slug(pair["source_slug"], pair["source_lang"])
        target = repo.get_by_slug(pair["target_slug"], pair["target_lang"])
        if source is None or target is None:
            logger.warning(
                "Skipping %s (%s) -> %s (%s): post not found",
                pair["source_slug"],
                pair["source_lang"],
                pair["target_slug"],
                pair["target_lang"],
            )
            continue
        if not source.translation_group:
            logger.warning(
                "Skipping %s (%s): source has no translation group",
                source.slug,
                source.language,
            )
            continue

        repo.set_translation_group(target.id, source.translation_group, clock.now_utc())
        linked += 1
        logger.info(
            "Linked %s (%s) to group %s", target.slug, target.language, source.translation_group
        )

    print(f"Linked {linked} post(s).")


def handle_replace_content(settings: Settings, rules: Rules, args: argparse.Namespace) -> None:
    if not args.old:
        logger.error("Search text must not be empty.")
        sys.exit(1)

    repo = SQLitePostRepo(settings.db_path)
    changed = repo.replace_in_content(args.old, args.new, SystemClock().now_utc())
    for post in changed:
        logger.info("Updated %s (%s)", post.slug, post.language)
    print(f"Updated {len(changed)} post(s).")


def handle_set_keywords(settings: Settings, rules: Rules, args: argparse.Namespace) -> None:
    repo = SQLitePostRepo(settings.db_path)
    clock = SystemClock()
    updated = 0

    for entry in _load_yaml_list(Path(args.file), "posts"):
        keywords = [str(k) for k in entry.get("keywords") or []]
        if repo.set_keywords(entry["slug"], entry["language"], keywords, clock.now_utc()):
            updated += 1
        else:
            logger.warning("Post not found: %s (%s)", entry["slug"], entry["language"])

    print(f"Updated keywords on {updated} post(s).")


HANDLERS = {
    "migrate": handle_migrate,
    "publish-due": handle_publish_due,
    "create-admin": handle_create_admin,
    "link-translations": handle_link_translations,
    "replace-content": handle_replace_content,
    "set-keywords": handle_set_keywords,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Blog maintenance CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # migrate
    subparsers.add_parser("migrate", help="Apply pending database migrations")

    # publish-due
    subparsers.add_parser("publish-due", help="Publish scheduled posts that are due")

    # create-admin
    admin_parser = subparsers.add_parser("create-admin", help="Create an admin account")
    admin_parser.add_argument("--email", required=True)
    admin_parser.add_argument("--password", required=True)
    admin_parser.add_argument("--name", required=True)

    # link-translations
    link_parser = subparsers.add_parser(
        "link-translations", help="Copy translation groups between posts"
    )
    link_parser.add_argument(
        "file", help="YAML list of source_slug/source_lang/target_slug/target_lang"
    )

    # replace-content
    replace_parser = subparsers.add_parser(
        "replace-content", help="Replace text in every post body"
    )
    replace_parser.add_argument("old", help="Text to search for")
    replace_parser.add_argument("new", help="Replacement text")

    # set-keywords
    keywords_parser = subparsers.add_parser("set-keywords", help="Set SEO keywords per post")
    keywords_parser.add_argument("file", help="YAML list of slug/language/keywords")

    return parser


def main(argv: list[str] | None = None) -> None:
    logging.basicConfig(level=logging.INFO)
    args = build_parser().parse_args(argv)

    settings = Settings()
    if not settings.rules_path.exists():
        logger.error("Rules file %s not found.", settings.rules_path)
        sys.exit(1)
    rules = load_rules(settings.rules_path)

    if args.command != "migrate":
        SQLiteMigrator(settings.db_path, settings.migrations_dir).run_migrations()

    HANDLERS[args.command](settings, rules, args)


if __name__ == "__main__":
    main()
