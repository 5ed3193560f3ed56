import logging
import os
import sys
from collections.abc import Mapping

from src.rules.models import Rules

logger = logging.getLogger(__name__)


def missing_env(rules: Rules, environ: Mapping[str, str] | None = None) -> list[str]:
    env = os.environ if environ is None else environ
    return [name for name in rules.ops.required_env if not env.get(name)]


def validate_ops_rules(rules: Rules, environ: Mapping[str, str] | None = None) -> None:
    """
    Validate operational requirements before startup.

    Exits the process when a variable listed in ops.required_env is missing.
    """
    env = os.environ if environ is None else environ

    missing = missing_env(rules, env)
    if missing:
        logger.critical("Missing required environment variables: %s", ", ".join(missing))
        sys.exit(1)

    if rules.revalidation.enabled and not env.get("REVALIDATE_TOKEN"):
        logger.warning("REVALIDATE_TOKEN is not set; frontend revalidation requests will fail")

    if not env.get("BLOG_SECRET_KEY"):
        logger.warning("BLOG_SECRET_KEY is not set; using the insecure development key")

    logger.info("Configuration validated")
