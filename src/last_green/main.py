"""Entry points for resolving the last green revision of the current project.

``get_last_successful_build_revision_on_branch`` is meant to be called from
inside a CircleCI job: it reads the job's environment, derives the project
slug from the build URL and asks the CircleCI API for the revision of the
most recent fully green pipeline on a branch.

``main`` wraps it as the ``last-green`` command, which prints the revision
on stdout so it can be used in shell steps, e.g.::

    BASE=$(last-green --branch main) && git diff --name-only "$BASE"...HEAD
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from pydantic import ValidationError

from last_green.circleci.client import CircleCIClient
from last_green.config import ResolverSettings, get_settings
from last_green.resolver import RevisionResolver


logger = logging.getLogger(__name__)


def _redact_secret(value: str, visible_chars: int = 4) -> str:
    """Redact a secret value, showing only the first few characters."""
    if len(value) <= visible_chars:
        return "*" * len(value)
    return value[:visible_chars] + "*" * (len(value) - visible_chars)


def _log_configuration(settings: ResolverSettings) -> None:
    logger.debug("Resolver configuration:")
    logger.debug(f"  API URL: {settings.api_url}")
    logger.debug(f"  Token: {_redact_secret(settings.token)}")
    logger.debug(f"  Build URL: {settings.build_url}")
    logger.debug(f"  Project Slug: {settings.project_slug}")
    logger.debug(f"  Timeout Seconds: {settings.timeout_seconds}")


async def get_last_successful_build_revision_on_branch(
    branch: str,
    settings: Optional[ResolverSettings] = None,
) -> Optional[str]:
    """Determine the revision of the last green CircleCI build on a branch.

    Args:
        branch: Branch whose pipelines are scanned.
        settings: Resolver settings; read from the environment when omitted.

    Returns:
        The revision of the most recent green pipeline on the branch, or
        None if there is none or the lookup failed.
    """
    if settings is None:
        try:
            settings = get_settings()
        except ValidationError as e:
            logger.warning(f"Failed to call CircleCI API v2 with error: {e}")
            return None

    _log_configuration(settings)

    slug = settings.project_slug
    if slug is None:
        logger.warning(
            "Could not derive project slug from build URL",
            extra={"build_url": settings.build_url},
        )
        return None

    async with CircleCIClient(
        token=settings.token,
        base_url=settings.api_url,
        timeout=settings.timeout_seconds,
    ) as client:
        resolver = RevisionResolver(client, slug)
        return await resolver.resolve(branch)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="last-green",
        description=(
            "Print the revision of the most recent fully green CircleCI "
            "pipeline on a branch."
        ),
    )
    parser.add_argument(
        "--branch",
        "-b",
        help="Branch to scan (default: $CIRCLE_BRANCH)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Run the last-green command.

    Returns:
        0 if a revision was printed, 1 otherwise.
    """
    args = _build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    try:
        settings = get_settings()
    except ValidationError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    branch = args.branch or settings.branch
    if not branch:
        logger.error("No branch given; pass --branch or set CIRCLE_BRANCH")
        return 1

    revision = asyncio.run(
        get_last_successful_build_revision_on_branch(branch, settings=settings)
    )
    if revision is None:
        logger.info("No green build found", extra={"branch": branch})
        return 1

    print(revision)
    return 0


if __name__ == "__main__":
    sys.exit(main())
