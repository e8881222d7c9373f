"""Project slug extraction from CircleCI build URLs."""

import re
from typing import Optional


# https://circleci.com/{vcs}/{org}/{repo}/{build_number}
_BUILD_URL_PATTERN = re.compile(r"circleci\.com/([^/]+/[^/]+/[^/]+)/")


def parse_project_slug(build_url: str) -> Optional[str]:
    """Extract the project slug from a build URL.

    Args:
        build_url: Value of CIRCLE_BUILD_URL, e.g.
            "https://circleci.com/gh/acme/widgets/1234".

    Returns:
        The slug "{vcs}/{org}/{repo}" (e.g. "gh/acme/widgets"), or None if
        the URL is not a CircleCI build URL.
    """
    match = _BUILD_URL_PATTERN.search(build_url)
    if match is None:
        return None
    return match.group(1)
