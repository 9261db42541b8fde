"""
versions.py

Responsibility: Resolve a `--versions` spec against the repository's tags.

A spec is a comma-separated list of tokens; each token is an exact tag (`v1.2.0`) or a
range (`>=1.0.0 <2`, `^1.2 || ~0.9`). A tag is selected when it is a valid semantic
version and satisfies at least one token. Pre-releases take part in range matching.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Iterable

from docsbuild.errors import EmptySpecError
from docsbuild.semver import InvalidRange, Range, SemVer, parse_version

logger = logging.getLogger(__name__)


def parse_version_spec(spec: str) -> list[str]:
    """
    Split a version spec into trimmed, non-empty tokens.

    Raises EmptySpecError when nothing is left.
    """
    tokens = [t.strip() for t in (spec or "").split(",")]
    tokens = [t for t in tokens if t]
    if not tokens:
        raise EmptySpecError("Version spec contains no tokens.")
    return tokens


def _compile(tokens: list[str]) -> list[Range]:
    ranges: list[Range] = []
    for token in tokens:
        try:
            ranges.append(Range(token))
        except InvalidRange:
            # Non-semver tokens can never name a buildable tag.
            logger.debug("Ignoring version token that is not a semver range: %r", token)
    return ranges


def _descending(a: tuple[str, SemVer], b: tuple[str, SemVer]) -> int:
    c = b[1].compare(a[1])
    if c:
        return c
    return (b[0] > a[0]) - (b[0] < a[0])


def resolve_tags_from_spec(spec: str, tags: Iterable[str]) -> list[str]:
    """
    Return the tags matching `spec`, highest version first.

    An empty or blank spec yields []; callers decide whether that is an error.
    """
    try:
        tokens = parse_version_spec(spec)
    except EmptySpecError:
        return []
    ranges = _compile(tokens)

    matched: list[tuple[str, SemVer]] = []
    seen: set[str] = set()
    for tag in tags:
        if tag in seen:
            continue
        version = parse_version(tag)
        if version is None:
            continue
        if any(r.test(version) for r in ranges):
            seen.add(tag)
            matched.append((tag, version))

    matched.sort(key=functools.cmp_to_key(_descending))
    return [tag for tag, _version in matched]
