"""
semver.py

Responsibility: Semantic Version 2.0.0 parsing, precedence, and npm-style range matching.

Tags in the wild look like `v1.2.3`, `1.2.3-beta.1`, `v2.0.0-rc.1+build.5`, so a single
optional leading `v` is accepted. Ranges follow the grammar documentation sites already
use in package.json files:

- `1.2.3`, `=1.2.3`, `v1.2.3`           exact
- `>=1.2.3 <2.0.0`                       space-separated comparators are ANDed
- `^1.2.3 || ~2.1`                       `||` separates alternatives
- `1.x`, `1.2.*`, `*`, `1.2`             x-ranges
- `~1.2.3`, `^0.2.3`                     tilde / caret
- `1.2.3 - 2.3.4`                        hyphen ranges

Pre-release tags take part in range matching like any other version: `>=1.0.0` admits
`2.0.0-beta.1`. Bounds derived from x-ranges, tildes and carets are floored at `-0`, so
`^1.2` admits `1.3.0-rc.1` but not `2.0.0-beta.1`.
"""

from __future__ import annotations

import functools
import re
from dataclasses import dataclass, field

_SEMVER_RE = re.compile(
    r"^v?(?P<major>0|[1-9]\d*)\.(?P<minor>0|[1-9]\d*)\.(?P<patch>0|[1-9]\d*)"
    r"(?:-(?P<prerelease>(?:0|[1-9]\d*|\d*[A-Za-z-][0-9A-Za-z-]*)(?:\.(?:0|[1-9]\d*|\d*[A-Za-z-][0-9A-Za-z-]*))*))?"
    r"(?:\+(?P<build>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?$"
)

_XR = r"0|[1-9]\d*|[xX*]"
_PARTIAL_RE = re.compile(
    rf"^v?(?P<major>{_XR})"
    rf"(?:\.(?P<minor>{_XR})"
    rf"(?:\.(?P<patch>{_XR})"
    r"(?:-(?P<prerelease>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
    r"(?:\+(?P<build>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?)?)?$"
)
_HYPHEN_RE = re.compile(r"^(?P<low>\S+)\s+-\s+(?P<high>\S+)$")
_COMPARATOR_RE = re.compile(r"^(?P<op><=|>=|<|>|=|~>|~|\^)?(?P<version>.*)$")
_OP_GAP_RE = re.compile(r"(<=|>=|<|>|=|~>|~|\^)\s+")


class InvalidVersion(ValueError):
    pass


class InvalidRange(ValueError):
    pass


def _compare_identifiers(a: str, b: str) -> int:
    a_num, b_num = a.isdigit(), b.isdigit()
    if a_num and b_num:
        return (int(a) > int(b)) - (int(a) < int(b))
    if a_num:
        return -1
    if b_num:
        return 1
    return (a > b) - (a < b)


@functools.total_ordering
@dataclass(frozen=True, eq=False)
class SemVer:
    """A parsed semantic version. Equality and ordering follow precedence (build metadata ignored)."""

    major: int
    minor: int
    patch: int
    prerelease: tuple[str, ...] = ()
    build: tuple[str, ...] = field(default=())

    @classmethod
    def parse(cls, text: str) -> SemVer:
        match = _SEMVER_RE.match(text.strip())
        if not match:
            raise InvalidVersion(f"Not a semantic version: {text!r}")
        prerelease = match.group("prerelease")
        build = match.group("build")
        return cls(
            major=int(match.group("major")),
            minor=int(match.group("minor")),
            patch=int(match.group("patch")),
            prerelease=tuple(prerelease.split(".")) if prerelease else (),
            build=tuple(build.split(".")) if build else (),
        )

    def compare(self, other: SemVer) -> int:
        main_a = (self.major, self.minor, self.patch)
        main_b = (other.major, other.minor, other.patch)
        if main_a != main_b:
            return 1 if main_a > main_b else -1
        # A release outranks any of its pre-releases.
        if not self.prerelease and not other.prerelease:
            return 0
        if not self.prerelease:
            return 1
        if not other.prerelease:
            return -1
        for a, b in zip(self.prerelease, other.prerelease):
            c = _compare_identifiers(a, b)
            if c:
                return c
        return (len(self.prerelease) > len(other.prerelease)) - (len(self.prerelease) < len(other.prerelease))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SemVer):
            return NotImplemented
        return self.compare(other) == 0

    def __lt__(self, other: SemVer) -> bool:
        if not isinstance(other, SemVer):
            return NotImplemented
        return self.compare(other) < 0

    def __hash__(self) -> int:
        return hash((self.major, self.minor, self.patch, self.prerelease))

    def __str__(self) -> str:
        out = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            out += "-" + ".".join(self.prerelease)
        if self.build:
            out += "+" + ".".join(self.build)
        return out


def parse_version(text: str) -> SemVer | None:
    """Return the parsed version, or None when `text` is not a valid semantic version."""
    try:
        return SemVer.parse(text)
    except InvalidVersion:
        return None


@dataclass(frozen=True)
class Comparator:
    """`op` is one of <, <=, >, >=, = ; a comparator with `version=None` matches anything."""

    op: str
    version: SemVer | None = None

    def test(self, version: SemVer) -> bool:
        if self.version is None:
            return True
        c = version.compare(self.version)
        if self.op == "<":
            return c < 0
        if self.op == "<=":
            return c <= 0
        if self.op == ">":
            return c > 0
        if self.op == ">=":
            return c >= 0
        return c == 0

    def __str__(self) -> str:
        if self.version is None:
            return "*"
        return f"{'' if self.op == '=' else self.op}{self.version}"


ANY = Comparator("=", None)
_NOTHING = Comparator("<", SemVer(0, 0, 0, ("0",)))

# Lowest possible pre-release; `<2.0.0-0` excludes every 2.0.0 pre-release.
_FLOOR = ("0",)


def _is_x(part: str | None) -> bool:
    return part is None or part.lower() == "x" or part == "*"


def _v(major: int, minor: int, patch: int, prerelease: tuple[str, ...] = ()) -> SemVer:
    return SemVer(major, minor, patch, prerelease)


def _floor(major: int, minor: int, patch: int) -> SemVer:
    return SemVer(major, minor, patch, _FLOOR)


class _Partial:
    def __init__(self, text: str) -> None:
        match = _PARTIAL_RE.match(text)
        if not match:
            raise InvalidRange(f"Invalid version in range: {text!r}")
        self.major_raw = match.group("major")
        self.minor_raw = match.group("minor")
        self.patch_raw = match.group("patch")
        pre = match.group("prerelease")
        self.prerelease: tuple[str, ...] = tuple(pre.split(".")) if pre else ()

    @property
    def x_major(self) -> bool:
        return _is_x(self.major_raw)

    @property
    def x_minor(self) -> bool:
        return self.x_major or _is_x(self.minor_raw)

    @property
    def x_patch(self) -> bool:
        return self.x_minor or _is_x(self.patch_raw)

    @property
    def major(self) -> int:
        return 0 if self.x_major else int(self.major_raw)

    @property
    def minor(self) -> int:
        return 0 if self.x_minor else int(self.minor_raw)

    @property
    def patch(self) -> int:
        return 0 if self.x_patch else int(self.patch_raw)

    def full(self) -> SemVer:
        return _v(self.major, self.minor, self.patch, self.prerelease)


def _tilde(p: _Partial) -> list[Comparator]:
    if p.x_major:
        return [ANY]
    if p.x_minor:
        return [Comparator(">=", _floor(p.major, 0, 0)), Comparator("<", _floor(p.major + 1, 0, 0))]
    if p.x_patch:
        return [Comparator(">=", _floor(p.major, p.minor, 0)), Comparator("<", _floor(p.major, p.minor + 1, 0))]
    return [Comparator(">=", p.full()), Comparator("<", _floor(p.major, p.minor + 1, 0))]


def _caret(p: _Partial) -> list[Comparator]:
    if p.x_major:
        return [ANY]
    if p.x_minor:
        return [Comparator(">=", _floor(p.major, 0, 0)), Comparator("<", _floor(p.major + 1, 0, 0))]
    if p.x_patch:
        low = _floor(p.major, p.minor, 0)
        if p.major == 0:
            return [Comparator(">=", low), Comparator("<", _floor(0, p.minor + 1, 0))]
        return [Comparator(">=", low), Comparator("<", _floor(p.major + 1, 0, 0))]
    low = p.full()
    if p.major == 0:
        if p.minor == 0:
            return [Comparator(">=", low), Comparator("<", _floor(0, 0, p.patch + 1))]
        return [Comparator(">=", low), Comparator("<", _floor(0, p.minor + 1, 0))]
    return [Comparator(">=", low), Comparator("<", _floor(p.major + 1, 0, 0))]


def _xrange(op: str, p: _Partial) -> list[Comparator]:
    any_x = p.x_patch
    if op == "=" and any_x:
        op = ""
    if not any_x:
        return [Comparator(op or "=", p.full())]
    if p.x_major:
        return [_NOTHING] if op in ("<", ">") else [ANY]
    if not op:
        if p.x_minor:
            return [Comparator(">=", _floor(p.major, 0, 0)), Comparator("<", _floor(p.major + 1, 0, 0))]
        return [Comparator(">=", _floor(p.major, p.minor, 0)), Comparator("<", _floor(p.major, p.minor + 1, 0))]

    major, minor = p.major, p.minor
    if op in (">", "<="):
        # `>1.2` means `>=1.3.0`, `<=1.2` means `<1.3.0`.
        op = ">=" if op == ">" else "<"
        if p.x_minor:
            major, minor = major + 1, 0
        else:
            minor += 1
    return [Comparator(op, _floor(major, minor, 0))]


def _hyphen(low: _Partial, high: _Partial) -> list[Comparator]:
    out: list[Comparator] = []
    if low.x_major:
        pass
    elif low.prerelease:
        out.append(Comparator(">=", low.full()))
    else:
        out.append(Comparator(">=", _floor(low.major, low.minor, low.patch)))

    if high.x_major:
        pass
    elif high.x_minor:
        out.append(Comparator("<", _floor(high.major + 1, 0, 0)))
    elif high.x_patch:
        out.append(Comparator("<", _floor(high.major, high.minor + 1, 0)))
    elif high.prerelease:
        out.append(Comparator("<=", high.full()))
    else:
        out.append(Comparator("<", _floor(high.major, high.minor, high.patch + 1)))
    return out or [ANY]


def _parse_comparator(token: str) -> list[Comparator]:
    match = _COMPARATOR_RE.match(token)
    if not match:
        raise InvalidRange(f"Invalid comparator: {token!r}")
    op = match.group("op") or ""
    partial = _Partial(match.group("version"))
    if op in ("~", "~>"):
        return _tilde(partial)
    if op == "^":
        return _caret(partial)
    return _xrange(op, partial)


class Range:
    """A parsed range: a union (`||`) of comparator sets that are each ANDed together."""

    def __init__(self, text: str) -> None:
        self.raw = text
        self.sets: list[list[Comparator]] = []
        for alternative in text.strip().split("||"):
            self.sets.append(self._parse_set(alternative.strip()))

    @staticmethod
    def _parse_set(text: str) -> list[Comparator]:
        if not text:
            return [ANY]
        hyphen = _HYPHEN_RE.match(text)
        if hyphen:
            return _hyphen(_Partial(hyphen.group("low")), _Partial(hyphen.group("high")))
        comparators: list[Comparator] = []
        for token in _OP_GAP_RE.sub(r"\1", text).split():
            comparators.extend(_parse_comparator(token))
        return comparators

    def test(self, version: SemVer) -> bool:
        return any(all(c.test(version) for c in comparators) for comparators in self.sets)

    def __str__(self) -> str:
        return " || ".join(" ".join(str(c) for c in s) for s in self.sets)
