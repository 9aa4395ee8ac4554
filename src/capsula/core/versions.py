"""
Semantic version parsing and comparison.

Used to validate capsule versions and to resolve dependency version
collisions. Range prefixes used by package managers (``^``, ``~``, ``>=``,
``=``, ``v``) are tolerated and ignored for comparison.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

SEMVER_PATTERN = re.compile(
    r"^(?P<major>0|[1-9]\d*)"
    r"(?:\.(?P<minor>0|[1-9]\d*))?"
    r"(?:\.(?P<patch>0|[1-9]\d*))?"
    r"(?:-(?P<prerelease>[0-9A-Za-z.-]+))?"
    r"(?:\+(?P<build>[0-9A-Za-z.-]+))?$"
)

STRICT_SEMVER_PATTERN = re.compile(
    r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-[0-9A-Za-z.-]+)?(?:\+[0-9A-Za-z.-]+)?$"
)

_RANGE_PREFIX = re.compile(r"^(?:\^|~>|~|>=|<=|==|=|>|<)?\s*v?")


@dataclass(frozen=True)
class SemVer:
    """A parsed semantic version. Build metadata does not affect ordering."""

    major: int
    minor: int
    patch: int
    prerelease: tuple[str, ...] = ()
    build: str | None = None

    def _key(self) -> tuple:
        # A release sorts above any of its pre-releases
        if not self.prerelease:
            pre: tuple = ((1,),)
        else:
            pre = tuple(
                (0, int(part), "") if part.isdigit() else (1, 0, part)
                for part in self.prerelease
            )
            pre = ((0,),) + pre
        return (self.major, self.minor, self.patch, pre)

    def __lt__(self, other: SemVer) -> bool:
        return self._key() < other._key()

    def __le__(self, other: SemVer) -> bool:
        return self._key() <= other._key()

    def __gt__(self, other: SemVer) -> bool:
        return self._key() > other._key()

    def __ge__(self, other: SemVer) -> bool:
        return self._key() >= other._key()

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            text += "-" + ".".join(self.prerelease)
        if self.build:
            text += "+" + self.build
        return text


def parse_version(text: str | None) -> SemVer | None:
    """
    Parse a version string, tolerating range prefixes and missing minor/patch.

    Returns:
        SemVer, or None if the string is not a recognisable version

    Examples:
        >>> str(parse_version("^1.4"))
        '1.4.0'
        >>> parse_version("latest") is None
        True
    """
    if not text:
        return None
    cleaned = _RANGE_PREFIX.sub("", text.strip(), count=1)
    match = SEMVER_PATTERN.match(cleaned)
    if not match:
        return None
    prerelease = match.group("prerelease")
    return SemVer(
        major=int(match.group("major")),
        minor=int(match.group("minor") or 0),
        patch=int(match.group("patch") or 0),
        prerelease=tuple(prerelease.split(".")) if prerelease else (),
        build=match.group("build"),
    )


def is_strict_semver(text: str) -> bool:
    """Check for a full MAJOR.MINOR.PATCH version without range prefixes."""
    return bool(STRICT_SEMVER_PATTERN.match(text))
