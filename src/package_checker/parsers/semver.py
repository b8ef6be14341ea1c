"""Minimal semver ordering and range handling.

Supported expressions:
- exact versions (e.g., "1.2.3", "19.0.0-rc-6230622a1a-20240610")
- comparator sets split by spaces, e.g., ">=1.0.0 <2.0.0"
- caret ranges ^x.y.z → >=x.y.z <x+1.0.0 (expanded at ingestion)
- tilde ranges ~x.y.z → >=x.y.z <x.y+1.0 (expanded at ingestion)

Anything after the leading ``major.minor.patch`` is treated as an opaque
pre-release suffix. A pre-release sorts before its release; two pre-releases
of the same base compare equal.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

_VERSION_PATTERN = re.compile(r"^[v=\s]*(\d+)(?:\.(\d+))?(?:\.(\d+))?(.*)$")
_CONDITION_PATTERN = re.compile(r"^(>=|<=|>|<)(.+)$")
_OPERATOR_SPACING = re.compile(r"(>=|<=|>|<)\s+")
_RANGE_OPERATORS = ("<", ">")


@dataclass(frozen=True, slots=True)
class Version:
    major: int
    minor: int
    patch: int
    prerelease: str | None = None

    @property
    def base(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    @property
    def is_prerelease(self) -> bool:
        return self.prerelease is not None


@dataclass(frozen=True, slots=True)
class Condition:
    operator: str
    bound: str

    def __str__(self) -> str:
        return f"{self.operator}{self.bound}"


@dataclass(frozen=True, slots=True)
class RangeExpression:
    """Space separated comparator conditions, implicitly ANDed."""

    conditions: tuple[Condition, ...]

    def __str__(self) -> str:
        return " ".join(str(c) for c in self.conditions)

    def __bool__(self) -> bool:
        return bool(self.conditions)


def parse_version(raw: str) -> Version:
    """Decompose ``raw`` into (major, minor, patch, prerelease).

    Never raises: missing or non-numeric components become 0.
    """
    match = _VERSION_PATTERN.match(raw.strip()) if raw else None
    if match is None:
        return Version(0, 0, 0)
    major, minor, patch, rest = match.groups()
    return Version(
        int(major),
        int(minor or 0),
        int(patch or 0),
        rest or None,
    )


def _coerce(value: str | Version) -> Version:
    return value if isinstance(value, Version) else parse_version(value)


def compare(a: str | Version, b: str | Version) -> int:
    """Return -1, 0 or 1 as ``a`` sorts before, equal to or after ``b``."""
    va, vb = _coerce(a), _coerce(b)
    left = (va.major, va.minor, va.patch)
    right = (vb.major, vb.minor, vb.patch)
    if left != right:
        return -1 if left < right else 1

    if va.is_prerelease and not vb.is_prerelease:
        return -1
    if vb.is_prerelease and not va.is_prerelease:
        return 1
    return 0


def normalise_expression(expr: str) -> str:
    """Collapse whitespace and glue operators to their operand."""
    collapsed = " ".join(expr.split())
    return _OPERATOR_SPACING.sub(r"\1", collapsed)


def parse_range(expr: str) -> RangeExpression:
    """Parse a comparator set; tokens without a known operator are dropped."""
    conditions: list[Condition] = []
    for token in normalise_expression(expr).split():
        match = _CONDITION_PATTERN.match(token)
        if match is None:
            continue
        conditions.append(Condition(match.group(1), match.group(2)))
    return RangeExpression(tuple(conditions))


def _satisfies(version: Version, condition: Condition) -> bool:
    bound = parse_version(condition.bound)
    if (
        condition.operator == ">="
        and version.is_prerelease
        and not bound.is_prerelease
        and version.base == bound.base
    ):
        # a pre-release of X.Y.Z counts as >= X.Y.Z
        cmp = 0
    else:
        cmp = compare(version, bound)

    if condition.operator == ">":
        return cmp == 1
    if condition.operator == ">=":
        return cmp != -1
    if condition.operator == "<":
        return cmp == -1
    return cmp != 1


def in_range(version: str | Version, expr: str | RangeExpression) -> bool:
    """Return True when ``version`` satisfies every condition of ``expr``.

    An expression with no recognised condition matches nothing.
    """
    parsed = expr if isinstance(expr, RangeExpression) else parse_range(expr)
    if not parsed:
        return False
    v = _coerce(version)
    return all(_satisfies(v, condition) for condition in parsed.conditions)


def is_version_range(value: str) -> bool:
    return any(op in value for op in _RANGE_OPERATORS)


def _caret_upper(base: Version) -> str:
    if base.major > 0:
        return f"{base.major + 1}.0.0"
    if base.minor > 0:
        return f"0.{base.minor + 1}.0"
    return f"0.0.{base.patch + 1}"


def expand_shorthand(value: str) -> str:
    """Rewrite ``^x.y.z`` / ``~x.y.z`` as explicit ``>=``/``<`` pairs.

    Any other value is returned unchanged.
    """
    stripped = value.strip()
    if stripped[:1] not in ("^", "~"):
        return stripped
    lower = stripped[1:].strip()
    if not lower or not lower[0].isdigit():
        return stripped
    base = parse_version(lower)
    if stripped[0] == "^":
        upper = _caret_upper(base)
    else:
        upper = f"{base.major}.{base.minor + 1}.0"
    return f">={lower} <{upper}"


def split_alternatives(value: str) -> list[str]:
    """Split ``a || b`` into normalised alternatives, dropping empty ones."""
    alternatives: list[str] = []
    for candidate in str(value).split("||"):
        cleaned = normalise_expression(expand_shorthand(candidate))
        if cleaned.startswith("=") and not cleaned.startswith("=="):
            cleaned = cleaned[1:].strip()
        if cleaned:
            alternatives.append(cleaned)
    return alternatives


def classify_versions(values) -> tuple[list[str], list[str]]:
    """Sort raw version values into (exact versions, ranges)."""
    exact: list[str] = []
    ranges: list[str] = []
    for value in values:
        if value is None:
            continue
        for alternative in split_alternatives(str(value)):
            if is_version_range(alternative):
                ranges.append(alternative)
            else:
                exact.append(alternative)
    return exact, ranges
