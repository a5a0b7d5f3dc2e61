"""Upstream URL shapes recognized by the proxy.

Rules are evaluated in the order of ``SHAPE_RULES`` and the first match wins.
Several patterns overlap (a ``raw`` path on github.com is both a BLOB and,
superficially, other shapes), so reordering the table changes routing.
"""

import re
from dataclasses import dataclass
from enum import StrEnum


class Shape(StrEnum):
    RELEASE = "release"
    GIST = "gist"
    TAGS = "tags"
    GIT = "git"
    RAW = "raw"
    BLOB = "blob"


@dataclass(frozen=True)
class ShapeRule:
    """A single classification rule."""

    shape: Shape
    pattern: re.Pattern[str]

    def matches(self, url: str) -> bool:
        return self.pattern.match(url) is not None


RELEASE_PATTERN = re.compile(
    r"^(?:https?://)?github\.com/.+?/.+?/(?:releases|archive)/.*$", re.IGNORECASE
)
BLOB_PATTERN = re.compile(
    r"^(?:https?://)?github\.com/.+?/.+?/(?:blob|raw)/.*$", re.IGNORECASE
)
GIT_PATTERN = re.compile(
    r"^(?:https?://)?github\.com/.+?/.+?/(?:info|git-).*$", re.IGNORECASE
)
RAW_PATTERN = re.compile(
    r"^(?:https?://)?raw\.(?:githubusercontent|github)\.com/.+?/.+?/.+?/.+$",
    re.IGNORECASE,
)
GIST_PATTERN = re.compile(
    r"^(?:https?://)?gist\.(?:githubusercontent|github)\.com/.+?/.+?/.+$",
    re.IGNORECASE,
)
TAGS_PATTERN = re.compile(r"^(?:https?://)?github\.com/.+?/.+?/tags.*$", re.IGNORECASE)

SHAPE_RULES: tuple[ShapeRule, ...] = (
    ShapeRule(Shape.RELEASE, RELEASE_PATTERN),
    ShapeRule(Shape.GIST, GIST_PATTERN),
    ShapeRule(Shape.TAGS, TAGS_PATTERN),
    ShapeRule(Shape.GIT, GIT_PATTERN),
    ShapeRule(Shape.RAW, RAW_PATTERN),
    ShapeRule(Shape.BLOB, BLOB_PATTERN),
)


def classify(url: str, rules: tuple[ShapeRule, ...] = SHAPE_RULES) -> Shape | None:
    """Return the first shape matching ``url``, or None."""
    for rule in rules:
        if rule.matches(url):
            return rule.shape
    return None


def is_upstream_url(url: str) -> bool:
    """Check if a URL names any recognized upstream shape."""
    return classify(url) is not None
