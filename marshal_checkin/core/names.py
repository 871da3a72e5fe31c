"""
Marshal name expansion for checkpoint imports.

A single "marshals" cell in an organiser's spreadsheet often lists
several people, e.g. ``"Mike and Jenna Jones, Killian Murphy + 1"``.
This module turns such a cell into one display name per volunteer:

- commas separate entries;
- ``&`` and the word ``and`` join people who share a surname
  ("Richard & Emily Walker" -> "Richard Walker", "Emily Walker");
- a trailing ``+N`` adds N unnamed helpers attached to the person
  before it ("Kelly Temple +2" -> "Kelly Temple", "Kelly Temple's (+1)",
  "Kelly Temple's (+2)").

Malformed input never raises; the parser returns what it can.
"""

import re
from dataclasses import dataclass
from typing import List, Optional
from marshal_checkin.common.sanitize import sanitize_name, sanitize_notes
from marshal_checkin.observability.logging_setup import get_logger

log = get_logger("checkin.names")

# upper bound for a single "+N" so a typo cannot explode an import
MAX_EXTRA_HELPERS = 99

_PLUS_RE = re.compile(r"^(?P<name>.*?)\s*\+\s*(?P<count>\d+)$")
_CONJUNCTION_RE = re.compile(r"\s*&\s*|\s*\band\b\s*", re.IGNORECASE)
_LEADING_CONJUNCTION_RE = re.compile(r"^(?:&|and\b)", re.IGNORECASE)

@dataclass
class NameToken:
    """One person from a marshals cell, with the number of extra helpers"""
    text: str
    extra: int = 0

    @property
    def words(self) -> List[str]:
        return self.text.split()

    @property
    def is_bare_first_name(self) -> bool:
        return len(self.words) == 1 and self.extra == 0

def make_possessive(name: str) -> str:
    """``"Kelly Temple"`` -> ``"Kelly Temple's"``, ``"Sarah Bridges"`` -> ``"Sarah Bridges'"``."""
    name = name.strip()
    if not name:
        return name
    return name + "'" if name.lower().endswith("s") else name + "'s"

def tokenize_segment(segment: str) -> List[NameToken]:
    """
    Split one comma-separated segment on conjunctions.

    Args:
        segment: text between two commas

    Returns:
        Tokens in order; a standalone ``+N`` becomes a token with empty text
    """
    tokens: List[NameToken] = []
    for part in _CONJUNCTION_RE.split(segment):
        part = part.strip()
        if not part:
            continue

        extra = 0
        match = _PLUS_RE.match(part)
        if match:
            part = match.group("name")
            extra = min(int(match.group("count")), MAX_EXTRA_HELPERS)

        text = " ".join(part.split())
        if text or extra:
            tokens.append(NameToken(text=text, extra=extra))

    return tokens

def group_tokens(raw: str) -> List[List[NameToken]]:
    """
    Tokenize a whole cell into conjunction groups.

    A segment that starts with a conjunction continues the run of bare
    first names before it, so ``"John, Jane, & Joan Smith"`` is one group.
    """
    groups: List[List[NameToken]] = []

    for segment in raw.split(","):
        segment = segment.strip()
        if not segment:
            continue

        tokens = tokenize_segment(segment)
        if not tokens:
            continue

        if _LEADING_CONJUNCTION_RE.match(segment):
            merged: List[NameToken] = []
            while groups and all(t.is_bare_first_name for t in groups[-1]):
                merged = groups.pop() + merged
            tokens = merged + tokens

        groups.append(tokens)

    return groups

def propagate_surnames(group: List[NameToken]) -> None:
    """Give each first-name-only token the surname of the next full name in its group."""
    for i, token in enumerate(group):
        if len(token.words) != 1:
            continue
        for later in group[i + 1:]:
            if len(later.words) > 1:
                token.text = f"{token.text} {later.words[-1]}"
                break

def expand_marshal_names(raw: Optional[str]) -> List[str]:
    """
    Expand a combined marshals field into individual display names.

    Args:
        raw: CSV cell content

    Returns:
        Sanitized names in order of appearance, duplicates kept
    """
    if raw is None:
        return []

    cleaned = sanitize_notes(raw)
    if not cleaned:
        return []

    names: List[str] = []
    anchor: Optional[str] = None

    for group in group_tokens(cleaned):
        propagate_surnames(group)

        for token in group:
            name = sanitize_name(token.text)
            if name:
                anchor = name
                names.append(name)

            if token.extra == 0:
                continue
            if anchor is None:
                log.debug(f"Dropping +{token.extra} without a preceding name: {raw!r}")
                continue

            owner = make_possessive(anchor)
            names.extend(
                sanitize_name(f"{owner} (+{n})") for n in range(1, token.extra + 1)
            )

    return names
