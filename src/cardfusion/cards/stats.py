"""
Stat synthesis: derives tribute, level, ATK and DEF from a category and a
card identity, plus the two string hashes the card pipeline relies on.

Both hashes are specified bit-for-bit so any other implementation that
follows the same recipe produces the same ids and stats.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Literal

from .categories import TRIBUTE_CEILING, profile_for

MIN_ATK = 1000
MAX_ATK = 5000
MIN_DEF = 1000

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def _int32(value: int) -> int:
    """Wrap to a signed 32-bit two's complement integer."""
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


def stable_hash(text: str) -> int:
    """
    Non-negative 31-multiplier string hash.

    ``h = int32(h * 31 + codepoint)`` over every character, starting at 0;
    the absolute value of the final accumulator is returned.

    >>> stable_hash("")
    0
    >>> stable_hash("a")
    97
    >>> stable_hash("abc")
    96354
    """
    h = 0
    for char in text:
        h = _int32(h * 31 + ord(char))
    return abs(h)


def short_id(text: str, length: int = 8) -> str:
    """
    Compact displayable id: 33-multiplier hash starting at 5381, rendered in
    lowercase base 36 and truncated to ``length`` characters.

    >>> short_id("")
    '45h'
    >>> short_id("a")
    '3t3a'
    """
    h = 5381
    for char in text:
        h = _int32(h * 33 + ord(char))
    value = abs(h)

    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36[remainder])
    return "".join(reversed(digits))[:length]


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class CardStats:
    """Everything a category contributes to a card."""

    category: str
    icon: str
    emoji: str
    rarity: str
    frame_type: str
    color: str
    tribute_count: int
    tribute: str
    level: int
    atk: int
    defense: int


class StatSynthesizer:
    """
    Stamps category-driven stats onto cards.

    In ``fixed`` mode every card of a category gets the category's maximum
    tribute. In ``range`` mode the tribute is picked from the category's
    ``[min, max]`` bounds by hashing the card identity, so one card always
    gets the same stats while cards of the same category spread out.
    """

    def __init__(self, mode: Literal["fixed", "range"] = "range", glyph: str = "🙇‍♂️") -> None:
        if mode not in ("fixed", "range"):
            raise ValueError(f"Unknown stat mode: {mode!r}")
        self.mode = mode
        self.glyph = glyph

    def tribute_for(self, category: str, identity: str) -> int:
        profile = profile_for(category)
        low, high = profile.min_tribute, profile.max_tribute
        if self.mode == "fixed" or high <= low:
            return high
        return stable_hash(identity) % (high - low + 1) + low

    def synthesize(self, category: str, identity: str) -> CardStats:
        profile = profile_for(category)
        tribute = self.tribute_for(category, identity)
        atk = round_half_up(MIN_ATK + (tribute / TRIBUTE_CEILING) * (MAX_ATK - MIN_ATK))
        defense = max(MIN_DEF, round_half_up(atk * 0.8))

        return CardStats(
            category=category,
            icon=profile.icon,
            emoji=profile.emoji,
            rarity=profile.rarity,
            frame_type=profile.frame_type,
            color=profile.color,
            tribute_count=tribute,
            tribute=self.glyph * tribute,
            level=tribute,
            atk=atk,
            defense=defense,
        )


def card_identity(name: str, source_url: str) -> str:
    return f"{name}|{source_url}"
