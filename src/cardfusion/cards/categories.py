"""
Static category configuration: the fixed enumeration, per-category card
profiles and the keyword rules used by the classifier.

Everything here is process-wide and read-only.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Tuple


class Category(str, Enum):
    """The fixed set of card categories."""

    BREAKING_NEWS = "Breaking News"
    POLITICS = "Politics"
    NATIONAL_NEWS = "National News"
    INTERNATIONAL_NEWS = "International News"
    LOCAL_NEWS = "Local News"
    ECONOMY = "Economy"
    BUSINESS = "Business"
    SALES = "Sales"
    MERCH = "Merch"
    TECHNOLOGY = "Technology"
    SCIENCE = "Science"
    HEALTH = "Health"
    EDUCATION = "Education"
    ENVIRONMENT = "Environment"
    SPORTS = "Sports"
    ENTERTAINMENT = "Entertainment"
    LIFESTYLE = "Lifestyle"
    TRAVEL = "Travel"
    OPINION = "Opinion"
    EDITORIAL = "Editorial"
    FEATURE_STORY = "Feature Story"
    PHOTOJOURNALISM = "Photojournalism"
    CLASSIFIEDS = "Classifieds"
    COMICS_PUZZLES = "Comics & Puzzles"
    OBITUARIES = "Obituaries"
    WEATHER = "Weather"
    SOCIETY = "Society"
    INFOTAINMENT = "Infotainment"
    SOFT_NEWS = "Soft News"
    HARD_NEWS = "Hard News"
    INVESTIGATIVE = "Investigative"
    GOVERNMENT = "Government"
    ZETSUMETSU = "Zetsumetsu"
    SOCIAL = "Social"
    CRYPTO = "Crypto"
    MEME = "Meme"
    PEOPLE = "People"


# Labels in declaration order; the hash fallback indexes into this tuple.
CATEGORY_LABELS: Tuple[str, ...] = tuple(category.value for category in Category)

# Highest tribute any category allows; ATK scales against it.
TRIBUTE_CEILING = 10


@dataclass(frozen=True)
class CategoryProfile:
    """Cosmetic and stat parameters for one category."""

    icon: str
    emoji: str
    rarity: str
    frame_type: str
    color: str
    min_tribute: int
    max_tribute: int


def _profile(icon: str, emoji: str, rarity: str, frame: str, color: str, bounds: Tuple[int, int]) -> CategoryProfile:
    return CategoryProfile(icon, emoji, rarity, frame, color, bounds[0], bounds[1])


CATEGORY_TABLE: Mapping[str, CategoryProfile] = MappingProxyType(
    {
        Category.BREAKING_NEWS.value: _profile("🚨🗞️", "🚨", "UR", "breaking_news", "bright-red", (4, 6)),
        Category.POLITICS.value: _profile("🏛️🗳️", "🏛️", "SR", "politics", "maroon", (3, 9)),
        Category.NATIONAL_NEWS.value: _profile("📰🧭", "📰", "R", "national_news", "dark-blue", (2, 8)),
        Category.INTERNATIONAL_NEWS.value: _profile("🌍📰", "🌍", "UR", "international_news", "blue", (4, 8)),
        Category.LOCAL_NEWS.value: _profile("🏘️🗞️", "🏘️", "R", "local_news", "sky-blue", (2, 4)),
        Category.ECONOMY.value: _profile("💹📈", "💹", "SR", "economy", "teal", (3, 3)),
        Category.BUSINESS.value: _profile("💼📊", "💼", "SR", "business", "gold", (3, 7)),
        Category.SALES.value: _profile("🛒🏷️", "🛒", "R", "sales", "cyan", (2, 7)),
        Category.MERCH.value: _profile("👕🛍️", "👕", "R", "merch", "magenta", (2, 7)),
        Category.TECHNOLOGY.value: _profile("🔧🚀", "🤖", "SR", "technology", "silver", (3, 8)),
        Category.SCIENCE.value: _profile("🔬🧪", "🔬", "UR", "science", "blue", (4, 8)),
        Category.HEALTH.value: _profile("🩺🧬", "🩺", "SR", "health", "red-orange", (3, 4)),
        Category.EDUCATION.value: _profile("🎓📚", "🎓", "R", "education", "sky-blue-light", (2, 3)),
        Category.ENVIRONMENT.value: _profile("🌱🌎", "🌱", "SR", "environment", "forest-green", (2, 2)),
        Category.SPORTS.value: _profile("🏅🏟️", "🏅", "R", "sports", "green", (2, 5)),
        Category.ENTERTAINMENT.value: _profile("🎭🎬", "🎭", "SR", "entertainment", "orange", (3, 3)),
        Category.LIFESTYLE.value: _profile("🌸🧘", "🌸", "R", "lifestyle", "light-green", (2, 6)),
        Category.TRAVEL.value: _profile("✈️🧭", "✈️", "R", "travel", "teal", (2, 7)),
        Category.OPINION.value: _profile("💬🗣️", "💬", "C", "opinion", "violet", (1, 5)),
        Category.EDITORIAL.value: _profile("🖋️📜", "🖋️", "C", "editorial", "dark-violet", (1, 6)),
        Category.FEATURE_STORY.value: _profile("📖✨", "📖", "UR", "feature_story", "peach", (4, 5)),
        Category.PHOTOJOURNALISM.value: _profile("📸📰", "📸", "R", "photojournalism", "gray", (2, 5)),
        Category.CLASSIFIEDS.value: _profile("📇📢", "📇", "C", "classifieds", "beige", (1, 4)),
        Category.COMICS_PUZZLES.value: _profile("🧩🗯️", "🧩", "R", "comics_puzzles", "yellow-green", (2, 4)),
        Category.OBITUARIES.value: _profile("⚰️🕯️", "⚰️", "C", "obituaries", "black", (1, 5)),
        Category.WEATHER.value: _profile("☀️🌧️", "☀️", "C", "weather", "light-gray", (1, 4)),
        Category.SOCIETY.value: _profile("👥🏙️", "👥", "R", "society", "rose", (2, 5)),
        Category.INFOTAINMENT.value: _profile("📺🎤", "📺", "SR", "infotainment", "neon-yellow", (3, 5)),
        Category.SOFT_NEWS.value: _profile("🪶📰", "🪶", "C", "soft_news", "peach-light", (1, 5)),
        Category.HARD_NEWS.value: _profile("🗞️📢", "🗞️", "R", "hard_news", "dark-red", (2, 8)),
        Category.INVESTIGATIVE.value: _profile("🔎🗃️", "🔎", "UR", "investigative", "dark-blue", (4, 9)),
        Category.GOVERNMENT.value: _profile("⚖️🏛️", "⚖️", "UR", "government", "gray", (4, 10)),
        Category.ZETSUMETSU.value: _profile(
            "🪬🌀", "🪬", "ZEOE", "zetsu", "linear-gradient(135deg,#e63946,#6f42c1,#00e6e6)", (10, 10)
        ),
        Category.SOCIAL.value: _profile("📱💬", "📱", "R", "social", "rose", (2, 5)),
        Category.CRYPTO.value: _profile("🪙🔗", "🪙", "SR", "crypto", "purple", (3, 9)),
        Category.MEME.value: _profile("😂🔥", "😂", "R", "meme", "neon-multicolor", (2, 2)),
        Category.PEOPLE.value: _profile("🙇‍♂️", "🙇‍♂️", "C", "people", "light-gray", (1, 2)),
    }
)

# Used for labels outside the enumeration.
FALLBACK_PROFILE = CategoryProfile("🧩", "🧩", "C", "misc", "gray", 1, 3)

# Matched anywhere in the candidate pool, ahead of the general rules.
BRAND_KEYWORDS: Tuple[str, ...] = ("zetsumetsu", "zetsu", "artworqq", "nios")

# Ordered keyword-substring rules; for a given pool entry the first rule that
# matches decides.
KEYWORD_RULES: Tuple[Tuple[Tuple[str, ...], Category], ...] = (
    (("breaking",), Category.BREAKING_NEWS),
    (("politic",), Category.POLITICS),
    (("national",), Category.NATIONAL_NEWS),
    (("international", "world"), Category.INTERNATIONAL_NEWS),
    (("local",), Category.LOCAL_NEWS),
    (("economy",), Category.ECONOMY),
    (("business", "biz"), Category.BUSINESS),
    (("sales",), Category.SALES),
    (("merch",), Category.MERCH),
    (("tech",), Category.TECHNOLOGY),
    (("science",), Category.SCIENCE),
    (("health", "medical"), Category.HEALTH),
    (("edu",), Category.EDUCATION),
    (("climate", "environment", "green"), Category.ENVIRONMENT),
    (("sport",), Category.SPORTS),
    (("entertain",), Category.ENTERTAINMENT),
    (("lifestyle",), Category.LIFESTYLE),
    (("travel", "tourism"), Category.TRAVEL),
    (("opinion",), Category.OPINION),
    (("editorial",), Category.EDITORIAL),
    (("feature",), Category.FEATURE_STORY),
    (("photo",), Category.PHOTOJOURNALISM),
    (("classified",), Category.CLASSIFIEDS),
    (("comic", "puzzle"), Category.COMICS_PUZZLES),
    (("obitu",), Category.OBITUARIES),
    (("weather", "forecast"), Category.WEATHER),
    (("society", "community"), Category.SOCIETY),
    (("infotainment",), Category.INFOTAINMENT),
    (("soft news",), Category.SOFT_NEWS),
    (("hard news",), Category.HARD_NEWS),
    (("investigat",), Category.INVESTIGATIVE),
    (("gov",), Category.GOVERNMENT),
    (("crypto", "bitcoin", "eth", "defi"), Category.CRYPTO),
    (("meme",), Category.MEME),
    (("people", "human", "social media"), Category.PEOPLE),
)


def profile_for(category: str) -> CategoryProfile:
    """Profile for a category label, or the neutral fallback for unknown labels."""
    return CATEGORY_TABLE.get(category, FALLBACK_PROFILE)


def canonical_label(value: str) -> str | None:
    """Return the enumeration label matching ``value`` case-insensitively, if any."""
    wanted = value.strip().casefold()
    for label in CATEGORY_LABELS:
        if label.casefold() == wanted:
            return label
    return None
