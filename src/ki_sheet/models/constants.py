"""Ability keys, lineage presets, and bonus field names.

Ability keys are the short lowercase names used throughout the sheet and
its JSON data. Only the seven abilities feed modifiers; synonyms exist so
technique data written against other rulebooks still resolves.
"""

from enum import StrEnum


class Ability(StrEnum):
    """The seven ability scores, in sheet display order."""
    STRENGTH = "str"
    DEXTERITY = "dex"
    CONSTITUTION = "con"
    INTELLIGENCE = "int"
    WISDOM = "wis"
    CHARISMA = "cha"
    SPIRIT = "spi"


ABILITY_KEYS: tuple[str, ...] = tuple(a.value for a in Ability)

# Friendly display names
ABILITY_NAMES: dict[str, str] = {
    "str": "Strength",
    "dex": "Dexterity",
    "con": "Constitution",
    "int": "Intelligence",
    "wis": "Wisdom",
    "cha": "Charisma",
    "spi": "Spirit",
}

# Stat-name synonyms → canonical ability key. "none" is kept as a sentinel
# meaning "no stat contributes".
STAT_SYNONYMS: dict[str, str] = {
    "strength": "str",
    "str": "str",
    "agility": "dex",
    "dexterity": "dex",
    "dex": "dex",
    "tenacity": "con",
    "constitution": "con",
    "con": "con",
    "scholarship": "int",
    "intelligence": "int",
    "int": "int",
    "insight": "wis",
    "wisdom": "wis",
    "wis": "wis",
    "personality": "cha",
    "charisma": "cha",
    "cha": "cha",
    "spirit": "spi",
    "potency": "spi",
    "magic": "spi",
    "spi": "spi",
    "none": "none",
}

NO_STAT = "none"


class BlendPreset(StrEnum):
    """How a character's ancestry is split between races."""
    FULL = "full"
    HALF_HUMAN = "half_human"
    QUARTER_HUMAN = "quarter_human"
    HALF_HYBRID = "half_hybrid"
    QUARTER_HYBRID = "quarter_hybrid"


LINEAGE_PRESET_LABELS: dict[str, str] = {
    BlendPreset.FULL: "Full Blood",
    BlendPreset.HALF_HUMAN: "Half Human Hybrid",
    BlendPreset.QUARTER_HUMAN: "Quarter Human Hybrid",
    BlendPreset.HALF_HYBRID: "Half Hybrid (Any Two Races)",
    BlendPreset.QUARTER_HYBRID: "Quarter Hybrid (75/25)",
}

DEFAULT_LINEAGE_LABEL = "Full Blood"

HUMAN_RACE_ID = "human"
SAIYAN_RACE_ID = "saiyan"

# Flat (non-ability) bonus keys contributed by races, classes and professions.
FLAT_BONUS_KEYS: tuple[str, ...] = (
    "hp",
    "ki",
    "speed",
    "attack",
    "damage",
    "defense",
    "initiative",
    "tech_save",
    "ki_recovery",
)

BASE_FORM_ID = "base"
