"""Reference-data catalogs and their built-in fallbacks.

Catalogs normally come from JSON files in a data directory. Each file is
optional: a missing or malformed file is replaced by the built-in catalog
for that kind so the sheet always has something to compute with.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, TypeVar

from ki_sheet.models.records import (
    ClassDefinition,
    RaceDefinition,
    Technique,
    TransformationForm,
)


log = logging.getLogger(__name__)

T = TypeVar("T")

CATALOG_KINDS: tuple[str, ...] = (
    "races",
    "classes",
    "professions",
    "transformations",
    "techniques",
)


_FALLBACK_RACES: list[dict[str, Any]] = [
    {
        "id": "android",
        "name": "Android",
        "subraces": ["Artificial Construct", "Cybernetic Organism", "Bio-Engineered"],
        "hpModifier": {"default": 4, "bioEngineered": 5},
        "startingAttributes": {"dex": 2, "wis": 2, "cha": 2, "spi": 2, "str": 2, "con": 5},
        "source": "DragonBallRedux V2",
    },
    {
        "id": "arcosian",
        "name": "Arcosian",
        "subraces": ["Arcosian"],
        "hpModifier": {"default": 3},
        "startingAttributes": {"dex": 2, "wis": 2, "cha": 2, "spi": 5, "str": 2, "con": 4},
        "source": "DragonBallRedux V2",
    },
    {
        "id": "human",
        "name": "Earthling",
        "subraces": ["Earthling", "Beast-men"],
        "hpModifier": {"default": 6},
        "startingAttributes": {},
        "source": "DragonBallRedux V2",
    },
    {
        "id": "namekian",
        "name": "Namekian",
        "subraces": ["Warrior", "Priest"],
        "hpModifier": {"default": 4},
        "startingAttributes": {"dex": 2, "wis": 5, "cha": 2, "spi": 4, "str": 2, "con": 5},
        "source": "DragonBallRedux V2",
    },
    {
        "id": "majin",
        "name": "Majin",
        "subraces": ["Majin"],
        "hpModifier": {"default": 3},
        "startingAttributes": {"dex": 2, "wis": 2, "cha": 5, "spi": 5, "str": 2, "con": 4},
        "source": "DragonBallRedux V2",
    },
    {
        "id": "saiyan",
        "name": "Saiyan",
        "subraces": ["Full-Blood", "Half-Blood"],
        "hpModifier": {"default": 3},
        "startingAttributes": {"dex": 4, "wis": 2, "cha": 2, "spi": 2, "str": 5, "con": 5},
        "source": "DragonBallRedux V2",
    },
    {
        "id": "shinjin",
        "name": "Shinjin",
        "subraces": ["Kaio", "Makaio"],
        "hpModifier": {"kaio": 5, "makaio": 4},
        "startingAttributes": {"wis": 5, "spi": 5},
        "source": "DragonBallRedux V2",
    },
]

_FALLBACK_CLASSES: list[dict[str, Any]] = [
    {
        "id": "brawler",
        "name": "Brawler",
        "stat_bonuses": {"str": 1, "con": 1},
        "flat_bonuses": {"hp": 4, "damage": 1},
        "features": ["Close-quarters specialist."],
        "source": "Sheet defaults",
    },
    {
        "id": "ki_blaster",
        "name": "Ki Blaster",
        "stat_bonuses": {"spi": 2},
        "flat_bonuses": {"ki": 4, "tech_save": 1},
        "features": ["Ranged energy specialist."],
        "source": "Sheet defaults",
    },
    {
        "id": "guardian",
        "name": "Guardian",
        "stat_bonuses": {"con": 1, "wis": 1},
        "flat_bonuses": {"hp": 6, "defense": 1},
        "features": ["Protects allies and absorbs pressure."],
        "source": "Sheet defaults",
    },
    {
        "id": "speedster",
        "name": "Speedster",
        "stat_bonuses": {"dex": 2},
        "flat_bonuses": {"speed": 10, "initiative": 1},
        "features": ["Strikes first and repositions freely."],
        "source": "Sheet defaults",
    },
]

_FALLBACK_PROFESSIONS: list[dict[str, Any]] = [
    {
        "id": "martial_instructor",
        "name": "Martial Instructor",
        "flat_bonuses": {"attack": 1},
        "features": ["Teaches a dojo between adventures."],
        "source": "Sheet defaults",
    },
    {
        "id": "scientist",
        "name": "Scientist",
        "stat_bonuses": {"int": 1},
        "features": ["Capsule tech and lab access."],
        "source": "Sheet defaults",
    },
    {
        "id": "monk",
        "name": "Monk",
        "stat_bonuses": {"wis": 1},
        "flat_bonuses": {"ki_recovery": 1},
        "features": ["Meditative ki discipline."],
        "source": "Sheet defaults",
    },
]

_FALLBACK_TRANSFORMATIONS: list[dict[str, Any]] = [
    {
        "id": "base",
        "name": "Base Form",
        "multiplier": 1,
        "kiModifier": 1,
        "notes": "No form bonus.",
        "source": "Core",
    },
    {
        "id": "kaioken_x2",
        "name": "Kaioken x2",
        "multiplier": 2,
        "kiModifier": 0.9,
        "attackBonus": 1,
        "damageBonus": 2,
        "defenseBonus": -1,
        "initiativeBonus": 1,
        "speedBonus": 10,
        "hpUpkeep": 3,
        "tierRequirement": "Tier 2+",
        "notes": "High output with stamina strain.",
        "source": "DBU Sourcebook",
    },
    {
        "id": "kaioken_x3",
        "name": "Kaioken x3",
        "multiplier": 3,
        "kiModifier": 0.8,
        "attackBonus": 2,
        "damageBonus": 3,
        "defenseBonus": -2,
        "initiativeBonus": 2,
        "speedBonus": 15,
        "hpUpkeep": 6,
        "tierRequirement": "Tier 3+",
        "notes": "Severe body stress.",
        "source": "DBU Sourcebook",
    },
    {
        "id": "kaioken_x4",
        "name": "Kaioken x4",
        "multiplier": 4,
        "kiModifier": 0.75,
        "attackBonus": 3,
        "damageBonus": 4,
        "defenseBonus": -3,
        "initiativeBonus": 3,
        "speedBonus": 20,
        "hpUpkeep": 10,
        "tierRequirement": "Tier 4+",
        "notes": "Extreme body stress; use sparingly.",
        "source": "DBU Sourcebook",
    },
    {
        "id": "saiyan_pride",
        "name": "Saiyan Pride",
        "multiplier": 1,
        "kiModifier": 1.05,
        "attackBonus": 2,
        "damageBonus": 2,
        "defenseBonus": 1,
        "initiativeBonus": 1,
        "speedBonus": 5,
        "abilityBonuses": {"str": 1, "dex": 1, "con": 1, "spi": 1},
        "allowedRaceIds": ["saiyan"],
        "minRaceShare": 0.5,
        "tierRequirement": "Tier 4+",
        "raceRequirement": "Saiyan",
        "notes": "Racial transformation line focused on pressure and resolve.",
        "source": "DBU Sourcebook",
    },
    {
        "id": "earthling_spirit",
        "name": "Earthling Spirit",
        "multiplier": 1,
        "kiModifier": 1.1,
        "attackBonus": 1,
        "damageBonus": 1,
        "defenseBonus": 1,
        "initiativeBonus": 1,
        "speedBonus": 0,
        "abilityBonuses": {"str": 1, "dex": 1, "con": 1, "spi": 1},
        "allowedRaceIds": ["human"],
        "minRaceShare": 0.5,
        "tierRequirement": "Tier 4+",
        "raceRequirement": "Earthling",
        "notes": "Discipline-based uplift; can stack in advanced stages.",
        "source": "DBU Sourcebook",
    },
    {
        "id": "hi_tension",
        "name": "Hi-Tension",
        "multiplier": 1,
        "kiModifier": 1.1,
        "attackBonus": 1,
        "damageBonus": 2,
        "defenseBonus": 0,
        "initiativeBonus": 1,
        "speedBonus": 5,
        "abilityBonuses": {"str": 1, "con": 1, "wis": 1, "spi": 1},
        "tierRequirement": "Tier 4+",
        "notes": "Focused pressure form with offensive spikes.",
        "source": "DBU Sourcebook",
    },
    {
        "id": "mushin",
        "name": "Mushin",
        "multiplier": 1,
        "kiModifier": 1.15,
        "attackBonus": 1,
        "damageBonus": 1,
        "defenseBonus": 1,
        "initiativeBonus": 2,
        "speedBonus": 5,
        "abilityBonuses": {"dex": 1, "wis": 1},
        "tierRequirement": "Tier 4+",
        "notes": "Calm focus form emphasizing action precision.",
        "source": "DBU Sourcebook",
    },
    {
        "id": "ascension",
        "name": "Ascension",
        "multiplier": 1,
        "kiModifier": 1.2,
        "attackBonus": 2,
        "damageBonus": 2,
        "defenseBonus": 1,
        "initiativeBonus": 1,
        "speedBonus": 0,
        "abilityBonuses": {"str": 1, "int": 1, "wis": 1, "spi": 1, "cha": 1},
        "allowedRaceIds": ["shinjin"],
        "minRaceShare": 1,
        "tierRequirement": "Tier 4+",
        "raceRequirement": "Shinjin",
        "notes": "Shinjin progression with broad attribute growth.",
        "source": "DBU Sourcebook",
    },
]


def _basic_attack(
    tech_id: str,
    name: str,
    ki_cost: int,
    damage_dice: str,
    damage_stat: str,
    range_: str,
    notes: str,
    *,
    uses_attack_mod: bool = True,
    to_hit_bonus: int = 0,
) -> dict[str, Any]:
    return {
        "id": tech_id,
        "name": name,
        "ki_cost": ki_cost,
        "to_hit_bonus": to_hit_bonus,
        "damage_dice": damage_dice,
        "damage_flat": 0,
        "uses_attack_mod": uses_attack_mod,
        "damage_stat": damage_stat,
        "range": range_,
        "source": "DragonBallRedux V2 Basic Attacks",
        "notes": notes,
    }


_FALLBACK_TECHNIQUES: list[dict[str, Any]] = [
    _basic_attack("basic_physical", "Basic Physical", 2, "1d10", "str", "Melee",
                  "Core strike profile."),
    _basic_attack("sphere_energy_attack", "Sphere Energy Attack", 2, "1d10", "spi", "Ranged",
                  "Focused orb projectile."),
    _basic_attack("incantation", "Incantation", 2, "1d10", "spi", "Ranged",
                  "Channeled cast attack."),
    _basic_attack("rapid_fire", "Rapid Fire", 10, "2d10", "none", "Ranged",
                  "Multiple blasts in quick succession.", uses_attack_mod=False),
    _basic_attack("guided", "Guided", 7, "1d10", "spi", "Ranged (can split hit chance)",
                  "Can choose full hit check or half-value guided variant."),
    _basic_attack("kiai", "Kiai", 8, "2d10", "spi", "Close burst",
                  "Short-range concussive blast.", to_hit_bonus=1),
    _basic_attack("energy_focus", "Energy Focus", 9, "1d10", "str+spi", "Melee",
                  "Weapons/limbs wrapped in ki."),
    _basic_attack("blast", "Blast", 6, "1d10", "spi", "3x3 ft line",
                  "Linear area attack."),
    _basic_attack("explosion", "Explosion", 9, "1d10", "spi", "3x3 ft burst",
                  "Localized blast area."),
    _basic_attack("beam", "Beam", 12, "1d10", "spi", "Line",
                  "Sustained directional beam."),
    _basic_attack("combination", "Combination", 10, "2d10", "none", "Melee",
                  "Flurry sequence with fixed output profile.", uses_attack_mod=False),
    _basic_attack("powered", "Powered", 9, "1d10", "str+spi", "Melee",
                  "Empowered physical attack."),
    {
        "id": "solar_flare",
        "name": "Solar Flare",
        "ki_cost": 3,
        "damage_dice": "0d0",
        "uses_attack_mod": False,
        "range": "30 ft burst",
        "notes": "Targets in range make Con save or are blinded.",
        "source": "DBU common technique",
    },
]


@dataclass(slots=True)
class Catalogs:
    """Reference data bundle consumed by the stat engine."""

    races: list[RaceDefinition] = field(default_factory=list)
    classes: list[ClassDefinition] = field(default_factory=list)
    professions: list[ClassDefinition] = field(default_factory=list)
    transformations: list[TransformationForm] = field(default_factory=list)
    techniques: list[Technique] = field(default_factory=list)

    @classmethod
    def fallback(cls) -> Catalogs:
        """Built-in catalogs, usable without any data files."""
        return cls(
            races=[RaceDefinition.from_dict(r) for r in _FALLBACK_RACES],
            classes=[ClassDefinition.from_dict(c) for c in _FALLBACK_CLASSES],
            professions=[ClassDefinition.from_dict(p) for p in _FALLBACK_PROFESSIONS],
            transformations=[TransformationForm.from_dict(t) for t in _FALLBACK_TRANSFORMATIONS],
            techniques=[Technique.from_dict(t) for t in _FALLBACK_TECHNIQUES],
        )

    def technique(self, technique_id: str) -> Technique | None:
        for technique in self.techniques:
            if technique.id == technique_id:
                return technique
        return None

    def transformation(self, form_id: str) -> TransformationForm | None:
        for form in self.transformations:
            if form.id == form_id:
                return form
        return None


def _records_from_payload(payload: Any, kind: str) -> list[Mapping[str, Any]] | None:
    """Accept a bare list or ``{"<kind>": [...]}``; None if neither."""
    if isinstance(payload, Mapping):
        payload = payload.get(kind)
    if not isinstance(payload, list):
        return None
    return [item for item in payload if isinstance(item, Mapping)]


def parse_catalog(
    payload: Any,
    kind: str,
    factory: Callable[[Mapping[str, Any]], T],
) -> list[T] | None:
    records = _records_from_payload(payload, kind)
    if records is None:
        return None
    return [factory(raw) for raw in records]


def _load_kind(
    data_dir: Path,
    kind: str,
    factory: Callable[[Mapping[str, Any]], T],
    fallback: list[T],
) -> list[T]:
    path = data_dir / f"{kind}.json"
    if not path.exists():
        log.debug("No %s catalog at %s; using built-in data", kind, path)
        return fallback
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        log.warning("Could not read %s catalog %s (%s); using built-in data", kind, path, exc)
        return fallback
    parsed = parse_catalog(payload, kind, factory)
    if parsed is None:
        log.warning("Catalog %s has no %r list; using built-in data", path, kind)
        return fallback
    return parsed


def load_catalogs(data_dir: Path | None) -> Catalogs:
    """Load every catalog kind from *data_dir*, falling back per file."""
    fallback = Catalogs.fallback()
    if data_dir is None:
        return fallback
    return Catalogs(
        races=_load_kind(data_dir, "races", RaceDefinition.from_dict, fallback.races),
        classes=_load_kind(data_dir, "classes", ClassDefinition.from_dict, fallback.classes),
        professions=_load_kind(
            data_dir, "professions", ClassDefinition.from_dict, fallback.professions
        ),
        transformations=_load_kind(
            data_dir, "transformations", TransformationForm.from_dict, fallback.transformations
        ),
        techniques=_load_kind(data_dir, "techniques", Technique.from_dict, fallback.techniques),
    )
