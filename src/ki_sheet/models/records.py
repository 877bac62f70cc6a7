"""Reference-data records: races, classes/professions, forms, techniques.

Records are immutable once built. ``from_dict`` accepts the JSON shapes
found in sheet data files (snake_case, camelCase, and a couple of legacy
race keys) and coerces every number on the way in.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from ki_sheet.models.constants import ABILITY_KEYS, BASE_FORM_ID, FLAT_BONUS_KEYS
from ki_sheet.models.numbers import Number, to_number


# flat key → accepted top-level spellings in data files
_FLAT_BONUS_ALIASES: dict[str, tuple[str, ...]] = {
    "hp": ("hp_bonus", "hpBonus"),
    "ki": ("ki_bonus", "kiBonus"),
    "speed": ("speed_bonus", "speedBonus"),
    "attack": ("attack_bonus", "attackBonus"),
    "damage": ("damage_bonus", "damageBonus"),
    "defense": ("defense_bonus", "defenseBonus"),
    "initiative": ("initiative_bonus", "initiativeBonus"),
    "tech_save": ("tech_save_bonus", "techSaveBonus"),
    "ki_recovery": ("ki_recovery_bonus", "kiRecoveryBonus"),
}


def _pick(raw: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in raw and raw[key] is not None:
            return raw[key]
    return default


def _text(value: Any, default: str = "") -> str:
    if value is None:
        return default
    return str(value)


_TRUE_WORDS = frozenset({"true", "yes", "y", "on", "1"})


def _flag(value: Any) -> bool:
    """JSON booleans pass through; ``"false"``/``"0"``/``""`` are False."""
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_WORDS
    if isinstance(value, (int, float)):
        return to_number(value) != 0
    return bool(value)


def ability_deltas(raw: Any) -> dict[str, Number]:
    """Keep only known ability keys with non-zero numeric deltas."""
    if not isinstance(raw, Mapping):
        return {}
    out: dict[str, Number] = {}
    for key in ABILITY_KEYS:
        value = to_number(raw.get(key))
        if value:
            out[key] = value
    return out


def _flat_bonuses(raw: Mapping[str, Any]) -> dict[str, Number]:
    nested = raw.get("flat_bonuses") or raw.get("flatBonuses") or {}
    if not isinstance(nested, Mapping):
        nested = {}
    out: dict[str, Number] = {}
    for key in FLAT_BONUS_KEYS:
        value = nested.get(key)
        if value is None:
            value = _pick(raw, *_FLAT_BONUS_ALIASES[key])
        out[key] = to_number(value)
    if "hp_bonus" not in raw and "hpBonus" not in raw and not nested.get("hp"):
        legacy = raw.get("hpModifier")
        if isinstance(legacy, Mapping):
            out["hp"] = to_number(legacy.get("default"))
    return out


def _string_list(raw: Any) -> tuple[str, ...]:
    if isinstance(raw, str):
        return (raw,)
    if not isinstance(raw, (list, tuple)):
        return ()
    return tuple(str(item) for item in raw if item is not None)


@dataclass(frozen=True, slots=True)
class RaceDefinition:
    """A playable race. Bonuses are scaled by the character's share of it."""

    id: str
    name: str
    stat_bonuses: dict[str, Number] = field(default_factory=dict)
    flat_bonuses: dict[str, Number] = field(default_factory=dict)
    features: tuple[str, ...] = ()
    source: str = ""

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> RaceDefinition:
        stats = _pick(raw, "stat_bonuses", "statBonuses", "startingAttributes", default={})
        features = _string_list(raw.get("features"))
        if not features and raw.get("subraces"):
            features = (f"Subraces: {', '.join(_string_list(raw.get('subraces')))}",)
        return cls(
            id=_text(raw.get("id")),
            name=_text(raw.get("name"), _text(raw.get("id"))),
            stat_bonuses=ability_deltas(stats),
            flat_bonuses=_flat_bonuses(raw),
            features=features,
            source=_text(raw.get("source")),
        )


@dataclass(frozen=True, slots=True)
class ClassDefinition:
    """A class or profession; contributes its bonuses at full weight."""

    id: str
    name: str
    stat_bonuses: dict[str, Number] = field(default_factory=dict)
    flat_bonuses: dict[str, Number] = field(default_factory=dict)
    features: tuple[str, ...] = ()
    source: str = ""

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> ClassDefinition:
        return cls(
            id=_text(raw.get("id")),
            name=_text(raw.get("name"), _text(raw.get("id"))),
            stat_bonuses=ability_deltas(_pick(raw, "stat_bonuses", "statBonuses", default={})),
            flat_bonuses=_flat_bonuses(raw),
            features=_string_list(raw.get("features")),
            source=_text(raw.get("source")),
        )

    @classmethod
    def none(cls) -> ClassDefinition:
        """Neutral placeholder used when nothing is selected."""
        return cls(id="none", name="None")


@dataclass(frozen=True, slots=True)
class TransformationForm:
    """A combat form: power multiplier, combat bonuses, and who may use it.

    Eligibility:
      - required_race_shares: every listed race needs at least that share
      - allowed_race_ids + min_race_share: the best share among the listed
        races must reach min_race_share (1.0 when unset)
      - blocked_lineages: blend presets that may never use the form
    """

    id: str
    name: str
    multiplier: Number = 1
    ki_modifier: Number = 1
    attack_bonus: Number = 0
    damage_bonus: Number = 0
    defense_bonus: Number = 0
    initiative_bonus: Number = 0
    speed_bonus: Number = 0
    ability_bonuses: dict[str, Number] = field(default_factory=dict)
    required_race_shares: dict[str, Number] = field(default_factory=dict)
    allowed_race_ids: tuple[str, ...] = ()
    min_race_share: Number | None = None
    blocked_lineages: tuple[str, ...] = ()
    ki_upkeep: Number = 0
    hp_upkeep: Number = 0
    tier_requirement: str = ""
    race_requirement: str = ""
    notes: str = ""
    source: str = ""

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> TransformationForm:
        required = _pick(raw, "required_race_shares", "requiredRaceShares", default={})
        if not isinstance(required, Mapping):
            required = {}
        min_share = _pick(raw, "min_race_share", "minRaceShare")
        return cls(
            id=_text(raw.get("id")),
            name=_text(raw.get("name"), _text(raw.get("id"))),
            multiplier=to_number(raw.get("multiplier"), 1),
            ki_modifier=to_number(_pick(raw, "ki_modifier", "kiModifier"), 1),
            attack_bonus=to_number(_pick(raw, "attack_bonus", "attackBonus")),
            damage_bonus=to_number(_pick(raw, "damage_bonus", "damageBonus")),
            defense_bonus=to_number(_pick(raw, "defense_bonus", "defenseBonus")),
            initiative_bonus=to_number(_pick(raw, "initiative_bonus", "initiativeBonus")),
            speed_bonus=to_number(_pick(raw, "speed_bonus", "speedBonus")),
            ability_bonuses=ability_deltas(_pick(raw, "ability_bonuses", "abilityBonuses")),
            required_race_shares={str(k): to_number(v) for k, v in required.items()},
            allowed_race_ids=_string_list(_pick(raw, "allowed_race_ids", "allowedRaceIds")),
            min_race_share=None if min_share is None else to_number(min_share, 1),
            blocked_lineages=_string_list(_pick(raw, "blocked_lineages", "blockedLineages")),
            ki_upkeep=to_number(_pick(raw, "ki_upkeep", "kiUpkeep")),
            hp_upkeep=to_number(_pick(raw, "hp_upkeep", "hpUpkeep")),
            tier_requirement=_text(_pick(raw, "tier_requirement", "tierRequirement")),
            race_requirement=_text(_pick(raw, "race_requirement", "raceRequirement")),
            notes=_text(raw.get("notes")),
            source=_text(raw.get("source")),
        )


def base_form() -> TransformationForm:
    """The synthetic form used whenever no catalog form is allowed."""
    return TransformationForm(
        id=BASE_FORM_ID,
        name="Base Form",
        notes="Fallback base form.",
        source="Core",
    )


@dataclass(frozen=True, slots=True)
class Technique:
    """A ki technique card."""

    id: str
    name: str
    ki_cost: Number = 0
    tp_cost: Number = 0
    to_hit_bonus: Number = 0
    to_hit_stat: str = ""
    damage_dice: str = "0d0"
    damage_flat: Number = 0
    uses_attack_mod: bool = False
    damage_stat: str = ""
    range: str = ""
    notes: str = ""
    source: str = ""

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> Technique:
        return cls(
            id=_text(raw.get("id")),
            name=_text(raw.get("name"), _text(raw.get("id"))),
            ki_cost=to_number(_pick(raw, "ki_cost", "kiCost")),
            tp_cost=to_number(_pick(raw, "tp_cost", "tpCost")),
            to_hit_bonus=to_number(_pick(raw, "to_hit_bonus", "toHitBonus")),
            to_hit_stat=_text(_pick(raw, "to_hit_stat", "toHitStat")),
            damage_dice=_text(_pick(raw, "damage_dice", "damageDice"), "0d0"),
            damage_flat=to_number(_pick(raw, "damage_flat", "damageFlat")),
            uses_attack_mod=_flag(_pick(raw, "uses_attack_mod", "usesAttackMod", default=False)),
            damage_stat=_text(_pick(raw, "damage_stat", "damageStat")),
            range=_text(raw.get("range")),
            notes=_text(raw.get("notes")),
            source=_text(raw.get("source")),
        )
