"""Character sheet state.

The only mutable entity in the system. It is always complete: anything
loaded from disk or imported is merged over the default schema first, so
fields added later always have a value. The serialized form is a plain
nested dict with the same keys as the dataclass fields.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import asdict, dataclass, field, fields
from typing import Any

from ki_sheet.models.constants import ABILITY_KEYS, BASE_FORM_ID, BlendPreset
from ki_sheet.models.numbers import to_number


# Starting allocation for a new fighter, in ABILITY_KEYS order.
_DEFAULT_ABILITIES: dict[str, int] = {
    "str": 14,
    "dex": 14,
    "con": 14,
    "int": 10,
    "wis": 10,
    "cha": 10,
    "spi": 14,
}


@dataclass(slots=True)
class CharacterMeta:
    name: str = "New Fighter"
    level: int = 1
    primary_race_id: str = "saiyan"
    secondary_race_id: str = ""   # empty = opposite of primary (see lineage)
    lineage_preset: str = BlendPreset.FULL.value
    class_id: str = ""
    profession_id: str = ""
    alignment: str = "Neutral"


@dataclass(slots=True)
class Progression:
    base_power_level: int = 500
    power_bonus_flat: int = 0


@dataclass(slots=True)
class Resources:
    max_hp: int = 32
    current_hp: int = 32
    base_ki: int = 12
    current_ki: int = 12
    ki_recovery_flat: int = 0


@dataclass(slots=True)
class CombatConfig:
    attack_stat: str = "str"
    base_speed: int = 30
    defense_bonus: int = 0
    initiative_bonus: int = 0
    attack_bonus_flat: int = 0
    damage_bonus_flat: int = 0
    tech_save_bonus: int = 0


@dataclass(slots=True)
class CharacterState:
    """A full character sheet."""

    meta: CharacterMeta = field(default_factory=CharacterMeta)
    abilities: dict[str, int | float] = field(default_factory=lambda: dict(_DEFAULT_ABILITIES))
    progression: Progression = field(default_factory=Progression)
    resources: Resources = field(default_factory=Resources)
    combat: CombatConfig = field(default_factory=CombatConfig)
    active_transformation_id: str = BASE_FORM_ID

    # Free text
    skills_notes: str = ""
    inventory: str = ""
    notes: str = ""

    @classmethod
    def from_dict(cls, raw: Any) -> CharacterState:
        """Build a state from persisted data, filling gaps from defaults."""
        return _from_merged(normalize_state_dict(raw))

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


# ---------------------------------------------------------------------------
# Default merge
# ---------------------------------------------------------------------------


def default_state_dict() -> dict[str, Any]:
    """The default schema as a plain dict."""
    return CharacterState().to_dict()


def deep_merge(base: Any, override: Any) -> Any:
    """Merge *override* onto *base*, keyed by *base*'s own shape.

    Lists are atomic (a list override replaces, anything else keeps base).
    Dicts recurse over base's keys only, so unknown keys are dropped and a
    non-dict override of a dict keeps base. For scalars the override wins
    unless it is None.
    """
    if isinstance(base, list):
        return list(override) if isinstance(override, list) else list(base)
    if isinstance(base, dict):
        source = override if isinstance(override, Mapping) else {}
        return {key: deep_merge(value, source.get(key)) for key, value in base.items()}
    return base if override is None else override


def normalize_state_dict(raw: Any) -> dict[str, Any]:
    """Merge *raw* over defaults; non-mapping input yields pure defaults."""
    if isinstance(raw, CharacterState):
        raw = raw.to_dict()
    base = default_state_dict()
    if not isinstance(raw, Mapping):
        return base
    return deep_merge(base, raw)


def normalize_state(raw: Any) -> CharacterState:
    return _from_merged(normalize_state_dict(raw))


def _section(section_cls: type, data: Mapping[str, Any]) -> Any:
    defaults = section_cls()
    values: dict[str, Any] = {}
    for f in fields(section_cls):
        default = getattr(defaults, f.name)
        value = data.get(f.name, default)
        if isinstance(default, int) and not isinstance(default, bool):
            value = to_number(value, default)
        elif isinstance(default, str):
            value = "" if value is None else str(value)
        values[f.name] = value
    return section_cls(**values)


def _from_merged(data: Mapping[str, Any]) -> CharacterState:
    abilities_raw = data.get("abilities") or {}
    abilities = {
        key: to_number(abilities_raw.get(key), _DEFAULT_ABILITIES[key])
        for key in ABILITY_KEYS
    }
    return CharacterState(
        meta=_section(CharacterMeta, data.get("meta") or {}),
        abilities=abilities,
        progression=_section(Progression, data.get("progression") or {}),
        resources=_section(Resources, data.get("resources") or {}),
        combat=_section(CombatConfig, data.get("combat") or {}),
        active_transformation_id=str(data.get("active_transformation_id") or BASE_FORM_ID),
        skills_notes=str(data.get("skills_notes") or ""),
        inventory=str(data.get("inventory") or ""),
        notes=str(data.get("notes") or ""),
    )


# ---------------------------------------------------------------------------
# JSON round-trip
# ---------------------------------------------------------------------------


def state_to_json(state: CharacterState, *, indent: int | None = 2) -> str:
    return json.dumps(state.to_dict(), indent=indent)


def state_from_json(text: str) -> CharacterState:
    """Parse exported JSON. Raises json.JSONDecodeError on malformed text."""
    return normalize_state(json.loads(text))
