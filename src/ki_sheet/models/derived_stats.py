"""Derived stat engine.

Folds a character's abilities, lineage-weighted race bonuses, class and
profession bonuses, and the active transformation into one snapshot of
combat-ready numbers. ``compute_derived`` is pure: it never mutates its
inputs, performs no I/O, and equal inputs give equal snapshots.

Formula summary (mod = floor((score - 10) / 2)):
  proficiency   2 + floor((level - 1) / 4)
  power level   max(0, base + flat) * form.multiplier
  max hp        max(1, floor(base hp + race hp + class hp))
  max ki        max(1, floor((max(0, base ki + race ki + class ki)
                              + level*4 + SPI*3) * form.ki_modifier))
  attack        prof + mod(attack stat) + flat + form + passive
  damage        mod(attack stat) + flat + form + passive
  defense       max(1, 10 + DEX + flat + form + passive)
  initiative    DEX + flat + form + passive
  speed         max(0, base speed + form + passive)
  tech save DC  8 + prof + SPI + flat + passive
  ki recovery   max(1, floor(level/2) + SPI + flat + passive)
"""

import math
from collections.abc import Iterable
from dataclasses import dataclass, field

from ki_sheet.models.bonuses import BonusPool, add_bonuses
from ki_sheet.models.catalogs import Catalogs
from ki_sheet.models.character import CharacterState
from ki_sheet.models.constants import ABILITY_KEYS, FLAT_BONUS_KEYS, NO_STAT, STAT_SYNONYMS
from ki_sheet.models.lineage import lineage_preset_label, resolve_lineage_shares
from ki_sheet.models.numbers import (
    Number,
    ability_mod,
    clamp,
    format_large_number,
    proficiency_bonus,
    to_number,
)
from ki_sheet.models.race_composite import RaceComposite, resolve_race_composite
from ki_sheet.models.records import ClassDefinition, TransformationForm
from ki_sheet.models.transformations import (
    filter_allowed_transformations,
    resolve_active_transformation,
)


def normalize_stat_key(raw: object) -> str:
    """Map a stat name or synonym to its ability key.

    Unknown names come back lowercased and stripped, so lookups on them
    simply miss.
    """
    key = str(raw or "").strip().lower()
    return STAT_SYNONYMS.get(key, key)


def find_by_id(records: Iterable[ClassDefinition], record_id: str) -> ClassDefinition:
    """Catalog entry with *record_id*, or the neutral "None" entry."""
    for record in records:
        if record.id == record_id:
            return record
    return ClassDefinition.none()


@dataclass(frozen=True, slots=True)
class DerivedStats:
    """Complete computed snapshot for one character state."""

    # Abilities
    mods: dict[str, int] = field(default_factory=dict)
    boosted_abilities: dict[str, Number] = field(default_factory=dict)
    level: Number = 1
    proficiency_bonus: int = 2

    # Forms
    form: TransformationForm | None = None
    allowed_transformations: tuple[TransformationForm, ...] = ()

    # Ancestry and training
    lineage_shares: dict[str, float] = field(default_factory=dict)
    lineage_label: str = ""
    race_composite: RaceComposite | None = None
    selected_class: ClassDefinition | None = None
    selected_profession: ClassDefinition | None = None

    # Power
    transformed_power_level: Number = 0
    transformed_power_level_label: str = "0"

    # Resources
    current_hp: Number = 0
    max_hp: int = 1
    current_ki: Number = 0
    max_ki: int = 1

    # Combat
    attack_bonus: Number = 0
    damage_bonus: Number = 0
    defense: Number = 10
    initiative: Number = 0
    speed: Number = 0
    tech_save_dc: Number = 8
    ki_recovery: Number = 1

    # Race + class flat totals, keyed by FLAT_BONUS_KEYS
    passive_bonuses: dict[str, Number] = field(default_factory=dict)


def compute_derived(state: CharacterState, catalogs: Catalogs | None = None) -> DerivedStats:
    """Compute every derived stat for *state* against *catalogs*."""
    catalogs = catalogs or Catalogs()
    meta = state.meta
    preset = meta.lineage_preset

    shares = resolve_lineage_shares(meta)
    composite = resolve_race_composite(catalogs.races, shares, preset)
    selected_class = find_by_id(catalogs.classes, meta.class_id)
    selected_profession = find_by_id(catalogs.professions, meta.profession_id)

    class_pool = BonusPool()
    add_bonuses(class_pool, selected_class, 1)
    add_bonuses(class_pool, selected_profession, 1)

    allowed = filter_allowed_transformations(catalogs.transformations, shares, preset)
    form = resolve_active_transformation(allowed, state.active_transformation_id)

    boosted: dict[str, Number] = {}
    mods: dict[str, int] = {}
    for key in ABILITY_KEYS:
        boosted[key] = (
            to_number(state.abilities.get(key))
            + to_number(composite.stat_bonuses.get(key))
            + to_number(class_pool.stat_bonuses.get(key))
            + to_number(form.ability_bonuses.get(key))
        )
        mods[key] = ability_mod(boosted[key])

    level = max(1, to_number(meta.level, 1))
    prof = proficiency_bonus(level)

    progression = state.progression
    power_base = max(
        0, to_number(progression.base_power_level) + to_number(progression.power_bonus_flat)
    )
    transformed_power = power_base * to_number(form.multiplier, 1)

    passive = {
        key: to_number(composite.flat_bonuses.get(key))
        + to_number(class_pool.flat_bonuses.get(key))
        for key in FLAT_BONUS_KEYS
    }

    resources = state.resources
    max_hp = max(1, math.floor(to_number(resources.max_hp, 1) + passive["hp"]))
    current_hp = clamp(to_number(resources.current_hp), 0, max_hp)

    base_ki = max(0, to_number(resources.base_ki) + passive["ki"])
    raw_max_ki = (base_ki + level * 4 + mods["spi"] * 3) * to_number(form.ki_modifier, 1)
    max_ki = max(1, math.floor(raw_max_ki))
    current_ki = clamp(to_number(resources.current_ki), 0, max_ki)

    combat = state.combat
    attack_stat = normalize_stat_key(combat.attack_stat or "str")
    attack_mod = 0 if attack_stat == NO_STAT else mods.get(attack_stat, 0)

    attack_bonus = (
        prof
        + attack_mod
        + to_number(combat.attack_bonus_flat)
        + to_number(form.attack_bonus)
        + passive["attack"]
    )
    damage_bonus = (
        attack_mod
        + to_number(combat.damage_bonus_flat)
        + to_number(form.damage_bonus)
        + passive["damage"]
    )
    defense = max(
        1,
        10
        + mods["dex"]
        + to_number(combat.defense_bonus)
        + to_number(form.defense_bonus)
        + passive["defense"],
    )
    initiative = (
        mods["dex"]
        + to_number(combat.initiative_bonus)
        + to_number(form.initiative_bonus)
        + passive["initiative"]
    )
    speed = max(0, to_number(combat.base_speed) + to_number(form.speed_bonus) + passive["speed"])
    tech_save_dc = 8 + prof + mods["spi"] + to_number(combat.tech_save_bonus) + passive["tech_save"]
    ki_recovery = max(
        1,
        math.floor(level / 2)
        + mods["spi"]
        + to_number(resources.ki_recovery_flat)
        + passive["ki_recovery"],
    )

    return DerivedStats(
        mods=mods,
        boosted_abilities=boosted,
        level=level,
        proficiency_bonus=prof,
        form=form,
        allowed_transformations=tuple(allowed),
        lineage_shares=dict(shares),
        lineage_label=lineage_preset_label(preset),
        race_composite=composite,
        selected_class=selected_class,
        selected_profession=selected_profession,
        transformed_power_level=transformed_power,
        transformed_power_level_label=format_large_number(transformed_power),
        current_hp=current_hp,
        max_hp=max_hp,
        current_ki=current_ki,
        max_ki=max_ki,
        attack_bonus=attack_bonus,
        damage_bonus=damage_bonus,
        defense=defense,
        initiative=initiative,
        speed=speed,
        tech_save_dc=tech_save_dc,
        ki_recovery=ki_recovery,
        passive_bonuses=passive,
    )
