"""To-hit and damage math for technique cards."""

from dataclasses import dataclass

from ki_sheet.models.constants import NO_STAT
from ki_sheet.models.derived_stats import DerivedStats, normalize_stat_key
from ki_sheet.models.numbers import Number, to_number
from ki_sheet.models.records import Technique


@dataclass(frozen=True, slots=True)
class TechniqueMath:
    base_hit: Number
    damage_mod: Number


def mod_for_stat_sum(derived: DerivedStats, stat_names: str) -> Number:
    """Sum of modifiers named in a ``"str+spi"`` style list; ``none`` adds 0."""
    total: Number = 0
    for part in str(stat_names or "").split("+"):
        key = normalize_stat_key(part)
        if not key or key == NO_STAT:
            continue
        total += to_number(derived.mods.get(key))
    return total


def compute_technique_math(technique: Technique, derived: DerivedStats) -> TechniqueMath:
    """To-hit and flat damage modifier for *technique* under *derived*.

    A named to-hit stat replaces the sheet attack bonus with proficiency
    plus that stat's modifier. A damage stat list takes precedence over
    ``uses_attack_mod``.
    """
    hit_stat = normalize_stat_key(technique.to_hit_stat)
    if hit_stat and hit_stat != NO_STAT:
        base_hit = (
            derived.proficiency_bonus
            + to_number(derived.mods.get(hit_stat))
            + to_number(technique.to_hit_bonus)
        )
    else:
        base_hit = derived.attack_bonus + to_number(technique.to_hit_bonus)

    damage_mod = to_number(technique.damage_flat)
    if technique.damage_stat:
        damage_mod += mod_for_stat_sum(derived, technique.damage_stat)
    elif technique.uses_attack_mod:
        damage_mod += derived.damage_bonus
    return TechniqueMath(base_hit=base_hit, damage_mod=damage_mod)
