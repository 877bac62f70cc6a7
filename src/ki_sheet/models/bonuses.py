"""Weighted accumulation of ability and flat bonuses."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Protocol

from ki_sheet.models.constants import ABILITY_KEYS, FLAT_BONUS_KEYS
from ki_sheet.models.numbers import Number, to_number


class BonusSource(Protocol):
    stat_bonuses: Mapping[str, Number]
    flat_bonuses: Mapping[str, Number]


def empty_stat_bonuses() -> dict[str, Number]:
    return {key: 0 for key in ABILITY_KEYS}


def empty_flat_bonuses() -> dict[str, Number]:
    return {key: 0 for key in FLAT_BONUS_KEYS}


@dataclass(slots=True)
class BonusPool:
    """Running totals of ability deltas and flat deltas, all starting at 0."""

    stat_bonuses: dict[str, Number] = field(default_factory=empty_stat_bonuses)
    flat_bonuses: dict[str, Number] = field(default_factory=empty_flat_bonuses)


def add_bonuses(pool: BonusPool, source: BonusSource | None, weight: object = 1) -> BonusPool:
    """Add ``value * weight`` for every pool key; missing values count as 0.

    Mutates and returns *pool*. The source is never modified.
    """
    weighted = to_number(weight, 1)
    stats = getattr(source, "stat_bonuses", None) or {}
    flats = getattr(source, "flat_bonuses", None) or {}
    for key in pool.stat_bonuses:
        pool.stat_bonuses[key] += to_number(stats.get(key)) * weighted
    for key in pool.flat_bonuses:
        pool.flat_bonuses[key] += to_number(flats.get(key)) * weighted
    return pool
