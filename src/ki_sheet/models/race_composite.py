"""Pool race bonuses according to lineage shares."""

import math
from collections.abc import Iterable
from dataclasses import dataclass, field

from ki_sheet.models.bonuses import BonusPool, add_bonuses, empty_flat_bonuses, empty_stat_bonuses
from ki_sheet.models.lineage import LineageShares, lineage_preset_label
from ki_sheet.models.numbers import Number, to_number
from ki_sheet.models.records import RaceDefinition


NO_ANCESTRY_SUMMARY = "No ancestry selected"


@dataclass(frozen=True, slots=True)
class RaceComposite:
    """Share-weighted blend of every race in a character's lineage."""

    stat_bonuses: dict[str, Number] = field(default_factory=empty_stat_bonuses)
    flat_bonuses: dict[str, Number] = field(default_factory=empty_flat_bonuses)
    features: tuple[str, ...] = ()
    breakdown: tuple[str, ...] = ()
    summary: str = NO_ANCESTRY_SUMMARY
    dominant_race: RaceDefinition | None = None
    lineage_label: str = ""


def resolve_race_composite(
    races: Iterable[RaceDefinition],
    shares: LineageShares,
    preset: str | None,
) -> RaceComposite:
    """Blend catalog races by share.

    Shares naming races absent from the catalog contribute nothing. The
    dominant race is the highest share; on ties the race listed first in
    the catalog wins.
    """
    race_map: dict[str, RaceDefinition] = {}
    for race in races:
        race_map.setdefault(race.id, race)

    pool = BonusPool()
    breakdown: list[str] = []
    features: list[str] = []
    for race_id, share in shares.items():
        race = race_map.get(race_id)
        if race is None:
            continue
        add_bonuses(pool, race, share)
        # half-up rounding, so 12.5% shows as 13%
        label = f"{race.name} {math.floor(to_number(share) * 100 + 0.5)}%"
        breakdown.append(label)
        features.extend(f"{label}: {feature}" for feature in race.features)

    dominant: RaceDefinition | None = None
    max_share = -1.0
    for race_id, race in race_map.items():
        share = to_number(shares.get(race_id))
        if race_id in shares and share > max_share:
            max_share = share
            dominant = race

    return RaceComposite(
        stat_bonuses=pool.stat_bonuses,
        flat_bonuses=pool.flat_bonuses,
        features=tuple(features),
        breakdown=tuple(breakdown),
        summary=" + ".join(breakdown) or NO_ANCESTRY_SUMMARY,
        dominant_race=dominant,
        lineage_label=lineage_preset_label(preset),
    )
