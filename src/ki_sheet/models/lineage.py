"""Lineage resolution: ancestry config → race share weights.

Shares always form a probability distribution over at least one race id.

  full            100% primary
  half_human       50% primary / 50% human
  quarter_human    25% primary / 75% human
  half_hybrid      50% primary / 50% secondary
  quarter_hybrid   75% primary / 25% secondary

Unknown presets resolve as ``full``. An unset secondary race defaults to
the opposite of the primary: saiyan for humans, human for everyone else.
"""

from collections.abc import Mapping

from ki_sheet.models.character import CharacterMeta
from ki_sheet.models.constants import (
    DEFAULT_LINEAGE_LABEL,
    HUMAN_RACE_ID,
    LINEAGE_PRESET_LABELS,
    SAIYAN_RACE_ID,
    BlendPreset,
)
from ki_sheet.models.numbers import to_number


LineageShares = dict[str, float]

# preset → ((slot, share), ...) where slot is "primary", "secondary" or a race id
_PRESET_SPLITS: dict[str, tuple[tuple[str, float], ...]] = {
    BlendPreset.FULL: (("primary", 1.0),),
    BlendPreset.HALF_HUMAN: (("primary", 0.5), (HUMAN_RACE_ID, 0.5)),
    BlendPreset.QUARTER_HUMAN: (("primary", 0.25), (HUMAN_RACE_ID, 0.75)),
    BlendPreset.HALF_HYBRID: (("primary", 0.5), ("secondary", 0.5)),
    BlendPreset.QUARTER_HYBRID: (("primary", 0.75), ("secondary", 0.25)),
}


def clean_shares(shares: Mapping[str, object]) -> LineageShares:
    """Drop non-positive entries and renormalize to sum 1.

    Collapses to ``{"human": 1.0}`` when nothing positive remains.
    """
    positive = {
        race_id: to_number(share)
        for race_id, share in shares.items()
        if to_number(share) > 0
    }
    total = sum(positive.values())
    if total <= 0:
        return {HUMAN_RACE_ID: 1.0}
    return {race_id: share / total for race_id, share in positive.items()}


def resolve_lineage_shares(meta: CharacterMeta | None) -> LineageShares:
    """Resolve a character's ancestry config into race shares."""
    primary = (meta.primary_race_id if meta else "") or HUMAN_RACE_ID
    fallback_secondary = SAIYAN_RACE_ID if primary == HUMAN_RACE_ID else HUMAN_RACE_ID
    secondary = (meta.secondary_race_id if meta else "") or fallback_secondary
    preset = (meta.lineage_preset if meta else "") or BlendPreset.FULL

    split = _PRESET_SPLITS.get(preset, _PRESET_SPLITS[BlendPreset.FULL])
    shares: dict[str, float] = {}
    for slot, amount in split:
        race_id = {"primary": primary, "secondary": secondary}.get(slot, slot)
        shares[race_id] = shares.get(race_id, 0.0) + amount
    return clean_shares(shares)


def lineage_preset_label(preset: str | None) -> str:
    return LINEAGE_PRESET_LABELS.get(preset or "", DEFAULT_LINEAGE_LABEL)
