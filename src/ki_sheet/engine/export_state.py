"""JSON-ready payloads of a derived sheet for external views."""

from __future__ import annotations

from typing import Any

from ki_sheet.engine.techniques import compute_technique_math
from ki_sheet.models.catalogs import Catalogs
from ki_sheet.models.character import CharacterState
from ki_sheet.models.derived_stats import DerivedStats
from ki_sheet.models.records import TransformationForm


def _form_payload(form: TransformationForm) -> dict[str, Any]:
    return {
        "id": form.id,
        "name": form.name,
        "multiplier": form.multiplier,
        "ki_modifier": form.ki_modifier,
        "attack_bonus": form.attack_bonus,
        "damage_bonus": form.damage_bonus,
        "defense_bonus": form.defense_bonus,
        "initiative_bonus": form.initiative_bonus,
        "speed_bonus": form.speed_bonus,
        "ability_bonuses": dict(form.ability_bonuses),
        "ki_upkeep": form.ki_upkeep,
        "hp_upkeep": form.hp_upkeep,
        "tier_requirement": form.tier_requirement or "None",
        "race_requirement": form.race_requirement or "None",
        "notes": form.notes or "None",
        "source": form.source or "Custom",
    }


def stats_payload(derived: DerivedStats) -> dict[str, Any]:
    composite = derived.race_composite
    return {
        "level": derived.level,
        "proficiency_bonus": derived.proficiency_bonus,
        "mods": dict(derived.mods),
        "boosted_abilities": dict(derived.boosted_abilities),
        "power_level": derived.transformed_power_level,
        "power_level_label": derived.transformed_power_level_label,
        "hp": {"current": derived.current_hp, "max": derived.max_hp},
        "ki": {"current": derived.current_ki, "max": derived.max_ki},
        "attack_bonus": derived.attack_bonus,
        "damage_bonus": derived.damage_bonus,
        "defense": derived.defense,
        "initiative": derived.initiative,
        "speed": derived.speed,
        "tech_save_dc": derived.tech_save_dc,
        "ki_recovery": derived.ki_recovery,
        "passive_bonuses": dict(derived.passive_bonuses),
        "lineage": {
            "label": derived.lineage_label,
            "shares": dict(derived.lineage_shares),
            "summary": composite.summary if composite else "",
            "features": list(composite.features) if composite else [],
            "dominant_race": (
                composite.dominant_race.id if composite and composite.dominant_race else None
            ),
        },
        "class": derived.selected_class.name if derived.selected_class else "None",
        "profession": derived.selected_profession.name if derived.selected_profession else "None",
    }


def build_sheet_payload(
    state: CharacterState,
    derived: DerivedStats,
    catalogs: Catalogs,
    roll_log: list[str] | None = None,
) -> dict[str, Any]:
    """Everything a view needs to draw the sheet, as plain JSON data."""
    techniques = []
    for technique in catalogs.techniques:
        tech_math = compute_technique_math(technique, derived)
        techniques.append(
            {
                "id": technique.id,
                "name": technique.name,
                "ki_cost": technique.ki_cost,
                "tp_cost": technique.tp_cost,
                "range": technique.range or "-",
                "to_hit": tech_math.base_hit,
                "damage_dice": technique.damage_dice,
                "damage_mod": tech_math.damage_mod,
                "can_use": derived.current_ki >= technique.ki_cost,
                "notes": technique.notes,
                "source": technique.source or "Custom",
            }
        )

    return {
        "character": {
            "name": state.meta.name,
            "alignment": state.meta.alignment,
            "active_transformation_id": state.active_transformation_id,
        },
        "stats": stats_payload(derived),
        "form": _form_payload(derived.form) if derived.form else None,
        "allowed_transformations": [
            {"id": form.id, "name": form.name} for form in derived.allowed_transformations
        ],
        "techniques": techniques,
        "roll_log": list(roll_log or []),
    }
