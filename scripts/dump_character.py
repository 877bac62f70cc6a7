"""Dump the derived sheet for a saved or exported character.

Reads a character JSON (an export, or the saved current sheet by
default), computes every derived stat, and prints a summary.

Usage:
    python -m scripts.dump_character [--state PATH] [--data-dir DIR] [--form ID] [--json]

Without --state, the current sheet from KI_SHEET_HOME (default
~/.ki_sheet) is used; without a saved sheet, the default fighter.
Without --data-dir (or KI_SHEET_DATA_DIR), built-in catalogs are used.
"""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from ki_sheet.engine.export_state import build_sheet_payload
from ki_sheet.engine.sheet_config import SheetConfig
from ki_sheet.engine.storage import JsonSheetStorage, read_json
from ki_sheet.models.catalogs import Catalogs, load_catalogs
from ki_sheet.models.character import CharacterState, normalize_state
from ki_sheet.models.constants import ABILITY_KEYS, ABILITY_NAMES
from ki_sheet.models.derived_stats import DerivedStats, compute_derived
from ki_sheet.models.numbers import format_number, signed


def _load_state(state_path: Path | None, config: SheetConfig) -> CharacterState:
    if state_path is not None:
        raw = read_json(state_path)
        if raw is None:
            print(f"Warning: could not read {state_path}; using the default fighter")
        return normalize_state(raw)
    raw = JsonSheetStorage(config.resolved_storage_dir).load_current()
    return normalize_state(raw)


def render_sheet(state: CharacterState, derived: DerivedStats) -> str:
    lines: list[str] = []
    composite = derived.race_composite
    form = derived.form

    lines.append("=" * 50)
    lines.append(f"  {state.meta.name} - Level {format_number(derived.level)}")
    lines.append("=" * 50)

    lines.append("")
    lines.append("--- ANCESTRY ---")
    lines.append(f"  {derived.lineage_label}: {composite.summary if composite else ''}")
    if composite:
        for feature in composite.features:
            lines.append(f"    {feature}")
    class_name = derived.selected_class.name if derived.selected_class else "None"
    profession_name = derived.selected_profession.name if derived.selected_profession else "None"
    lines.append(f"  Class: {class_name}  Profession: {profession_name}")

    lines.append("")
    lines.append("--- ABILITIES ---")
    for key in ABILITY_KEYS:
        score = format_number(derived.boosted_abilities[key])
        lines.append(f"  {ABILITY_NAMES[key]:<14} {score:>5} ({signed(derived.mods[key])})")

    lines.append("")
    lines.append("--- FORM ---")
    if form is not None:
        lines.append(f"  {form.name} (x{format_number(form.multiplier)} power, "
                     f"x{format_number(form.ki_modifier)} ki)")
    allowed = ", ".join(f.name for f in derived.allowed_transformations)
    lines.append(f"  Available: {allowed}")

    lines.append("")
    lines.append("--- COMBAT ---")
    lines.append(f"  Power Level         {derived.transformed_power_level_label:>12}")
    lines.append(f"  HP                  {format_number(derived.current_hp):>5} / {derived.max_hp}")
    lines.append(f"  Ki                  {format_number(derived.current_ki):>5} / {derived.max_ki}")
    lines.append(f"  Proficiency         {signed(derived.proficiency_bonus):>5}")
    lines.append(f"  Attack Bonus        {signed(derived.attack_bonus):>5}")
    lines.append(f"  Damage Bonus        {signed(derived.damage_bonus):>5}")
    lines.append(f"  Defense             {format_number(derived.defense):>5}")
    lines.append(f"  Initiative          {signed(derived.initiative):>5}")
    lines.append(f"  Speed               {format_number(derived.speed):>5}")
    lines.append(f"  Tech Save DC        {format_number(derived.tech_save_dc):>5}")
    lines.append(f"  Ki Recovery         {format_number(derived.ki_recovery):>5}")
    return "\n".join(lines)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Dump derived character stats")
    parser.add_argument("--state", type=Path, help="Character JSON (export or saved sheet)")
    parser.add_argument("--data-dir", type=Path, help="Directory with catalog JSON files")
    parser.add_argument("--form", help="Preview with this transformation active")
    parser.add_argument("--json", action="store_true", help="Print the full payload as JSON")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    config = SheetConfig.from_env()
    data_dir = args.data_dir or config.data_dir
    catalogs = load_catalogs(data_dir) if data_dir else Catalogs.fallback()
    state = _load_state(args.state, config)
    if args.form:
        state.active_transformation_id = args.form

    derived = compute_derived(state, catalogs)
    if args.form and derived.form is not None and derived.form.id != args.form:
        print(f"Warning: form {args.form!r} is not available; showing {derived.form.name}")

    if args.json:
        print(json.dumps(build_sheet_payload(state, derived, catalogs), indent=2))
    else:
        print(render_sheet(state, derived))
        print()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
