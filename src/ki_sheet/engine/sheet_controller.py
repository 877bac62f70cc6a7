"""Controller for play-time sheet mutations.

Every action reads the current snapshot from the store, builds the next
one, re-clamps current HP/Ki against freshly derived maxima, and hands it
back to the store. Actions that can be refused return ``(ok, message)``;
notable events also land in the roll log.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from ki_sheet.engine.dice import UniformSource, roll_die, roll_expression
from ki_sheet.engine.roll_log import RollLog
from ki_sheet.engine.sheet_config import SheetConfig
from ki_sheet.engine.storage import JsonSheetStorage, SlotInfo
from ki_sheet.engine.store import SheetStore
from ki_sheet.engine.techniques import compute_technique_math
from ki_sheet.models.catalogs import Catalogs
from ki_sheet.models.character import (
    CharacterState,
    default_state_dict,
    normalize_state,
    state_to_json,
)
from ki_sheet.models.constants import BASE_FORM_ID
from ki_sheet.models.derived_stats import DerivedStats, compute_derived
from ki_sheet.models.numbers import format_number, signed, to_number


log = logging.getLogger(__name__)


def _set_path(data: dict[str, Any], path: str, value: Any) -> None:
    parts = path.split(".")
    current = data
    for key in parts[:-1]:
        if not isinstance(current.get(key), dict):
            current[key] = {}
        current = current[key]
    current[parts[-1]] = value


def _schema_has_path(path: str) -> bool:
    node: Any = default_state_dict()
    for key in path.split("."):
        if not isinstance(node, dict) or key not in node:
            return False
        node = node[key]
    return not isinstance(node, dict)


@dataclass(slots=True)
class SheetController:
    """Owns sheet actions: resources, forms, techniques, files, slots."""

    store: SheetStore
    catalogs: Catalogs
    config: SheetConfig = field(default_factory=SheetConfig)
    storage: JsonSheetStorage | None = None
    roll_log: RollLog | None = None
    rng: UniformSource | None = None
    active_slot_id: str = ""

    def __post_init__(self) -> None:
        if self.roll_log is None:
            self.roll_log = RollLog(self.config.roll_log_limit)

    # --- Read models -------------------------------------------------------

    @property
    def state(self) -> CharacterState:
        return self.store.get()

    def derived(self) -> DerivedStats:
        return compute_derived(self.store.get(), self.catalogs)

    def log_entries(self) -> list[str]:
        assert self.roll_log is not None
        return self.roll_log.entries()

    # --- Internals ---------------------------------------------------------

    def _push(self, text: str) -> None:
        assert self.roll_log is not None
        self.roll_log.push(text)

    def _commit(self, mutate: Callable[[CharacterState], CharacterState | None]) -> CharacterState:
        """Apply *mutate* to a copy, clamp resources, store the result.

        *mutate* edits the copy in place or returns a replacement.
        """
        next_state = self.store.get()
        next_state = mutate(next_state) or next_state
        derived = compute_derived(next_state, self.catalogs)
        next_state.resources.current_hp = derived.current_hp
        next_state.resources.current_ki = derived.current_ki
        return self.store.set(next_state)

    # --- Field edits -------------------------------------------------------

    def update_field(
        self, path: str, value: Any, *, numeric: bool = False
    ) -> tuple[bool, str | None]:
        """Set a dotted-path field (``"resources.current_hp"``)."""
        if not _schema_has_path(path):
            return False, f"Unknown field: {path}"
        if numeric:
            value = to_number(value, 0)

        def mutate(state: CharacterState) -> CharacterState:
            data = state.to_dict()
            _set_path(data, path, value)
            return normalize_state(data)

        self._commit(mutate)
        return True, None

    # --- Forms -------------------------------------------------------------

    def apply_transformation(self, form_id: str) -> tuple[bool, str | None]:
        if self.catalogs.transformation(form_id) is None and form_id != BASE_FORM_ID:
            return False, f"Unknown form: {form_id}"
        derived = self.derived()
        form = next((f for f in derived.allowed_transformations if f.id == form_id), None)
        if form is None:
            return False, f"Form {form_id!r} is not available to this character."

        def mutate(state: CharacterState) -> None:
            state.active_transformation_id = form.id

        self._commit(mutate)
        self._push(f"Transformed: {form.name}.")
        return True, None

    def sync_active_form(self) -> bool:
        """Persist the engine's active-form correction; True if it changed."""
        resolved = self.derived().form
        assert resolved is not None
        if self.store.get().active_transformation_id == resolved.id:
            return False

        def mutate(state: CharacterState) -> None:
            state.active_transformation_id = resolved.id

        self._commit(mutate)
        return True

    # --- Quick actions -----------------------------------------------------

    def recover_ki(self) -> int | float:
        derived = self.derived()
        amount = derived.ki_recovery

        def mutate(state: CharacterState) -> None:
            current = to_number(state.resources.current_ki)
            state.resources.current_ki = min(derived.max_ki, current + amount)

        self._commit(mutate)
        self._push(f"Recovered {format_number(amount)} Ki.")
        return amount

    def spend_ki(self, amount: int | float | None = None) -> None:
        cost = self.config.ki_spend_amount if amount is None else to_number(amount)

        def mutate(state: CharacterState) -> None:
            state.resources.current_ki = max(0, to_number(state.resources.current_ki) - cost)

        self._commit(mutate)
        self._push(f"Spent {format_number(cost)} Ki.")

    def heal(self, amount: int | float | None = None) -> None:
        healed = self.config.heal_amount if amount is None else to_number(amount)
        max_hp = self.derived().max_hp

        def mutate(state: CharacterState) -> None:
            state.resources.current_hp = min(max_hp, to_number(state.resources.current_hp) + healed)

        self._commit(mutate)
        self._push(f"Healed {format_number(healed)} HP.")

    def take_damage(self, amount: int | float | None = None) -> None:
        damage = self.config.damage_amount if amount is None else to_number(amount)

        def mutate(state: CharacterState) -> None:
            state.resources.current_hp = max(0, to_number(state.resources.current_hp) - damage)

        self._commit(mutate)
        self._push(f"Took {format_number(damage)} damage.")

    def roll_initiative(self) -> int | float:
        initiative = self.derived().initiative
        roll = roll_die(20, self.rng)
        total = roll + initiative
        self._push(f"Initiative: {roll}{signed(initiative)}={format_number(total)}")
        return total

    # --- Techniques --------------------------------------------------------

    def use_technique(self, technique_id: str) -> tuple[bool, str | None]:
        technique = self.catalogs.technique(technique_id)
        if technique is None:
            return False, f"Unknown technique: {technique_id}"
        cost = to_number(technique.ki_cost)
        if self.derived().current_ki < cost:
            message = f"{technique.name}: not enough Ki."
            self._push(message)
            return False, message

        def mutate(state: CharacterState) -> None:
            state.resources.current_ki = max(0, to_number(state.resources.current_ki) - cost)

        self._commit(mutate)
        message = f"{technique.name}: spent {format_number(cost)} Ki."
        self._push(message)
        return True, message

    def roll_technique(self, technique_id: str) -> tuple[bool, str | None]:
        technique = self.catalogs.technique(technique_id)
        if technique is None:
            return False, f"Unknown technique: {technique_id}"
        tech_math = compute_technique_math(technique, self.derived())
        d20 = roll_die(20, self.rng)
        hit_total = d20 + tech_math.base_hit
        damage = roll_expression(technique.damage_dice, self.rng)
        damage_total = damage.total + tech_math.damage_mod
        rolls = ",".join(str(r) for r in damage.rolls)
        message = (
            f"{technique.name}: hit {d20}{signed(tech_math.base_hit)}={format_number(hit_total)}, "
            f"damage {damage.expression} ({rolls}) {signed(tech_math.damage_mod)}"
            f"={format_number(damage_total)}"
        )
        self._push(message)
        return True, message

    # --- Import / export / reset -------------------------------------------

    def export_json(self) -> str:
        return state_to_json(self.store.get())

    def import_json(self, text: str, *, source_name: str = "file") -> tuple[bool, str | None]:
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as exc:
            log.warning("Import of %s failed: %s", source_name, exc)
            message = "Import failed: invalid JSON file."
            self._push(message)
            return False, message
        if not isinstance(payload, dict):
            message = "Import failed: invalid JSON file."
            self._push(message)
            return False, message
        self._commit(lambda _state: normalize_state(payload))
        self._push(f"Imported {source_name}.")
        return True, None

    def reset(self) -> None:
        self.store.reset()
        self._push("Character reset to defaults.")

    # --- Slots -------------------------------------------------------------

    def list_slots(self) -> list[SlotInfo]:
        if self.storage is None:
            return []
        return self.storage.list_slots()

    def create_slot(self, name: str | None = None) -> tuple[bool, str | None]:
        if self.storage is None:
            return False, "No storage configured."
        state = self.store.get()
        label = name or state.meta.name or "New Character"
        try:
            slot_id = self.storage.create_slot(label, state.to_dict())
        except OSError as exc:
            log.error("Could not create slot %r: %s", label, exc)
            self._push("Could not create slot.")
            return False, "Could not create slot."
        self.active_slot_id = slot_id
        self._push(f'Created slot "{label}".')
        return True, slot_id

    def save_slot(
        self, slot_id: str | None = None, name: str | None = None
    ) -> tuple[bool, str | None]:
        if self.storage is None:
            return False, "No storage configured."
        state = self.store.get()
        label = name or state.meta.name or "Character"
        target = slot_id or self.active_slot_id
        if not target:
            return self.create_slot(label)
        try:
            saved = self.storage.save_slot(target, label, state.to_dict())
        except OSError as exc:
            log.error("Could not save slot %s: %s", target, exc)
            self._push("Could not save selected slot.")
            return False, "Could not save selected slot."
        if not saved:
            return False, f"Invalid slot id: {target}"
        self.active_slot_id = target
        self._push("Saved current character to slot.")
        return True, target

    def load_slot(self, slot_id: str | None = None) -> tuple[bool, str | None]:
        if self.storage is None:
            return False, "No storage configured."
        target = slot_id or self.active_slot_id
        if not target:
            self._push("No slot selected to load.")
            return False, "No slot selected to load."
        data = self.storage.load_slot(target)
        if data is None:
            self._push("Could not load selected slot.")
            return False, "Could not load selected slot."
        self._commit(lambda _state: normalize_state(data))
        self.active_slot_id = target
        self._push("Loaded selected slot.")
        return True, None

    def delete_slot(self, slot_id: str | None = None) -> tuple[bool, str | None]:
        if self.storage is None:
            return False, "No storage configured."
        target = slot_id or self.active_slot_id
        if not target:
            self._push("No slot selected to delete.")
            return False, "No slot selected to delete."
        try:
            deleted = self.storage.delete_slot(target)
        except OSError as exc:
            log.error("Could not delete slot %s: %s", target, exc)
            deleted = False
        if not deleted:
            self._push("Could not delete selected slot.")
            return False, "Could not delete selected slot."
        if self.active_slot_id == target:
            self.active_slot_id = ""
        self._push("Deleted selected slot.")
        return True, None
