"""JSON file persistence for the current sheet and named character slots.

Layout under the storage root:

    current.json            the live sheet
    slots/<slot_id>.json    {"id", "name", "updated_at", "state"}

Writes go through a temp file and ``os.replace`` so a crash never leaves
a half-written sheet behind. Reads never raise: unreadable or malformed
files are logged and reported as missing.
"""

from __future__ import annotations

import json
import logging
import os
import re
import tempfile
import uuid
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any


log = logging.getLogger(__name__)

CURRENT_FILENAME = "current.json"
SLOTS_DIRNAME = "slots"

_SLOT_ID_PATTERN = re.compile(r"[A-Za-z0-9_-]+")


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def write_json_atomic(path: Path, payload: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    temp_path: Path | None = None
    data = json.dumps(payload, indent=2)
    try:
        with tempfile.NamedTemporaryFile(
            "w", encoding="utf-8", dir=path.parent, delete=False, suffix=".tmp"
        ) as handle:
            temp_path = Path(handle.name)
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(temp_path, path)
        temp_path = None
    finally:
        if temp_path is not None:
            try:
                temp_path.unlink()
            except FileNotFoundError:
                pass


def read_json(path: Path) -> Any:
    """Parsed JSON at *path*, or None if absent or unreadable."""
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except OSError as exc:
        log.warning("Could not read %s: %s", path, exc)
        return None
    except UnicodeDecodeError as exc:
        log.warning("Undecodable bytes in %s: %s", path, exc)
        return None
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        log.warning("Malformed JSON in %s: %s", path, exc)
        return None


@dataclass(frozen=True, slots=True)
class SlotInfo:
    id: str
    name: str
    updated_at: str


class JsonSheetStorage:
    """Persists sheet dicts as JSON under a root directory."""

    def __init__(self, root: Path, clock: Callable[[], str] = _utc_now) -> None:
        self.root = Path(root)
        self._clock = clock

    @property
    def current_path(self) -> Path:
        return self.root / CURRENT_FILENAME

    @property
    def slots_dir(self) -> Path:
        return self.root / SLOTS_DIRNAME

    # --- Current sheet -----------------------------------------------------

    def load_current(self) -> Any:
        return read_json(self.current_path)

    def save_current(self, state: Mapping[str, Any]) -> None:
        write_json_atomic(self.current_path, dict(state))

    # --- Slots -------------------------------------------------------------

    def _slot_path(self, slot_id: str) -> Path | None:
        if not _SLOT_ID_PATTERN.fullmatch(slot_id or ""):
            return None
        return self.slots_dir / f"{slot_id}.json"

    def _read_slot(self, path: Path) -> dict[str, Any] | None:
        payload = read_json(path)
        if not isinstance(payload, dict) or not isinstance(payload.get("state"), dict):
            return None
        return payload

    def list_slots(self) -> list[SlotInfo]:
        """All readable slots, most recently updated first."""
        if not self.slots_dir.is_dir():
            return []
        slots: list[SlotInfo] = []
        for path in self.slots_dir.glob("*.json"):
            payload = self._read_slot(path)
            if payload is None:
                continue
            slots.append(
                SlotInfo(
                    id=str(payload.get("id") or path.stem),
                    name=str(payload.get("name") or "Character"),
                    updated_at=str(payload.get("updated_at") or ""),
                )
            )
        slots.sort(key=lambda slot: slot.updated_at, reverse=True)
        return slots

    def create_slot(self, name: str, state: Mapping[str, Any]) -> str:
        slot_id = uuid.uuid4().hex[:12]
        self.save_slot(slot_id, name, state)
        return slot_id

    def save_slot(self, slot_id: str, name: str, state: Mapping[str, Any]) -> bool:
        path = self._slot_path(slot_id)
        if path is None:
            log.warning("Rejected invalid slot id %r", slot_id)
            return False
        write_json_atomic(
            path,
            {
                "id": slot_id,
                "name": name or "Character",
                "updated_at": self._clock(),
                "state": dict(state),
            },
        )
        return True

    def load_slot(self, slot_id: str) -> dict[str, Any] | None:
        path = self._slot_path(slot_id)
        if path is None:
            return None
        payload = self._read_slot(path)
        return None if payload is None else payload["state"]

    def delete_slot(self, slot_id: str) -> bool:
        path = self._slot_path(slot_id)
        if path is None or not path.exists():
            return False
        path.unlink()
        return True
