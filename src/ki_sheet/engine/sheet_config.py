"""Configuration knobs for the sheet runtime.

Defaults match the sheet's quick-action buttons. Environment
variables override them for a given install.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def _env_path(name: str) -> Path | None:
    raw = os.getenv(name)
    if not raw:
        return None
    return Path(raw).expanduser()


def default_storage_dir() -> Path:
    return Path.home() / ".ki_sheet"


@dataclass(slots=True)
class SheetConfig:
    """Tuneable parameters for quick actions, the roll log, and file locations."""

    heal_amount: int = 10
    damage_amount: int = 10
    ki_spend_amount: int = 1
    roll_log_limit: int = 12
    data_dir: Path | None = None        # catalog JSON files; None = built-in data
    storage_dir: Path | None = None     # current sheet + slots; None = ~/.ki_sheet

    def __post_init__(self) -> None:
        for name in ("heal_amount", "damage_amount", "ki_spend_amount"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0, got {getattr(self, name)}")
        if self.roll_log_limit < 1:
            raise ValueError(f"roll_log_limit must be >= 1, got {self.roll_log_limit}")

    @property
    def resolved_storage_dir(self) -> Path:
        return self.storage_dir or default_storage_dir()

    @classmethod
    def from_env(cls) -> SheetConfig:
        return cls(
            heal_amount=_env_int("KI_SHEET_HEAL_AMOUNT", 10),
            damage_amount=_env_int("KI_SHEET_DAMAGE_AMOUNT", 10),
            ki_spend_amount=_env_int("KI_SHEET_KI_SPEND_AMOUNT", 1),
            roll_log_limit=_env_int("KI_SHEET_ROLL_LOG_LIMIT", 12),
            data_dir=_env_path("KI_SHEET_DATA_DIR"),
            storage_dir=_env_path("KI_SHEET_HOME"),
        )
