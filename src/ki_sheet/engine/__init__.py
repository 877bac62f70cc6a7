"""Sheet runtime: dice, store, persistence, and play-time actions."""

from ki_sheet.engine.bootstrap import SheetSession, bootstrap_session
from ki_sheet.engine.dice import RollResult, roll_die, roll_expression
from ki_sheet.engine.sheet_config import SheetConfig
from ki_sheet.engine.sheet_controller import SheetController
from ki_sheet.engine.store import SheetStore

__all__ = [
    "RollResult",
    "SheetConfig",
    "SheetController",
    "SheetSession",
    "SheetStore",
    "bootstrap_session",
    "roll_die",
    "roll_expression",
]
