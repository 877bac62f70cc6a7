"""Dice rolling: single dice and ``NdM`` expressions.

Rolls draw from a uniform source exposing ``random() -> float in [0, 1)``.
The module-level ``random`` is used unless a caller passes its own source
(tests pass a seeded ``random.Random`` or a scripted stub).
"""

from __future__ import annotations

import math
import random
import re
from dataclasses import dataclass, field
from typing import Protocol

from ki_sheet.models.numbers import to_number


_DICE_PATTERN = re.compile(r"^(\d+)d(\d+)$", re.IGNORECASE)

EMPTY_EXPRESSION = "0d0"


class UniformSource(Protocol):
    def random(self) -> float: ...


@dataclass(frozen=True, slots=True)
class RollResult:
    """Outcome of an ``NdM`` roll."""

    total: int = 0
    rolls: list[int] = field(default_factory=list)
    expression: str = EMPTY_EXPRESSION


def roll_die(sides: object = 20, rng: UniformSource | None = None) -> int:
    """Uniform integer in [1, sides]; invalid sides mean a d20."""
    source = rng or random
    count = max(1, math.floor(to_number(sides, 20)))
    return math.floor(source.random() * count) + 1


def roll_expression(expression: object, rng: UniformSource | None = None) -> RollResult:
    """Roll ``NdM``. Anything unparseable or non-positive rolls nothing."""
    match = _DICE_PATTERN.match(str(expression).strip())
    if not match:
        return RollResult()
    num_dice = int(match.group(1))
    die = int(match.group(2))
    if num_dice <= 0 or die <= 0:
        return RollResult()
    rolls = [roll_die(die, rng) for _ in range(num_dice)]
    return RollResult(total=sum(rolls), rolls=rolls, expression=f"{num_dice}d{die}")
