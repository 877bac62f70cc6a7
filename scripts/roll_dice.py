"""Roll dice expressions from the command line.

Usage:
    python -m scripts.roll_dice 3d6 1d20
    python -m scripts.roll_dice --seed 7 2d10
"""

from __future__ import annotations

import argparse
import random

from ki_sheet.engine.dice import roll_expression


def format_roll(expression: str, rng: random.Random | None = None) -> str:
    result = roll_expression(expression, rng)
    if not result.rolls:
        return f"{expression}: invalid dice expression ({result.expression})"
    rolls = ", ".join(str(r) for r in result.rolls)
    return f"{result.expression}: [{rolls}] = {result.total}"


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Roll NdM dice expressions")
    parser.add_argument("expressions", nargs="+", help="Dice such as 3d6 or 1d20")
    parser.add_argument("--seed", type=int, help="Seed for repeatable rolls")
    args = parser.parse_args(argv)

    rng = random.Random(args.seed) if args.seed is not None else None
    for expression in args.expressions:
        print(format_roll(expression, rng))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
