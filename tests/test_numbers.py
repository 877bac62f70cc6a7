import math

import pytest

from ki_sheet.models.numbers import (
    ability_mod,
    clamp,
    format_large_number,
    format_number,
    proficiency_bonus,
    signed,
    to_number,
)


# --- Coercion ---

@pytest.mark.parametrize(
    "value, expected",
    [
        (3, 3),
        (2.5, 2.5),
        ("7", 7),
        (" 12 ", 12),
        ("1.5", 1.5),
        (True, 1),
        (None, 0),
        ("", 0),
        ("abc", 0),
        (float("nan"), 0),
        (float("inf"), 0),
        ("inf", 0),
        ([1, 2], 0),
    ],
)
def test_to_number(value, expected):
    assert to_number(value) == expected


def test_to_number_uses_caller_fallback():
    assert to_number(None, 20) == 20
    assert to_number(float("nan"), 1) == 1
    assert to_number("x", -1) == -1


def test_to_number_keeps_ints_as_ints():
    assert isinstance(to_number("14"), int)
    assert isinstance(to_number(14), int)


def test_clamp():
    assert clamp(5, 0, 10) == 5
    assert clamp(-3, 0, 10) == 0
    assert clamp(40, 0, 35) == 35


# --- Ability math ---

def test_ability_mod_examples():
    assert ability_mod(10) == 0
    assert ability_mod(12) == 1
    assert ability_mod(9) == -1
    assert ability_mod(19) == 4
    assert ability_mod(1) == -5


def test_ability_mod_coerces_garbage_to_zero_score():
    assert ability_mod("oops") == -5


def test_proficiency_bonus_examples():
    assert proficiency_bonus(1) == 2
    assert proficiency_bonus(4) == 2
    assert proficiency_bonus(5) == 3
    assert proficiency_bonus(20) == 6


def test_proficiency_bonus_floors_level_at_one():
    assert proficiency_bonus(0) == 2
    assert proficiency_bonus(-7) == 2


# --- Formatting ---

def test_format_number_drops_trailing_zero():
    assert format_number(3.0) == "3"
    assert format_number(2.5) == "2.5"
    assert format_number(7) == "7"


def test_signed():
    assert signed(3) == "+3"
    assert signed(0) == "+0"
    assert signed(-2) == "-2"


def test_format_large_number_grouping_below_ten_million():
    assert format_large_number(9_999_999) == "9,999,999"
    assert format_large_number(500) == "500"
    assert format_large_number(1000.0) == "1,000"


def test_format_large_number_scientific_from_ten_million():
    assert format_large_number(10_000_000) == "1.00e7"
    assert format_large_number(123_456_789) == "1.23e8"
    assert "+" not in format_large_number(10**12)


def test_format_large_number_negative_and_fractional():
    assert format_large_number(-20_000_000) == "-2.00e7"
    assert format_large_number(1234.5) == "1,234.5"


def test_format_large_number_non_finite_is_zero():
    assert format_large_number(math.inf) == "0"
