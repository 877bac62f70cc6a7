"""Tests for the character state schema, default merge, and JSON round-trip."""

import json

import pytest

from ki_sheet.models.character import (
    CharacterState,
    deep_merge,
    default_state_dict,
    normalize_state,
    state_from_json,
    state_to_json,
)


def test_defaults():
    state = CharacterState()
    assert state.meta.name == "New Fighter"
    assert state.meta.level == 1
    assert state.meta.primary_race_id == "saiyan"
    assert state.meta.lineage_preset == "full"
    assert state.abilities == {
        "str": 14, "dex": 14, "con": 14, "int": 10, "wis": 10, "cha": 10, "spi": 14,
    }
    assert state.resources.max_hp == 32
    assert state.resources.current_ki == 12
    assert state.progression.base_power_level == 500
    assert state.combat.attack_stat == "str"
    assert state.combat.base_speed == 30
    assert state.active_transformation_id == "base"


def test_default_instances_do_not_share_abilities():
    a = CharacterState()
    b = CharacterState()
    a.abilities["str"] = 20
    assert b.abilities["str"] == 14


# --- deep_merge ---

def test_deep_merge_override_wins_for_scalars():
    assert deep_merge({"a": 1, "b": 2}, {"a": 5}) == {"a": 5, "b": 2}


def test_deep_merge_drops_unknown_keys_and_keeps_base_shape():
    base = {"meta": {"name": "x", "level": 1}}
    merged = deep_merge(base, {"meta": {"level": 3, "extra": True}, "junk": 1})
    assert merged == {"meta": {"name": "x", "level": 3}}


def test_deep_merge_none_keeps_default():
    assert deep_merge({"a": 1}, {"a": None}) == {"a": 1}


def test_deep_merge_non_dict_override_of_dict_keeps_base():
    assert deep_merge({"meta": {"name": "x"}}, {"meta": "broken"}) == {"meta": {"name": "x"}}


def test_deep_merge_lists_are_atomic():
    assert deep_merge({"tags": [1, 2]}, {"tags": [3]}) == {"tags": [3]}
    assert deep_merge({"tags": [1, 2]}, {"tags": "x"}) == {"tags": [1, 2]}


def test_deep_merge_does_not_alias_inputs():
    base = {"tags": [1]}
    merged = deep_merge(base, {})
    merged["tags"].append(2)
    assert base == {"tags": [1]}


# --- normalize ---

def test_normalize_partial_state_fills_defaults():
    state = normalize_state({"meta": {"name": "Kale", "level": "4"}, "abilities": {"spi": 18}})
    assert state.meta.name == "Kale"
    assert state.meta.level == 4
    assert state.meta.primary_race_id == "saiyan"
    assert state.abilities["spi"] == 18
    assert state.abilities["str"] == 14
    assert state.resources.max_hp == 32


@pytest.mark.parametrize("raw", [None, [], "text", 42])
def test_normalize_non_mapping_is_defaults(raw):
    assert normalize_state(raw) == CharacterState()


def test_normalize_coerces_bad_numbers_to_defaults():
    state = normalize_state({"resources": {"max_hp": "lots", "current_hp": None}})
    assert state.resources.max_hp == 32
    assert state.resources.current_hp == 32


def test_normalize_accepts_state_instance():
    state = CharacterState()
    state.meta.name = "Copy"
    assert normalize_state(state).meta.name == "Copy"


def test_to_dict_matches_default_schema_keys():
    assert set(default_state_dict()) == {
        "meta",
        "abilities",
        "progression",
        "resources",
        "combat",
        "active_transformation_id",
        "skills_notes",
        "inventory",
        "notes",
    }


# --- JSON ---

def test_json_round_trip_is_lossless():
    state = CharacterState()
    state.meta.name = "Gohan"
    state.meta.lineage_preset = "half_human"
    state.abilities["spi"] = 17
    state.resources.current_hp = 5
    state.active_transformation_id = "mushin"
    state.notes = "Loves books."

    restored = state_from_json(state_to_json(state))
    assert restored == state


def test_state_from_json_raises_on_malformed_text():
    with pytest.raises(json.JSONDecodeError):
        state_from_json("{oops")
