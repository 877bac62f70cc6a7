import pytest

from ki_sheet.models.bonuses import BonusPool, add_bonuses
from ki_sheet.models.catalogs import Catalogs
from ki_sheet.models.race_composite import NO_ANCESTRY_SUMMARY, resolve_race_composite
from ki_sheet.models.records import ClassDefinition, RaceDefinition


@pytest.fixture
def races():
    return [
        RaceDefinition(
            id="saiyan",
            name="Saiyan",
            stat_bonuses={"str": 4, "con": 2},
            flat_bonuses={"hp": 4, "attack": 1},
            features=("Zenkai",),
        ),
        RaceDefinition(
            id="human",
            name="Earthling",
            stat_bonuses={"int": 2},
            flat_bonuses={"hp": 6},
            features=("Adaptable", "Driven"),
        ),
        RaceDefinition(id="namekian", name="Namekian", stat_bonuses={"wis": 4}),
    ]


# --- Bonus aggregation ---

def test_add_bonuses_weights_and_accumulates():
    pool = BonusPool()
    source = ClassDefinition(id="x", name="X", stat_bonuses={"str": 2}, flat_bonuses={"hp": 4})
    add_bonuses(pool, source, 0.5)
    add_bonuses(pool, source, 1)
    assert pool.stat_bonuses["str"] == pytest.approx(3)
    assert pool.flat_bonuses["hp"] == pytest.approx(6)
    assert pool.stat_bonuses["dex"] == 0


def test_add_bonuses_coerces_bad_values_and_leaves_source_alone():
    source = ClassDefinition(
        id="x", name="X", stat_bonuses={"str": "bad", "dex": None}, flat_bonuses={"speed": "5"}
    )
    pool = add_bonuses(BonusPool(), source)
    assert pool.stat_bonuses["str"] == 0
    assert pool.stat_bonuses["dex"] == 0
    assert pool.flat_bonuses["speed"] == 5
    assert source.stat_bonuses == {"str": "bad", "dex": None}


def test_add_bonuses_accepts_missing_source():
    pool = add_bonuses(BonusPool(), None)
    assert set(pool.stat_bonuses.values()) == {0}


# --- Composite ---

def test_full_blood_composite(races):
    composite = resolve_race_composite(races, {"saiyan": 1.0}, "full")
    assert composite.stat_bonuses["str"] == 4
    assert composite.flat_bonuses["hp"] == 4
    assert composite.summary == "Saiyan 100%"
    assert composite.features == ("Saiyan 100%: Zenkai",)
    assert composite.dominant_race.id == "saiyan"
    assert composite.lineage_label == "Full Blood"


def test_weighted_composite(races):
    composite = resolve_race_composite(races, {"saiyan": 0.25, "human": 0.75}, "quarter_human")
    assert composite.stat_bonuses["str"] == pytest.approx(1.0)
    assert composite.stat_bonuses["int"] == pytest.approx(1.5)
    assert composite.flat_bonuses["hp"] == pytest.approx(5.5)
    assert composite.breakdown == ("Saiyan 25%", "Earthling 75%")
    assert composite.summary == "Saiyan 25% + Earthling 75%"
    assert composite.features == (
        "Saiyan 25%: Zenkai",
        "Earthling 75%: Adaptable",
        "Earthling 75%: Driven",
    )
    assert composite.dominant_race.id == "human"
    assert composite.lineage_label == "Quarter Human Hybrid"


def test_dominant_tie_goes_to_first_in_catalog(races):
    composite = resolve_race_composite(races, {"namekian": 0.5, "saiyan": 0.5}, "half_hybrid")
    assert composite.dominant_race.id == "saiyan"


def test_unknown_races_contribute_nothing(races):
    composite = resolve_race_composite(races, {"tuffle": 1.0}, "full")
    assert composite.summary == NO_ANCESTRY_SUMMARY
    assert composite.breakdown == ()
    assert composite.dominant_race is None
    assert set(composite.stat_bonuses.values()) == {0}


def test_empty_catalog():
    composite = resolve_race_composite([], {"human": 1.0}, "weird")
    assert composite.summary == "No ancestry selected"
    assert composite.lineage_label == "Full Blood"


def test_percent_label_rounds_half_up(races):
    composite = resolve_race_composite(races, {"saiyan": 0.125, "human": 0.875}, "full")
    assert composite.breakdown == ("Saiyan 13%", "Earthling 88%")


def test_builtin_catalog_tie_picks_earlier_catalog_race():
    composite = resolve_race_composite(
        Catalogs.fallback().races, {"saiyan": 0.5, "namekian": 0.5}, "half_hybrid"
    )
    # namekian is listed before saiyan in the built-in races
    assert composite.dominant_race.id == "namekian"
