import pytest

from ki_sheet.models.character import CharacterMeta
from ki_sheet.models.constants import BlendPreset
from ki_sheet.models.lineage import clean_shares, lineage_preset_label, resolve_lineage_shares


def _meta(primary="saiyan", secondary="", preset="full") -> CharacterMeta:
    return CharacterMeta(
        primary_race_id=primary, secondary_race_id=secondary, lineage_preset=preset
    )


@pytest.mark.parametrize("preset", [p.value for p in BlendPreset] + ["mystery"])
def test_shares_always_sum_to_one(preset):
    shares = resolve_lineage_shares(_meta("namekian", "majin", preset))
    assert sum(shares.values()) == pytest.approx(1.0)
    assert all(share > 0 for share in shares.values())


def test_full_human():
    assert resolve_lineage_shares(_meta("human", "", "full")) == {"human": 1.0}


def test_half_hybrid_saiyan_namekian():
    shares = resolve_lineage_shares(_meta("saiyan", "namekian", "half_hybrid"))
    assert shares == {"saiyan": 0.5, "namekian": 0.5}


def test_half_human_forces_human_regardless_of_secondary():
    shares = resolve_lineage_shares(_meta("arcosian", "majin", "half_human"))
    assert shares == {"arcosian": 0.5, "human": 0.5}


def test_quarter_human():
    shares = resolve_lineage_shares(_meta("saiyan", "", "quarter_human"))
    assert shares == pytest.approx({"saiyan": 0.25, "human": 0.75})


def test_quarter_hybrid():
    shares = resolve_lineage_shares(_meta("namekian", "android", "quarter_hybrid"))
    assert shares == pytest.approx({"namekian": 0.75, "android": 0.25})


def test_unset_secondary_is_opposite_of_primary():
    assert resolve_lineage_shares(_meta("human", "", "half_hybrid")) == {
        "human": 0.5,
        "saiyan": 0.5,
    }
    assert resolve_lineage_shares(_meta("majin", "", "half_hybrid")) == {
        "majin": 0.5,
        "human": 0.5,
    }


def test_half_human_of_human_merges_into_one_entry():
    assert resolve_lineage_shares(_meta("human", "", "half_human")) == {"human": 1.0}


def test_unknown_preset_is_full():
    assert resolve_lineage_shares(_meta("majin", "saiyan", "mystery")) == {"majin": 1.0}


def test_missing_meta_and_primary_default_to_human():
    assert resolve_lineage_shares(None) == {"human": 1.0}
    assert resolve_lineage_shares(_meta("", "", "full")) == {"human": 1.0}


def test_clean_shares_drops_non_positive_and_renormalizes():
    assert clean_shares({"saiyan": 2, "human": 2, "majin": 0, "android": -1}) == {
        "saiyan": 0.5,
        "human": 0.5,
    }


def test_clean_shares_collapses_to_human_when_empty():
    assert clean_shares({}) == {"human": 1.0}
    assert clean_shares({"saiyan": 0, "majin": "nope"}) == {"human": 1.0}


def test_lineage_preset_label():
    assert lineage_preset_label("half_hybrid") == "Half Hybrid (Any Two Races)"
    assert lineage_preset_label("quarter_human") == "Quarter Human Hybrid"
    assert lineage_preset_label("unknown") == "Full Blood"
    assert lineage_preset_label(None) == "Full Blood"
