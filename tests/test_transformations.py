from ki_sheet.models.records import TransformationForm, base_form
from ki_sheet.models.transformations import (
    filter_allowed_transformations,
    is_transformation_allowed,
    resolve_active_transformation,
)


def _form(form_id: str, **kwargs) -> TransformationForm:
    return TransformationForm(id=form_id, name=form_id.title(), **kwargs)


def test_required_share_excludes_missing_race():
    form = _form("oozaru", required_race_shares={"saiyan": 0.5})
    assert filter_allowed_transformations([form], {"human": 1.0}, "full") == [base_form()]
    assert not is_transformation_allowed(form, {"saiyan": 0.25, "human": 0.75}, "quarter_human")
    assert is_transformation_allowed(form, {"saiyan": 0.5, "human": 0.5}, "half_human")


def test_allowed_race_ids_use_best_share():
    form = _form("pride", allowed_race_ids=("saiyan", "arcosian"), min_race_share=0.5)
    assert is_transformation_allowed(form, {"arcosian": 0.5, "human": 0.5}, "half_human")
    assert not is_transformation_allowed(form, {"saiyan": 0.25, "human": 0.75}, "quarter_human")


def test_allowed_race_ids_default_to_full_share():
    form = _form("ascension", allowed_race_ids=("shinjin",))
    assert is_transformation_allowed(form, {"shinjin": 1.0}, "full")
    assert not is_transformation_allowed(form, {"shinjin": 0.75, "human": 0.25}, "quarter_hybrid")


def test_blocked_lineage():
    form = _form("legendary", blocked_lineages=("half_human", "quarter_human"))
    assert not is_transformation_allowed(form, {"saiyan": 0.5, "human": 0.5}, "half_human")
    assert is_transformation_allowed(form, {"saiyan": 0.5, "human": 0.5}, "half_hybrid")


def test_unconstrained_form_is_always_allowed():
    assert is_transformation_allowed(_form("kaioken"), {"human": 1.0}, "anything")


def test_filter_keeps_catalog_order():
    forms = [_form("b"), _form("x", required_race_shares={"majin": 1}), _form("a")]
    allowed = filter_allowed_transformations(forms, {"human": 1.0}, "full")
    assert [f.id for f in allowed] == ["b", "a"]


def test_filter_never_returns_empty():
    for catalog in (None, []):
        allowed = filter_allowed_transformations(catalog, {"human": 1.0}, "full")
        assert len(allowed) == 1
        assert allowed[0].name == "Base Form"
        assert allowed[0].multiplier == 1
        assert allowed[0].ki_modifier == 1
        assert allowed[0].attack_bonus == 0


def test_resolve_active_finds_match():
    forms = [_form("base"), _form("kaioken")]
    assert resolve_active_transformation(forms, "kaioken").id == "kaioken"


def test_resolve_active_falls_back_to_first_allowed():
    forms = [_form("mushin"), _form("kaioken")]
    assert resolve_active_transformation(forms, "saiyan_pride").id == "mushin"
    assert resolve_active_transformation(forms, None).id == "mushin"


def test_resolve_active_with_empty_list_is_base_form():
    assert resolve_active_transformation([], "anything") == base_form()
