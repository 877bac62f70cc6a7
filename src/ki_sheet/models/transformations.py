"""Transformation eligibility and active-form resolution.

A form is allowed when the character's lineage shares satisfy every
constraint it declares. The allowed list is never empty: with nothing
eligible it holds just the synthetic Base Form.
"""

from collections.abc import Iterable, Mapping

from ki_sheet.models.numbers import to_number
from ki_sheet.models.records import TransformationForm, base_form


def is_transformation_allowed(
    form: TransformationForm,
    shares: Mapping[str, float],
    lineage_preset: str | None,
) -> bool:
    for race_id, min_share in form.required_race_shares.items():
        if to_number(shares.get(race_id)) < to_number(min_share):
            return False

    if form.allowed_race_ids:
        min_share = to_number(form.min_race_share, 1)
        highest = max(to_number(shares.get(race_id)) for race_id in form.allowed_race_ids)
        if highest < min_share:
            return False

    if lineage_preset in form.blocked_lineages:
        return False
    return True


def filter_allowed_transformations(
    transformations: Iterable[TransformationForm] | None,
    shares: Mapping[str, float],
    lineage_preset: str | None,
) -> list[TransformationForm]:
    """Catalog forms usable by this lineage, in catalog order."""
    allowed = [
        form
        for form in transformations or ()
        if is_transformation_allowed(form, shares, lineage_preset)
    ]
    return allowed or [base_form()]


def resolve_active_transformation(
    allowed_forms: list[TransformationForm],
    active_id: str | None,
) -> TransformationForm:
    """The form matching *active_id*, else the first allowed form.

    Only reports the effective form; persisting the correction is up to
    the caller.
    """
    if not allowed_forms:
        return base_form()
    for form in allowed_forms:
        if form.id == active_id:
            return form
    return allowed_forms[0]
