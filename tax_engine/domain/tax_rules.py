from datetime import date, datetime
from typing import AbstractSet, Iterable, List, Optional

from tax_engine.domain.models import TaxRule


def _calendar_date(reference_date) -> date:
    if isinstance(reference_date, datetime):
        return reference_date.date()
    return reference_date


def active_as_of(rules: Iterable[TaxRule], reference_date: date) -> List[TaxRule]:
    """
    Returns the rules in effect on ``reference_date``.

    A rule is active when effective_from <= date and effective_to is either
    open (None) or >= date. Only the calendar date is compared.
    """
    day = _calendar_date(reference_date)
    return [rule for rule in rules if rule.is_active(day)]


def selected(rules: Iterable[TaxRule], selected_ids: AbstractSet[str]) -> List[TaxRule]:
    """Returns the rules whose id was selected, in the order of ``rules``."""
    wanted = set(selected_ids)
    return [rule for rule in rules if rule.id in wanted]


def applicable_rules(
    rules: Iterable[TaxRule],
    selected_ids: AbstractSet[str],
    reference_date: Optional[date] = None,
) -> List[TaxRule]:
    """
    Selected rules that are active on ``reference_date``.

    Without a reference date the caller has already narrowed ``rules`` to
    the active ones and only the selection is applied.
    """
    if reference_date is not None:
        rules = active_as_of(rules, reference_date)
    return selected(rules, selected_ids)
