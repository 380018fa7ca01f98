"""
Query engine: filter -> sort -> paginate over an immutable Fund snapshot.

Pure function of (funds, query). Nothing outlives one ``execute`` call.
"""
from __future__ import annotations

from collections.abc import Callable, Sequence

from fund_explorer.data.schemas import (
    Fund,
    Query,
    QueryResult,
    clamp_pagination,
    total_pages,
)

Predicate = Callable[[Fund], bool]


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------

def build_predicates(query: Query) -> list[Predicate]:
    """One predicate per active filter; all of them must pass."""
    predicates: list[Predicate] = []

    if query.isin:
        # Lookup, not discovery: whole-ISIN match only
        isin = query.isin.lower()
        predicates.append(lambda f: f.isin.lower() == isin)

    if query.categories:
        prefixes = tuple(c.lower() for c in query.categories)
        predicates.append(lambda f: f.category.lower().startswith(prefixes))

    if query.currency:
        currency = query.currency.lower()
        predicates.append(lambda f: f.currency.lower() == currency)

    if query.risk_levels:
        levels = frozenset(query.risk_levels)
        predicates.append(lambda f: f.risk_level in levels)

    if query.dividend_policy:
        policy = query.dividend_policy.lower()
        predicates.append(lambda f: f.dividend_policy.lower() == policy)

    if query.replication_type:
        replication = query.replication_type.lower()
        predicates.append(lambda f: f.replication_type.lower() == replication)

    tri_states = [
        (query.focus_list, lambda f: f.focus_list == "Y"),
        (query.implicit_advisory, lambda f: f.available_for_implicit_advisory),
        (query.explicit_advisory, lambda f: f.available_for_explicit_advisory),
        (query.hedge, lambda f: f.hedge == "Y"),
    ]
    for state, flag in tri_states:
        if state.accepts(True) and state.accepts(False):
            continue
        predicates.append(lambda f, state=state, flag=flag: state.accepts(flag(f)))

    return predicates


def filter_funds(funds: Sequence[Fund], query: Query) -> list[Fund]:
    predicates = build_predicates(query)
    return [f for f in funds if all(p(f) for p in predicates)]


# ---------------------------------------------------------------------------
# Sort & paginate
# ---------------------------------------------------------------------------

def sort_funds(funds: Sequence[Fund], query: Query) -> list[Fund]:
    """Always descending; there is no ascending mode."""
    key = query.sort_by.value
    return sorted(funds, key=lambda f: getattr(f, key) or 0.0, reverse=True)


def paginate(funds: Sequence[Fund], page: int, limit: int) -> list[Fund]:
    """1-based slice; pages past the end are empty."""
    page, limit = clamp_pagination(page, limit)
    start = (page - 1) * limit
    return list(funds[start:start + limit])


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def execute(funds: Sequence[Fund], query: Query) -> QueryResult:
    """Run one query against a snapshot.

    When ``query.include_counts`` is set, filter-panel counts are computed
    over the whole snapshot, before any of the query's filters.
    """
    matched = sort_funds(filter_funds(funds, query), query)
    page, limit = clamp_pagination(query.page, query.limit)

    counts = None
    if query.include_counts:
        from fund_explorer.analytics.filter_counts import aggregate_counts
        counts = aggregate_counts(funds, query.data_source)

    return QueryResult(
        funds=paginate(matched, page, limit),
        total=len(matched),
        page=page,
        total_pages=total_pages(len(matched), limit),
        limit=limit,
        counts=counts,
    )
