"""
Mode Controller.

Maps the UI toggle to a retrieval mode and decides whether extracted
constraints become filters:

    standard -> hybrid, raw text, no filters (constraints are display-only)
    smart    -> hybrid_filtered, clean text, price/color filters

Standard mode intentionally ignores the constraints it could have used;
it is the baseline the smart mode is compared against.
"""

from typing import Any, Dict, Union

from core.logging import get_logger
from search.models import ExtractedConstraints, RetrievalMode, SearchPlan, SearchToggle

logger = get_logger(__name__)


def constraints_to_filters(constraints: ExtractedConstraints) -> Dict[str, Any]:
    """Filter dict from constraints, omitting fields that were not found."""
    filters: Dict[str, Any] = {}
    if constraints.price_ceiling is not None:
        filters["price"] = constraints.price_ceiling
    if constraints.color is not None:
        filters["color"] = constraints.color
    return filters


def plan(
    raw_text: str,
    constraints: ExtractedConstraints,
    toggle: Union[SearchToggle, str],
) -> SearchPlan:
    """
    Build the search plan for one request.

    Raises:
        InvalidModeError: If the toggle is neither 'standard' nor 'smart'.
    """
    toggle = SearchToggle.parse(toggle)

    if toggle is SearchToggle.SMART:
        search_plan = SearchPlan(
            search_text=constraints.clean_text,
            mode=RetrievalMode.HYBRID_FILTERED,
            filters=constraints_to_filters(constraints),
        )
    else:
        search_plan = SearchPlan(
            search_text=raw_text,
            mode=RetrievalMode.HYBRID,
            filters={},
        )

    logger.debug(
        "Planned search",
        toggle=toggle.value,
        mode=search_plan.mode.value,
        search_text=search_plan.search_text,
        filters=search_plan.filters,
    )
    return search_plan
