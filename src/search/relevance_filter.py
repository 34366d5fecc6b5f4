"""
Relevance Filter.

Splits hybrid results at a score threshold. Low scorers are kept in
``hidden`` so the UI can offer "show N low-relevance results".

Filtering only runs for hybrid modes where every record carries a
normalized score. Lexical/vector results, or any batch containing a
distance-only record, pass through untouched.
"""

from typing import Iterable, List, Union

from search.models import RankedRecord, ResultSet, RetrievalMode

RELEVANCE_THRESHOLD = 0.7


def is_filter_active(records: List[RankedRecord], mode: RetrievalMode) -> bool:
    """True when the threshold should be applied to this batch."""
    return mode.is_hybrid and all(r.score is not None for r in records)


def apply_relevance_filter(
    records: Iterable[RankedRecord],
    mode: Union[RetrievalMode, str],
    threshold: float = RELEVANCE_THRESHOLD,
) -> ResultSet:
    """
    Partition records into visible (score >= threshold) and hidden.

    Relative order is preserved within each partition. Never raises for
    record content; an unknown mode string raises InvalidModeError.
    """
    records = list(records)
    mode = RetrievalMode.parse(mode)

    if not is_filter_active(records, mode):
        return ResultSet(visible=tuple(records), hidden=())

    visible = []
    hidden = []
    for record in records:
        if record.score >= threshold:
            visible.append(record)
        else:
            hidden.append(record)
    return ResultSet(visible=tuple(visible), hidden=tuple(hidden))
