from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Set

from db.store import Stores
from models import ProblemRecord, ProgressRecord
from utils.search import normalize_query, text_matches

logger = logging.getLogger(__name__)

AGGREGATED_REVIEW_ID = "aggregated-review"
AGGREGATED_ALL_ID = "aggregated-all"

_TITLES = {
    AGGREGATED_REVIEW_ID: ("All wrong answers", "Wrong answers in selected files"),
    AGGREGATED_ALL_ID: ("All problems", "All problems in selected files"),
}


@dataclass
class ProblemSet:
    """A read-only, possibly cross-file, bundle of problems handed to a study session."""
    id: str
    original_filename: str
    problems: List[ProblemRecord] = field(default_factory=list)
    is_review_mode: bool = False


def _in_subset(file_set_id: Optional[str], subset: Set[str]) -> bool:
    return not subset or file_set_id in subset


def wrong_problems(stores: Stores, file_ids: Iterable[str] = ()) -> List[ProblemRecord]:
    """Problems whose last recorded outcome was wrong, within the given files (all when empty)."""
    subset = set(file_ids)
    wrong_ids: Set[str] = set()

    def collect_ids(value: ProgressRecord, key: str) -> None:
        if _in_subset(value.file_set_id, subset) and value.is_correct is False:
            wrong_ids.add(value.problem_id)

    stores.progress.iterate(collect_ids)
    if not wrong_ids:
        return []

    details: List[ProblemRecord] = []

    def collect_problems(value: ProblemRecord, key: str) -> None:
        if value.id in wrong_ids:
            details.append(value)

    stores.problems.iterate(collect_problems)
    return details


def all_problems(stores: Stores, file_ids: Iterable[str] = ()) -> List[ProblemRecord]:
    subset = set(file_ids)
    return [p for p in stores.problems.values() if _in_subset(p.file_set_id, subset)]


def search_by_keyword(stores: Stores, keyword: Optional[str]) -> Set[str]:
    """Ids of files holding at least one problem that matches ``keyword``.

    Description, answer and every choice are searched, case-insensitively
    and by Hangul initial consonants.
    """
    query = normalize_query(keyword)
    matching: Set[str] = set()
    if not query:
        return matching

    def visit(value: ProblemRecord, key: str) -> None:
        if not value.file_set_id or value.file_set_id in matching:
            return
        if text_matches([value.description, value.answer, *value.choices], query):
            matching.add(value.file_set_id)

    stores.problems.iterate(visit)
    logger.debug("Keyword %r matched %d files", query, len(matching))
    return matching


def load_aggregated_set(
    stores: Stores,
    kind: str,
    file_ids: Iterable[str] = (),
) -> Optional[ProblemSet]:
    """Build the cross-file review set; None when there is nothing to study."""
    selected = list(file_ids)
    if kind == AGGREGATED_REVIEW_ID:
        problems = wrong_problems(stores, selected)
    elif kind == AGGREGATED_ALL_ID:
        problems = all_problems(stores, selected)
    else:
        raise ValueError(f"Unknown aggregated set: {kind}")
    if not problems:
        return None
    all_title, subset_title = _TITLES[kind]
    return ProblemSet(
        id=kind,
        original_filename=subset_title if selected else all_title,
        problems=problems,
        is_review_mode=kind == AGGREGATED_REVIEW_ID,
    )
