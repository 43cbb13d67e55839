from __future__ import annotations

import logging
import re
from typing import Dict, Iterable, List, Mapping, Optional, Union

from db.store import Stores
from models import Outcome, ProgressRecord
from models.base import utc_now_iso

logger = logging.getLogger(__name__)

OutcomeInput = Union[bool, Outcome, Mapping]

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def parse_count(value) -> int:
    """Leading integer of a cell value ("2.0" -> 2, "3회" -> 3); 0 when there is none."""
    if value is None or isinstance(value, bool):
        return 0
    match = _LEADING_INT.match(str(value))
    return int(match.group(1)) if match else 0


def coerce_outcome(outcome: OutcomeInput) -> Outcome:
    """Accept the bare-boolean form or an outcome object/mapping.

    ``is_completed`` defaults to True in both forms.
    """
    if isinstance(outcome, bool):
        return Outcome(is_correct=outcome, is_completed=True)
    if isinstance(outcome, Outcome):
        return outcome
    return Outcome.model_validate(dict(outcome))


def next_wrong_count(existing: Optional[ProgressRecord], is_correct: Optional[bool]) -> int:
    """Sticky 0/1 flag: set on the first recorded miss, never raised or cleared afterwards.

    Only an explicit progress reset brings it back to zero.
    """
    previous = existing.wrong_count if existing else 0
    if is_correct is False and not previous:
        return 1
    return previous


def save_result(
    stores: Stores,
    file_set_id: str,
    problem_id: str,
    outcome: OutcomeInput,
) -> ProgressRecord:
    existing: Optional[ProgressRecord] = stores.progress.get(problem_id)
    result = coerce_outcome(outcome)
    record = ProgressRecord(
        problem_id=problem_id,
        file_set_id=file_set_id,
        is_completed=result.is_completed,
        is_correct=result.is_correct,
        wrong_count=next_wrong_count(existing, result.is_correct),
        last_attempted_at=utc_now_iso(),
    )
    if existing:
        record.id = existing.id
    stores.progress.set(problem_id, record)
    logger.debug(
        "Recorded result for problem %s: correct=%s wrong_count=%s",
        problem_id, record.is_correct, record.wrong_count,
    )
    return record


def toggle_complete(
    stores: Stores,
    file_set_id: str,
    problem_id: str,
    is_completed: bool,
) -> ProgressRecord:
    existing: Optional[ProgressRecord] = stores.progress.get(problem_id)
    record = ProgressRecord(
        problem_id=problem_id,
        file_set_id=file_set_id,
        is_completed=is_completed,
        is_correct=existing.is_correct if existing else None,
        wrong_count=existing.wrong_count if existing else 0,
        last_attempted_at=existing.last_attempted_at if existing else None,
        completed_at=utc_now_iso() if is_completed else None,
    )
    if existing:
        record.id = existing.id
    stores.progress.set(problem_id, record)
    return record


def reset_file_progress(stores: Stores, file_set_id: str) -> List[str]:
    """Delete every progress record of a file; returns the removed keys."""
    keys_to_delete: List[str] = []

    def collect(value: ProgressRecord, key: str) -> None:
        if value.file_set_id == file_set_id:
            keys_to_delete.append(key)

    stores.progress.iterate(collect)
    for key in keys_to_delete:
        stores.progress.remove(key)
    logger.info("Reset progress for file %s (%d records)", file_set_id, len(keys_to_delete))
    return keys_to_delete


def reset_problem_progress(stores: Stores, problem_id: str) -> List[str]:
    keys_to_delete: List[str] = []

    def collect(value: ProgressRecord, key: str) -> None:
        if value.problem_id == problem_id:
            keys_to_delete.append(key)

    stores.progress.iterate(collect)
    for key in keys_to_delete:
        stores.progress.remove(key)
    return keys_to_delete


def bulk_save_progress(stores: Stores, items: Iterable[Mapping]) -> List[ProgressRecord]:
    """Seed progress from imported data (e.g. completion/wrong-count columns of a sheet).

    Each item carries ``file_set_id``, ``problem_id``, ``is_completed`` and
    ``wrong_count``. The last outcome is unknown, so ``is_correct`` stays None.
    """
    saved: List[ProgressRecord] = []
    for item in items:
        completed = bool(item.get("is_completed"))
        wrong_count = parse_count(item.get("wrong_count"))
        stamp = utc_now_iso() if completed else None
        record = ProgressRecord(
            problem_id=item["problem_id"],
            file_set_id=item.get("file_set_id"),
            is_completed=completed,
            is_correct=None,
            wrong_count=wrong_count,
            last_attempted_at=stamp,
            completed_at=stamp,
        )
        stores.progress.set(record.problem_id, record)
        saved.append(record)
    if saved:
        logger.info("Imported progress for %d problems", len(saved))
    return saved


def load_progress_map(stores: Stores, file_set_id: Optional[str] = None) -> Dict[str, ProgressRecord]:
    """Map problem id -> progress, for one file or for every file when no id is given."""
    progress_map: Dict[str, ProgressRecord] = {}

    def collect(value: ProgressRecord, key: str) -> None:
        if file_set_id is None or value.file_set_id == file_set_id:
            progress_map[value.problem_id] = value

    stores.progress.iterate(collect)
    return progress_map


def completion_summary(progress_map: Mapping[str, ProgressRecord], file_set_id: str, total: int) -> dict:
    completed = sum(
        1 for p in progress_map.values() if p.file_set_id == file_set_id and p.is_completed
    )
    percent = int(completed / total * 100 + 0.5) if total > 0 else 0
    return {"count": completed, "percent": percent}


def count_wrong(progress_map: Mapping[str, ProgressRecord], file_set_ids: Iterable[str] = ()) -> int:
    """Progress records whose last outcome was wrong, within the given files (all when empty)."""
    targets = set(file_set_ids)
    return sum(
        1
        for p in progress_map.values()
        if (not targets or p.file_set_id in targets) and p.is_correct is False
    )
