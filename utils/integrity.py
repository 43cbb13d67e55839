"""Referential integrity between the files, problems and progress stores.

The stores enforce nothing, so every mutation that can orphan a record goes
through this module. Cascades are full-store scans followed by independent
removals: re-running one after an interruption finishes the job, since
removing an absent key is a no-op.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence, Set

from db.store import Stores
from models import FileRecord, ImportedProblem, ProblemRecord, ProgressRecord
from models.base import utc_now_iso
from utils.progress import bulk_save_progress

logger = logging.getLogger(__name__)


def save_file(stores: Stores, file: FileRecord) -> FileRecord:
    stores.files.set(file.id, file)
    return file


def get_file(stores: Stores, file_id: str) -> Optional[FileRecord]:
    return stores.files.get(file_id)


def active_files(stores: Stores) -> List[FileRecord]:
    """Files not in the trash, newest first."""
    files = [f for f in stores.files.values() if not f.is_trashed]
    return sorted(files, key=lambda f: f.created_at, reverse=True)


def trash_files(stores: Stores) -> List[FileRecord]:
    """Trashed files, most recently trashed first."""
    files = [f for f in stores.files.values() if f.is_trashed]
    return sorted(files, key=lambda f: f.deleted_at, reverse=True)


def move_to_trash(stores: Stores, file_id: str) -> Optional[FileRecord]:
    file = stores.files.get(file_id)
    if file:
        file.deleted_at = utc_now_iso()
        stores.files.set(file_id, file)
        logger.info("Moved file %s to trash", file_id)
    return file


def restore_file(stores: Stores, file_id: str) -> Optional[FileRecord]:
    file = stores.files.get(file_id)
    if file:
        file.deleted_at = None
        stores.files.set(file_id, file)
        logger.info("Restored file %s from trash", file_id)
    return file


def _remove_problem_progress(stores: Stores, problem_id: str) -> int:
    keys: List[str] = []

    def collect(value: ProgressRecord, key: str) -> None:
        if value.problem_id == problem_id:
            keys.append(key)

    stores.progress.iterate(collect)
    for key in keys:
        stores.progress.remove(key)
    return len(keys)


def _remove_problem(stores: Stores, problem_id: str) -> None:
    stores.problems.remove(problem_id)
    _remove_problem_progress(stores, problem_id)


def permanent_delete(stores: Stores, file_id: str) -> List[str]:
    """Erase a file, its problems and their progress. Returns the removed problem ids."""
    stores.files.remove(file_id)

    problem_ids: List[str] = []

    def collect(value: ProblemRecord, key: str) -> None:
        if value.file_set_id == file_id:
            problem_ids.append(key)

    stores.problems.iterate(collect)
    for problem_id in problem_ids:
        _remove_problem(stores, problem_id)
    logger.info("Permanently deleted file %s (%d problems)", file_id, len(problem_ids))
    return problem_ids


def save_problems(stores: Stores, file_id: str, problems: Sequence[ProblemRecord]) -> List[str]:
    """Reconcile the stored problems of a file with ``problems``.

    Stored problems missing from the new list are removed along with their
    progress; every given problem is then upserted. Returns the removed ids.
    """
    existing_ids: List[str] = []

    def collect(value: ProblemRecord, key: str) -> None:
        if value.file_set_id == file_id:
            existing_ids.append(value.id)

    stores.problems.iterate(collect)

    new_ids: Set[str] = {p.id for p in problems}
    ids_to_delete = [pid for pid in existing_ids if pid not in new_ids]
    for problem_id in ids_to_delete:
        _remove_problem(stores, problem_id)

    for problem in problems:
        stores.problems.set(problem.id, problem)
    logger.debug(
        "Synced file %s: %d saved, %d removed", file_id, len(problems), len(ids_to_delete)
    )
    return ids_to_delete


def problems_by_file_id(stores: Stores, file_id: str) -> List[ProblemRecord]:
    problems = [p for p in stores.problems.values() if p.file_set_id == file_id]
    return sorted(problems, key=lambda p: p.sequence_number)


def move_many_to_trash(stores: Stores, file_ids: Iterable[str]) -> int:
    count = 0
    for file_id in file_ids:
        move_to_trash(stores, file_id)
        count += 1
    return count


def restore_many(stores: Stores, file_ids: Iterable[str]) -> int:
    count = 0
    for file_id in file_ids:
        restore_file(stores, file_id)
        count += 1
    return count


def permanent_delete_many(stores: Stores, file_ids: Iterable[str]) -> int:
    count = 0
    for file_id in file_ids:
        permanent_delete(stores, file_id)
        count += 1
    return count


def create_problem_set(
    stores: Stores,
    filename: str,
    file_type: str,
    problems: Sequence[ProblemRecord],
) -> FileRecord:
    """Store a freshly imported or authored problem set under a new file.

    Imported problems that arrive already completed or with a wrong count
    have that progress restored.
    """
    now = utc_now_iso()
    file = FileRecord(
        original_filename=filename,
        file_type=file_type,
        total_problems=len(problems),
        created_at=now,
        updated_at=now,
    )
    save_file(stores, file)

    records: List[ProblemRecord] = []
    progress_items = []
    for problem in problems:
        if isinstance(problem, ImportedProblem):
            record = problem.to_record(file.id)
            if problem.is_completed or problem.wrong_count > 0:
                progress_items.append({
                    "file_set_id": file.id,
                    "problem_id": record.id,
                    "is_completed": problem.is_completed,
                    "wrong_count": problem.wrong_count,
                })
        else:
            record = problem.model_copy(update={"file_set_id": file.id})
        if record.created_at is None:
            record.created_at = now
        records.append(record)

    save_problems(stores, file.id, records)
    if progress_items:
        bulk_save_progress(stores, progress_items)
    logger.info("Created file %s (%s) with %d problems", file.id, filename, len(records))
    return file


def update_problem_set(
    stores: Stores,
    file_id: str,
    filename: str,
    problems: Sequence[ProblemRecord],
) -> FileRecord:
    """Editor save: renumber, drop blank choices, and sync the problem list of a file."""
    existing = stores.files.get(file_id)
    now = utc_now_iso()
    file = FileRecord(
        id=file_id,
        original_filename=filename,
        file_type=existing.file_type if existing else "custom",
        total_problems=len(problems),
        created_at=existing.created_at if existing else now,
        updated_at=now,
        deleted_at=None,
    )
    save_file(stores, file)

    records = [
        problem.model_copy(
            update={
                "file_set_id": file_id,
                "sequence_number": index + 1,
                "choices": [c for c in problem.choices if c.strip()],
            }
        )
        for index, problem in enumerate(problems)
    ]
    save_problems(stores, file_id, records)
    return file
