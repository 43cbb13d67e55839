"""Column mapping between decoded sheet rows and problem/progress records.

Rows arrive already decoded (lists of cell values); reading xlsx/csv/tsv
bytes happens elsewhere.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from db.store import Stores
from models import ColumnMapping, FileRecord, ImportedProblem, ProblemRecord, ProgressRecord
from models.settings import UNMAPPED
from utils.integrity import create_problem_set
from utils.progress import parse_count
from utils.settings import get_settings

logger = logging.getLogger(__name__)

Row = Sequence[Any]

COMPLETED_TRUE_VALUES = {"O", "TRUE", "1"}
EXPORT_CHOICE_COLUMNS = 5
FIELD_LABELS = {
    "description": "Description",
    "answer": "Answer",
    "hint": "Hint",
    "explanation": "Explanation",
    "is_completed": "Completed",
    "wrong_count": "Wrong count",
}


def _cell(row: Row, idx: int) -> str:
    if idx == UNMAPPED or idx < 0 or idx >= len(row) or row[idx] is None:
        return ""
    return str(row[idx]).strip()


def row_to_problem(row: Row, mapping: ColumnMapping, index: int) -> ImportedProblem:
    """Build a problem from one row; every non-empty unmapped cell becomes a choice."""
    mapped_indices = set(mapping.mapped().values())
    choices = [
        str(value).strip()
        for idx, value in enumerate(row)
        if idx not in mapped_indices and value is not None and str(value).strip()
    ]
    return ImportedProblem(
        sequence_number=index + 1,
        description=_cell(row, mapping.description),
        answer=_cell(row, mapping.answer),
        hint=_cell(row, mapping.hint) or None,
        explanation=_cell(row, mapping.explanation) or None,
        is_completed=_cell(row, mapping.is_completed).upper() in COMPLETED_TRUE_VALUES,
        wrong_count=parse_count(_cell(row, mapping.wrong_count)),
        choices=choices,
    )


def rows_to_problems(rows: Sequence[Row], mapping: ColumnMapping, has_header: bool = True) -> List[ImportedProblem]:
    """Map data rows to problems, skipping the header and rows lacking a description or answer."""
    data_rows = list(rows[1:] if has_header else rows)
    usable = [
        row for row in data_rows
        if _cell(row, mapping.description) and _cell(row, mapping.answer)
    ]
    return [row_to_problem(row, mapping, index) for index, row in enumerate(usable)]


def import_rows(
    stores: Stores,
    filename: str,
    file_type: str,
    rows: Sequence[Row],
    mapping: Optional[ColumnMapping] = None,
    has_header: Optional[bool] = None,
) -> FileRecord:
    """Create a file from decoded rows, using the stored parser settings by default."""
    settings = get_settings(stores)
    mapping = mapping or settings.parser_mapping
    if has_header is None:
        has_header = settings.has_header_row
    problems = rows_to_problems(rows, mapping, has_header)
    if not problems:
        raise ValueError("No problems found; check the column mapping and header setting")
    return create_problem_set(stores, filename, file_type, problems)


def _row_width(mapping: ColumnMapping) -> int:
    return max(mapping.mapped().values(), default=-1) + 1


def export_headers(mapping: ColumnMapping) -> List[str]:
    width = _row_width(mapping)
    headers = [""] * (width + EXPORT_CHOICE_COLUMNS)
    for field, idx in mapping.mapped().items():
        headers[idx] = FIELD_LABELS[field]
    for i in range(EXPORT_CHOICE_COLUMNS):
        headers[width + i] = f"Choice {i + 1}"
    return headers


def export_row(problem: ProblemRecord, mapping: ColumnMapping, progress: Optional[ProgressRecord] = None) -> List[Any]:
    width = _row_width(mapping)
    row: List[Any] = [""] * (width + len(problem.choices))
    values = {
        "description": problem.description,
        "answer": problem.answer,
        "hint": problem.hint or "",
        "explanation": problem.explanation or "",
        "is_completed": "O" if progress and progress.is_completed else "X",
        "wrong_count": progress.wrong_count if progress else 0,
    }
    for field, idx in mapping.mapped().items():
        row[idx] = values[field]
    for i, choice in enumerate(problem.choices):
        row[width + i] = choice
    return row


def export_rows(
    problems: Sequence[ProblemRecord],
    mapping: ColumnMapping,
    progress_map: Optional[Mapping[str, ProgressRecord]] = None,
) -> List[List[Any]]:
    """Header row followed by one row per problem."""
    progress_map = progress_map or {}
    return [export_headers(mapping)] + [
        export_row(problem, mapping, progress_map.get(problem.id)) for problem in problems
    ]


def export_json(file: FileRecord, problems: Sequence[ProblemRecord]) -> Dict[str, Any]:
    """Full-fidelity document; problem ids and file links are dropped so it can be re-imported."""
    return {
        "metadata": file.model_dump(by_alias=True),
        "problems": [
            p.model_dump(by_alias=True, exclude={"id", "file_set_id"}) for p in problems
        ],
    }


def export_filename(file: FileRecord, fmt: str) -> str:
    base = file.original_filename.split(".")[0]
    return f"{base}_export.{fmt}"
