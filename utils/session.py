"""Study session: stable ordering and stable multiple-choice sets.

A session is built once from a problem list. Page navigation, re-renders and
repeated ``start_session`` calls with the same (file, order mode, filters)
leave it untouched; only ``restart_session`` or a different triple reshuffles.
"""

from __future__ import annotations

import logging
import time
import uuid
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, TypeVar, Union

from models import DistractorEntry, ProblemRecord, ProgressRecord
from models.settings import OrderMode

logger = logging.getLogger(__name__)

T = TypeVar("T")

MAX_DISTRACTORS = 3

FILTER_WRONG = "wrong"
FILTER_CORRECT = "correct"
FILTER_INCOMPLETE = "incomplete"
FILTER_COMPLETE = "complete"

PoolInput = Union[DistractorEntry, Mapping[str, Any]]


def charcode_sum(text: Optional[str], start: int = 0) -> int:
    """``start`` plus the sum of the UTF-16 code units of ``text``."""
    data = str(text or "").encode("utf-16-le")
    return start + sum(int.from_bytes(data[i:i + 2], "little") for i in range(0, len(data), 2))


def deterministic_shuffle(items: Sequence[T], seed: int) -> List[T]:
    """Permute a copy of ``items`` reproducibly from ``seed``.

    For i from len-1 down to 1, swap i with j = |seed + i| mod (i + 1).
    The same seed always gives the same order. ``j`` comes from the seed, not
    fresh entropy, so the permutations are not uniformly distributed; that
    bias is part of the contract and changing the recurrence changes every
    stored session order.
    """
    result = list(items)
    for i in range(len(result) - 1, 0, -1):
        j = abs(seed + i) % (i + 1)
        result[i], result[j] = result[j], result[i]
    return result


def session_seed(file_id: Optional[str], force_new_seed: bool = False) -> int:
    start = int(time.time() * 1000) if force_new_seed else 0
    return charcode_sum(file_id, start)


def _utf16_key(value: str) -> bytes:
    # Big-endian UTF-16 bytes compare in code-unit order.
    return value.encode("utf-16-be")


def _normalize(value: str) -> str:
    return value.strip().lower()


def _unique_sorted(values: Iterable[str]) -> List[str]:
    """Strip, sort, and drop blanks and case-insensitive duplicates (first in sort order wins)."""
    seen = set()
    unique: List[str] = []
    for value in sorted((v.strip() for v in values), key=_utf16_key):
        key = value.lower()
        if not value or key in seen:
            continue
        seen.add(key)
        unique.append(value)
    return unique


def _coerce_pool(pool: Iterable[PoolInput]) -> List[DistractorEntry]:
    return [
        entry if isinstance(entry, DistractorEntry) else DistractorEntry.model_validate(dict(entry))
        for entry in pool
    ]


def build_choices(problem: ProblemRecord, pool: Sequence[DistractorEntry], problem_seed: int) -> List[str]:
    """Options shown for one problem, in their fixed session order.

    Authored choices are used as-is, plus the answer if it isn't among them.
    Without authored choices, up to three other answers from the pool with
    the same category flag are drawn as distractors.
    """
    if problem.choices:
        final = list(problem.choices)
        answer_ref = _normalize(problem.answer)
        if not any(_normalize(c) == answer_ref for c in final):
            final.append(problem.answer)
    elif pool:
        answer_ref = _normalize(problem.answer)
        is_calculation = problem.is_calculation
        same_category = [e.answer for e in pool if bool(e.category_flag) == is_calculation]
        others = [a for a in _unique_sorted(same_category) if a.lower() != answer_ref]
        fakes = deterministic_shuffle(others, problem_seed)[:MAX_DISTRACTORS]
        final = [problem.answer, *fakes]
    else:
        final = []
    return deterministic_shuffle(_unique_sorted(final), problem_seed)


def prepare_problems_and_choices(
    file_id: Optional[str],
    problems: Sequence[ProblemRecord],
    order_mode: Union[OrderMode, str],
    distractor_pool: Iterable[PoolInput] = (),
    force_new_seed: bool = False,
) -> Tuple[List[ProblemRecord], Dict[str, List[str]]]:
    seed = session_seed(file_id, force_new_seed)
    ordered = list(problems)
    if order_mode == OrderMode.RANDOM:
        ordered = deterministic_shuffle(ordered, seed)

    pool = _coerce_pool(distractor_pool)
    problem_choices: Dict[str, List[str]] = {}
    for problem in ordered:
        problem_seed = charcode_sum(problem.id, seed)
        problem_choices[problem.id] = build_choices(problem, pool, problem_seed)
    return ordered, problem_choices


class StudySession:
    """In-memory state of one study session.

    Only the owner of the instance mutates it; nothing here is persisted.
    """

    def __init__(self):
        self.clear_session()

    def clear_session(self) -> None:
        self.file_id: Optional[str] = None
        self.problems: List[ProblemRecord] = []
        self.current_index = 0
        self.session_answers: Dict[str, Dict[str, Any]] = {}
        self.problem_choices: Dict[str, List[str]] = {}
        self.order_mode: Optional[str] = None
        self.active_filters: List[str] = []
        self.session_id: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.session_id is not None

    def _same_session(self, file_id, order_mode, filters) -> bool:
        return (
            self.is_active
            and self.file_id == file_id
            and self.order_mode == _order_value(order_mode)
            and self.active_filters == list(filters)
        )

    def _rebuild(self, file_id, problems, order_mode, filters, distractor_pool, force_new_seed) -> None:
        ordered, choices = prepare_problems_and_choices(
            file_id, problems, order_mode, distractor_pool, force_new_seed
        )
        self.file_id = file_id
        self.problems = ordered
        self.current_index = 0
        self.session_answers = {}
        self.problem_choices = choices
        self.order_mode = _order_value(order_mode)
        self.active_filters = list(filters)
        self.session_id = uuid.uuid4().hex
        logger.debug(
            "Built session %s for %s: %d problems, order=%s, reshuffled=%s",
            self.session_id, file_id, len(ordered), self.order_mode, force_new_seed,
        )

    def start_session(
        self,
        file_id: Optional[str],
        problems: Sequence[ProblemRecord],
        order_mode: Union[OrderMode, str],
        filters: Iterable[str] = (),
        distractor_pool: Iterable[PoolInput] = (),
    ) -> bool:
        """Build the session unless the same (file, order, filters) session is already active.

        Returns True when a new session was built.
        """
        filters = list(filters)
        if self._same_session(file_id, order_mode, filters):
            return False
        self._rebuild(file_id, problems, order_mode, filters, distractor_pool, False)
        return True

    def restart_session(
        self,
        file_id: Optional[str],
        problems: Sequence[ProblemRecord],
        order_mode: Union[OrderMode, str],
        filters: Iterable[str] = (),
        distractor_pool: Iterable[PoolInput] = (),
    ) -> None:
        """Rebuild unconditionally with a time-mixed seed ("shuffle again")."""
        self._rebuild(file_id, problems, order_mode, list(filters), distractor_pool, True)

    def set_current_index(self, index: int) -> bool:
        if 0 <= index < len(self.problems):
            self.current_index = index
            return True
        return False

    def advance(self) -> bool:
        """Move to the next problem; False when already on the last one."""
        return self.set_current_index(self.current_index + 1)

    def set_session_answer(self, problem_id: str, answer_data: Optional[Mapping[str, Any]] = None, **fields) -> Dict[str, Any]:
        """Merge fields into the recorded answer of one problem, keeping earlier fields."""
        merged = {**self.session_answers.get(problem_id, {}), **(answer_data or {}), **fields}
        self.session_answers[problem_id] = merged
        return merged

    @property
    def total(self) -> int:
        return len(self.problems)

    @property
    def is_last(self) -> bool:
        return self.current_index >= len(self.problems) - 1

    @property
    def current_problem(self) -> Optional[ProblemRecord]:
        if 0 <= self.current_index < len(self.problems):
            return self.problems[self.current_index]
        return None

    @property
    def current_choices(self) -> List[str]:
        problem = self.current_problem
        if problem is None:
            return []
        return self.problem_choices.get(problem.id, [])

    def results(self) -> List[Dict[str, Any]]:
        """Graded answers in session order."""
        graded = []
        for problem in self.problems:
            answer = self.session_answers.get(problem.id)
            if answer and "is_correct" in answer:
                graded.append({"problem_id": problem.id, "is_correct": answer["is_correct"]})
        return graded


def _order_value(order_mode: Union[OrderMode, str, None]) -> Optional[str]:
    return getattr(order_mode, "value", order_mode)


def filter_problems(
    problems: Sequence[ProblemRecord],
    progress_map: Mapping[str, ProgressRecord],
    filters: Iterable[str],
) -> List[ProblemRecord]:
    """Keep problems matching any of the active progress filters; no filters keeps all."""
    active = list(filters)
    if not active:
        return list(problems)

    def matches(problem: ProblemRecord) -> bool:
        progress = progress_map.get(problem.id)
        for name in active:
            if name == FILTER_WRONG and progress is not None and progress.wrong_count > 0:
                return True
            if name == FILTER_CORRECT and progress is not None and progress.is_correct is True:
                return True
            if name == FILTER_INCOMPLETE and (progress is None or not progress.is_completed):
                return True
            if name == FILTER_COMPLETE and progress is not None and progress.is_completed:
                return True
        return False

    return [p for p in problems if matches(p)]


def build_distractor_pool(problems: Iterable[ProblemRecord]) -> List[DistractorEntry]:
    return [DistractorEntry(answer=p.answer, category_flag=p.is_calculation) for p in problems]


def is_correct_choice(choice: Optional[str], answer: Optional[str]) -> bool:
    return _normalize(choice or "") == _normalize(answer or "")


def summarize_results(results: Sequence[Mapping[str, Any]], total: int) -> Dict[str, int]:
    correct = sum(1 for r in results if r.get("is_correct"))
    score = int(correct / total * 100 + 0.5) if total > 0 else 0
    return {"total": total, "correct": correct, "wrong": len(results) - correct, "score": score}
