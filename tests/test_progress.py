from models import Outcome, ProgressRecord
from utils import progress


def test_first_miss_sets_wrong_count(stores):
    record = progress.save_result(stores, "F1", "P1", False)

    assert record.is_correct is False
    assert record.is_completed is True
    assert record.wrong_count == 1
    assert record.last_attempted_at is not None


def test_wrong_count_is_sticky(stores):
    progress.save_result(stores, "F1", "P1", False)
    assert progress.save_result(stores, "F1", "P1", False).wrong_count == 1

    progress.save_result(stores, "F1", "P2", False)
    assert progress.save_result(stores, "F1", "P2", True).wrong_count == 1
    assert progress.save_result(stores, "F1", "P2", False).wrong_count == 1


def test_correct_answers_never_raise_wrong_count(stores):
    progress.save_result(stores, "F1", "P1", True)
    record = progress.save_result(stores, "F1", "P1", True)

    assert record.wrong_count == 0
    assert record.is_correct is True


def test_one_record_per_problem_keeps_its_id(stores):
    first = progress.save_result(stores, "F1", "P1", True)
    second = progress.save_result(stores, "F1", "P1", False)

    assert len(stores.progress) == 1
    assert second.id == first.id
    assert stores.progress.get("P1").is_correct is False


def test_mixed_results_across_problems(stores):
    progress.save_result(stores, "F1", "P1", True)
    progress.save_result(stores, "F1", "P2", False)

    progress_map = progress.load_progress_map(stores, "F1")
    assert progress_map["P1"].is_correct is True
    assert progress_map["P1"].wrong_count == 0
    assert progress_map["P2"].is_correct is False
    assert progress_map["P2"].wrong_count == 1
    assert progress.count_wrong(progress_map) == 1


def test_outcome_forms():
    assert progress.coerce_outcome(True) == Outcome(is_correct=True, is_completed=True)
    assert progress.coerce_outcome({"isCorrect": False}).is_completed is True
    explicit = progress.coerce_outcome({"is_correct": None, "is_completed": False})
    assert explicit.is_correct is None
    assert explicit.is_completed is False


def test_outcome_without_grade_leaves_wrong_count(stores):
    progress.save_result(stores, "F1", "P1", False)
    record = progress.save_result(stores, "F1", "P1", {"is_correct": None, "is_completed": False})

    assert record.is_correct is None
    assert record.is_completed is False
    assert record.wrong_count == 1


def test_toggle_complete_preserves_outcome(stores):
    progress.save_result(stores, "F1", "P1", False)

    record = progress.toggle_complete(stores, "F1", "P1", False)
    assert record.is_completed is False
    assert record.completed_at is None
    assert record.is_correct is False
    assert record.wrong_count == 1

    record = progress.toggle_complete(stores, "F1", "P1", True)
    assert record.is_completed is True
    assert record.completed_at is not None


def test_toggle_complete_without_history(stores):
    record = progress.toggle_complete(stores, "F1", "P9", True)

    assert record.is_correct is None
    assert record.wrong_count == 0
    assert record.last_attempted_at is None


def test_reset_file_progress_only_touches_that_file(stores):
    progress.save_result(stores, "F1", "P1", False)
    progress.save_result(stores, "F1", "P2", True)
    progress.save_result(stores, "F2", "Q1", False)

    removed = progress.reset_file_progress(stores, "F1")

    assert sorted(removed) == ["P1", "P2"]
    assert list(stores.progress.keys()) == ["Q1"]
    assert progress.reset_file_progress(stores, "F1") == []


def test_reset_clears_sticky_counter(stores):
    progress.save_result(stores, "F1", "P1", False)
    assert progress.reset_problem_progress(stores, "P1") == ["P1"]

    assert progress.save_result(stores, "F1", "P1", True).wrong_count == 0


def test_bulk_save_progress(stores):
    saved = progress.bulk_save_progress(
        stores,
        [
            {"file_set_id": "F1", "problem_id": "P1", "is_completed": True, "wrong_count": 3},
            {"file_set_id": "F1", "problem_id": "P2", "is_completed": False, "wrong_count": "x"},
            {"file_set_id": "F1", "problem_id": "P3", "is_completed": False, "wrong_count": 2.0},
        ],
    )

    assert len(saved) == 3
    first = stores.progress.get("P1")
    assert first.is_completed is True
    assert first.is_correct is None
    assert first.wrong_count == 3
    assert first.completed_at is not None
    second = stores.progress.get("P2")
    assert second.wrong_count == 0
    assert second.completed_at is None
    assert stores.progress.get("P3").wrong_count == 2


def test_completion_summary_rounds_half_up():
    progress_map = {
        "a": ProgressRecord(problem_id="a", file_set_id="F1", is_completed=True),
        "b": ProgressRecord(problem_id="b", file_set_id="F2", is_completed=True),
        "c": ProgressRecord(problem_id="c", file_set_id="F1", is_completed=False),
    }

    assert progress.completion_summary(progress_map, "F1", 8) == {"count": 1, "percent": 13}
    assert progress.completion_summary(progress_map, "F1", 3) == {"count": 1, "percent": 33}
    assert progress.completion_summary(progress_map, "F1", 0) == {"count": 1, "percent": 0}


def test_count_wrong_limits_to_files():
    progress_map = {
        "a": ProgressRecord(problem_id="a", file_set_id="F1", is_correct=False, wrong_count=1),
        "b": ProgressRecord(problem_id="b", file_set_id="F2", is_correct=False, wrong_count=1),
        "c": ProgressRecord(problem_id="c", file_set_id="F1", is_correct=True, wrong_count=1),
    }

    assert progress.count_wrong(progress_map) == 2
    assert progress.count_wrong(progress_map, ["F1"]) == 1
