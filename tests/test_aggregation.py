import pytest

from conftest import make_problem
from utils import aggregation
from utils.integrity import save_problems
from utils.progress import save_result


@pytest.fixture
def seeded(stores):
    save_problems(stores, "F1", [
        make_problem("p1", "F1", seq=1, description="광합성의 산물", answer="포도당"),
        make_problem("p2", "F1", seq=2, description="Capital of France", answer="Paris"),
    ])
    save_problems(stores, "F2", [
        make_problem("q1", "F2", seq=1, description="빌려온 고양이", answer="cat", choices=["dog", "Tiger"]),
    ])
    save_result(stores, "F1", "p1", False)
    save_result(stores, "F1", "p2", True)
    save_result(stores, "F2", "q1", False)
    return stores


def test_wrong_problems_uses_last_outcome(seeded):
    assert sorted(p.id for p in aggregation.wrong_problems(seeded)) == ["p1", "q1"]
    assert [p.id for p in aggregation.wrong_problems(seeded, ["F1"])] == ["p1"]

    save_result(seeded, "F1", "p1", True)
    assert [p.id for p in aggregation.wrong_problems(seeded, ["F1"])] == []


def test_wrong_problems_skips_orphaned_progress(seeded):
    save_result(seeded, "F1", "ghost", False)

    assert "ghost" not in {p.id for p in aggregation.wrong_problems(seeded)}


def test_all_problems_subset(seeded):
    assert len(aggregation.all_problems(seeded)) == 3
    assert [p.id for p in aggregation.all_problems(seeded, ["F2"])] == ["q1"]


@pytest.mark.parametrize(
    "keyword, expected",
    [
        ("paris", {"F1"}),
        ("  TIGER ", {"F2"}),
        ("ㅂㄹㅇ", {"F2"}),
        ("ㅍㄷㄷ", {"F1"}),
        ("nothing-here", set()),
        ("", set()),
        (None, set()),
    ],
)
def test_search_by_keyword(seeded, keyword, expected):
    assert aggregation.search_by_keyword(seeded, keyword) == expected


def test_load_aggregated_review_set(seeded):
    problem_set = aggregation.load_aggregated_set(seeded, aggregation.AGGREGATED_REVIEW_ID)

    assert problem_set.id == "aggregated-review"
    assert problem_set.is_review_mode is True
    assert problem_set.original_filename == "All wrong answers"
    assert sorted(p.id for p in problem_set.problems) == ["p1", "q1"]


def test_load_aggregated_all_set_for_selection(seeded):
    problem_set = aggregation.load_aggregated_set(seeded, aggregation.AGGREGATED_ALL_ID, ["F1"])

    assert problem_set.is_review_mode is False
    assert problem_set.original_filename == "All problems in selected files"
    assert sorted(p.id for p in problem_set.problems) == ["p1", "p2"]


def test_load_aggregated_set_empty_returns_none(stores):
    assert aggregation.load_aggregated_set(stores, aggregation.AGGREGATED_REVIEW_ID) is None
    assert aggregation.load_aggregated_set(stores, aggregation.AGGREGATED_ALL_ID, ["F1"]) is None


def test_load_aggregated_set_rejects_unknown_kind(stores):
    with pytest.raises(ValueError):
        aggregation.load_aggregated_set(stores, "aggregated-nope")
