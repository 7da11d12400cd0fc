import pytest


def _ev(eval_value: str, ev_id: str = "e"):
    from src.models.inspection import InspectionEvaluation

    return InspectionEvaluation(id=ev_id, eval=eval_value, timestamp=0)


def test_worst_evaluation_picks_most_severe_grade() -> None:
    from src.services.severity import worst_value

    assert worst_value([_ev("a"), _ev("c"), _ev("b1")]) == "c"
    assert worst_value([_ev("b1"), _ev("b2")]) == "b2"


def test_worst_evaluation_ties_go_to_first_recorded() -> None:
    from src.services.severity import worst_evaluation

    first = _ev("b2", "first")
    second = _ev("b2", "second")
    assert worst_evaluation([_ev("a"), first, second]).id == "first"


def test_ungraded_values_never_count_as_worst() -> None:
    from src.services.severity import worst_value, disabled_kinds, priority_of

    assert priority_of("na") == 0
    assert priority_of("S") == 0
    assert priority_of(None) == 0
    assert worst_value([_ev("na"), _ev("freetext")]) is None
    assert disabled_kinds([_ev("na")]) == frozenset()
    assert worst_value([]) is None


@pytest.mark.parametrize(
    "recorded, expected",
    [
        ("a", frozenset()),
        ("b1", frozenset({"a"})),
        ("b2", frozenset({"a", "b1"})),
        ("c", frozenset({"a", "b1", "b2"})),
    ],
)
def test_disabled_kinds_are_strictly_milder_than_worst(recorded: str, expected: frozenset) -> None:
    from src.services.severity import disabled_kinds, is_regression

    evaluations = [_ev(recorded)]
    assert disabled_kinds(evaluations) == expected
    # Same grade and "na" stay allowed
    assert not is_regression(evaluations, recorded)
    assert not is_regression(evaluations, "na")


def test_similar_only_between_defect_grades() -> None:
    from src.services.severity import is_similar

    assert is_similar([_ev("c")], "b2")
    assert is_similar([_ev("a"), _ev("b2")], "c")
    assert not is_similar([_ev("b1")], "c")
    assert not is_similar([_ev("c")], "na")
    assert not is_similar([], "c")
