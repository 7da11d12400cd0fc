def _engine():
    from src.services.inspection_engine import InspectionEngine

    return InspectionEngine.for_new_property("prop-1")


def test_fresh_inspection_counts_every_item() -> None:
    engine = _engine()
    total = engine.total_progress()

    assert total.done == 0
    assert total.total == engine.master.total_item_count() == 101
    assert total.percent == 0
    assert total.skipped_categories == 0
    assert len(total.categories) == 7


def test_category_progress_counts_evaluated_items() -> None:
    from src.models.schemas import EvaluationInput

    engine = _engine()
    engine.add_evaluation("item100", EvaluationInput(eval="none"))
    engine.add_evaluation("item100", EvaluationInput(eval="concern", concern_detail="x"))

    progress = engine.category_progress("cat7")
    assert (progress.done, progress.total, progress.skipped) == (1, 2, False)


def test_absent_group_shrinks_category_total() -> None:
    engine = _engine()
    assert engine.category_progress("cat1").total == 10

    engine.set_group_existence("group_youheki", False)

    assert engine.category_progress("cat1").total == 7
    assert engine.total_progress().total == 98


def test_skipped_category_is_counted_apart() -> None:
    from src.models.inspection import SurveyStatus
    from src.models.schemas import EvaluationInput

    engine = _engine()
    engine.add_evaluation("item11", EvaluationInput(eval="a", survey_methods=["visual"]))
    engine.set_category_survey_status("cat2", SurveyStatus(conducted=False, not_conducted_reason="点検口なし"))

    cat2 = engine.category_progress("cat2")
    assert (cat2.done, cat2.total, cat2.skipped) == (0, 0, True)

    total = engine.total_progress()
    assert total.skipped_categories == 1
    assert total.total == 101 - 14
    assert total.done == 0


def test_percent_rounds_half_up() -> None:
    from src.models.schemas import EvaluationInput
    from src.services.progress import total_progress

    engine = _engine()
    engine.set_group_existence("group_koyaura", False)
    cat2 = next(c for c in engine.master.categories if c.id == "cat2")
    engine.add_evaluation("item11", EvaluationInput(eval="a", survey_methods=["visual"]))

    # 1 / 8 = 12.5%
    result = total_progress([cat2], engine.data)
    assert (result.done, result.total) == (1, 8)
    assert result.percent == 13

    engine.add_evaluation("item12", EvaluationInput(eval="a", survey_methods=["visual"]))
    engine.add_evaluation("item13", EvaluationInput(eval="a", survey_methods=["visual"]))
    # 3 / 8 = 37.5%
    assert total_progress([cat2], engine.data).percent == 38


def test_empty_total_gives_zero_percent() -> None:
    from src.models.inspection import PropertyInspectionData
    from src.services.progress import total_progress

    result = total_progress([], PropertyInspectionData.create_initial("prop-1"))
    assert (result.done, result.total, result.percent) == (0, 0, 0)


def test_unknown_category_has_no_progress() -> None:
    assert _engine().category_progress("cat99") is None
