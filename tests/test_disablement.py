import pytest


def _engine():
    from src.services.inspection_engine import InspectionEngine

    return InspectionEngine.for_new_property("prop-1")


def _reasons(engine, item_id: str) -> list:
    return engine.item_state(item_id).exclusion_reasons


def test_nothing_is_excluded_on_a_fresh_inspection() -> None:
    engine = _engine()
    for category in engine.master.categories:
        for item in category.items:
            assert not engine.is_item_excluded(item.id), item.id


def test_category_not_conducted_excludes_its_items() -> None:
    from src.models.inspection import SurveyStatus

    engine = _engine()
    engine.set_category_survey_status("cat2", SurveyStatus(conducted=False, not_conducted_reason="点検口なし"))

    assert engine.is_category_disabled("cat2")
    assert _reasons(engine, "item11") == ["category_not_conducted"]
    assert not engine.is_item_excluded("item25")


@pytest.mark.parametrize("category_id", ["cat1", "cat6", "cat7"])
def test_categories_without_toggle_are_never_disabled(category_id: str) -> None:
    from src.models.inspection import SurveyStatus

    engine = _engine()
    engine.set_category_survey_status(category_id, SurveyStatus(conducted=False, not_conducted_reason="x"))

    assert not engine.needs_survey_toggle(category_id)
    assert not engine.is_category_disabled(category_id)


def test_item_survey_toggle_only_for_rebar_and_schmidt() -> None:
    from src.models.inspection import SurveyStatus

    engine = _engine()
    engine.set_item_survey_status("item95", SurveyStatus(conducted=False, not_conducted_reason="機材なし"))
    engine.set_item_survey_status("item89", SurveyStatus(conducted=False, not_conducted_reason="x"))

    assert _reasons(engine, "item95") == ["item_not_conducted"]
    assert not engine.is_item_excluded("item96")
    assert not engine.is_item_excluded("item89")
    assert "item89" not in engine.data.item_survey_status


def test_absent_group_excludes_its_members() -> None:
    engine = _engine()
    engine.set_group_existence("group_yukashita", False)

    assert _reasons(engine, "item11") == ["group_absent"]
    assert not engine.is_item_excluded("item19")

    engine.set_group_existence("group_yukashita", True)
    assert not engine.is_item_excluded("item11")


def test_legacy_groups_ignore_existence_flag() -> None:
    engine = _engine()
    engine.set_group_existence("group_kiso", False)
    engine.set_group_existence("group_yane", False)

    assert not engine.is_item_excluded("item25")
    assert not engine.is_item_excluded("item79")


def test_finish_material_selection_excludes_other_materials() -> None:
    from src.services.checklist_master import KISO_FINISH_MATERIALS

    concrete, mortar, _ = KISO_FINISH_MATERIALS
    engine = _engine()
    engine.set_finish_materials("group_kiso", [concrete])

    assert not engine.is_item_excluded("item28")
    assert _reasons(engine, "item30") == ["finish_material_not_selected"]
    assert _reasons(engine, "item32") == ["finish_material_not_selected"]
    # Items without a finish material stay required
    assert not engine.is_item_excluded("item25")

    engine.toggle_finish_material("group_kiso", mortar)
    assert not engine.is_item_excluded("item30")


def test_empty_finish_material_selection_excludes_nothing() -> None:
    from src.services.checklist_master import KISO_FINISH_MATERIALS

    engine = _engine()
    engine.set_finish_materials("group_kiso", [KISO_FINISH_MATERIALS[0]])
    engine.toggle_finish_material("group_kiso", KISO_FINISH_MATERIALS[0])

    assert engine.get_finish_materials("group_kiso") == []
    for item_id in ("item28", "item30", "item32"):
        assert not engine.is_item_excluded(item_id)


def test_stair_not_present_excludes_rest_of_group() -> None:
    engine = _engine()
    engine.set_item_option("item72", "設置", "該当無")

    assert not engine.is_item_excluded("item72")
    for item_id in ("item73", "item74", "item75", "item76"):
        assert _reasons(engine, item_id) == ["option_not_applicable"]

    engine.set_item_option("item72", "設置", "該当有")
    assert not engine.is_item_excluded("item73")


def test_reasons_are_listed_in_precedence_order() -> None:
    from src.models.inspection import SurveyStatus

    engine = _engine()
    engine.set_item_option("item72", "設置", "該当無")
    engine.set_category_survey_status("cat3", SurveyStatus(conducted=False, not_conducted_reason="立入不可"))

    assert _reasons(engine, "item73") == ["category_not_conducted", "option_not_applicable"]


def test_unknown_targets_are_ignored() -> None:
    engine = _engine()
    before = engine.data.model_copy(deep=True)

    engine.set_group_existence("group_unknown", False)
    engine.set_item_option("item999", "設置", "該当無")
    engine.set_finish_materials("group_unknown", ["x"])

    assert engine.data == before
    assert engine.item_state("item999") is None


def test_repeated_queries_give_the_same_answer() -> None:
    from src.models.inspection import SurveyStatus
    from src.models.schemas import EvaluationInput

    engine = _engine()
    engine.set_category_survey_status("cat2", SurveyStatus(conducted=False, not_conducted_reason="点検口なし"))
    engine.set_item_survey_status("item96", SurveyStatus(conducted=False, not_conducted_reason="足場なし"))
    engine.set_group_existence("group_youheki", False)
    engine.set_finish_materials("group_kiso", ["その他仕上げ"])
    engine.set_item_option("item72", "設置", "該当無")
    engine.add_evaluation("item34", EvaluationInput(eval="b2", survey_methods=["visual"]))
    before = engine.data.model_copy(deep=True)

    item_ids = [item.id for category in engine.master.categories for item in category.items]
    first = [engine.item_state(item_id) for item_id in item_ids]
    second = [engine.item_state(item_id) for item_id in item_ids]

    assert first == second
    assert engine.data == before
    assert sum(state.excluded for state in first) > 0
