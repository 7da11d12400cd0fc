import json

import pytest


def test_summary_lists_progress_and_missing_work() -> None:
    from scripts.inspection_report import format_summary
    from src.models.inspection import SurveyStatus
    from src.models.schemas import EvaluationInput
    from src.services.inspection_engine import InspectionEngine

    engine = InspectionEngine.for_new_property("prop-3")
    engine.add_evaluation("item100", EvaluationInput(eval="none"))
    engine.set_category_survey_status("cat2", SurveyStatus(conducted=False))

    summary = format_summary(engine)

    assert "Property: prop-3" in summary
    assert "Progress: 1/87 (1%)" in summary
    assert "点検口: skipped" in summary
    assert "違法性: 1/2" in summary
    assert "Complete: no" in summary
    assert "missing not-conducted reason: category cat2" in summary


def test_main_reads_exported_document(tmp_path, monkeypatch: pytest.MonkeyPatch, capsys) -> None:  # noqa: ANN001
    import sys

    from scripts import inspection_report
    from src.models.inspection import PropertyInspectionData

    path = tmp_path / "inspection.json"
    path.write_text(PropertyInspectionData.create_initial("prop-4").serialize(), encoding="utf-8")
    monkeypatch.setattr(sys, "argv", ["inspection_report.py", str(path), "--json"])
    monkeypatch.setattr(inspection_report, "setup_logging", lambda **kwargs: None)

    assert inspection_report.main() == 0

    payload = json.loads(capsys.readouterr().out)
    assert payload["progress"]["total"] == 101
    assert payload["completion"]["isComplete"] is False


def test_main_rejects_unreadable_file(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:  # noqa: ANN001
    import sys

    from scripts import inspection_report

    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    monkeypatch.setattr(sys, "argv", ["inspection_report.py", str(path)])
    monkeypatch.setattr(inspection_report, "setup_logging", lambda **kwargs: None)

    assert inspection_report.main() == 1
