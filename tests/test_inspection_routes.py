import pytest
from fastapi.testclient import TestClient


@pytest.fixture
def session_store(monkeypatch: pytest.MonkeyPatch):
    import src.api.routes.inspection as inspection_route
    from src.services.inspection_sessions import InspectionSessionManager
    from src.services.persistence import InMemoryInspectionStore, InspectionRepository

    store = InMemoryInspectionStore()
    manager = InspectionSessionManager(InspectionRepository(store))
    monkeypatch.setattr(inspection_route, "get_session_manager", lambda: manager)
    return store


def _client() -> TestClient:
    from src.api.main import app

    return TestClient(app)


def test_checklist_reference_data() -> None:
    resp = _client().get("/api/v1/checklist")

    assert resp.status_code == 200
    body = resp.json()
    assert body["totalItems"] == 101
    assert [c["id"] for c in body["categories"]] == ["cat1", "cat2", "cat3", "cat4", "cat5", "cat6", "cat7"]
    assert len(body["maintenanceItems"]) == 5
    stair = next(i for i in body["categories"][2]["items"] if i["id"] == "item72")
    assert stair["options"][0]["label"] == "設置"


def test_severe_evaluation_returns_defect_capture_and_is_saved(session_store) -> None:  # noqa: ANN001
    client = _client()
    resp = client.post(
        "/api/v1/properties/p1/evaluations/item34",
        json={"eval": "c", "memo": "北面", "surveyMethods": ["visual"]},
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["evaluationId"]
    assert body["defectCapture"]["evaluationId"] == body["evaluationId"]
    assert body["defectCapture"]["returnPath"] == "/properties/p1/inspection-checklist"
    assert body["inspection"]["evaluations"]["item34"][0]["eval"] == "c"

    # Background save has run by the time the test client returns
    assert session_store.raw("p1") is not None


def test_mild_evaluation_has_no_defect_capture(session_store) -> None:  # noqa: ANN001
    resp = _client().post(
        "/api/v1/properties/p1/evaluations/item34",
        json={"eval": "b1", "surveyMethods": ["measurement"]},
    )

    assert resp.status_code == 200
    assert resp.json()["defectCapture"] is None


def test_regression_is_rejected_with_422(session_store) -> None:  # noqa: ANN001
    client = _client()
    client.post("/api/v1/properties/p1/evaluations/item34", json={"eval": "c", "surveyMethods": ["visual"]})

    resp = client.post("/api/v1/properties/p1/evaluations/item34", json={"eval": "a", "surveyMethods": ["visual"]})

    assert resp.status_code == 422
    assert resp.json()["detail"]["code"] == "EVALUATION_REGRESSION"
    state = client.get("/api/v1/properties/p1/items/item34/state").json()
    assert state["evaluationCount"] == 1
    assert state["worstEvaluation"] == "c"
    assert state["disabledEvaluations"] == ["a", "b1", "b2"]


def test_unknown_item_returns_404(session_store) -> None:  # noqa: ANN001
    client = _client()

    resp = client.post("/api/v1/properties/p1/evaluations/item999", json={"eval": "a", "surveyMethods": ["visual"]})
    assert resp.status_code == 404
    assert client.get("/api/v1/properties/p1/items/item999/state").status_code == 404


def test_survey_status_finalize_requires_reason(session_store) -> None:  # noqa: ANN001
    client = _client()

    resp = client.put("/api/v1/properties/p1/categories/cat2/survey-status",
                      json={"conducted": False, "finalize": True})
    assert resp.status_code == 422
    assert resp.json()["detail"]["code"] == "MISSING_NOT_CONDUCTED_REASON"

    resp = client.put("/api/v1/properties/p1/categories/cat2/survey-status",
                      json={"conducted": False, "notConductedReason": "点検口なし", "finalize": True})
    assert resp.status_code == 200
    assert resp.json()["categorySurveyStatus"]["cat2"]["conducted"] is False

    progress = client.get("/api/v1/properties/p1/categories/cat2/progress").json()
    assert progress["skipped"] is True


def test_progress_and_completion(session_store) -> None:  # noqa: ANN001
    client = _client()
    client.put("/api/v1/properties/p1/groups/group_youheki/existence", json={"exists": False})
    client.post("/api/v1/properties/p1/evaluations/item1", json={"eval": "a", "surveyMethods": ["visual"]})
    client.patch("/api/v1/properties/p1/maintenance/maint_cat1", json={"need": "required"})

    progress = client.get("/api/v1/properties/p1/progress").json()
    assert progress["done"] == 1
    assert progress["total"] == 98

    report = client.get("/api/v1/properties/p1/completion").json()
    assert report["isComplete"] is False
    assert "maint_cat1" not in report["missingMaintenance"]
    assert "item3" not in [m["itemId"] for m in report["missingItems"]]


def test_options_and_finish_materials(session_store) -> None:  # noqa: ANN001
    client = _client()

    resp = client.put("/api/v1/properties/p1/options/item72", json={"label": "設置", "value": "該当無"})
    assert resp.status_code == 200
    assert resp.json()["options"]["item72"]["設置"] == "該当無"
    state = client.get("/api/v1/properties/p1/items/item73/state").json()
    assert state["exclusionReasons"] == ["option_not_applicable"]

    client.put("/api/v1/properties/p1/groups/group_kiso/finish-materials",
               json={"materials": ["コンクリート直仕上げ"]})
    resp = client.post("/api/v1/properties/p1/groups/group_kiso/finish-materials/toggle",
                       json={"material": "その他仕上げ"})
    assert resp.json()["finishMaterials"]["group_kiso"] == ["コンクリート直仕上げ", "その他仕上げ"]


def test_invalid_maintenance_value_is_rejected(session_store) -> None:  # noqa: ANN001
    resp = _client().patch("/api/v1/properties/p1/maintenance/maint_cat2", json={"need": "sometimes"})

    # Rejected by request validation before reaching the engine
    assert resp.status_code == 422


def test_remove_and_photo_write_back(session_store) -> None:  # noqa: ANN001
    client = _client()
    created = client.post("/api/v1/properties/p1/evaluations/item34",
                          json={"eval": "b2", "surveyMethods": ["visual"]}).json()
    evaluation_id = created["evaluationId"]

    resp = client.post(f"/api/v1/properties/p1/evaluations/item34/{evaluation_id}/photo")
    assert resp.json()["evaluations"]["item34"][0]["hasPhoto"] is True

    resp = client.delete("/api/v1/properties/p1/evaluations/item34/0")
    assert resp.status_code == 200
    assert "item34" not in resp.json()["evaluations"]


def test_health_reports_memory_store() -> None:
    resp = _client().get("/health")

    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "healthy"
    assert body["services"] == {"memory_store": True}


def test_root_reports_store_backend() -> None:
    body = _client().get("/").json()

    assert body["service"] == "inspection-checklist"
    assert body["store_backend"] == "memory"


@pytest.mark.parametrize(
    ("error", "status_code"),
    [
        ("validation", 422),
        ("persistence", 503),
        ("other", 500),
    ],
)
def test_escaped_inspection_errors_keep_route_status(error: str, status_code: int) -> None:
    from fastapi import FastAPI

    from src.api.main import inspection_error_handler
    from src.errors import ErrorCode, InspectionError, InspectionValidationError, PersistenceError

    raised = {
        "validation": InspectionValidationError("bad value", code=ErrorCode.INVALID_EVALUATION_VALUE, field="eval"),
        "persistence": PersistenceError("store down", property_id="p1"),
        "other": InspectionError(code=ErrorCode.STORE_NOT_CONFIGURED, message="no endpoint"),
    }[error]

    app = FastAPI()
    app.add_exception_handler(InspectionError, inspection_error_handler)

    @app.get("/boom")
    async def boom():
        raise raised

    resp = TestClient(app).get("/boom")

    assert resp.status_code == status_code
    assert resp.json()["detail"]["code"] == raised.code
