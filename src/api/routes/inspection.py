"""API endpoints for the per-property inspection checklist."""
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, HTTPException

from src.errors import InspectionValidationError, PersistenceError
from src.models.inspection import PropertyInspectionData, SurveyStatus
from src.models.schemas import (
    AddEvaluationResponse,
    CategoryProgress,
    ChecklistResponse,
    CompletionReport,
    EvaluationInput,
    FinishMaterialToggle,
    FinishMaterialsUpdate,
    GroupExistenceUpdate,
    ItemOptionUpdate,
    ItemState,
    MaintenanceStatusUpdate,
    SurveyStatusUpdate,
    TotalProgress,
)
from src.services.checklist_master import get_checklist_master
from src.services.inspection_engine import InspectionEngine
from src.services.inspection_sessions import get_session_manager
from src.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["Inspection"])


async def _open(property_id: str) -> InspectionEngine:
    try:
        return await get_session_manager().get_engine(property_id)
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=e.to_dict())


def _save_later(background_tasks: BackgroundTasks, engine: InspectionEngine) -> PropertyInspectionData:
    """Queue a save of the engine and hand the current state back to the caller."""
    background_tasks.add_task(get_session_manager().persist, engine)
    return engine.data


def _rejected(e: InspectionValidationError, property_id: str) -> HTTPException:
    logger.warning("Inspection input rejected", property_id=property_id, code=e.code, message=e.message)
    return HTTPException(status_code=422, detail=e.to_dict())


@router.get("/checklist", response_model=ChecklistResponse)
async def get_checklist() -> ChecklistResponse:
    """Static checklist reference data (categories, items, maintenance rows)."""
    master = get_checklist_master()
    return ChecklistResponse(
        categories=list(master.categories),
        maintenance_items=list(master.maintenance_items),
        total_items=master.total_item_count(),
    )


@router.get("/properties/{property_id}/inspection", response_model=PropertyInspectionData)
async def get_inspection(property_id: str) -> PropertyInspectionData:
    engine = await _open(property_id)
    return engine.data


@router.get("/properties/{property_id}/progress", response_model=TotalProgress)
async def get_progress(property_id: str) -> TotalProgress:
    engine = await _open(property_id)
    return engine.total_progress()


@router.get("/properties/{property_id}/categories/{category_id}/progress", response_model=CategoryProgress)
async def get_category_progress(property_id: str, category_id: str) -> CategoryProgress:
    engine = await _open(property_id)
    result = engine.category_progress(category_id)
    if result is None:
        raise HTTPException(status_code=404, detail="Category not found")
    return result


@router.get("/properties/{property_id}/completion", response_model=CompletionReport)
async def get_completion(property_id: str) -> CompletionReport:
    """Whether the inspection can be marked complete, and what is missing."""
    engine = await _open(property_id)
    return engine.completion_report()


@router.get("/properties/{property_id}/items/{item_id}/state", response_model=ItemState)
async def get_item_state(property_id: str, item_id: str) -> ItemState:
    engine = await _open(property_id)
    state = engine.item_state(item_id)
    if state is None:
        raise HTTPException(status_code=404, detail="Checklist item not found")
    return state


# ─── Evaluations ──────────────────────────────────────────────────────

@router.post("/properties/{property_id}/evaluations/{item_id}", response_model=AddEvaluationResponse)
async def add_evaluation(
    property_id: str,
    item_id: str,
    record: EvaluationInput,
    background_tasks: BackgroundTasks,
    return_path: Optional[str] = None,
) -> AddEvaluationResponse:
    """Record an evaluation; b2/c results carry a defect-capture hand-off."""
    engine = await _open(property_id)
    try:
        evaluation = engine.add_evaluation_record(item_id, record)
    except InspectionValidationError as e:
        raise _rejected(e, property_id)

    if evaluation is None:
        raise HTTPException(status_code=404, detail="Checklist item not found")

    data = _save_later(background_tasks, engine)
    return AddEvaluationResponse(
        inspection=data,
        evaluation_id=evaluation.id,
        defect_capture=engine.defect_capture_handoff(item_id, evaluation.id, return_path),
    )


@router.delete("/properties/{property_id}/evaluations/{item_id}/{index}", response_model=PropertyInspectionData)
async def remove_evaluation(
    property_id: str,
    item_id: str,
    index: int,
    background_tasks: BackgroundTasks,
) -> PropertyInspectionData:
    engine = await _open(property_id)
    engine.remove_evaluation(item_id, index)
    return _save_later(background_tasks, engine)


@router.post(
    "/properties/{property_id}/evaluations/{item_id}/{evaluation_id}/photo",
    response_model=PropertyInspectionData,
)
async def mark_photo_captured(
    property_id: str,
    item_id: str,
    evaluation_id: str,
    background_tasks: BackgroundTasks,
) -> PropertyInspectionData:
    """Write-back from the photo-capture workflow."""
    engine = await _open(property_id)
    engine.mark_photo_captured(item_id, evaluation_id)
    return _save_later(background_tasks, engine)


# ─── Survey status, groups, options ───────────────────────────────────

@router.put(
    "/properties/{property_id}/categories/{category_id}/survey-status",
    response_model=PropertyInspectionData,
)
async def set_category_survey_status(
    property_id: str,
    category_id: str,
    update: SurveyStatusUpdate,
    background_tasks: BackgroundTasks,
) -> PropertyInspectionData:
    engine = await _open(property_id)
    status = SurveyStatus(conducted=update.conducted, not_conducted_reason=update.not_conducted_reason)
    try:
        engine.set_category_survey_status(category_id, status, finalize=update.finalize)
    except InspectionValidationError as e:
        raise _rejected(e, property_id)
    return _save_later(background_tasks, engine)


@router.put(
    "/properties/{property_id}/items/{item_id}/survey-status",
    response_model=PropertyInspectionData,
)
async def set_item_survey_status(
    property_id: str,
    item_id: str,
    update: SurveyStatusUpdate,
    background_tasks: BackgroundTasks,
) -> PropertyInspectionData:
    engine = await _open(property_id)
    status = SurveyStatus(conducted=update.conducted, not_conducted_reason=update.not_conducted_reason)
    try:
        engine.set_item_survey_status(item_id, status, finalize=update.finalize)
    except InspectionValidationError as e:
        raise _rejected(e, property_id)
    return _save_later(background_tasks, engine)


@router.put("/properties/{property_id}/groups/{group_id}/existence", response_model=PropertyInspectionData)
async def set_group_existence(
    property_id: str,
    group_id: str,
    update: GroupExistenceUpdate,
    background_tasks: BackgroundTasks,
) -> PropertyInspectionData:
    engine = await _open(property_id)
    engine.set_group_existence(group_id, update.exists)
    return _save_later(background_tasks, engine)


@router.put("/properties/{property_id}/groups/{group_id}/finish-materials", response_model=PropertyInspectionData)
async def set_finish_materials(
    property_id: str,
    group_id: str,
    update: FinishMaterialsUpdate,
    background_tasks: BackgroundTasks,
) -> PropertyInspectionData:
    engine = await _open(property_id)
    engine.set_finish_materials(group_id, update.materials)
    return _save_later(background_tasks, engine)


@router.post(
    "/properties/{property_id}/groups/{group_id}/finish-materials/toggle",
    response_model=PropertyInspectionData,
)
async def toggle_finish_material(
    property_id: str,
    group_id: str,
    update: FinishMaterialToggle,
    background_tasks: BackgroundTasks,
) -> PropertyInspectionData:
    engine = await _open(property_id)
    engine.toggle_finish_material(group_id, update.material)
    return _save_later(background_tasks, engine)


@router.put("/properties/{property_id}/options/{target_id}", response_model=PropertyInspectionData)
async def set_item_option(
    property_id: str,
    target_id: str,
    update: ItemOptionUpdate,
    background_tasks: BackgroundTasks,
) -> PropertyInspectionData:
    engine = await _open(property_id)
    engine.set_item_option(target_id, update.label, update.value)
    return _save_later(background_tasks, engine)


@router.patch("/properties/{property_id}/maintenance/{maintenance_id}", response_model=PropertyInspectionData)
async def update_maintenance_status(
    property_id: str,
    maintenance_id: str,
    update: MaintenanceStatusUpdate,
    background_tasks: BackgroundTasks,
) -> PropertyInspectionData:
    engine = await _open(property_id)
    try:
        engine.update_maintenance_status(maintenance_id, update.model_dump(exclude_unset=True))
    except InspectionValidationError as e:
        raise _rejected(e, property_id)
    return _save_later(background_tasks, engine)
