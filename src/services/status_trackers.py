"""Category, item and group status maps layered over the checklist.

Absent entries read as explicit defaults defined here, never at call sites.
"""
from typing import Optional

from src.errors import ErrorCode, InspectionValidationError
from src.models.inspection import (
    GroupExistenceStatus,
    MaintenanceCondition,
    MaintenanceNeed,
    MaintenanceStatus,
    PropertyInspectionData,
    SurveyStatus,
)
from src.services.checklist_master import CATEGORIES_WITHOUT_SURVEY_TOGGLE, ITEMS_WITH_SURVEY_TOGGLE

DEFAULT_SURVEY_STATUS = SurveyStatus(conducted=True)
DEFAULT_MAINTENANCE_STATUS = MaintenanceStatus(need=None, condition=None)
# Unknown group existence (None) counts as existing
DEFAULT_GROUP_EXISTENCE: Optional[GroupExistenceStatus] = None


def ensure_reason(status: SurveyStatus, target_id: str) -> None:
    """A finalized not-conducted status must carry a reason."""
    if not status.conducted and not status.has_reason:
        raise InspectionValidationError(
            f"A reason is required when the survey of {target_id} is not conducted",
            code=ErrorCode.MISSING_NOT_CONDUCTED_REASON,
            field="not_conducted_reason",
            details={"target_id": target_id},
        )


# --- Category survey status -------------------------------------------------

def needs_survey_toggle(category_id: str) -> bool:
    return category_id not in CATEGORIES_WITHOUT_SURVEY_TOGGLE


def get_category_survey_status(data: PropertyInspectionData, category_id: str) -> SurveyStatus:
    return data.category_survey_status.get(category_id) or DEFAULT_SURVEY_STATUS


def set_category_survey_status(
    data: PropertyInspectionData,
    category_id: str,
    status: SurveyStatus,
    finalize: bool = False,
) -> None:
    if finalize:
        ensure_reason(status, category_id)
    data.category_survey_status[category_id] = status.model_copy()


def is_category_disabled(data: PropertyInspectionData, category_id: str) -> bool:
    if not needs_survey_toggle(category_id):
        return False
    return not get_category_survey_status(data, category_id).conducted


# --- Item survey status -----------------------------------------------------

def needs_item_survey_toggle(item_id: str) -> bool:
    return item_id in ITEMS_WITH_SURVEY_TOGGLE


def get_item_survey_status(data: PropertyInspectionData, item_id: str) -> SurveyStatus:
    return data.item_survey_status.get(item_id) or DEFAULT_SURVEY_STATUS


def set_item_survey_status(
    data: PropertyInspectionData,
    item_id: str,
    status: SurveyStatus,
    finalize: bool = False,
) -> None:
    if finalize:
        ensure_reason(status, item_id)
    data.item_survey_status[item_id] = status.model_copy()


def is_item_disabled_by_survey(data: PropertyInspectionData, item_id: str) -> bool:
    if not needs_item_survey_toggle(item_id):
        return False
    return not get_item_survey_status(data, item_id).conducted


# --- Group existence --------------------------------------------------------

def get_group_existence(data: PropertyInspectionData, group_id: str) -> Optional[GroupExistenceStatus]:
    return data.group_existence.get(group_id, DEFAULT_GROUP_EXISTENCE)


def set_group_existence(data: PropertyInspectionData, group_id: str, exists: bool) -> None:
    data.group_existence[group_id] = GroupExistenceStatus(exists=exists)


# --- Maintenance status -----------------------------------------------------

def get_maintenance_status(data: PropertyInspectionData, maintenance_id: str) -> MaintenanceStatus:
    return data.maintenance_status.get(maintenance_id) or DEFAULT_MAINTENANCE_STATUS


def update_maintenance_status(
    data: PropertyInspectionData,
    maintenance_id: str,
    updates: dict,
) -> MaintenanceStatus:
    """Merge the given fields ('need', 'condition') into the stored status.

    A key present with value None clears that field back to unset.
    """
    current = get_maintenance_status(data, maintenance_id)
    need = current.need
    condition = current.condition
    try:
        if "need" in updates:
            need = MaintenanceNeed(updates["need"]) if updates["need"] is not None else None
        if "condition" in updates:
            condition = MaintenanceCondition(updates["condition"]) if updates["condition"] is not None else None
    except ValueError as e:
        raise InspectionValidationError(
            str(e),
            field="maintenance_status",
            details={"maintenance_id": maintenance_id},
        ) from e
    merged = MaintenanceStatus(need=need, condition=condition)
    data.maintenance_status[maintenance_id] = merged
    return merged
