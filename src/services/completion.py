"""Completion validation consumed by the "finish inspection" workflow."""
from typing import List

from src.models.inspection import PropertyInspectionData
from src.models.schemas import CompletionReport, MissingItem, MissingReason
from src.services import disablement, status_trackers
from src.services.checklist_master import ChecklistMaster, ITEMS_WITH_SURVEY_TOGGLE
from src.utils.logging import get_logger

logger = get_logger(__name__)


def find_missing_items(master: ChecklistMaster, data: PropertyInspectionData) -> List[MissingItem]:
    """Required (not excluded) items that have no evaluation yet."""
    missing = []
    for category in master.categories:
        if disablement.is_category_skipped(category, data):
            continue
        for item in category.items:
            if disablement.is_item_excluded(item, category, data):
                continue
            if not data.evaluations_for(item.id):
                missing.append(MissingItem(
                    item_id=item.id,
                    item_num=item.num,
                    item_name=item.name,
                    category_id=category.id,
                    category_name=category.name,
                ))
    return missing


def find_missing_reasons(master: ChecklistMaster, data: PropertyInspectionData) -> List[MissingReason]:
    missing = []
    for category in master.categories:
        if not status_trackers.needs_survey_toggle(category.id):
            continue
        status = status_trackers.get_category_survey_status(data, category.id)
        if not status.conducted and not status.has_reason:
            missing.append(MissingReason(target_id=category.id, scope="category"))
    for item_id in sorted(ITEMS_WITH_SURVEY_TOGGLE):
        status = status_trackers.get_item_survey_status(data, item_id)
        if not status.conducted and not status.has_reason:
            missing.append(MissingReason(target_id=item_id, scope="item"))
    return missing


def build_completion_report(master: ChecklistMaster, data: PropertyInspectionData) -> CompletionReport:
    """Everything still blocking the inspection from being closed out."""
    missing_items = find_missing_items(master, data)

    missing_maintenance = []
    missing_maintenance_labels = []
    for maintenance in master.maintenance_items:
        if status_trackers.get_maintenance_status(data, maintenance.id).need is None:
            missing_maintenance.append(maintenance.id)
            missing_maintenance_labels.append(maintenance.label)

    missing_reasons = find_missing_reasons(master, data)
    is_complete = not (missing_items or missing_maintenance or missing_reasons)

    logger.info("Completion checked",
                property_id=data.property_id,
                is_complete=is_complete,
                missing_items=len(missing_items),
                missing_maintenance=len(missing_maintenance),
                missing_reasons=len(missing_reasons))

    return CompletionReport(
        property_id=data.property_id,
        is_complete=is_complete,
        missing_items=missing_items,
        missing_maintenance=missing_maintenance,
        missing_maintenance_labels=missing_maintenance_labels,
        missing_reasons=missing_reasons,
    )
