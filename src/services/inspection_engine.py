"""Inspection engine - owns one property's checklist aggregate.

Every mutation entry point validates first and only then applies its changes,
so a rejected call leaves the aggregate exactly as it was. References to ids
that are not part of the checklist are logged and ignored.
"""
from typing import List, Optional

from src.config import settings
from src.models.checklist import ChecklistItem
from src.models.inspection import (
    InspectionEvaluation,
    MaintenanceStatus,
    OptionValue,
    PropertyInspectionData,
    SurveyStatus,
)
from src.models.schemas import (
    CategoryProgress,
    CompletionReport,
    DefectCaptureHandoff,
    EvaluationInput,
    ItemState,
    TotalProgress,
)
from src.services import (
    completion,
    disablement,
    evaluation_store,
    option_store,
    progress,
    severity,
    status_trackers,
)
from src.services.checklist_master import ChecklistMaster, get_checklist_master
from src.utils.logging import get_logger

logger = get_logger(__name__)


class InspectionEngine:
    """Rule layer over a single PropertyInspectionData aggregate."""

    def __init__(self, data: PropertyInspectionData, master: Optional[ChecklistMaster] = None):
        self.data = data
        self.master = master or get_checklist_master()

    @classmethod
    def for_new_property(cls, property_id: str, master: Optional[ChecklistMaster] = None) -> "InspectionEngine":
        return cls(PropertyInspectionData.create_initial(property_id), master)

    @property
    def property_id(self) -> str:
        return self.data.property_id

    def _item(self, item_id: str, action: str) -> Optional[ChecklistItem]:
        found = self.master.get_item(item_id)
        if found is None:
            logger.warning("Unknown checklist item, ignoring", action=action,
                           property_id=self.property_id, item_id=item_id)
            return None
        return found[0]

    def _changed(self, event: str, **context) -> PropertyInspectionData:
        self.data.touch()
        logger.info(event, property_id=self.property_id, **context)
        return self.data

    # ─── Category / item survey status ─────────────────────────────

    def get_category_survey_status(self, category_id: str) -> SurveyStatus:
        return status_trackers.get_category_survey_status(self.data, category_id)

    def set_category_survey_status(
        self,
        category_id: str,
        status: SurveyStatus,
        finalize: bool = False,
    ) -> PropertyInspectionData:
        if self.master.get_category(category_id) is None:
            logger.warning("Unknown category, ignoring", property_id=self.property_id, category_id=category_id)
            return self.data
        status_trackers.set_category_survey_status(self.data, category_id, status, finalize=finalize)
        return self._changed("Category survey status updated",
                             category_id=category_id, conducted=status.conducted)

    def needs_survey_toggle(self, category_id: str) -> bool:
        return status_trackers.needs_survey_toggle(category_id)

    def is_category_disabled(self, category_id: str) -> bool:
        return status_trackers.is_category_disabled(self.data, category_id)

    def get_item_survey_status(self, item_id: str) -> SurveyStatus:
        return status_trackers.get_item_survey_status(self.data, item_id)

    def set_item_survey_status(
        self,
        item_id: str,
        status: SurveyStatus,
        finalize: bool = False,
    ) -> PropertyInspectionData:
        if self._item(item_id, "set_item_survey_status") is None:
            return self.data
        if not status_trackers.needs_item_survey_toggle(item_id):
            logger.warning("Item has no survey toggle, ignoring", property_id=self.property_id, item_id=item_id)
            return self.data
        status_trackers.set_item_survey_status(self.data, item_id, status, finalize=finalize)
        return self._changed("Item survey status updated", item_id=item_id, conducted=status.conducted)

    # ─── Groups, options, finish materials ─────────────────────────

    def get_group_existence(self, group_id: str):
        return status_trackers.get_group_existence(self.data, group_id)

    def set_group_existence(self, group_id: str, exists: bool) -> PropertyInspectionData:
        if not self.master.has_group(group_id):
            logger.warning("Unknown group, ignoring", property_id=self.property_id, group_id=group_id)
            return self.data
        status_trackers.set_group_existence(self.data, group_id, exists)
        return self._changed("Group existence updated", group_id=group_id, exists=exists)

    def get_item_option(self, target_id: str, label: str) -> Optional[OptionValue]:
        return option_store.get_item_option(self.data, target_id, label)

    def set_item_option(self, target_id: str, label: str, value: OptionValue) -> PropertyInspectionData:
        if not self.master.is_known_target(target_id):
            logger.warning("Unknown option target, ignoring", property_id=self.property_id, target_id=target_id)
            return self.data
        option_store.set_item_option(self.data, target_id, label, value)
        return self._changed("Item option updated", target_id=target_id, label=label)

    def get_finish_materials(self, group_id: str) -> List[str]:
        return option_store.get_finish_materials(self.data, group_id)

    def set_finish_materials(self, group_id: str, materials: List[str]) -> PropertyInspectionData:
        if not self.master.has_group(group_id):
            logger.warning("Unknown group, ignoring", property_id=self.property_id, group_id=group_id)
            return self.data
        selected = option_store.set_finish_materials(self.data, group_id, materials)
        return self._changed("Finish materials updated", group_id=group_id, materials=selected)

    def toggle_finish_material(self, group_id: str, material: str) -> PropertyInspectionData:
        if not self.master.has_group(group_id):
            logger.warning("Unknown group, ignoring", property_id=self.property_id, group_id=group_id)
            return self.data
        selected = option_store.toggle_finish_material(self.data, group_id, material)
        return self._changed("Finish material toggled", group_id=group_id, materials=selected)

    # ─── Maintenance ───────────────────────────────────────────────

    def get_maintenance_status(self, maintenance_id: str) -> MaintenanceStatus:
        return status_trackers.get_maintenance_status(self.data, maintenance_id)

    def update_maintenance_status(self, maintenance_id: str, updates: dict) -> PropertyInspectionData:
        if not self.master.is_maintenance_id(maintenance_id):
            logger.warning("Unknown maintenance id, ignoring",
                           property_id=self.property_id, maintenance_id=maintenance_id)
            return self.data
        merged = status_trackers.update_maintenance_status(self.data, maintenance_id, updates)
        return self._changed("Maintenance status updated", maintenance_id=maintenance_id,
                             need=merged.need.value if merged.need else None,
                             condition=merged.condition.value if merged.condition else None)

    # ─── Evaluations ───────────────────────────────────────────────

    def evaluations(self, item_id: str) -> List[InspectionEvaluation]:
        return self.data.evaluations_for(item_id)

    def worst_evaluation(self, item_id: str) -> Optional[str]:
        return severity.worst_value(self.evaluations(item_id))

    def disabled_kinds(self, item_id: str) -> frozenset:
        return severity.disabled_kinds(self.evaluations(item_id))

    def add_evaluation(self, item_id: str, record: EvaluationInput) -> PropertyInspectionData:
        """Record an evaluation; raises InspectionValidationError on bad input."""
        self.add_evaluation_record(item_id, record)
        return self.data

    def add_evaluation_record(self, item_id: str, record: EvaluationInput) -> Optional[InspectionEvaluation]:
        """Like add_evaluation but hands back the stored record (None if ignored)."""
        item = self._item(item_id, "add_evaluation")
        if item is None:
            return None
        evaluation = evaluation_store.add_evaluation(self.data, item, record)
        self._changed("Evaluation added", item_id=item_id, evaluation_id=evaluation.id,
                      eval=evaluation.eval, is_similar=bool(evaluation.is_similar))
        return evaluation

    def remove_evaluation(self, item_id: str, index: int) -> PropertyInspectionData:
        if self._item(item_id, "remove_evaluation") is None:
            return self.data
        removed = evaluation_store.remove_evaluation(self.data, item_id, index)
        if removed is None:
            logger.warning("No evaluation at index, ignoring",
                           property_id=self.property_id, item_id=item_id, index=index)
            return self.data
        return self._changed("Evaluation removed", item_id=item_id, evaluation_id=removed.id)

    def mark_photo_captured(self, item_id: str, evaluation_id: str) -> PropertyInspectionData:
        if self._item(item_id, "mark_photo_captured") is None:
            return self.data
        evaluation = evaluation_store.find_evaluation(self.data, item_id, evaluation_id)
        if evaluation is None:
            logger.warning("Unknown evaluation for photo write-back, ignoring",
                           property_id=self.property_id, item_id=item_id, evaluation_id=evaluation_id)
            return self.data
        if evaluation.has_photo:
            return self.data
        evaluation_store.mark_photo_captured(self.data, item_id, evaluation_id)
        return self._changed("Evaluation photo recorded", item_id=item_id, evaluation_id=evaluation_id)

    def defect_capture_handoff(
        self,
        item_id: str,
        evaluation_id: str,
        return_path: Optional[str] = None,
    ) -> Optional[DefectCaptureHandoff]:
        """Hand-off payload for b2/c evaluations; None for anything else."""
        found = self.master.get_item(item_id)
        evaluation = evaluation_store.find_evaluation(self.data, item_id, evaluation_id)
        if found is None or evaluation is None or evaluation.eval not in severity.DEFECT_VALUES:
            return None
        return DefectCaptureHandoff(
            property_id=self.property_id,
            item_id=item_id,
            item_name=found[0].name,
            evaluation_id=evaluation.id,
            evaluation_type=evaluation.eval,
            is_similar=bool(evaluation.is_similar),
            return_path=return_path or settings.checklist_return_path_template.format(
                property_id=self.property_id),
        )

    # ─── Derived views ─────────────────────────────────────────────

    def item_state(self, item_id: str) -> Optional[ItemState]:
        found = self.master.get_item(item_id)
        if found is None:
            return None
        item, category = found
        evaluations = self.evaluations(item_id)
        reasons = disablement.exclusion_reasons(item, category, self.data)
        return ItemState(
            item_id=item_id,
            evaluation_count=len(evaluations),
            worst_evaluation=severity.worst_value(evaluations),
            disabled_evaluations=sorted(severity.disabled_kinds(evaluations), key=severity.priority_of),
            excluded=bool(reasons),
            exclusion_reasons=[r.value for r in reasons],
        )

    def is_item_excluded(self, item_id: str) -> bool:
        found = self.master.get_item(item_id)
        if found is None:
            return False
        return disablement.is_item_excluded(found[0], found[1], self.data)

    def category_progress(self, category_id: str) -> Optional[CategoryProgress]:
        category = self.master.get_category(category_id)
        if category is None:
            return None
        return progress.category_progress(category, self.data)

    def total_progress(self) -> TotalProgress:
        return progress.total_progress(self.master.categories, self.data)

    def completion_report(self) -> CompletionReport:
        return completion.build_completion_report(self.master, self.data)
