"""Decides whether a checklist item is excluded from required completion.

The rules are an ordered tuple of pure predicates. Order is precedence: the
first rule that holds is the controlling reason, although several may hold.
Nothing here is cached; every call reads the aggregate as it is now.
"""
from enum import Enum
from typing import Callable, List, Optional, Tuple

from src.models.checklist import ChecklistCategory, ChecklistItem
from src.models.inspection import PropertyInspectionData
from src.services import option_store, status_trackers
from src.services.checklist_master import (
    LEGACY_GROUPS,
    STAIR_GROUP_ID,
    STAIR_NOT_APPLICABLE,
    STAIR_OPTION_ITEM_ID,
    STAIR_OPTION_LABEL,
)


class ExclusionReason(str, Enum):
    """Why an item is excluded, in precedence order."""
    CATEGORY_NOT_CONDUCTED = "category_not_conducted"
    ITEM_NOT_CONDUCTED = "item_not_conducted"
    GROUP_ABSENT = "group_absent"
    FINISH_MATERIAL_NOT_SELECTED = "finish_material_not_selected"
    OPTION_NOT_APPLICABLE = "option_not_applicable"


Predicate = Callable[[ChecklistItem, ChecklistCategory, PropertyInspectionData], bool]


def category_not_conducted(item: ChecklistItem, category: ChecklistCategory, data: PropertyInspectionData) -> bool:
    return status_trackers.is_category_disabled(data, category.id)


def item_not_conducted(item: ChecklistItem, category: ChecklistCategory, data: PropertyInspectionData) -> bool:
    return status_trackers.is_item_disabled_by_survey(data, item.id)


def group_absent(item: ChecklistItem, category: ChecklistCategory, data: PropertyInspectionData) -> bool:
    """Group explicitly marked as not existing; legacy groups never gate."""
    if not item.group_id or item.group_id in LEGACY_GROUPS:
        return False
    existence = status_trackers.get_group_existence(data, item.group_id)
    return existence is not None and existence.exists is False


def finish_material_not_selected(item: ChecklistItem, category: ChecklistCategory, data: PropertyInspectionData) -> bool:
    """An empty selection excludes nothing."""
    if not item.finish_material_key or not item.group_id:
        return False
    selected = option_store.get_finish_materials(data, item.group_id)
    if not selected:
        return False
    return item.finish_material_key not in selected


def option_not_applicable(item: ChecklistItem, category: ChecklistCategory, data: PropertyInspectionData) -> bool:
    """Outdoor stair marked not present disables the rest of its group."""
    if item.group_id != STAIR_GROUP_ID or item.id == STAIR_OPTION_ITEM_ID:
        return False
    value = option_store.get_item_option(data, STAIR_OPTION_ITEM_ID, STAIR_OPTION_LABEL)
    return value == STAIR_NOT_APPLICABLE


EXCLUSION_RULES: Tuple[Tuple[ExclusionReason, Predicate], ...] = (
    (ExclusionReason.CATEGORY_NOT_CONDUCTED, category_not_conducted),
    (ExclusionReason.ITEM_NOT_CONDUCTED, item_not_conducted),
    (ExclusionReason.GROUP_ABSENT, group_absent),
    (ExclusionReason.FINISH_MATERIAL_NOT_SELECTED, finish_material_not_selected),
    (ExclusionReason.OPTION_NOT_APPLICABLE, option_not_applicable),
)

# Rules applied item by item once the category itself is not skipped
ITEM_LEVEL_RULES = EXCLUSION_RULES[1:]


def exclusion_reasons(
    item: ChecklistItem,
    category: ChecklistCategory,
    data: PropertyInspectionData,
) -> List[ExclusionReason]:
    """Every rule that currently holds, in precedence order."""
    return [reason for reason, predicate in EXCLUSION_RULES if predicate(item, category, data)]


def exclusion_reason(
    item: ChecklistItem,
    category: ChecklistCategory,
    data: PropertyInspectionData,
) -> Optional[ExclusionReason]:
    """The controlling (first) reason, or None if the item is required."""
    for reason, predicate in EXCLUSION_RULES:
        if predicate(item, category, data):
            return reason
    return None


def is_item_excluded(item: ChecklistItem, category: ChecklistCategory, data: PropertyInspectionData) -> bool:
    return exclusion_reason(item, category, data) is not None


def is_item_excluded_within_category(
    item: ChecklistItem,
    category: ChecklistCategory,
    data: PropertyInspectionData,
) -> bool:
    return any(predicate(item, category, data) for _, predicate in ITEM_LEVEL_RULES)


def is_category_skipped(category: ChecklistCategory, data: PropertyInspectionData) -> bool:
    return status_trackers.is_category_disabled(data, category.id)
