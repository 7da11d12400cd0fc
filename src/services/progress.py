"""Progress calculation over the checklist, consistent with disablement."""
from typing import Iterable

from src.models.checklist import ChecklistCategory
from src.models.inspection import PropertyInspectionData
from src.models.schemas import CategoryProgress, TotalProgress
from src.services import disablement
from src.services.evaluation_store import round_half_up


def category_progress(category: ChecklistCategory, data: PropertyInspectionData) -> CategoryProgress:
    """Done/total for one category; a skipped category counts as 0/0."""
    if disablement.is_category_skipped(category, data):
        return CategoryProgress(category_id=category.id, done=0, total=0, skipped=True)

    done = 0
    total = 0
    for item in category.items:
        if disablement.is_item_excluded_within_category(item, category, data):
            continue
        total += 1
        if data.evaluations_for(item.id):
            done += 1
    return CategoryProgress(category_id=category.id, done=done, total=total, skipped=False)


def total_progress(categories: Iterable[ChecklistCategory], data: PropertyInspectionData) -> TotalProgress:
    """Sum over non-skipped categories; percent is 0 for an empty total."""
    done = 0
    total = 0
    skipped = 0
    per_category = []
    for category in categories:
        progress = category_progress(category, data)
        per_category.append(progress)
        if progress.skipped:
            skipped += 1
            continue
        done += progress.done
        total += progress.total

    percent = int(round_half_up(done / total * 100)) if total > 0 else 0
    return TotalProgress(
        done=done,
        total=total,
        percent=percent,
        skipped_categories=skipped,
        categories=per_category,
    )
