"""Evaluation store - ordered evaluation records per checklist item.

Each evaluation kind has one validate-and-build function, selected from a
single table keyed by the item's evaluation type. Validation always runs to
completion before the aggregate is touched.
"""
import math
import time
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple
from uuid import uuid4

from src.errors import ErrorCode, InspectionValidationError
from src.models.checklist import ChecklistItem, EvaluationType
from src.models.inspection import (
    FREETEXT_VALUE,
    InspectionEvaluation,
    LegalEvaluation,
    ManagementEvaluation,
    PropertyInspectionData,
    StandardEvaluation,
)
from src.models.schemas import EvaluationInput
from src.services import severity

SCHMIDT_MAX_READINGS = 9
SCHMIDT_SLOPE = 1.27
SCHMIDT_INTERCEPT = -18.0

GRADED_VALUES = frozenset(v.value for v in StandardEvaluation)
MANAGEMENT_VALUES = frozenset(v.value for v in ManagementEvaluation)
LEGAL_VALUES = frozenset(v.value for v in LegalEvaluation)


def round_half_up(value: float, digits: int = 0) -> float:
    """Round with halves going up (2.5 -> 3, -2.5 -> -2)."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def compute_schmidt_result(readings: Sequence[Optional[float]]) -> Tuple[List[float], Optional[float]]:
    """Drop blank/zero readings and derive the compressive strength estimate.

    Returns:
        (kept readings, result) - result is None when no reading remains
    """
    values = [float(r) for r in readings if r is not None and float(r) > 0]
    if not values:
        return [], None
    mean = sum(values) / len(values)
    return values, round_half_up(SCHMIDT_SLOPE * mean + SCHMIDT_INTERCEPT, 2)


def _require_value(record: EvaluationInput, allowed: frozenset, item: ChecklistItem) -> str:
    if not record.eval:
        raise InspectionValidationError(
            f"An evaluation value is required for {item.id}",
            code=ErrorCode.MISSING_EVALUATION_VALUE,
            field="eval",
            details={"item_id": item.id, "eval_type": item.eval_type.value},
        )
    if record.eval not in allowed:
        raise InspectionValidationError(
            f"'{record.eval}' is not a valid {item.eval_type.value} evaluation",
            code=ErrorCode.INVALID_EVALUATION_VALUE,
            field="eval",
            details={"item_id": item.id, "allowed": sorted(allowed)},
        )
    return record.eval


def _build_standard(item: ChecklistItem, record: EvaluationInput) -> Dict[str, Any]:
    value = _require_value(record, GRADED_VALUES, item)
    if not record.survey_methods:
        raise InspectionValidationError(
            f"Select at least one survey method for {item.id}",
            code=ErrorCode.MISSING_SURVEY_METHOD,
            field="survey_methods",
            details={"item_id": item.id},
        )
    return {"eval": value, "survey_methods": list(dict.fromkeys(record.survey_methods))}


def _build_management(item: ChecklistItem, record: EvaluationInput) -> Dict[str, Any]:
    return {"eval": _require_value(record, MANAGEMENT_VALUES, item)}


def _build_legal(item: ChecklistItem, record: EvaluationInput) -> Dict[str, Any]:
    value = _require_value(record, LEGAL_VALUES, item)
    fields: Dict[str, Any] = {"eval": value}
    if value == LegalEvaluation.CONCERN.value:
        fields["concern_detail"] = record.concern_detail or ""
    return fields


def _build_freetext(item: ChecklistItem, record: EvaluationInput) -> Dict[str, Any]:
    return {"eval": FREETEXT_VALUE, "freetext_content": record.freetext_content or ""}


def _build_rebar(item: ChecklistItem, record: EvaluationInput) -> Dict[str, Any]:
    fields: Dict[str, Any] = {"eval": _require_value(record, GRADED_VALUES, item)}
    if record.rebar_pitch is not None:
        if record.rebar_pitch <= 0:
            raise InspectionValidationError(
                "Rebar pitch must be positive",
                code=ErrorCode.INVALID_MEASUREMENT,
                field="rebar_pitch",
                details={"item_id": item.id},
            )
        fields["rebar_pitch"] = record.rebar_pitch
    return fields


def _build_schmidt(item: ChecklistItem, record: EvaluationInput) -> Dict[str, Any]:
    fields: Dict[str, Any] = {"eval": _require_value(record, GRADED_VALUES, item)}
    if len(record.schmidt_values) > SCHMIDT_MAX_READINGS:
        raise InspectionValidationError(
            f"At most {SCHMIDT_MAX_READINGS} hammer readings can be recorded",
            code=ErrorCode.INVALID_MEASUREMENT,
            field="schmidt_values",
            details={"item_id": item.id, "count": len(record.schmidt_values)},
        )
    values, result = compute_schmidt_result(record.schmidt_values)
    if values:
        fields["schmidt_values"] = values
        fields["schmidt_result"] = result
    return fields


_BUILDERS: Dict[EvaluationType, Callable[[ChecklistItem, EvaluationInput], Dict[str, Any]]] = {
    EvaluationType.STANDARD: _build_standard,
    EvaluationType.MANAGEMENT: _build_management,
    EvaluationType.LEGAL: _build_legal,
    EvaluationType.FREETEXT: _build_freetext,
    EvaluationType.REBAR: _build_rebar,
    EvaluationType.SCHMIDT: _build_schmidt,
}


def build_evaluation(
    item: ChecklistItem,
    record: EvaluationInput,
    existing: Sequence[InspectionEvaluation],
    timestamp_ms: Optional[int] = None,
) -> InspectionEvaluation:
    """Validate a submitted record against its item and the existing ones.

    Raises:
        InspectionValidationError: missing/invalid payload, or a grade milder
            than the worst one already recorded.
    """
    fields = _BUILDERS[item.eval_type](item, record)
    value = fields["eval"]

    if severity.is_regression(existing, value):
        raise InspectionValidationError(
            f"'{value}' is milder than the recorded '{severity.worst_value(existing)}' for {item.id}",
            code=ErrorCode.EVALUATION_REGRESSION,
            field="eval",
            details={
                "item_id": item.id,
                "worst": severity.worst_value(existing),
                "disabled": sorted(severity.disabled_kinds(existing)),
            },
        )

    if severity.is_similar(existing, value):
        fields["is_similar"] = True

    return InspectionEvaluation(
        id=uuid4().hex,
        memo=record.memo or "",
        timestamp=timestamp_ms if timestamp_ms is not None else int(time.time() * 1000),
        **fields,
    )


def add_evaluation(
    data: PropertyInspectionData,
    item: ChecklistItem,
    record: EvaluationInput,
    timestamp_ms: Optional[int] = None,
) -> InspectionEvaluation:
    """Append a record, or replace the single record of a Schmidt item.

    Returns:
        The stored evaluation
    """
    existing = data.evaluations_for(item.id)
    evaluation = build_evaluation(item, record, existing, timestamp_ms)

    if item.eval_type == EvaluationType.SCHMIDT and existing:
        # Re-adding is an edit of the one record: keep its identity and photo
        previous = existing[0]
        evaluation = evaluation.model_copy(update={
            "id": previous.id,
            "has_photo": previous.has_photo,
            "is_similar": previous.is_similar,
        })
        data.evaluations[item.id] = [evaluation]
    else:
        data.evaluations[item.id] = [*existing, evaluation]
    return evaluation


def remove_evaluation(data: PropertyInspectionData, item_id: str, index: int) -> Optional[InspectionEvaluation]:
    """Remove by position; the key disappears with its last record."""
    existing = data.evaluations_for(item_id)
    if index < 0 or index >= len(existing):
        return None
    remaining = existing[:index] + existing[index + 1:]
    removed = existing[index]
    if remaining:
        data.evaluations[item_id] = remaining
    else:
        data.evaluations.pop(item_id, None)
    return removed


def find_evaluation(data: PropertyInspectionData, item_id: str, evaluation_id: str) -> Optional[InspectionEvaluation]:
    return next((e for e in data.evaluations_for(item_id) if e.id == evaluation_id), None)


def mark_photo_captured(data: PropertyInspectionData, item_id: str, evaluation_id: str) -> Optional[InspectionEvaluation]:
    """Photo write-back from the capture workflow; repeating it changes nothing."""
    evaluation = find_evaluation(data, item_id, evaluation_id)
    if evaluation is not None:
        evaluation.has_photo = True
    return evaluation
