"""Severity resolution over recorded evaluations.

Graded values are totally ordered; once a more severe grade has been
recorded for an item, a milder one may not be added.
"""
from typing import Dict, FrozenSet, Optional, Sequence

from src.models.inspection import InspectionEvaluation

# Higher number = more severe
EVAL_PRIORITY: Dict[str, int] = {
    "a": 1,
    "b1": 2,
    "b2": 3,
    "c": 4,
}

# Grades that route to defect photo capture and count for "similar" marking
DEFECT_VALUES: FrozenSet[str] = frozenset({"b2", "c"})


def priority_of(value: Optional[str]) -> int:
    """Priority of a value; 0 for anything outside the graded scale (na, S, ...)."""
    if value is None:
        return 0
    return EVAL_PRIORITY.get(value, 0)


def worst_evaluation(evaluations: Sequence[InspectionEvaluation]) -> Optional[InspectionEvaluation]:
    """Most severe graded record; the first inserted one wins among equals."""
    worst: Optional[InspectionEvaluation] = None
    worst_priority = 0
    for evaluation in evaluations:
        priority = priority_of(evaluation.eval)
        if priority > worst_priority:
            worst = evaluation
            worst_priority = priority
    return worst


def worst_value(evaluations: Sequence[InspectionEvaluation]) -> Optional[str]:
    worst = worst_evaluation(evaluations)
    return worst.eval if worst else None


def disabled_kinds(evaluations: Sequence[InspectionEvaluation]) -> FrozenSet[str]:
    """Graded values strictly milder than the current worst."""
    worst_priority = priority_of(worst_value(evaluations))
    if worst_priority == 0:
        return frozenset()
    return frozenset(value for value, priority in EVAL_PRIORITY.items() if priority < worst_priority)


def is_regression(evaluations: Sequence[InspectionEvaluation], new_value: str) -> bool:
    return new_value in disabled_kinds(evaluations)


def is_similar(evaluations: Sequence[InspectionEvaluation], new_value: str) -> bool:
    """A new b2/c next to an existing b2/c is a similar occurrence."""
    if new_value not in DEFECT_VALUES:
        return False
    return any(e.eval in DEFECT_VALUES for e in evaluations)
