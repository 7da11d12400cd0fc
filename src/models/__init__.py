"""Data models initialization."""
from src.models.checklist import (
    EvaluationType,
    ChecklistItem,
    ChecklistCategory,
    MaintenanceItemDefinition,
)
from src.models.inspection import (
    InspectionEvaluation,
    SurveyStatus,
    GroupExistenceStatus,
    MaintenanceStatus,
    PropertyInspectionData,
)
from src.models.schemas import (
    EvaluationInput,
    CategoryProgress,
    TotalProgress,
    CompletionReport,
    DefectCaptureHandoff,
    HealthResponse,
)

__all__ = [
    "EvaluationType",
    "ChecklistItem",
    "ChecklistCategory",
    "MaintenanceItemDefinition",
    "InspectionEvaluation",
    "SurveyStatus",
    "GroupExistenceStatus",
    "MaintenanceStatus",
    "PropertyInspectionData",
    "EvaluationInput",
    "CategoryProgress",
    "TotalProgress",
    "CompletionReport",
    "DefectCaptureHandoff",
    "HealthResponse",
]
