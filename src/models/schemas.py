"""Pydantic models for engine inputs, derived views and API responses."""
from datetime import datetime, timezone
from typing import Optional, List, Dict, Union

from pydantic import BaseModel, Field, ConfigDict
from pydantic.alias_generators import to_camel

from src.models.checklist import ChecklistCategory, MaintenanceItemDefinition
from src.models.inspection import (
    MaintenanceCondition,
    MaintenanceNeed,
    PropertyInspectionData,
    SurveyMethod,
)


class _ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class EvaluationInput(_ApiModel):
    """An evaluation as submitted by the inspector, before validation."""

    eval: Optional[str] = Field(None, description="Chosen value; ignored for free-text items")
    memo: str = Field("", description="Location memo")
    concern_detail: Optional[str] = Field(None, description="Legal concern detail")
    freetext_content: Optional[str] = Field(None, description="Free-text answer")
    survey_methods: List[SurveyMethod] = Field(default_factory=list)
    rebar_pitch: Optional[float] = Field(None, description="Rebar pitch in cm")
    schmidt_values: List[Optional[float]] = Field(
        default_factory=list,
        description="Up to 9 hammer readings; blank or zero readings are ignored",
    )


class SurveyStatusUpdate(_ApiModel):
    conducted: bool
    not_conducted_reason: Optional[str] = None
    finalize: bool = Field(False, description="Require a reason when not conducted")


class GroupExistenceUpdate(_ApiModel):
    exists: bool


class FinishMaterialsUpdate(_ApiModel):
    materials: List[str] = Field(default_factory=list)


class FinishMaterialToggle(_ApiModel):
    material: str


class ItemOptionUpdate(_ApiModel):
    label: str
    value: Union[str, List[str]]


class MaintenanceStatusUpdate(_ApiModel):
    """Partial update; only fields present in the request are applied."""

    need: Optional[MaintenanceNeed] = None
    condition: Optional[MaintenanceCondition] = None


class CategoryProgress(_ApiModel):
    category_id: str
    done: int = Field(..., ge=0)
    total: int = Field(..., ge=0)
    skipped: bool = False


class TotalProgress(_ApiModel):
    done: int = Field(..., ge=0)
    total: int = Field(..., ge=0)
    percent: int = Field(..., ge=0, le=100)
    skipped_categories: int = Field(..., ge=0)
    categories: List[CategoryProgress] = Field(default_factory=list)


class MissingItem(_ApiModel):
    """A required item without any evaluation."""

    item_id: str
    item_num: int
    item_name: str
    category_id: str
    category_name: str


class MissingReason(_ApiModel):
    """A not-conducted status recorded without its mandatory reason."""

    target_id: str
    scope: str = Field(..., description="'category' or 'item'")


class CompletionReport(_ApiModel):
    property_id: str
    is_complete: bool
    missing_items: List[MissingItem] = Field(default_factory=list)
    missing_maintenance: List[str] = Field(default_factory=list)
    missing_maintenance_labels: List[str] = Field(default_factory=list)
    missing_reasons: List[MissingReason] = Field(default_factory=list)


class DefectCaptureHandoff(_ApiModel):
    """What the photo-capture workflow needs for a b2/c evaluation."""

    property_id: str
    item_id: str
    item_name: str
    evaluation_id: str
    evaluation_type: str
    is_similar: bool = False
    return_path: str


class AddEvaluationResponse(_ApiModel):
    inspection: PropertyInspectionData
    evaluation_id: Optional[str] = None
    defect_capture: Optional[DefectCaptureHandoff] = None


class ItemState(_ApiModel):
    """Derived per-item view: severity and exclusion."""

    item_id: str
    evaluation_count: int
    worst_evaluation: Optional[str] = None
    disabled_evaluations: List[str] = Field(default_factory=list)
    excluded: bool
    exclusion_reasons: List[str] = Field(default_factory=list)


class HealthResponse(BaseModel):
    """Health check response."""
    model_config = ConfigDict(populate_by_name=True)

    status: str = Field(..., description="Overall health status")
    services: Dict[str, bool] = Field(..., description="Status of individual services")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ChecklistResponse(_ApiModel):
    """Reference data the client renders the checklist from."""

    categories: List[ChecklistCategory]
    maintenance_items: List[MaintenanceItemDefinition]
    total_items: int
