"""Per-property inspection aggregate and its parts.

The aggregate is persisted as one document per property. Field names are
snake_case in Python and camelCase on the wire, which is the format the
field application stores.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class StandardEvaluation(str, Enum):
    """Graded severity for standard items."""
    A = "a"  # mostly good
    B1 = "b1"  # progressing, minor
    B2 = "b2"  # progressing, moderate
    C = "c"  # severe, needs repair soon
    NA = "na"  # not applicable / could not survey


class ManagementEvaluation(str, Enum):
    S = "S"
    A = "A"
    B = "B"
    C = "C"


class LegalEvaluation(str, Enum):
    NONE = "none"
    CONCERN = "concern"


FREETEXT_VALUE = "freetext"


class SurveyMethod(str, Enum):
    VISUAL = "visual"
    MEASUREMENT = "measurement"
    PALPATION = "palpation"


class MaintenanceNeed(str, Enum):
    REQUIRED = "required"
    NOT_REQUIRED = "not_required"


class MaintenanceCondition(str, Enum):
    GOOD = "good"
    NO_ISSUE = "no_issue"


OptionValue = Union[str, List[str]]


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class InspectionEvaluation(_WireModel):
    """One recorded answer for an item."""

    id: str
    eval: str = Field(..., description="Kind-specific value (a/b1/b2/c/na, S/A/B/C, none/concern, freetext)")
    memo: str = Field("", description="Location memo")
    concern_detail: Optional[str] = None
    freetext_content: Optional[str] = None
    survey_methods: Optional[List[SurveyMethod]] = None
    rebar_pitch: Optional[float] = None
    schmidt_values: Optional[List[float]] = None
    schmidt_result: Optional[float] = None
    has_photo: Optional[bool] = None
    is_similar: Optional[bool] = None
    timestamp: int = Field(..., description="Creation time, epoch milliseconds")


class SurveyStatus(_WireModel):
    """Conducted / not-conducted toggle for a category or an item."""

    conducted: bool = True
    not_conducted_reason: Optional[str] = None

    @property
    def has_reason(self) -> bool:
        return bool(self.not_conducted_reason and self.not_conducted_reason.strip())


class GroupExistenceStatus(_WireModel):
    exists: bool


class MaintenanceStatus(_WireModel):
    """Repair need and, where repaired, its condition. None means unset."""

    need: Optional[MaintenanceNeed] = None
    condition: Optional[MaintenanceCondition] = None


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class PropertyInspectionData(_WireModel):
    """The complete per-property checklist state."""

    property_id: str
    evaluations: Dict[str, List[InspectionEvaluation]] = Field(default_factory=dict)
    options: Dict[str, Dict[str, OptionValue]] = Field(default_factory=dict)
    # Whole-property toggle from older field-app documents; exclusion uses the
    # category and item statuses only
    survey_info: SurveyStatus = Field(default_factory=SurveyStatus)
    category_survey_status: Dict[str, SurveyStatus] = Field(default_factory=dict)
    item_survey_status: Dict[str, SurveyStatus] = Field(default_factory=dict)
    group_existence: Dict[str, GroupExistenceStatus] = Field(default_factory=dict)
    finish_materials: Dict[str, List[str]] = Field(default_factory=dict)
    maintenance_status: Dict[str, MaintenanceStatus] = Field(default_factory=dict)
    updated_at: str = Field(default_factory=utc_now_iso)

    @classmethod
    def create_initial(cls, property_id: str) -> "PropertyInspectionData":
        """Fresh aggregate: no evaluations, every survey conducted."""
        return cls(property_id=property_id)

    def evaluations_for(self, item_id: str) -> List[InspectionEvaluation]:
        """Recorded evaluations; absence and empty list read the same."""
        return self.evaluations.get(item_id) or []

    def touch(self) -> None:
        self.updated_at = utc_now_iso()

    def to_document(self) -> Dict[str, Any]:
        """JSON-ready document in the stored camelCase format."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def serialize(self) -> str:
        return json.dumps(self.to_document(), ensure_ascii=False, separators=(",", ":"))

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "PropertyInspectionData":
        return cls.model_validate(document)
