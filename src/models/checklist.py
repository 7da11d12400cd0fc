"""Static checklist reference types (categories, items, maintenance groups)."""
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class EvaluationType(str, Enum):
    """How an item is evaluated; selects payload shape and validation."""
    STANDARD = "standard"  # graded severity a / b1 / b2 / c / na
    MANAGEMENT = "management"  # S / A / B / C
    LEGAL = "legal"  # none / concern
    FREETEXT = "freetext"
    REBAR = "rebar"  # rebar scan, pitch in cm
    SCHMIDT = "schmidt"  # rebound hammer, up to 9 readings


class ItemOptionDefinition(BaseModel):
    """A side input attached to an item (presence, type selections...)."""
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    label: str = Field(..., description="Option label, used as key in the option store")
    choices: List[str] = Field(default_factory=list)
    multiple: bool = Field(False, description="Whether several choices may be selected")


class ChecklistItem(BaseModel):
    """One checklist question."""
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: str = Field(..., description="Item id (e.g. 'item72')")
    num: int = Field(..., ge=1, description="Sequence number 1-101")
    name: str = Field(..., description="Item name")
    desc: str = Field("", description="What is surveyed / degradation description")
    eval_type: EvaluationType = Field(EvaluationType.STANDARD)
    group_id: Optional[str] = Field(None, description="Cross-cutting sub-group id")
    group_label: Optional[str] = Field(None, description="Label shown on the first item of a group")
    finish_material_key: Optional[str] = Field(None, description="Finish material this item applies to")
    options: List[ItemOptionDefinition] = Field(default_factory=list)


class ChecklistCategory(BaseModel):
    """Top-level grouping of checklist items."""
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: str
    name: str
    short_name: str
    items: List[ChecklistItem] = Field(default_factory=list)


class MaintenanceSubGroup(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    label: str
    group_id: str


class MaintenanceItemDefinition(BaseModel):
    """A repair / renovation status row shown in the maintenance section."""
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: str
    label: str
    sub_label: Optional[str] = None
    sub_groups: List[MaintenanceSubGroup] = Field(default_factory=list)
