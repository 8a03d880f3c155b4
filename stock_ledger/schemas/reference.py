"""
Pydantic schemas for the reason catalog and the node directory.
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from stock_ledger.models.enums import ReasonType, ReasonCategory


# --- Reason Schemas ---

class ReasonCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=255)
    reason_type: ReasonType
    reason_category: ReasonCategory
    is_free_text_allowed: bool = False


class ReasonResponse(BaseModel):
    id: int
    name: str
    description: str | None
    reason_type: ReasonType
    reason_category: ReasonCategory
    is_free_text_allowed: bool

    model_config = {"from_attributes": True}


# --- Node Schemas ---

class NodeCreate(BaseModel):
    code: str = Field(min_length=1, max_length=50)
    name: str = Field(min_length=1, max_length=100)
    reference_id: uuid.UUID = Field(default_factory=uuid.uuid4)
    is_ref_data_facility: bool = True


class NodeResponse(BaseModel):
    id: int
    code: str
    name: str
    reference_id: uuid.UUID
    is_ref_data_facility: bool
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}
