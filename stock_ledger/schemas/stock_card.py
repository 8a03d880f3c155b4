"""
Pydantic schemas for stock cards and movements.

MovementRequest is the inbound shape of one movement. It only
checks field-level rules (types, ranges, lengths); whether the
combination of reason, source and destination is a valid
movement is decided by the MovementFactory.
"""

import uuid
from datetime import datetime

from pydantic import AwareDatetime, BaseModel, Field

from stock_ledger.models.enums import MovementKind, ReasonType

# Largest value the INTEGER quantity column can hold
MAX_QUANTITY = 2_147_483_647


# --- Request Schemas ---

class StockCardCreate(BaseModel):
    facility_id: uuid.UUID
    program_id: uuid.UUID
    orderable_id: uuid.UUID
    lot_id: uuid.UUID | None = None


class MovementRequest(BaseModel):
    """
    One movement against a stock card.

    Leave reason_id, source_id and destination_id all empty to
    record a physical count. The client provides event_id so that
    retries with the same id are idempotent.
    """
    event_id: uuid.UUID = Field(default_factory=uuid.uuid4)
    quantity: int = Field(ge=0, le=MAX_QUANTITY)
    reason_id: int | None = None
    source_id: int | None = None
    destination_id: int | None = None
    source_free_text: str | None = Field(default=None, max_length=255)
    destination_free_text: str | None = Field(default=None, max_length=255)
    document_number: str | None = Field(default=None, max_length=255)
    reason_free_text: str | None = Field(default=None, max_length=255)
    signature: str | None = Field(default=None, max_length=255)
    occurred_date: AwareDatetime
    noticed_date: AwareDatetime | None = None


# --- Response Schemas ---

class StockCardResponse(BaseModel):
    id: int
    external_id: uuid.UUID
    facility_id: uuid.UUID
    program_id: uuid.UUID
    orderable_id: uuid.UUID
    lot_id: uuid.UUID | None
    created_at: datetime

    model_config = {"from_attributes": True}


class LineItemResponse(BaseModel):
    """A line item together with the stock on hand right after it."""
    id: int
    sequence: int
    movement_kind: MovementKind
    quantity: int
    reason_id: int | None
    reason_type: ReasonType | None
    source_id: int | None
    destination_id: int | None
    source_free_text: str | None
    destination_free_text: str | None
    document_number: str | None
    reason_free_text: str | None
    signature: str | None
    occurred_date: datetime
    noticed_date: datetime
    recorded_date: datetime
    user_id: uuid.UUID
    origin_event_id: int
    stock_on_hand: int


class MovementResponse(BaseModel):
    """Response after recording a movement."""
    stock_card_id: int
    event_id: uuid.UUID
    line_items: list[LineItemResponse]
    stock_on_hand: int


class StockOnHandResponse(BaseModel):
    stock_card_id: int
    stock_on_hand: int
    line_item_count: int
