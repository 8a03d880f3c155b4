"""
Stock card API endpoints.

The API layer is thin: it owns the transaction (commit on
success, rollback on any rejection) and maps domain errors to
status codes. All ledger rules live in the services.
"""

import uuid

from fastapi import APIRouter, Depends, Header, HTTPException
from sqlalchemy.orm import Session

from stock_ledger.errors import ReferenceNotFound
from stock_ledger.models.base import get_db
from stock_ledger.models.line_item import StockCardLineItem
from stock_ledger.schemas.stock_card import (
    StockCardCreate,
    StockCardResponse,
    MovementRequest,
    MovementResponse,
    LineItemResponse,
    StockOnHandResponse,
)
from stock_ledger.services.stock_card_service import StockCardService
from stock_ledger.services.stock_on_hand import StockOnHandStep

router = APIRouter(prefix="/stock-cards", tags=["Stock cards"])


def to_line_item_response(
    line_item: StockCardLineItem, step: StockOnHandStep
) -> LineItemResponse:
    return LineItemResponse(
        id=line_item.id,
        sequence=line_item.sequence,
        movement_kind=line_item.movement_kind,
        quantity=line_item.quantity,
        reason_id=line_item.reason_id,
        reason_type=line_item.reason.reason_type if line_item.reason else None,
        source_id=line_item.source_id,
        destination_id=line_item.destination_id,
        source_free_text=line_item.source_free_text,
        destination_free_text=line_item.destination_free_text,
        document_number=line_item.document_number,
        reason_free_text=line_item.reason_free_text,
        signature=line_item.signature,
        occurred_date=line_item.occurred_date,
        noticed_date=line_item.noticed_date,
        recorded_date=line_item.recorded_date,
        user_id=line_item.user_id,
        origin_event_id=line_item.origin_event_id,
        stock_on_hand=step.stock_on_hand,
    )


@router.post("", response_model=StockCardResponse, status_code=201)
def create_stock_card(
    request: StockCardCreate,
    db: Session = Depends(get_db),
):
    service = StockCardService(db)
    try:
        card = service.create_card(request)
        db.commit()
        return card
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/{stock_card_id}", response_model=StockCardResponse)
def get_stock_card(stock_card_id: int, db: Session = Depends(get_db)):
    try:
        return StockCardService(db).get_card(stock_card_id)
    except ReferenceNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post(
    "/{stock_card_id}/movements",
    response_model=MovementResponse,
    status_code=201,
)
def record_movement(
    stock_card_id: int,
    request: MovementRequest,
    user_id: uuid.UUID = Header(alias="X-User-Id"),
    db: Session = Depends(get_db),
):
    """
    Record one movement against a stock card.

    Leave reason_id, source_id and destination_id empty for a
    physical count. Unknown references return 404, an invalid
    combination or a rejected negative balance returns 400, and
    in every error case nothing is written.
    """
    service = StockCardService(db)
    try:
        result = service.record_event(stock_card_id, request, user_id)
        response = MovementResponse(
            stock_card_id=stock_card_id,
            event_id=request.event_id,
            line_items=[
                to_line_item_response(li, step)
                for li, step in zip(result.line_items, result.steps)
            ],
            stock_on_hand=result.stock_on_hand,
        )
        db.commit()
        return response
    except ReferenceNotFound as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))


@router.get(
    "/{stock_card_id}/line-items",
    response_model=list[LineItemResponse],
)
def get_line_items(stock_card_id: int, db: Session = Depends(get_db)):
    """All line items in append order, each with its running balance."""
    try:
        rows = StockCardService(db).get_line_items(stock_card_id)
    except ReferenceNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    return [to_line_item_response(li, step) for li, step in rows]


@router.get(
    "/{stock_card_id}/stock-on-hand",
    response_model=StockOnHandResponse,
)
def get_stock_on_hand(stock_card_id: int, db: Session = Depends(get_db)):
    """
    Get the current stock on hand for a card.

    Stock on hand is replayed from the line items, not stored.
    """
    service = StockCardService(db)
    try:
        card = service.get_card(stock_card_id)
    except ReferenceNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))

    return StockOnHandResponse(
        stock_card_id=card.id,
        stock_on_hand=service.get_stock_on_hand(card.id),
        line_item_count=len(card.line_items),
    )
