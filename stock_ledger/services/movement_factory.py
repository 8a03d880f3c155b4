"""
Movement factory — turns a movement request into line items.

Every line item is in exactly one shape, and the factory is the
only place that decides which:

1. Physical count: no reason, no source, no destination
2. Explicit reason of type CREDIT or DEBIT
3. Exactly one of source (CREDIT) or destination (DEBIT),
   with an optional reason that must agree

Anything else is rejected with InvalidShape before a line item
exists, so the balance engine never has to guess.
"""

import uuid
from datetime import datetime
from typing import Callable

from sqlalchemy.orm import Session

from stock_ledger.errors import InvalidShape
from stock_ledger.models.base import utc_now
from stock_ledger.models.enums import MovementKind, ReasonType
from stock_ledger.models.line_item import StockCardLineItem
from stock_ledger.models.node import Node
from stock_ledger.models.reason import StockCardLineItemReason
from stock_ledger.models.stock_card import StockCard
from stock_ledger.schemas.stock_card import MAX_QUANTITY, MovementRequest
from stock_ledger.services.node_service import NodeService
from stock_ledger.services.reason_service import ReasonService


Clock = Callable[[], datetime]


def movement_kind_for(
    reason: StockCardLineItemReason | None,
    source: Node | None,
    destination: Node | None,
) -> MovementKind:
    """
    Decide the shape of a movement.

    Raises InvalidShape when the combination is ambiguous or
    contradictory.
    """
    if source is not None and destination is not None:
        raise InvalidShape(
            "A movement cannot have both a source and a destination"
        )

    if reason is None:
        if source is not None:
            return MovementKind.CREDIT
        if destination is not None:
            return MovementKind.DEBIT
        return MovementKind.PHYSICAL_COUNT

    if reason.reason_type == ReasonType.CREDIT:
        if destination is not None:
            raise InvalidShape(
                f"Reason '{reason.name}' is a credit but the movement "
                f"has a destination"
            )
        return MovementKind.CREDIT

    if reason.reason_type == ReasonType.DEBIT:
        if source is not None:
            raise InvalidShape(
                f"Reason '{reason.name}' is a debit but the movement "
                f"has a source"
            )
        return MovementKind.DEBIT

    raise InvalidShape(
        f"Reason '{reason.name}' of type {reason.reason_type.value} "
        f"cannot be used on a movement"
    )


class MovementFactory:
    """
    Builds line items and appends them to their stock card.

    The clock is passed in so the recorded date of a line item is
    deterministic under test.
    """

    def __init__(self, db: Session, clock: Clock = utc_now):
        self.db = db
        self.clock = clock
        self.reason_service = ReasonService(db)
        self.node_service = NodeService(db)

    def create_line_items(
        self,
        request: MovementRequest,
        stock_card: StockCard,
        event_id: int,
        user_id: uuid.UUID,
    ) -> list[StockCardLineItem]:
        """
        Create the line items for one movement request.

        Today a request always produces exactly one line item.
        Resolution or shape failures raise before anything is
        appended to the card.
        """
        if request.quantity < 0:
            raise InvalidShape(
                f"Quantity must not be negative, got {request.quantity}"
            )
        if request.quantity > MAX_QUANTITY:
            raise InvalidShape(
                f"Quantity must not exceed {MAX_QUANTITY}, got {request.quantity}"
            )

        # --- Resolve references ---
        reason = None
        if request.reason_id is not None:
            reason = self.reason_service.lookup(request.reason_id)
        source = None
        if request.source_id is not None:
            source = self.node_service.lookup(request.source_id)
        destination = None
        if request.destination_id is not None:
            destination = self.node_service.lookup(request.destination_id)

        movement_kind = movement_kind_for(reason, source, destination)

        # --- Dates ---
        recorded_date = self.clock()
        if request.occurred_date > recorded_date:
            raise InvalidShape(
                f"Occurred date {request.occurred_date.isoformat()} is "
                f"in the future"
            )
        noticed_date = request.noticed_date or request.occurred_date

        line_item = StockCardLineItem(
            origin_event_id=event_id,
            sequence=len(stock_card.line_items),
            movement_kind=movement_kind,
            quantity=request.quantity,
            reason=reason,
            source=source,
            destination=destination,
            source_free_text=request.source_free_text,
            destination_free_text=request.destination_free_text,
            document_number=request.document_number,
            reason_free_text=request.reason_free_text,
            signature=request.signature,
            occurred_date=request.occurred_date,
            noticed_date=noticed_date,
            recorded_date=recorded_date,
            user_id=user_id,
        )
        stock_card.line_items.append(line_item)
        return [line_item]
