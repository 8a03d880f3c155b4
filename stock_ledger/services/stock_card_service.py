"""
Stock card service — records movements and reports stock on hand.

Recording a movement:
1. Locks the stock card so appends to one card are serialised
2. Returns the existing line items if the event was already recorded
3. Builds and appends line items through the MovementFactory
4. Computes the new stock on hand with the balance engine
5. Attaches the physical inventory reason to physical counts

Nothing is committed here. The caller owns the transaction and
either commits everything or rolls everything back.
"""

import logging
import uuid
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.orm import Session

from stock_ledger.config import get_settings
from stock_ledger.errors import NegativeStockOnHand, ReferenceNotFound
from stock_ledger.models.base import utc_now
from stock_ledger.models.line_item import StockCardLineItem
from stock_ledger.models.stock_card import StockCard
from stock_ledger.models.stock_event import StockEvent
from stock_ledger.schemas.stock_card import MovementRequest, StockCardCreate
from stock_ledger.services.movement_factory import Clock, MovementFactory
from stock_ledger.services.reason_service import ReasonService
from stock_ledger.services.stock_on_hand import (
    StockOnHandStep,
    apply_line_item,
    final_stock_on_hand,
    replay,
)

logger = logging.getLogger("stock_ledger.stock_cards")


@dataclass
class MovementResult:
    """Line items created (or found) for one event, and the card balance."""
    stock_card: StockCard
    event_id: int
    line_items: list[StockCardLineItem]
    steps: list[StockOnHandStep]
    stock_on_hand: int


class StockCardService:

    def __init__(
        self,
        db: Session,
        clock: Clock = utc_now,
        allow_negative_stock: bool | None = None,
    ):
        self.db = db
        self.reason_service = ReasonService(db)
        self.factory = MovementFactory(db, clock=clock)
        if allow_negative_stock is None:
            allow_negative_stock = get_settings().ALLOW_NEGATIVE_STOCK
        self.allow_negative_stock = allow_negative_stock

    # --- Stock cards ---

    def create_card(self, request: StockCardCreate) -> StockCard:
        """
        Open a stock card.

        Raises ValueError if a card already exists for the same
        facility, program, orderable and lot.
        """
        query = select(StockCard).where(
            StockCard.facility_id == request.facility_id,
            StockCard.program_id == request.program_id,
            StockCard.orderable_id == request.orderable_id,
        )
        # NULL never equals NULL, so a card without a lot needs IS NULL
        if request.lot_id is None:
            query = query.where(StockCard.lot_id.is_(None))
        else:
            query = query.where(StockCard.lot_id == request.lot_id)
        existing = self.db.execute(query).scalar_one_or_none()

        if existing:
            raise ValueError(
                f"Stock card already exists for orderable "
                f"{request.orderable_id} at facility {request.facility_id}"
            )

        card = StockCard(
            facility_id=request.facility_id,
            program_id=request.program_id,
            orderable_id=request.orderable_id,
            lot_id=request.lot_id,
        )
        self.db.add(card)
        self.db.flush()
        return card

    def get_card(self, stock_card_id: int, for_update: bool = False) -> StockCard:
        """
        Return a stock card or raise ReferenceNotFound.

        With for_update=True the card row is locked until the
        transaction ends, serialising concurrent appends.
        """
        query = select(StockCard).where(StockCard.id == stock_card_id)
        if for_update:
            query = query.with_for_update()
        card = self.db.execute(query).scalar_one_or_none()
        if not card:
            raise ReferenceNotFound("Stock card", stock_card_id)
        return card

    # --- Recording movements ---

    def record_event(
        self,
        stock_card_id: int,
        request: MovementRequest,
        user_id: uuid.UUID,
    ) -> MovementResult:
        """
        Persist the inbound event and record its movement.

        Re-sending the same request with an event_id that was already
        recorded against this card returns the original line items.
        Reusing an event_id with a different payload is rejected.
        """
        card = self.get_card(stock_card_id, for_update=True)

        payload = request.model_dump(mode="json")
        event = self.db.execute(
            select(StockEvent).where(StockEvent.external_id == request.event_id)
        ).scalar_one_or_none()

        if not event:
            event = StockEvent(
                external_id=request.event_id,
                user_id=user_id,
                payload=payload,
            )
            self.db.add(event)
            self.db.flush()
        elif not any(li.origin_event_id == event.id for li in card.line_items):
            raise ValueError(
                f"Event {request.event_id} was already recorded against "
                f"another stock card"
            )
        elif event.payload != payload:
            logger.warning(
                "Rejected retry of event %s with a different payload",
                request.event_id,
            )
            raise ValueError(
                f"Event {request.event_id} was already recorded with "
                f"a different payload"
            )

        return self.record_movement(request, card, event.id, user_id)

    def record_movement(
        self,
        request: MovementRequest,
        stock_card: StockCard,
        event_id: int,
        user_id: uuid.UUID,
    ) -> MovementResult:
        """
        Append the line items for one request and compute the balance.

        The card should already be locked by the caller (get_card
        with for_update=True). Raises ReferenceNotFound, InvalidShape
        or NegativeStockOnHand; on any error nothing is appended.
        """
        existing = [
            li for li in stock_card.line_items
            if li.origin_event_id == event_id
        ]
        if existing:
            # Idempotency: return what the event produced the first time
            logger.info(
                "Event %s already recorded on stock card %s",
                event_id, stock_card.id,
            )
            steps = replay(stock_card.line_items)
            return MovementResult(
                stock_card=stock_card,
                event_id=event_id,
                line_items=existing,
                steps=[
                    step for li, step in zip(stock_card.line_items, steps)
                    if li.origin_event_id == event_id
                ],
                stock_on_hand=steps[-1].stock_on_hand,
            )

        previous = final_stock_on_hand(stock_card.line_items)
        line_items = self.factory.create_line_items(
            request, stock_card, event_id, user_id
        )

        steps = []
        stock_on_hand = previous
        for line_item in line_items:
            step = apply_line_item(line_item, stock_on_hand)
            if step.stock_on_hand < 0 and not self.allow_negative_stock:
                self._discard(stock_card, line_items)
                logger.warning(
                    "Rejected movement on stock card %s: stock on hand "
                    "would be %s",
                    stock_card.id, step.stock_on_hand,
                )
                raise NegativeStockOnHand(stock_card.id, step.stock_on_hand)
            steps.append(step)
            stock_on_hand = step.stock_on_hand

        try:
            for line_item, step in zip(line_items, steps):
                if step.physical_reason is not None:
                    line_item.reason = self.reason_service.physical_reason(
                        step.physical_reason
                    )
        except ValueError:
            self._discard(stock_card, line_items)
            raise

        self.db.flush()

        for line_item, step in zip(line_items, steps):
            logger.info(
                "Recorded %s of %s on stock card %s: %s -> %s",
                line_item.movement_kind.value,
                line_item.quantity,
                stock_card.id,
                step.previous_stock_on_hand,
                step.stock_on_hand,
            )

        return MovementResult(
            stock_card=stock_card,
            event_id=event_id,
            line_items=line_items,
            steps=steps,
            stock_on_hand=stock_on_hand,
        )

    def _discard(
        self, stock_card: StockCard, line_items: list[StockCardLineItem]
    ) -> None:
        """Take unflushed line items back off the card."""
        for line_item in line_items:
            stock_card.line_items.remove(line_item)
            if line_item in self.db:
                self.db.expunge(line_item)

    # --- Queries ---

    def get_line_items(
        self, stock_card_id: int
    ) -> list[tuple[StockCardLineItem, StockOnHandStep]]:
        """Return every line item in append order with its running balance."""
        card = self.get_card(stock_card_id)
        return list(zip(card.line_items, replay(card.line_items)))

    def get_stock_on_hand(self, stock_card_id: int) -> int:
        """
        Calculate a card's stock on hand from its line items.

        Stock on hand is never stored, it is always replayed.
        """
        card = self.get_card(stock_card_id)
        return final_stock_on_hand(card.line_items)
