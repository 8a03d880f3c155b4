"""
Stock on hand calculation — the balance engine.

Pure functions only. Nothing here touches the database or
writes to a line item; the caller decides what to do with a
classified physical reason.

Rules, keyed on the line item's movement_kind:
- PHYSICAL_COUNT: the counted quantity is the new stock on hand
- CREDIT: previous stock on hand + quantity
- DEBIT: previous stock on hand - quantity

Stock on hand is never stored. It is always recomputed by
folding a card's line items in append order.
"""

from dataclasses import dataclass
from typing import Iterable, Protocol

from stock_ledger.errors import InvalidShape
from stock_ledger.models.enums import MovementKind, PhysicalReason


class Movement(Protocol):
    """Anything with a movement kind and a quantity can be folded."""
    movement_kind: MovementKind
    quantity: int


@dataclass(frozen=True)
class StockOnHandStep:
    """Result of applying one line item to a running balance."""
    previous_stock_on_hand: int
    stock_on_hand: int
    physical_reason: PhysicalReason | None = None


def classify(quantity: int, previous_stock_on_hand: int) -> PhysicalReason:
    """
    Classify a physical count against the balance it replaces.

    A count above the balance means stock was found, below it
    means stock was lost, equal means no discrepancy.
    """
    if quantity > previous_stock_on_hand:
        return PhysicalReason.PHYSICAL_CREDIT
    if quantity < previous_stock_on_hand:
        return PhysicalReason.PHYSICAL_DEBIT
    return PhysicalReason.PHYSICAL_BALANCE


def compute_stock_on_hand(line_item: Movement, previous_stock_on_hand: int) -> int:
    """Return the stock on hand after applying one line item."""
    kind = line_item.movement_kind
    if kind == MovementKind.PHYSICAL_COUNT:
        return line_item.quantity
    if kind == MovementKind.CREDIT:
        return previous_stock_on_hand + line_item.quantity
    if kind == MovementKind.DEBIT:
        return previous_stock_on_hand - line_item.quantity
    raise InvalidShape(f"Line item has no valid movement kind: {kind!r}")


def apply_line_item(line_item: Movement, previous_stock_on_hand: int) -> StockOnHandStep:
    """Compute the new balance and, for a physical count, its reason."""
    physical_reason = None
    if line_item.movement_kind == MovementKind.PHYSICAL_COUNT:
        physical_reason = classify(line_item.quantity, previous_stock_on_hand)
    return StockOnHandStep(
        previous_stock_on_hand=previous_stock_on_hand,
        stock_on_hand=compute_stock_on_hand(line_item, previous_stock_on_hand),
        physical_reason=physical_reason,
    )


def replay(line_items: Iterable[Movement], initial: int = 0) -> list[StockOnHandStep]:
    """
    Fold line items left to right, returning one step per line item.

    The same line items in the same order from the same initial
    balance always produce the same steps.
    """
    steps = []
    stock_on_hand = initial
    for line_item in line_items:
        step = apply_line_item(line_item, stock_on_hand)
        steps.append(step)
        stock_on_hand = step.stock_on_hand
    return steps


def final_stock_on_hand(line_items: Iterable[Movement], initial: int = 0) -> int:
    """Stock on hand after the last line item (initial if there are none)."""
    stock_on_hand = initial
    for line_item in line_items:
        stock_on_hand = compute_stock_on_hand(line_item, stock_on_hand)
    return stock_on_hand
