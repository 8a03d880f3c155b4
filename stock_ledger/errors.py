"""
Domain errors.

All errors derive from ValueError so that callers which already
treat ValueError as "rejected input" keep working. The API layer
maps each kind to an HTTP status.
"""


class StockLedgerError(ValueError):
    """Base class for every rejection raised by the stock ledger."""


class ReferenceNotFound(StockLedgerError):
    """A reason, node, stock card or event id does not resolve."""

    def __init__(self, kind: str, reference_id):
        self.kind = kind
        self.reference_id = reference_id
        super().__init__(f"{kind} {reference_id} not found")


class InvalidShape(StockLedgerError):
    """A movement does not fit exactly one of the ledger entry shapes."""


class NegativeStockOnHand(StockLedgerError):
    """A movement would drive stock on hand below zero."""

    def __init__(self, stock_card_id: int, stock_on_hand: int):
        self.stock_card_id = stock_card_id
        self.stock_on_hand = stock_on_hand
        super().__init__(
            f"Stock card {stock_card_id} would have negative stock "
            f"on hand ({stock_on_hand})"
        )
