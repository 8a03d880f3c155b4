"""Business logic services."""

from stock_ledger.services.reason_service import ReasonService
from stock_ledger.services.node_service import NodeService
from stock_ledger.services.movement_factory import MovementFactory
from stock_ledger.services.stock_card_service import StockCardService

__all__ = [
    "ReasonService",
    "NodeService",
    "MovementFactory",
    "StockCardService",
]
