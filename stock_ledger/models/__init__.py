"""
Database models package.

All models must be imported here so that Alembic can discover
them through Base.metadata when generating migrations.
"""

from stock_ledger.models.base import Base
from stock_ledger.models.enums import (
    ReasonType,
    ReasonCategory,
    MovementKind,
    PhysicalReason,
)
from stock_ledger.models.reason import StockCardLineItemReason
from stock_ledger.models.node import Node
from stock_ledger.models.stock_event import StockEvent
from stock_ledger.models.stock_card import StockCard
from stock_ledger.models.line_item import StockCardLineItem

__all__ = [
    "Base",
    "ReasonType",
    "ReasonCategory",
    "MovementKind",
    "PhysicalReason",
    "StockCardLineItemReason",
    "Node",
    "StockEvent",
    "StockCard",
    "StockCardLineItem",
]
