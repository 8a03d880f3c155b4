"""
Reason service — the reason catalog.

Reasons are looked up by id when a movement names one, and the
three physical inventory reasons are created on first use.
"""

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from stock_ledger.errors import ReferenceNotFound
from stock_ledger.models.reason import StockCardLineItemReason
from stock_ledger.models.enums import (
    ReasonType,
    ReasonCategory,
    PhysicalReason,
)
from stock_ledger.schemas.reference import ReasonCreate

logger = logging.getLogger("stock_ledger.reasons")


# The well-known reasons attached to physical counts.
PHYSICAL_REASONS: dict[PhysicalReason, ReasonCreate] = {
    PhysicalReason.PHYSICAL_CREDIT: ReasonCreate(
        name="Overstock",
        description="Physical count found more stock than expected",
        reason_type=ReasonType.CREDIT,
        reason_category=ReasonCategory.PHYSICAL_INVENTORY,
    ),
    PhysicalReason.PHYSICAL_DEBIT: ReasonCreate(
        name="Understock",
        description="Physical count found less stock than expected",
        reason_type=ReasonType.DEBIT,
        reason_category=ReasonCategory.PHYSICAL_INVENTORY,
    ),
    PhysicalReason.PHYSICAL_BALANCE: ReasonCreate(
        name="Balance",
        description="Physical count matched the expected stock",
        reason_type=ReasonType.BALANCE_ADJUSTMENT,
        reason_category=ReasonCategory.PHYSICAL_INVENTORY,
    ),
}

RESERVED_NAMES = frozenset(r.name for r in PHYSICAL_REASONS.values())


class ReasonService:

    def __init__(self, db: Session):
        self.db = db

    def create_reason(self, request: ReasonCreate) -> StockCardLineItemReason:
        """
        Add a reason to the catalog.

        Raises ValueError if a reason with the same name exists, or if
        the request claims a name or category kept for physical counts.
        """
        if request.name in RESERVED_NAMES:
            raise ValueError(
                f"Reason name '{request.name}' is reserved for physical counts"
            )
        if request.reason_category == ReasonCategory.PHYSICAL_INVENTORY:
            raise ValueError(
                "Physical inventory reasons are created by the ledger"
            )
        return self._insert(request)

    def _insert(self, request: ReasonCreate) -> StockCardLineItemReason:
        existing = self.db.execute(
            select(StockCardLineItemReason).where(
                StockCardLineItemReason.name == request.name
            )
        ).scalar_one_or_none()

        if existing:
            raise ValueError(f"Reason '{request.name}' already exists")

        reason = StockCardLineItemReason(
            name=request.name,
            description=request.description,
            reason_type=request.reason_type,
            reason_category=request.reason_category,
            is_free_text_allowed=request.is_free_text_allowed,
        )
        self.db.add(reason)
        self.db.flush()
        return reason

    def lookup(self, reason_id: int) -> StockCardLineItemReason:
        """Return the reason or raise ReferenceNotFound."""
        reason = self.db.get(StockCardLineItemReason, reason_id)
        if not reason:
            raise ReferenceNotFound("Reason", reason_id)
        return reason

    def list_reasons(self) -> list[StockCardLineItemReason]:
        reasons = self.db.execute(
            select(StockCardLineItemReason)
            .order_by(StockCardLineItemReason.name)
        ).scalars().all()
        return list(reasons)

    def physical_reason(
        self, kind: PhysicalReason
    ) -> StockCardLineItemReason:
        """Get the reason for a physical count outcome, creating it if needed."""
        template = PHYSICAL_REASONS[kind]
        reason = self.db.execute(
            select(StockCardLineItemReason).where(
                StockCardLineItemReason.name == template.name,
                StockCardLineItemReason.reason_type == template.reason_type,
                StockCardLineItemReason.reason_category
                == ReasonCategory.PHYSICAL_INVENTORY,
            )
        ).scalar_one_or_none()

        if not reason:
            logger.info("Creating physical inventory reason %s", template.name)
            reason = self._insert(template)

        return reason
