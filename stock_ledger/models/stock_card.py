"""
Stock card model.

A stock card tracks one product (optionally one lot) at one
facility under one program. It owns the ordered, append-only
list of line items; stock on hand is derived from them and is
never stored on the card.
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stock_ledger.models.base import Base, utc_now


class StockCard(Base):
    __tablename__ = "stock_cards"
    __table_args__ = (
        UniqueConstraint(
            "facility_id", "program_id", "orderable_id", "lot_id",
            name="uq_stock_card_identity",
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    external_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, unique=True, nullable=False, default=uuid.uuid4
    )
    facility_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    program_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    orderable_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    lot_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )

    # Append order is the order stock on hand is folded in
    line_items: Mapped[list["StockCardLineItem"]] = relationship(
        back_populates="stock_card",
        order_by="StockCardLineItem.sequence",
    )

    def __repr__(self) -> str:
        return f"<StockCard {self.external_id}>"
