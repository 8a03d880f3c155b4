"""
Stock card line item model.

One immutable movement against a stock card. The movement_kind
column is the explicit shape of the line item, decided once by
the MovementFactory; the balance engine dispatches on it instead
of re-deriving the shape from which columns happen to be null.

The only column ever written after creation is reason_id, and
only for a physical count, when its discrepancy is classified.
"""

import uuid
from datetime import datetime

from sqlalchemy import (
    String, Integer, DateTime, ForeignKey, CheckConstraint,
    UniqueConstraint, Enum as SAEnum, Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stock_ledger.models.base import Base
from stock_ledger.models.enums import MovementKind


class StockCardLineItem(Base):
    __tablename__ = "stock_card_line_items"
    __table_args__ = (
        UniqueConstraint(
            "stock_card_id", "sequence", name="uq_line_item_sequence"
        ),
        CheckConstraint("quantity >= 0", name="ck_line_item_quantity"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    stock_card_id: Mapped[int] = mapped_column(
        ForeignKey("stock_cards.id"), nullable=False, index=True
    )
    origin_event_id: Mapped[int] = mapped_column(
        ForeignKey("stock_events.id"), nullable=False, index=True
    )
    sequence: Mapped[int] = mapped_column(Integer, nullable=False)
    movement_kind: Mapped[MovementKind] = mapped_column(
        SAEnum(
            MovementKind,
            name="movement_kind_enum",
            create_constraint=True,
        ),
        nullable=False,
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    reason_id: Mapped[int | None] = mapped_column(
        ForeignKey("stock_card_line_item_reasons.id"), nullable=True
    )
    source_id: Mapped[int | None] = mapped_column(
        ForeignKey("nodes.id"), nullable=True
    )
    destination_id: Mapped[int | None] = mapped_column(
        ForeignKey("nodes.id"), nullable=True
    )

    # Free text, no effect on stock on hand
    source_free_text: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    destination_free_text: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    document_number: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    reason_free_text: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    signature: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )

    occurred_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    noticed_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    recorded_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)

    # Relationships
    stock_card: Mapped["StockCard"] = relationship(
        back_populates="line_items"
    )
    origin_event: Mapped["StockEvent"] = relationship()
    reason: Mapped["StockCardLineItemReason | None"] = relationship()
    source: Mapped["Node | None"] = relationship(foreign_keys=[source_id])
    destination: Mapped["Node | None"] = relationship(
        foreign_keys=[destination_id]
    )

    @property
    def is_physical_count(self) -> bool:
        return self.movement_kind == MovementKind.PHYSICAL_COUNT

    def __repr__(self) -> str:
        return (
            f"<StockCardLineItem #{self.sequence} "
            f"{self.movement_kind.value} {self.quantity}>"
        )
