"""
Stock card line item reason model (the reason catalog).

A reason explains a directional movement ("Transfer In",
"Damage") or the outcome of a physical count. Its reason_type
decides whether it adds to or subtracts from stock on hand.
"""

from datetime import datetime

from sqlalchemy import String, Boolean, DateTime, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column

from stock_ledger.models.base import Base, utc_now
from stock_ledger.models.enums import ReasonType, ReasonCategory


class StockCardLineItemReason(Base):
    __tablename__ = "stock_card_line_item_reasons"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(
        String(100), unique=True, nullable=False
    )
    description: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    reason_type: Mapped[ReasonType] = mapped_column(
        SAEnum(ReasonType, name="reason_type_enum", create_constraint=True),
        nullable=False,
    )
    reason_category: Mapped[ReasonCategory] = mapped_column(
        SAEnum(
            ReasonCategory,
            name="reason_category_enum",
            create_constraint=True,
        ),
        nullable=False,
    )
    is_free_text_allowed: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )

    def __repr__(self) -> str:
        return f"<Reason {self.name} ({self.reason_type.value})>"
