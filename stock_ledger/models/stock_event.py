"""
Stock event model.

The raw movement request as it arrived, kept for audit and
idempotence. Line items point back at the event that produced
them. Like line items, events are append-only.
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, JSON, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from stock_ledger.models.base import Base, utc_now


class StockEvent(Base):
    __tablename__ = "stock_events"

    id: Mapped[int] = mapped_column(primary_key=True)
    external_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, unique=True, nullable=False, default=uuid.uuid4
    )
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    payload: Mapped[dict] = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )

    def __repr__(self) -> str:
        return f"<StockEvent {self.external_id}>"
