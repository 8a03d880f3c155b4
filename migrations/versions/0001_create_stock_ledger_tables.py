"""create stock ledger tables

Revision ID: 0001
Revises:
Create Date: 2026-10-19 09:00:00
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


reason_type_enum = sa.Enum(
    "CREDIT", "DEBIT", "BALANCE_ADJUSTMENT",
    name="reason_type_enum", create_constraint=True,
)
reason_category_enum = sa.Enum(
    "TRANSFER", "ADJUSTMENT", "PHYSICAL_INVENTORY",
    name="reason_category_enum", create_constraint=True,
)
movement_kind_enum = sa.Enum(
    "PHYSICAL_COUNT", "CREDIT", "DEBIT",
    name="movement_kind_enum", create_constraint=True,
)


def upgrade() -> None:
    op.create_table(
        "stock_card_line_item_reasons",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False, unique=True),
        sa.Column("description", sa.String(255), nullable=True),
        sa.Column("reason_type", reason_type_enum, nullable=False),
        sa.Column("reason_category", reason_category_enum, nullable=False),
        sa.Column("is_free_text_allowed", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_table(
        "nodes",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("code", sa.String(50), nullable=False, unique=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("reference_id", sa.Uuid(), nullable=False),
        sa.Column("is_ref_data_facility", sa.Boolean(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_table(
        "stock_events",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("external_id", sa.Uuid(), nullable=False, unique=True),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("payload", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_table(
        "stock_cards",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("external_id", sa.Uuid(), nullable=False, unique=True),
        sa.Column("facility_id", sa.Uuid(), nullable=False),
        sa.Column("program_id", sa.Uuid(), nullable=False),
        sa.Column("orderable_id", sa.Uuid(), nullable=False),
        sa.Column("lot_id", sa.Uuid(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint(
            "facility_id", "program_id", "orderable_id", "lot_id",
            name="uq_stock_card_identity",
        ),
    )
    op.create_table(
        "stock_card_line_items",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "stock_card_id", sa.Integer(),
            sa.ForeignKey("stock_cards.id"), nullable=False,
        ),
        sa.Column(
            "origin_event_id", sa.Integer(),
            sa.ForeignKey("stock_events.id"), nullable=False,
        ),
        sa.Column("sequence", sa.Integer(), nullable=False),
        sa.Column("movement_kind", movement_kind_enum, nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column(
            "reason_id", sa.Integer(),
            sa.ForeignKey("stock_card_line_item_reasons.id"), nullable=True,
        ),
        sa.Column(
            "source_id", sa.Integer(),
            sa.ForeignKey("nodes.id"), nullable=True,
        ),
        sa.Column(
            "destination_id", sa.Integer(),
            sa.ForeignKey("nodes.id"), nullable=True,
        ),
        sa.Column("source_free_text", sa.String(255), nullable=True),
        sa.Column("destination_free_text", sa.String(255), nullable=True),
        sa.Column("document_number", sa.String(255), nullable=True),
        sa.Column("reason_free_text", sa.String(255), nullable=True),
        sa.Column("signature", sa.String(255), nullable=True),
        sa.Column("occurred_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("noticed_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("recorded_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.UniqueConstraint(
            "stock_card_id", "sequence", name="uq_line_item_sequence"
        ),
        sa.CheckConstraint("quantity >= 0", name="ck_line_item_quantity"),
    )
    op.create_index(
        "ix_stock_card_line_items_stock_card_id",
        "stock_card_line_items", ["stock_card_id"],
    )
    op.create_index(
        "ix_stock_card_line_items_origin_event_id",
        "stock_card_line_items", ["origin_event_id"],
    )


def downgrade() -> None:
    op.drop_index(
        "ix_stock_card_line_items_origin_event_id",
        table_name="stock_card_line_items",
    )
    op.drop_index(
        "ix_stock_card_line_items_stock_card_id",
        table_name="stock_card_line_items",
    )
    op.drop_table("stock_card_line_items")
    op.drop_table("stock_cards")
    op.drop_table("stock_events")
    op.drop_table("nodes")
    op.drop_table("stock_card_line_item_reasons")
    movement_kind_enum.drop(op.get_bind(), checkfirst=True)
    reason_category_enum.drop(op.get_bind(), checkfirst=True)
    reason_type_enum.drop(op.get_bind(), checkfirst=True)
