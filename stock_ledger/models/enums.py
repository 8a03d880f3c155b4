"""
Shared enumerations for database models.

Python enums mapped to database enums, so only valid values
can be stored.
"""

import enum


class ReasonType(str, enum.Enum):
    """Direction a reason moves stock on hand."""
    CREDIT = "CREDIT"
    DEBIT = "DEBIT"
    BALANCE_ADJUSTMENT = "BALANCE_ADJUSTMENT"


class ReasonCategory(str, enum.Enum):
    TRANSFER = "TRANSFER"
    ADJUSTMENT = "ADJUSTMENT"
    PHYSICAL_INVENTORY = "PHYSICAL_INVENTORY"


class MovementKind(str, enum.Enum):
    """
    The shape of a line item, fixed when the line item is created.

    PHYSICAL_COUNT replaces stock on hand with the counted quantity.
    CREDIT adds the quantity, DEBIT subtracts it.
    """
    PHYSICAL_COUNT = "PHYSICAL_COUNT"
    CREDIT = "CREDIT"
    DEBIT = "DEBIT"


class PhysicalReason(str, enum.Enum):
    """Outcome of comparing a physical count to the running balance."""
    PHYSICAL_CREDIT = "PHYSICAL_CREDIT"
    PHYSICAL_DEBIT = "PHYSICAL_DEBIT"
    PHYSICAL_BALANCE = "PHYSICAL_BALANCE"
