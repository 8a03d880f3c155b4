"""
Tests for the StockCardService.

Tests cover:
- Stock card creation and uniqueness
- Recording movements end to end (scenarios A through E)
- Physical counts get their physical inventory reason
- Idempotency on event_id
- The negative stock policy
- Stock on hand replay and running balances
"""

import uuid
from datetime import datetime, timezone

import pytest

from stock_ledger.errors import (
    InvalidShape,
    NegativeStockOnHand,
    ReferenceNotFound,
)
from stock_ledger.models.enums import (
    MovementKind,
    ReasonType,
    ReasonCategory,
)
from stock_ledger.models.line_item import StockCardLineItem
from stock_ledger.models.reason import StockCardLineItemReason
from stock_ledger.models.stock_event import StockEvent
from stock_ledger.schemas.reference import NodeCreate, ReasonCreate
from stock_ledger.schemas.stock_card import MovementRequest, StockCardCreate
from stock_ledger.services.node_service import NodeService
from stock_ledger.services.reason_service import ReasonService
from stock_ledger.services.stock_card_service import StockCardService


OCCURRED = datetime(2026, 2, 20, 8, 0, tzinfo=timezone.utc)


# --- Helpers ---

def make_card(service, lot_id=None):
    return service.create_card(StockCardCreate(
        facility_id=uuid.uuid4(),
        program_id=uuid.uuid4(),
        orderable_id=uuid.uuid4(),
        lot_id=lot_id,
    ))


def record(service, card, user_id, **kwargs):
    """Record one movement through the full event path."""
    kwargs.setdefault("occurred_date", OCCURRED)
    return service.record_event(card.id, MovementRequest(**kwargs), user_id)


def make_node(db, code):
    return NodeService(db).create_node(NodeCreate(code=code, name=code))


@pytest.fixture
def service(db_session, clock):
    return StockCardService(db_session, clock=clock, allow_negative_stock=True)


# --- Stock Card Tests ---

class TestCreateCard:

    def test_create_card_succeeds(self, service, db_session):
        card = make_card(service)
        db_session.commit()

        assert card.id is not None
        assert card.external_id is not None
        assert card.line_items == []

    def test_duplicate_card_rejected(self, service, db_session):
        request = StockCardCreate(
            facility_id=uuid.uuid4(),
            program_id=uuid.uuid4(),
            orderable_id=uuid.uuid4(),
        )
        service.create_card(request)
        db_session.commit()

        with pytest.raises(ValueError, match="already exists"):
            service.create_card(request)

    def test_different_lots_get_separate_cards(self, service, db_session):
        facility, program, orderable = uuid.uuid4(), uuid.uuid4(), uuid.uuid4()
        for lot_id in (None, uuid.uuid4()):
            service.create_card(StockCardCreate(
                facility_id=facility,
                program_id=program,
                orderable_id=orderable,
                lot_id=lot_id,
            ))
        db_session.commit()

    def test_unknown_card_rejected(self, service):
        with pytest.raises(ReferenceNotFound, match="Stock card 404"):
            service.get_card(404)


# --- Recording Tests ---

class TestRecordMovement:

    def test_scenario_a_physical_count_below_balance(
        self, service, db_session, user_id
    ):
        card = make_card(service)
        record(service, card, user_id, quantity=100)
        db_session.commit()

        result = record(service, card, user_id, quantity=80)
        db_session.commit()

        [line_item] = result.line_items
        assert result.stock_on_hand == 80
        assert line_item.movement_kind == MovementKind.PHYSICAL_COUNT
        assert line_item.reason.name == "Understock"
        assert line_item.reason.reason_type == ReasonType.DEBIT

    def test_scenario_b_receipt_from_source(
        self, service, db_session, user_id
    ):
        card = make_card(service)
        warehouse = make_node(db_session, "WarehouseA")
        record(service, card, user_id, quantity=50)
        db_session.commit()

        result = record(
            service, card, user_id, quantity=20, source_id=warehouse.id
        )
        db_session.commit()

        assert result.stock_on_hand == 70
        assert result.line_items[0].reason is None
        assert result.steps[0].previous_stock_on_hand == 50

    def test_scenario_c_issue_to_destination(
        self, service, db_session, user_id
    ):
        card = make_card(service)
        clinic = make_node(db_session, "ClinicX")
        record(service, card, user_id, quantity=70)
        db_session.commit()

        result = record(
            service, card, user_id, quantity=70, destination_id=clinic.id
        )
        db_session.commit()

        assert result.stock_on_hand == 0

    def test_scenario_d_empty_physical_count(
        self, service, db_session, user_id
    ):
        card = make_card(service)
        result = record(service, card, user_id, quantity=0)
        db_session.commit()

        assert result.stock_on_hand == 0
        assert result.line_items[0].reason.name == "Balance"
        assert (
            result.line_items[0].reason.reason_type
            == ReasonType.BALANCE_ADJUSTMENT
        )

    def test_scenario_e_credit_reason_with_destination_rejected(
        self, service, db_session, user_id
    ):
        card = make_card(service)
        clinic = make_node(db_session, "ClinicX")
        found = ReasonService(db_session).create_reason(ReasonCreate(
            name="Found",
            reason_type=ReasonType.CREDIT,
            reason_category=ReasonCategory.ADJUSTMENT,
        ))
        record(service, card, user_id, quantity=10)
        db_session.commit()

        with pytest.raises(InvalidShape):
            record(
                service, card, user_id,
                quantity=5, reason_id=found.id, destination_id=clinic.id,
            )

        assert len(card.line_items) == 1
        assert service.get_stock_on_hand(card.id) == 10

    def test_physical_count_above_balance_is_overstock(
        self, service, db_session, user_id
    ):
        card = make_card(service)
        result = record(service, card, user_id, quantity=12)
        db_session.commit()

        assert result.line_items[0].reason.name == "Overstock"
        assert result.line_items[0].reason.reason_type == ReasonType.CREDIT

    def test_physical_reasons_created_once(
        self, service, db_session, user_id
    ):
        card = make_card(service)
        first = record(service, card, user_id, quantity=5)
        second = record(service, card, user_id, quantity=9)
        db_session.commit()

        assert first.line_items[0].reason.id == second.line_items[0].reason.id

    def test_debit_reason_subtracts(self, service, db_session, user_id):
        card = make_card(service)
        damage = ReasonService(db_session).create_reason(ReasonCreate(
            name="Damage",
            reason_type=ReasonType.DEBIT,
            reason_category=ReasonCategory.ADJUSTMENT,
        ))
        record(service, card, user_id, quantity=40)
        result = record(
            service, card, user_id, quantity=15, reason_id=damage.id
        )
        db_session.commit()

        assert result.stock_on_hand == 25
        assert result.line_items[0].reason.name == "Damage"

    def test_unknown_reason_appends_nothing(
        self, service, db_session, user_id
    ):
        card = make_card(service)
        db_session.commit()

        with pytest.raises(ReferenceNotFound):
            record(service, card, user_id, quantity=5, reason_id=999)

        assert card.line_items == []

    def test_event_is_persisted_with_payload(
        self, service, db_session, user_id
    ):
        card = make_card(service)
        result = record(
            service, card, user_id, quantity=3, document_number="DOC-1"
        )
        db_session.commit()

        event = db_session.get(StockEvent, result.event_id)
        assert event.user_id == user_id
        assert event.payload["quantity"] == 3
        assert event.payload["document_number"] == "DOC-1"


# --- Idempotency Tests ---

class TestIdempotency:

    def test_same_event_returns_existing_line_items(
        self, service, db_session, user_id
    ):
        card = make_card(service)
        request = MovementRequest(quantity=25, occurred_date=OCCURRED)

        first = service.record_event(card.id, request, user_id)
        db_session.commit()
        second = service.record_event(card.id, request, user_id)
        db_session.commit()

        assert [li.id for li in first.line_items] == [
            li.id for li in second.line_items
        ]
        assert second.stock_on_hand == 25
        assert db_session.query(StockCardLineItem).count() == 1

    def test_event_reused_on_other_card_rejected(
        self, service, db_session, user_id
    ):
        card = make_card(service)
        other = make_card(service)
        request = MovementRequest(quantity=25, occurred_date=OCCURRED)
        service.record_event(card.id, request, user_id)
        db_session.commit()

        with pytest.raises(ValueError, match="another stock card"):
            service.record_event(other.id, request, user_id)

    def test_same_event_with_different_payload_rejected(
        self, service, db_session, user_id
    ):
        card = make_card(service)
        event_id = uuid.uuid4()
        service.record_event(
            card.id,
            MovementRequest(
                event_id=event_id, quantity=25, occurred_date=OCCURRED
            ),
            user_id,
        )
        db_session.commit()

        with pytest.raises(ValueError, match="different payload"):
            service.record_event(
                card.id,
                MovementRequest(
                    event_id=event_id, quantity=40, occurred_date=OCCURRED
                ),
                user_id,
            )

        assert len(card.line_items) == 1
        assert service.get_stock_on_hand(card.id) == 25


# --- Physical Reason Catalog Tests ---

class TestPhysicalReasonCatalog:

    def test_catalog_cannot_take_physical_reason_name(self, db_session):
        with pytest.raises(ValueError, match="reserved"):
            ReasonService(db_session).create_reason(ReasonCreate(
                name="Overstock",
                reason_type=ReasonType.DEBIT,
                reason_category=ReasonCategory.ADJUSTMENT,
            ))

    def test_catalog_cannot_use_physical_inventory_category(
        self, db_session
    ):
        with pytest.raises(ValueError, match="created by the ledger"):
            ReasonService(db_session).create_reason(ReasonCreate(
                name="Recount gain",
                reason_type=ReasonType.CREDIT,
                reason_category=ReasonCategory.PHYSICAL_INVENTORY,
            ))

    def test_gain_is_classified_as_credit_after_rejected_catalog_entry(
        self, service, db_session, user_id
    ):
        card = make_card(service)
        with pytest.raises(ValueError):
            ReasonService(db_session).create_reason(ReasonCreate(
                name="Overstock",
                reason_type=ReasonType.DEBIT,
                reason_category=ReasonCategory.ADJUSTMENT,
            ))

        result = record(service, card, user_id, quantity=10)
        db_session.commit()

        reason = result.line_items[0].reason
        assert reason.name == "Overstock"
        assert reason.reason_type == ReasonType.CREDIT
        assert reason.reason_category == ReasonCategory.PHYSICAL_INVENTORY

    def test_mismatched_row_with_physical_name_is_never_attached(
        self, service, db_session, user_id
    ):
        card = make_card(service)
        # A row written outside the service, e.g. by an old import
        db_session.add(StockCardLineItemReason(
            name="Overstock",
            reason_type=ReasonType.DEBIT,
            reason_category=ReasonCategory.ADJUSTMENT,
        ))
        db_session.commit()

        with pytest.raises(ValueError, match="already exists"):
            record(service, card, user_id, quantity=10)

        assert card.line_items == []


# --- Negative Stock Policy Tests ---

class TestNegativeStockPolicy:

    def test_negative_allowed_by_default_policy(
        self, service, db_session, user_id
    ):
        card = make_card(service)
        clinic = make_node(db_session, "ClinicX")
        record(service, card, user_id, quantity=10)

        result = record(
            service, card, user_id, quantity=15, destination_id=clinic.id
        )
        db_session.commit()

        assert result.stock_on_hand == -5

    def test_negative_rejected_when_disallowed(
        self, db_session, clock, user_id
    ):
        service = StockCardService(
            db_session, clock=clock, allow_negative_stock=False
        )
        card = make_card(service)
        clinic = make_node(db_session, "ClinicX")
        record(service, card, user_id, quantity=10)
        db_session.commit()

        with pytest.raises(NegativeStockOnHand) as exc_info:
            record(
                service, card, user_id,
                quantity=15, destination_id=clinic.id,
            )

        assert exc_info.value.stock_on_hand == -5
        assert len(card.line_items) == 1
        db_session.flush()
        assert db_session.query(StockCardLineItem).count() == 1

    def test_issue_to_exactly_zero_allowed_when_disallowed(
        self, db_session, clock, user_id
    ):
        service = StockCardService(
            db_session, clock=clock, allow_negative_stock=False
        )
        card = make_card(service)
        clinic = make_node(db_session, "ClinicX")
        record(service, card, user_id, quantity=10)

        result = record(
            service, card, user_id, quantity=10, destination_id=clinic.id
        )

        assert result.stock_on_hand == 0


# --- Stock On Hand Tests ---

class TestStockOnHand:

    def test_empty_card_has_zero(self, service, db_session):
        card = make_card(service)
        db_session.commit()
        assert service.get_stock_on_hand(card.id) == 0

    def test_replay_matches_recorded_balances(
        self, service, db_session, user_id
    ):
        card = make_card(service)
        warehouse = make_node(db_session, "WarehouseA")
        clinic = make_node(db_session, "ClinicX")

        recorded = [
            record(service, card, user_id, quantity=100).stock_on_hand,
            record(
                service, card, user_id, quantity=30, destination_id=clinic.id
            ).stock_on_hand,
            record(
                service, card, user_id, quantity=20, source_id=warehouse.id
            ).stock_on_hand,
            record(service, card, user_id, quantity=85).stock_on_hand,
        ]
        db_session.commit()

        rows = service.get_line_items(card.id)
        assert [step.stock_on_hand for _, step in rows] == recorded
        assert recorded == [100, 70, 90, 85]
        assert [li.sequence for li, _ in rows] == [0, 1, 2, 3]
        assert service.get_stock_on_hand(card.id) == 85

    def test_line_items_keep_append_order_not_occurred_order(
        self, service, db_session, user_id
    ):
        card = make_card(service)
        later = datetime(2026, 2, 25, tzinfo=timezone.utc)
        earlier = datetime(2026, 2, 1, tzinfo=timezone.utc)
        record(service, card, user_id, quantity=10, occurred_date=later)
        record(service, card, user_id, quantity=4, occurred_date=earlier)
        db_session.commit()

        rows = service.get_line_items(card.id)
        assert [li.quantity for li, _ in rows] == [10, 4]
        assert service.get_stock_on_hand(card.id) == 4
