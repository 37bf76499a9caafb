from decimal import Decimal

import pytest

from backoffice.core.exceptions import NotFoundError
from backoffice.models import Item, Party
from backoffice.services.ledger_service import (
    LedgerUpdater, invoice_increases_balance, payment_increases_balance
)
from backoffice.services.sequence_service import DocumentSequenceService
from backoffice.services.stock_service import StockAdjuster, stock_sign


@pytest.fixture
def item(db):
    item = Item(name="Steel Rod", unit="pcs", sale_rate=Decimal("50"), current_stock=Decimal("5"))
    db.add(item)
    db.commit()
    return item


@pytest.fixture
def party(db):
    party = Party(name="Build Co", type="customer",
                  opening_balance=Decimal("100"), current_balance=Decimal("100"))
    db.add(party)
    db.commit()
    return party


def test_stock_sign():
    assert stock_sign("sale") == -1
    assert stock_sign("purchase") == 1


def test_sale_quantity_above_stock_clamps_at_zero(db, item):
    levels = StockAdjuster(db).apply([(item.id, Decimal("8"))], stock_sign("sale"))
    db.commit()

    assert levels == {item.id: Decimal("0")}
    db.refresh(item)
    assert item.current_stock == Decimal("0")


def test_repeated_item_lines_accumulate(db, item):
    StockAdjuster(db).apply([(item.id, Decimal("2")), (item.id, Decimal("1"))], -1)
    db.commit()

    db.refresh(item)
    assert item.current_stock == Decimal("2")


def test_reverse_undoes_apply(db, item):
    adjuster = StockAdjuster(db)
    adjuster.apply([(item.id, Decimal("3"))], 1)
    adjuster.reverse([(item.id, Decimal("3"))], 1)
    db.commit()

    db.refresh(item)
    assert item.current_stock == Decimal("5")


def test_service_lines_are_skipped(db, item):
    levels = StockAdjuster(db).apply([(None, Decimal("4")), (item.id, Decimal("1"))], 1)
    assert levels == {item.id: Decimal("6")}


def test_missing_item_is_skipped_when_lenient(db, caplog):
    levels = StockAdjuster(db).apply([(999, Decimal("1"))], -1)
    assert levels == {}
    assert "item 999 no longer exists" in caplog.text


def test_missing_item_raises_when_strict(db):
    with pytest.raises(NotFoundError):
        StockAdjuster(db, strict=True).apply([(999, Decimal("1"))], -1)


def test_ledger_directions():
    assert invoice_increases_balance("sale") is True
    assert invoice_increases_balance("purchase") is False
    assert payment_increases_balance("in") is True
    assert payment_increases_balance("out") is False


def test_ledger_apply_and_reverse(db, party):
    ledger = LedgerUpdater(db)

    assert ledger.apply(party.id, Decimal("50"), True) == Decimal("150")
    assert ledger.apply(party.id, Decimal("30"), False) == Decimal("120")
    assert ledger.reverse(party.id, Decimal("30"), False) == Decimal("150")
    db.commit()

    db.refresh(party)
    assert party.current_balance == Decimal("150")


def test_ledger_missing_party(db):
    assert LedgerUpdater(db).apply(999, Decimal("10"), True) is None
    with pytest.raises(NotFoundError):
        LedgerUpdater(db, strict=True).apply(999, Decimal("10"), True)


def test_sequence_numbers_are_consecutive(db):
    sequence = DocumentSequenceService(db)

    assert sequence.preview_next_number() == "INV-0001"
    assert sequence.get_next_number() == "INV-0001"
    assert sequence.get_next_number() == "INV-0002"
    db.commit()
    assert sequence.preview_next_number() == "INV-0003"


def test_rolled_back_number_is_reused(db):
    sequence = DocumentSequenceService(db, prefix="BILL/", padding=3)

    assert sequence.get_next_number() == "BILL/001"
    db.rollback()
    assert sequence.get_next_number() == "BILL/001"


# ==================== LOCKED READS ====================

def test_ledger_uses_balance_committed_by_another_session(file_database):
    setup = file_database.session()
    party = Party(name="Shared", type="customer",
                  opening_balance=Decimal("100"), current_balance=Decimal("100"))
    setup.add(party)
    setup.commit()
    party_id = party.id
    setup.close()

    db_a = file_database.session()
    db_b = file_database.session()
    try:
        # Session A already holds the party with a balance of 100
        assert db_a.query(Party).filter(Party.id == party_id).one().current_balance == Decimal("100")

        db_b.query(Party).filter(Party.id == party_id).one().current_balance = Decimal("500")
        db_b.commit()

        assert LedgerUpdater(db_a).apply(party_id, Decimal("10"), True) == Decimal("510")
        db_a.commit()
    finally:
        db_a.close()
        db_b.close()

    check = file_database.session()
    assert check.query(Party).filter(Party.id == party_id).one().current_balance == Decimal("510")
    check.close()


def test_stock_uses_level_committed_by_another_session(file_database):
    setup = file_database.session()
    item = Item(name="Shared Rod", unit="pcs", sale_rate=Decimal("50"), current_stock=Decimal("5"))
    setup.add(item)
    setup.commit()
    item_id = item.id
    setup.close()

    db_a = file_database.session()
    db_b = file_database.session()
    try:
        assert db_a.query(Item).filter(Item.id == item_id).one().current_stock == Decimal("5")

        db_b.query(Item).filter(Item.id == item_id).one().current_stock = Decimal("20")
        db_b.commit()

        levels = StockAdjuster(db_a).apply([(item_id, Decimal("3"))], stock_sign("sale"))
        db_a.commit()
    finally:
        db_a.close()
        db_b.close()

    assert levels == {item_id: Decimal("17")}
