from decimal import Decimal

import pytest

from backoffice.core.database import atomic
from backoffice.core.exceptions import NotFoundError, PersistenceError
from backoffice.models import Item, Party


def test_atomic_commits_on_success(db):
    with atomic(db):
        db.add(Party(name="Kept", type="customer"))

    assert db.query(Party).count() == 1


def test_constraint_violation_becomes_persistence_error(db):
    with pytest.raises(PersistenceError) as exc_info:
        with atomic(db):
            db.add(Party(name="Half Written", type="customer"))
            db.flush()
            db.add(Item(name="Broken", unit="pcs", sale_rate=Decimal("1"), current_stock=Decimal("-1")))
            db.flush()

    assert exc_info.value.message == "The transaction could not be completed"
    assert "CHECK" not in str(exc_info.value)
    assert db.query(Party).count() == 0
    assert db.query(Item).count() == 0


def test_service_errors_roll_back_and_pass_through(db):
    with pytest.raises(NotFoundError):
        with atomic(db):
            db.add(Party(name="Rolled Back", type="customer"))
            db.flush()
            raise NotFoundError("Item 7 not found")

    assert db.query(Party).count() == 0
