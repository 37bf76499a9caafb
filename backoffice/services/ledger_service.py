"""
Ledger Updater - maintains the running balance of parties
"""
from decimal import Decimal
from typing import Optional
import logging

from sqlalchemy.orm import Session

from backoffice.core.exceptions import NotFoundError
from backoffice.models import Party, InvoiceType, PaymentType

logger = logging.getLogger(__name__)


def invoice_increases_balance(invoice_type: str) -> bool:
    """A sale invoice adds to what the party owes; a purchase takes it off."""
    return invoice_type == InvoiceType.SALE.value


def payment_increases_balance(payment_type: str) -> bool:
    # Payments "in" add to the balance exactly like sale invoices do.
    # Kept as recorded in existing ledgers; see DESIGN.md before changing.
    return payment_type == PaymentType.IN.value


class LedgerUpdater:
    def __init__(self, db: Session, strict: bool = False):
        self.db = db
        self.strict = strict

    def apply(self, party_id: int, delta, increase: bool) -> Optional[Decimal]:
        """
        Add ``delta`` to the party balance when ``increase`` is true,
        subtract it otherwise. Returns the new balance, or None when the
        party is missing and the updater is lenient.
        """
        party = self.db.query(Party).filter(
            Party.id == party_id
        ).with_for_update().populate_existing().first()
        if not party:
            if self.strict:
                raise NotFoundError(f"Party {party_id} not found")
            logger.warning(f"Ledger update skipped: party {party_id} no longer exists")
            return None

        delta = Decimal(delta or 0)
        current = party.current_balance or Decimal("0")
        party.current_balance = current + delta if increase else current - delta
        self.db.flush()
        return party.current_balance

    def reverse(self, party_id: int, delta, increase: bool) -> Optional[Decimal]:
        """Undo an earlier ``apply`` made with the same arguments."""
        return self.apply(party_id, delta, not increase)
