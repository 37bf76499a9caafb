"""
Payment Service - record, edit and delete payments against parties and invoices
"""
from typing import Optional, List
from decimal import Decimal
import logging

from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from backoffice.core.config import Settings, settings as default_settings
from backoffice.core.database import atomic
from backoffice.core.exceptions import NotFoundError, ValidationError
from backoffice.models import Invoice, Party, Payment
from backoffice.schemas import PaymentCreate, PaymentUpdate
from backoffice.services.calculator import derive_status
from backoffice.services.ledger_service import LedgerUpdater, payment_increases_balance

logger = logging.getLogger(__name__)


class PaymentService:
    def __init__(self, db: Session, settings: Settings = default_settings):
        self.db = db
        self.strict = settings.STRICT_ADJUSTMENTS
        self.ledger = LedgerUpdater(db, strict=self.strict)

    # ==================== READ ====================

    def get_by_id(self, payment_id: int) -> Optional[Payment]:
        return self.db.query(Payment).options(
            joinedload(Payment.party),
            joinedload(Payment.invoice)
        ).filter(Payment.id == payment_id).first()

    def get(self, payment_id: int) -> Payment:
        payment = self.get_by_id(payment_id)
        if not payment:
            raise NotFoundError("Payment not found")
        return payment

    def get_all(self, type: str = None, party_id: int = None, invoice_id: int = None,
                mode: str = None, search: str = None) -> List[Payment]:
        query = self.db.query(Payment).join(Party, Payment.party_id == Party.id).options(
            joinedload(Payment.party),
            joinedload(Payment.invoice)
        )
        if type:
            query = query.filter(Payment.type == type)
        if party_id:
            query = query.filter(Payment.party_id == party_id)
        if invoice_id:
            query = query.filter(Payment.invoice_id == invoice_id)
        if mode:
            query = query.filter(Payment.mode == mode)
        if search:
            # Search by note or party name
            pattern = f"%{search}%"
            query = query.filter(or_(Payment.note.ilike(pattern), Party.name.ilike(pattern)))
        return query.order_by(Payment.id.desc()).all()

    # ==================== HELPERS ====================

    def _check_references(self, party_id: int, invoice_id: Optional[int]):
        if not self.db.query(Party.id).filter(Party.id == party_id).first():
            raise NotFoundError(f"Party {party_id} not found")
        if invoice_id is not None and not self.db.query(Invoice.id).filter(Invoice.id == invoice_id).first():
            raise NotFoundError(f"Invoice {invoice_id} not found")

    def _lock_payment(self, payment_id: int) -> Payment:
        payment = self.db.query(Payment).filter(
            Payment.id == payment_id
        ).with_for_update().populate_existing().first()
        if not payment:
            raise NotFoundError("Payment not found")
        return payment

    def _lock_invoice(self, invoice_id: int) -> Optional[Invoice]:
        invoice = self.db.query(Invoice).filter(
            Invoice.id == invoice_id
        ).with_for_update().populate_existing().first()
        if not invoice:
            if self.strict:
                raise NotFoundError(f"Invoice {invoice_id} not found")
            logger.warning(f"Invoice adjustment skipped: invoice {invoice_id} no longer exists")
        return invoice

    def _add_to_invoice(self, invoice_id: int, amount: Decimal):
        invoice = self._lock_invoice(invoice_id)
        if not invoice:
            return

        paid = (invoice.paid_amount or Decimal("0")) + amount
        remaining = invoice.grand_total - paid
        invoice.paid_amount = paid
        invoice.balance = max(Decimal("0"), remaining)
        invoice.status = derive_status(remaining, paid)
        self.db.flush()

    def _remove_from_invoice(self, invoice_id: int, amount: Decimal):
        invoice = self._lock_invoice(invoice_id)
        if not invoice:
            return

        paid = max(Decimal("0"), (invoice.paid_amount or Decimal("0")) - amount)
        invoice.paid_amount = paid
        invoice.balance = invoice.grand_total - paid
        invoice.status = derive_status(invoice.balance, paid)
        self.db.flush()

    def _apply(self, payment: Payment):
        self.ledger.apply(payment.party_id, payment.amount, payment_increases_balance(payment.type))
        if payment.invoice_id:
            self._add_to_invoice(payment.invoice_id, payment.amount)

    def _revert(self, payment: Payment):
        self.ledger.reverse(payment.party_id, payment.amount, payment_increases_balance(payment.type))
        if payment.invoice_id:
            self._remove_from_invoice(payment.invoice_id, payment.amount)

    # ==================== WRITE ====================

    def create(self, payment_data: PaymentCreate) -> Payment:
        self._check_references(payment_data.party_id, payment_data.invoice_id)

        with atomic(self.db):
            payment = Payment(
                type=payment_data.type.value,
                party_id=payment_data.party_id,
                amount=payment_data.amount,
                mode=payment_data.mode or "cash",
                note=payment_data.note or "",
                invoice_id=payment_data.invoice_id
            )
            self.db.add(payment)
            self.db.flush()
            self._apply(payment)
            payment_id = payment.id

        logger.info(
            f"Recorded payment {payment_id} ({payment_data.type.value} {payment_data.amount}) "
            f"for party {payment_data.party_id}"
            + (f" against invoice {payment_data.invoice_id}" if payment_data.invoice_id else "")
        )
        return self.get(payment_id)

    def update(self, payment_id: int, payment_data: PaymentUpdate) -> Payment:
        """
        Revert the stored payment's ledger and invoice effects, then apply
        the edited payment. Omitted fields keep their current values.
        """
        update_data = payment_data.model_dump(exclude_unset=True)

        for key in ("type", "party_id", "amount"):
            if key in update_data and update_data[key] is None:
                raise ValidationError(f"{key} cannot be empty")

        with atomic(self.db):
            payment = self._lock_payment(payment_id)

            new_type = update_data["type"].value if "type" in update_data else payment.type
            new_party_id = update_data.get("party_id", payment.party_id)
            new_amount = update_data.get("amount", payment.amount)
            new_invoice_id = update_data["invoice_id"] if "invoice_id" in update_data else payment.invoice_id

            self._check_references(new_party_id, new_invoice_id)
            self._revert(payment)

            payment.type = new_type
            payment.party_id = new_party_id
            payment.amount = new_amount
            payment.invoice_id = new_invoice_id
            if "mode" in update_data:
                payment.mode = update_data["mode"] or "cash"
            if "note" in update_data:
                payment.note = update_data["note"] or ""
            self.db.flush()

            self._apply(payment)

        logger.info(f"Updated payment {payment_id}")
        return self.get(payment_id)

    def delete(self, payment_id: int) -> None:
        with atomic(self.db):
            payment = self._lock_payment(payment_id)
            self._revert(payment)
            self.db.delete(payment)

        logger.info(f"Deleted payment {payment_id}")
