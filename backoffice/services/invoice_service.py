"""
Invoice Service - create, edit and delete invoices with their stock and ledger effects
"""
from typing import Optional, List
from decimal import Decimal
from datetime import date
import logging

from sqlalchemy.orm import Session, joinedload

from backoffice.core.config import Settings, settings as default_settings
from backoffice.core.database import atomic
from backoffice.core.exceptions import ConflictError, NotFoundError
from backoffice.models import Invoice, InvoiceItem, InvoiceType, Item, Party, Payment
from backoffice.schemas import InvoiceCreate
from backoffice.services.calculator import InvoiceTotals, calculate_invoice
from backoffice.services.ledger_service import LedgerUpdater, invoice_increases_balance
from backoffice.services.sequence_service import DocumentSequenceService
from backoffice.services.stock_service import StockAdjuster, stock_sign

logger = logging.getLogger(__name__)


class InvoiceService:
    def __init__(self, db: Session, settings: Settings = default_settings):
        self.db = db
        self.settings = settings
        self.stock = StockAdjuster(db, strict=settings.STRICT_ADJUSTMENTS)
        self.ledger = LedgerUpdater(db, strict=settings.STRICT_ADJUSTMENTS)
        self.sequence = DocumentSequenceService(
            db,
            prefix=settings.INVOICE_NUMBER_PREFIX,
            padding=settings.INVOICE_NUMBER_PADDING
        )

    # ==================== READ ====================

    def get_by_id(self, invoice_id: int) -> Optional[Invoice]:
        return self.db.query(Invoice).options(
            joinedload(Invoice.items),
            joinedload(Invoice.party)
        ).filter(Invoice.id == invoice_id).first()

    def get(self, invoice_id: int) -> Invoice:
        invoice = self.get_by_id(invoice_id)
        if not invoice:
            raise NotFoundError("Invoice not found")
        return invoice

    def get_all(self, type: str = None, status: str = None, party_id: int = None) -> List[Invoice]:
        query = self.db.query(Invoice).options(
            joinedload(Invoice.items),
            joinedload(Invoice.party)
        )
        if type:
            query = query.filter(Invoice.type == type)
        if status:
            query = query.filter(Invoice.status == status)
        if party_id:
            query = query.filter(Invoice.party_id == party_id)
        return query.order_by(Invoice.id.desc()).all()

    def get_next_number(self) -> str:
        return self.sequence.preview_next_number()

    # ==================== HELPERS ====================

    def _lock(self, invoice_id: int) -> Invoice:
        """Re-read the invoice under a row lock; its lines load fresh afterwards"""
        invoice = self.db.query(Invoice).filter(
            Invoice.id == invoice_id
        ).with_for_update().populate_existing().first()
        if not invoice:
            raise NotFoundError("Invoice not found")
        self.db.expire(invoice, ["items"])
        return invoice

    def _get_party(self, party_id: int) -> Party:
        party = self.db.query(Party).filter(Party.id == party_id).first()
        if not party:
            raise NotFoundError(f"Party {party_id} not found")
        return party

    def _resolve_lines(self, invoice_type: str, invoice_data: InvoiceCreate) -> List[dict]:
        """Fill in missing line rates from the item's sale or purchase rate"""
        lines = []
        for line in invoice_data.items:
            rate = line.rate
            if line.item_id is not None and rate is None:
                item = self.db.query(Item).filter(Item.id == line.item_id).first()
                if not item:
                    raise NotFoundError(f"Item {line.item_id} not found")
                rate = item.sale_rate if invoice_type == InvoiceType.SALE.value else item.purchase_rate
            lines.append({
                "item_id": line.item_id,
                "description": line.description,
                "quantity": line.quantity,
                "rate": rate,
                "tax_rate": line.tax_rate,
            })
        return lines

    def _calculate(self, invoice_data: InvoiceCreate, lines: List[dict]) -> InvoiceTotals:
        def rate_or_default(value, default):
            return default if value is None else value

        return calculate_invoice(
            lines,
            discount=invoice_data.discount,
            paid_amount=invoice_data.paid_amount,
            cgst_rate=rate_or_default(invoice_data.cgst_rate, self.settings.DEFAULT_CGST_RATE),
            sgst_rate=rate_or_default(invoice_data.sgst_rate, self.settings.DEFAULT_SGST_RATE),
            igst_rate=rate_or_default(invoice_data.igst_rate, self.settings.DEFAULT_IGST_RATE),
            currency_phrase=self.settings.CURRENCY_PHRASE,
        )

    def _fill(self, invoice: Invoice, invoice_data: InvoiceCreate, party: Party,
              lines: List[dict], totals: InvoiceTotals):
        invoice.type = invoice_data.type.value
        invoice.party = party
        invoice.date = invoice_data.date or invoice.date or date.today()
        invoice.site_name = invoice_data.site_name
        invoice.particular = invoice_data.particular
        invoice.sub_total = totals.sub_total
        invoice.cgst_rate = totals.cgst_rate
        invoice.cgst_amount = totals.cgst_amount
        invoice.sgst_rate = totals.sgst_rate
        invoice.sgst_amount = totals.sgst_amount
        invoice.igst_rate = totals.igst_rate
        invoice.igst_amount = totals.igst_amount
        invoice.tax_total = totals.tax_total
        invoice.discount = totals.discount
        invoice.round_off = totals.round_off
        invoice.grand_total = totals.grand_total
        invoice.amount_in_words = totals.amount_in_words
        invoice.paid_amount = totals.paid_amount
        invoice.balance = totals.balance
        invoice.status = totals.status

        for line, line_totals in zip(lines, totals.lines):
            invoice.items.append(InvoiceItem(
                item_id=line["item_id"],
                description=line["description"],
                quantity=line_totals.quantity,
                rate=line_totals.rate,
                tax_rate=line_totals.tax_rate,
                amount=line_totals.amount,
                tax_amount=line_totals.tax_amount,
                total=line_totals.total,
            ))

    def _stock_lines(self, invoice: Invoice):
        return [(line.item_id, line.quantity) for line in invoice.items]

    def _apply_effects(self, invoice: Invoice):
        """Move stock and post the outstanding balance to the party"""
        self.stock.apply(self._stock_lines(invoice), stock_sign(invoice.type))
        self.ledger.apply(invoice.party_id, invoice.balance, invoice_increases_balance(invoice.type))

    def _reverse_effects(self, invoice: Invoice):
        """Undo _apply_effects using the invoice as currently stored"""
        self.stock.reverse(self._stock_lines(invoice), stock_sign(invoice.type))
        self.ledger.reverse(invoice.party_id, invoice.balance, invoice_increases_balance(invoice.type))

    # ==================== WRITE ====================

    def create(self, invoice_data: InvoiceCreate) -> Invoice:
        party = self._get_party(invoice_data.party_id)
        lines = self._resolve_lines(invoice_data.type.value, invoice_data)
        totals = self._calculate(invoice_data, lines)

        with atomic(self.db):
            invoice = Invoice(invoice_number=self.sequence.get_next_number())
            self._fill(invoice, invoice_data, party, lines, totals)
            self.db.add(invoice)
            self.db.flush()
            self._apply_effects(invoice)
            invoice_id = invoice.id
            invoice_number = invoice.invoice_number

        logger.info(
            f"Created {invoice_data.type.value} invoice {invoice_number} for party {party.id}: "
            f"grand total {totals.grand_total}, balance {totals.balance}"
        )
        return self.get(invoice_id)

    def update(self, invoice_id: int, invoice_data: InvoiceCreate) -> Invoice:
        """
        Replace an unpaid invoice's contents.

        The old stock and ledger effects are reverted with the old type,
        lines and balance before the new ones are applied, all in one
        transaction.
        """
        with atomic(self.db):
            invoice = self._lock(invoice_id)
            if (invoice.paid_amount or Decimal("0")) > 0:
                raise ConflictError(
                    f"Invoice {invoice.invoice_number} has payments recorded and cannot be edited"
                )

            party = self._get_party(invoice_data.party_id)
            lines = self._resolve_lines(invoice_data.type.value, invoice_data)
            totals = self._calculate(invoice_data, lines)

            self._reverse_effects(invoice)
            invoice.items.clear()
            self.db.flush()

            self._fill(invoice, invoice_data, party, lines, totals)
            self.db.flush()
            self._apply_effects(invoice)
            invoice_number = invoice.invoice_number

        logger.info(
            f"Updated invoice {invoice_number}: grand total {totals.grand_total}, balance {totals.balance}"
        )
        return self.get(invoice_id)

    def delete(self, invoice_id: int) -> None:
        with atomic(self.db):
            invoice = self._lock(invoice_id)
            invoice_number = invoice.invoice_number
            self._reverse_effects(invoice)

            detached = self.db.query(Payment).filter(
                Payment.invoice_id == invoice.id
            ).update({Payment.invoice_id: None}, synchronize_session=False)
            if detached:
                logger.warning(f"Detached {detached} payment(s) from deleted invoice {invoice_number}")

            self.db.query(InvoiceItem).filter(
                InvoiceItem.invoice_id == invoice.id
            ).delete(synchronize_session=False)
            self.db.expire(invoice, ["items", "payments"])
            self.db.delete(invoice)

        logger.info(f"Deleted invoice {invoice_number}")
