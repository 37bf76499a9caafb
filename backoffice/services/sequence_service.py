"""
Document Sequence Service for atomic number generation

The counter row is read with SELECT ... FOR UPDATE and incremented inside
the caller's transaction, so two concurrent invoices cannot draw the same
number and a rolled-back invoice gives its number back.
"""
from sqlalchemy import func
from sqlalchemy.orm import Session

from backoffice.models import DocumentSequence, Invoice

INVOICE_SEQUENCE = "INV"

# Where a brand-new counter starts, so numbering continues after existing rows
SEED_COLUMNS = {
    INVOICE_SEQUENCE: Invoice.id,
}


class DocumentSequenceService:
    def __init__(self, db: Session, prefix: str = "INV-", padding: int = 4):
        self.db = db
        self.prefix = prefix
        self.padding = padding

    def _format(self, number: int) -> str:
        return f"{self.prefix}{number:0{self.padding}d}"

    def _seed(self, name: str) -> int:
        column = SEED_COLUMNS.get(name)
        if column is None:
            return 0
        return self.db.query(func.max(column)).scalar() or 0

    def get_next_number(self, name: str = INVOICE_SEQUENCE) -> str:
        """Increment the counter and return the formatted number."""
        sequence = self.db.query(DocumentSequence).filter(
            DocumentSequence.name == name
        ).with_for_update().populate_existing().first()

        if sequence is None:
            sequence = DocumentSequence(name=name, current_number=self._seed(name))
            self.db.add(sequence)

        sequence.current_number += 1
        self.db.flush()
        return self._format(sequence.current_number)

    def preview_next_number(self, name: str = INVOICE_SEQUENCE) -> str:
        """What the next number would be, without taking it"""
        sequence = self.db.query(DocumentSequence).filter(DocumentSequence.name == name).first()
        current = sequence.current_number if sequence else self._seed(name)
        return self._format(current + 1)
