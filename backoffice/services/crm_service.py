"""
CRM Service - Parties (customers and suppliers)
"""
from typing import Optional, List
from decimal import Decimal
import logging

from sqlalchemy.orm import Session, selectinload

from backoffice.core.database import atomic
from backoffice.core.exceptions import ConflictError, NotFoundError
from backoffice.models import Party, Invoice, Payment
from backoffice.schemas import PartyCreate, PartyUpdate

logger = logging.getLogger(__name__)


class PartyService:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, party_id: int) -> Optional[Party]:
        return self.db.query(Party).filter(Party.id == party_id).first()

    def get(self, party_id: int) -> Party:
        party = self.get_by_id(party_id)
        if not party:
            raise NotFoundError("Party not found")
        return party

    def get_with_activity(self, party_id: int) -> Party:
        """Party with its invoices and payments loaded"""
        party = self.db.query(Party).options(
            selectinload(Party.invoices),
            selectinload(Party.payments).joinedload(Payment.invoice)
        ).filter(Party.id == party_id).first()
        if not party:
            raise NotFoundError("Party not found")
        return party

    def get_all(self, type: str = None) -> List[Party]:
        query = self.db.query(Party)
        if type:
            query = query.filter(Party.type == type)
        return query.order_by(Party.id.desc()).all()

    def create(self, party_data: PartyCreate) -> Party:
        opening_balance = party_data.opening_balance or Decimal("0")

        with atomic(self.db):
            party = Party(
                name=party_data.name,
                type=party_data.type.value,
                contact=party_data.contact,
                address=party_data.address,
                gstin=party_data.gstin,
                opening_balance=opening_balance,
                current_balance=opening_balance
            )
            self.db.add(party)
            self.db.flush()
            party_id = party.id

        logger.info(f"Created {party_data.type.value} {party_id} '{party_data.name}'")
        return self.get(party_id)

    def update(self, party_id: int, party_data: PartyUpdate) -> Party:
        party = self.get(party_id)
        update_data = party_data.model_dump(exclude_unset=True)

        with atomic(self.db):
            for key, value in update_data.items():
                if key in ('name', 'type') and value is None:
                    continue
                if key == 'type':
                    value = value.value
                setattr(party, key, value)

        return self.get(party_id)

    def delete(self, party_id: int) -> None:
        party = self.get(party_id)

        has_invoices = self.db.query(Invoice.id).filter(Invoice.party_id == party_id).first()
        has_payments = self.db.query(Payment.id).filter(Payment.party_id == party_id).first()
        if has_invoices or has_payments:
            raise ConflictError("Cannot delete party with existing invoices or payments")

        with atomic(self.db):
            self.db.delete(party)

        logger.info(f"Deleted party {party_id}")
