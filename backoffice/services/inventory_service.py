"""
Inventory Service - Items and stock levels
"""
from typing import Optional, List
from decimal import Decimal
import logging

from sqlalchemy.orm import Session

from backoffice.core.database import atomic
from backoffice.core.exceptions import ConflictError, NotFoundError
from backoffice.models import Item, InvoiceItem
from backoffice.schemas import ItemCreate, ItemUpdate

logger = logging.getLogger(__name__)


class ItemService:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, item_id: int) -> Optional[Item]:
        return self.db.query(Item).filter(Item.id == item_id).first()

    def get(self, item_id: int) -> Item:
        item = self.get_by_id(item_id)
        if not item:
            raise NotFoundError("Item not found")
        return item

    def get_all(self) -> List[Item]:
        return self.db.query(Item).order_by(Item.id.desc()).all()

    def get_low_stock(self) -> List[Item]:
        """Get items at or below their low stock alert"""
        return self.db.query(Item).filter(
            Item.low_stock_alert.isnot(None),
            Item.current_stock <= Item.low_stock_alert
        ).order_by(Item.name).all()

    def is_name_unique(self, name: str, exclude_item_id: int = None) -> bool:
        query = self.db.query(Item).filter(Item.name == name)
        if exclude_item_id:
            query = query.filter(Item.id != exclude_item_id)
        return query.first() is None

    def create(self, item_data: ItemCreate) -> Item:
        if not self.is_name_unique(item_data.name):
            raise ConflictError("An item with this name already exists")

        with atomic(self.db):
            item = Item(
                name=item_data.name,
                hsn_sac=item_data.hsn_sac or None,
                unit=item_data.unit,
                purchase_rate=item_data.purchase_rate or Decimal("0"),
                sale_rate=item_data.sale_rate,
                tax_rate=item_data.tax_rate,
                current_stock=item_data.current_stock or Decimal("0"),
                low_stock_alert=item_data.low_stock_alert
            )
            self.db.add(item)
            self.db.flush()
            item_id = item.id

        logger.info(f"Created item {item_id} '{item_data.name}'")
        return self.get(item_id)

    def update(self, item_id: int, item_data: ItemUpdate) -> Item:
        item = self.get(item_id)
        update_data = item_data.model_dump(exclude_unset=True)

        if update_data.get('name') and update_data['name'] != item.name:
            if not self.is_name_unique(update_data['name'], exclude_item_id=item_id):
                raise ConflictError("Another item with this name already exists")

        with atomic(self.db):
            for key, value in update_data.items():
                if value is None and key not in ('hsn_sac', 'low_stock_alert'):
                    # Required columns keep their value when sent as null
                    continue
                setattr(item, key, value)

        return self.get(item_id)

    def delete(self, item_id: int) -> None:
        item = self.get(item_id)

        used_in_invoice = self.db.query(InvoiceItem.id).filter(
            InvoiceItem.item_id == item_id
        ).first()
        if used_in_invoice:
            raise ConflictError("Cannot delete item because it is used in one or more invoices")

        with atomic(self.db):
            self.db.delete(item)

        logger.info(f"Deleted item {item_id}")
