"""
Stock Adjuster - applies invoice quantities to item stock
"""
from decimal import Decimal
from typing import Dict, Iterable, Optional, Tuple
import logging

from sqlalchemy.orm import Session

from backoffice.core.exceptions import NotFoundError
from backoffice.models import Item, InvoiceType

logger = logging.getLogger(__name__)

StockLine = Tuple[Optional[int], Decimal]


def stock_sign(invoice_type: str) -> int:
    """Sales take stock out, purchases bring it in."""
    return -1 if invoice_type == InvoiceType.SALE.value else 1


class StockAdjuster:
    def __init__(self, db: Session, strict: bool = False):
        self.db = db
        self.strict = strict

    def apply(self, lines: Iterable[StockLine], sign: int) -> Dict[int, Decimal]:
        """
        Move ``sign * quantity`` into each line's item, clamping at zero.

        Lines without an item are service lines and are skipped. Unknown
        items are skipped with a warning unless the adjuster is strict.
        Returns the new stock level per touched item.
        """
        new_levels = {}
        for item_id, quantity in lines:
            if item_id is None:
                continue

            item = self.db.query(Item).filter(
                Item.id == item_id
            ).with_for_update().populate_existing().first()
            if not item:
                if self.strict:
                    raise NotFoundError(f"Item {item_id} not found")
                logger.warning(f"Stock adjustment skipped: item {item_id} no longer exists")
                continue

            new_stock = (item.current_stock or Decimal("0")) + sign * Decimal(quantity)
            if new_stock < 0:
                logger.info(f"Stock for '{item.name}' clamped at 0 (would have been {new_stock})")
                new_stock = Decimal("0")

            item.current_stock = new_stock
            new_levels[item.id] = new_stock
            # Flush per line so a repeated item sees the previous line's result
            self.db.flush()

        return new_levels

    def reverse(self, lines: Iterable[StockLine], sign: int) -> Dict[int, Decimal]:
        """Undo an earlier ``apply`` made with ``sign``."""
        return self.apply(lines, -sign)
