# Services Package
from backoffice.services.inventory_service import ItemService
from backoffice.services.crm_service import PartyService
from backoffice.services.invoice_service import InvoiceService
from backoffice.services.payment_service import PaymentService
from backoffice.services.sequence_service import DocumentSequenceService
from backoffice.services.stock_service import StockAdjuster
from backoffice.services.ledger_service import LedgerUpdater

__all__ = [
    'ItemService',
    'PartyService',
    'InvoiceService',
    'PaymentService',
    'DocumentSequenceService',
    'StockAdjuster',
    'LedgerUpdater',
]
