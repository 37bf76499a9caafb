# API v1 Package
from backoffice.api.v1 import inventory, crm, invoices, payments

__all__ = [
    'inventory',
    'crm',
    'invoices',
    'payments',
]
