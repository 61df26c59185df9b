from .auth import AdminUser, SessionToken
from .business import PosBusiness, BUSINESS_STATUSES
from .catalog import Product
from .sales import Transaction, TransactionLine, ReceiptSequence, PAYMENT_METHODS

__all__ = [
    'AdminUser', 'SessionToken',
    'PosBusiness', 'BUSINESS_STATUSES',
    'Product',
    'Transaction', 'TransactionLine', 'ReceiptSequence', 'PAYMENT_METHODS',
]
