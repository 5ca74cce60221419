from .errors import (
    ExchangeError,
    InsufficientPayment,
    InvalidPayment,
    NotFound,
    NotListed,
    Unauthorized,
)
from .ledger import Item, MarketplaceLedger, Quote
from .terms import INDIAN_TERMS, WORLD_TERMS, ExchangeTerms

__all__ = [
    "ExchangeError",
    "ExchangeTerms",
    "INDIAN_TERMS",
    "InsufficientPayment",
    "InvalidPayment",
    "Item",
    "MarketplaceLedger",
    "NotFound",
    "NotListed",
    "Quote",
    "Unauthorized",
    "WORLD_TERMS",
]
