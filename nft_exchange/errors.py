"""Exchange rejections, one class per failure category."""

from typing import Optional

from .terms import (
    ASKING_PRICE_REQUIRED,
    ITEM_NOT_FOUND,
    ITEM_NOT_LISTED,
    MUST_OWN_ITEM,
    PRICE_MUST_EQUAL_LISTING,
    WRONG_RECEIVER,
    ExchangeTerms,
)


class ExchangeError(Exception):
    """Base class. ``reason`` is the revert reason the exchange reports."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class InvalidPayment(ExchangeError):
    """Wrong amount (or wrong receiver) attached to a call."""


class InsufficientPayment(InvalidPayment):
    """Buyer did not send exactly price + royalty fee + success fee."""


class Unauthorized(ExchangeError):
    """Caller lacks the owner or item-owner role."""


class NotFound(ExchangeError):
    """Unknown item id."""


class NotListed(ExchangeError):
    """Item exists but is not for sale."""


def classify(message: str, terms: ExchangeTerms) -> Optional[ExchangeError]:
    """
    Map an on-chain failure message to an ExchangeError.

    Algod reports a failed ``assert`` with the surrounding TEAL, and the
    contracts annotate every assert with its reason, so the reason string
    appears verbatim in the message. Returns None when nothing matches.
    """
    table = (
        (ASKING_PRICE_REQUIRED,       InsufficientPayment),
        (PRICE_MUST_EQUAL_LISTING,    InvalidPayment),
        (WRONG_RECEIVER,              InvalidPayment),
        (MUST_OWN_ITEM,               Unauthorized),
        (terms.update_price_reason,   Unauthorized),
        (terms.withdraw_reason,       Unauthorized),
        (terms.transfer_reason,       Unauthorized),
        (ITEM_NOT_FOUND,              NotFound),
        (ITEM_NOT_LISTED,             NotListed),
    )
    for reason, error_cls in table:
        if reason in message:
            return error_cls(reason)
    return None
