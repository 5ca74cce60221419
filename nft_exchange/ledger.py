"""
Off-chain model of an NFT exchange.

MarketplaceLedger applies the same rules as the PyTeal application in
``contracts/nft_exchange.py``: listing fees, royalty and success fees,
resale and owner withdrawals. It keeps the exchange state in memory and
records every payment the exchange would make in ``payouts``, so a sale
can be dry-run or an on-chain run checked against it.
"""

from collections import defaultdict
from dataclasses import dataclass, replace
from typing import Dict

import structlog

from .errors import InsufficientPayment, InvalidPayment, NotFound, NotListed, Unauthorized
from .terms import (
    ASKING_PRICE_REQUIRED,
    ITEM_NOT_FOUND,
    ITEM_NOT_LISTED,
    MUST_OWN_ITEM,
    PRICE_MUST_EQUAL_LISTING,
    ExchangeTerms,
)

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Item:
    id: int
    creator: str
    owner: str
    seller: str
    price: int
    token_uri: str
    currently_listed: bool

    @classmethod
    def from_abi(cls, value) -> "Item":
        """Build from the ABI tuple returned by ``get_item`` / ``get_latest_item``."""
        item_id, creator, owner, seller, price, token_uri, listed = value
        return cls(item_id, creator, owner, seller, price, token_uri, bool(listed))


@dataclass(frozen=True)
class Quote:
    price: int
    royalty_fee: int
    success_fee: int

    @property
    def total(self) -> int:
        return self.price + self.royalty_fee + self.success_fee


class MarketplaceLedger:
    def __init__(self, terms: ExchangeTerms, owner: str, address: str = "exchange"):
        self.terms = terms
        self.owner = owner
        self.address = address
        self.listing_price = terms.listing_price
        self.accumulated_balance = 0
        self.item_count = 0
        self.items: Dict[int, Item] = {}
        self.payouts: Dict[str, int] = defaultdict(int)

    # ── owner ──────────────────────────────────
    def _require_owner(self, caller: str, reason: str) -> None:
        if caller != self.owner:
            raise Unauthorized(reason)

    def update_listing_price(self, caller: str, price: int) -> None:
        self._require_owner(caller, self.terms.update_price_reason)
        logger.info("listing_price_updated", old=self.listing_price, new=price)
        self.listing_price = price

    def transfer_ownership(self, caller: str, new_owner: str) -> None:
        self._require_owner(caller, self.terms.transfer_reason)
        logger.info("ownership_transferred", previous=self.owner, new=new_owner)
        self.owner = new_owner

    def deposit(self, amount: int) -> None:
        self.accumulated_balance += amount
        logger.info("deposited", amount=amount)

    def withdraw(self, caller: str) -> int:
        """Pay the whole withdrawable balance to the owner and return it."""
        self._require_owner(caller, self.terms.withdraw_reason)
        amount = self.accumulated_balance
        self.accumulated_balance = 0
        self.payouts[caller] += amount
        logger.info("withdrawn", owner=caller, amount=amount)
        return amount

    # ── items ──────────────────────────────────
    def get_item(self, item_id: int) -> Item:
        try:
            return self.items[item_id]
        except KeyError:
            raise NotFound(ITEM_NOT_FOUND) from None

    def get_latest_item(self) -> Item:
        return self.get_item(self.item_count)

    def quote(self, item_id: int) -> Quote:
        price = self.get_item(item_id).price
        return Quote(
            price=price,
            royalty_fee=self.terms.royalty_fee(price),
            success_fee=self.terms.success_fee(price),
        )

    def get_item_price(self, item_id: int) -> int:
        return self.quote(item_id).total

    def get_royalty_fee_for_item(self, item_id: int) -> int:
        return self.quote(item_id).royalty_fee

    def get_success_fee_for_item(self, item_id: int) -> int:
        return self.quote(item_id).success_fee

    def create_item(self, caller: str, token_uri: str, price: int, paid_value: int) -> int:
        if paid_value != self.listing_price:
            raise InvalidPayment(PRICE_MUST_EQUAL_LISTING)

        self.item_count += 1
        item = Item(
            id=self.item_count,
            creator=caller,
            owner=self.address,
            seller=caller,
            price=price,
            token_uri=token_uri,
            currently_listed=True,
        )
        self.items[item.id] = item
        self.accumulated_balance += paid_value
        logger.info("item_created", item_id=item.id, creator=caller, price=price)
        return item.id

    def buy_item(self, caller: str, item_id: int, paid_value: int) -> Quote:
        item = self.get_item(item_id)
        if not item.currently_listed:
            raise NotListed(ITEM_NOT_LISTED)

        quote = self.quote(item_id)
        if paid_value != quote.total:
            raise InsufficientPayment(ASKING_PRICE_REQUIRED)

        self.payouts[item.creator] += quote.royalty_fee
        self.payouts[item.seller] += quote.price
        self.accumulated_balance += quote.success_fee
        self.items[item_id] = replace(item, owner=caller, currently_listed=False)
        logger.info(
            "item_sold",
            item_id=item_id,
            buyer=caller,
            seller=item.seller,
            price=quote.price,
            royalty_fee=quote.royalty_fee,
            success_fee=quote.success_fee,
        )
        return quote

    def resell_item(self, caller: str, item_id: int, price: int, paid_value: int) -> None:
        if paid_value != self.listing_price:
            raise InvalidPayment(PRICE_MUST_EQUAL_LISTING)
        item = self.get_item(item_id)
        if caller != item.owner:
            raise Unauthorized(MUST_OWN_ITEM)

        self.items[item_id] = replace(
            item,
            owner=self.address,
            seller=caller,
            price=price,
            currently_listed=True,
        )
        self.accumulated_balance += paid_value
        logger.info("item_relisted", item_id=item_id, seller=caller, price=price)
