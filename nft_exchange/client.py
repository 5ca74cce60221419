"""
Client for a deployed exchange application.

Wraps Beaker's ApplicationClient: attaches the payment transaction each
payable method expects, supplies box and account references, pools the
fee for inner payments and turns failed asserts into ExchangeError
subclasses.
"""

from contextlib import contextmanager
from typing import Optional

import structlog
from algosdk.atomic_transaction_composer import TransactionSigner, TransactionWithSigner
from algosdk.transaction import PaymentTxn
from algosdk.v2client import algod
from beaker import Application
from beaker.client import ApplicationClient, LogicException

from contracts.nft_exchange import item_box_name

from . import config
from .errors import classify
from .ledger import Item, Quote
from .terms import ExchangeTerms

logger = structlog.get_logger(__name__)


def get_algod() -> algod.AlgodClient:
    return algod.AlgodClient(config.ALGOD_TOKEN, config.ALGOD_ADDRESS)


class ExchangeClient:
    def __init__(
        self,
        algod_client: algod.AlgodClient,
        app: Application,
        terms: ExchangeTerms,
        signer: TransactionSigner,
        sender: str,
        app_id: int = config.APP_ID,
    ):
        self.algod = algod_client
        self.app = app
        self.terms = terms
        self.signer = signer
        self.sender = sender
        self.app_client = ApplicationClient(
            algod_client, app, app_id=app_id, signer=signer, sender=sender
        )

    # ─────────────────────────────────────────
    #  DEPLOY
    # ─────────────────────────────────────────
    @classmethod
    def deploy(
        cls,
        algod_client: algod.AlgodClient,
        app: Application,
        terms: ExchangeTerms,
        signer: TransactionSigner,
        sender: str,
        funding: int = config.APP_FUNDING,
    ) -> "ExchangeClient":
        """Create the application (``sender`` becomes its owner) and fund it."""
        exchange = cls(algod_client, app, terms, signer, sender, app_id=0)
        app_id, app_addr, tx_id = exchange.app_client.create()
        exchange.app_client.fund(funding)
        logger.info("exchange_deployed", name=terms.name, app_id=app_id, address=app_addr, tx_id=tx_id)
        return exchange

    def connect(self, signer: TransactionSigner, sender: str) -> "ExchangeClient":
        """Same application, different calling account."""
        return type(self)(self.algod, self.app, self.terms, signer, sender, app_id=self.app_id)

    @property
    def app_id(self) -> int:
        return self.app_client.app_id

    @property
    def address(self) -> str:
        return self.app_client.app_addr

    # ─────────────────────────────────────────
    #  INTERNAL HELPERS
    # ─────────────────────────────────────────
    @contextmanager
    def _reverts(self):
        try:
            yield
        except LogicException as exc:
            error = classify(str(exc), self.terms)
            if error is None:
                raise
            logger.warning("exchange_call_rejected", app_id=self.app_id, reason=error.reason)
            raise error from exc

    def _call(self, method: str, inner_txns: int = 0, **kwargs):
        sp = self.algod.suggested_params()
        if inner_txns:
            sp.flat_fee = True
            sp.fee = sp.min_fee * (1 + inner_txns)
        with self._reverts():
            result = self.app_client.call(method, suggested_params=sp, **kwargs)
        return result.return_value

    def _payment(self, amount: int) -> TransactionWithSigner:
        sp = self.algod.suggested_params()
        txn = PaymentTxn(sender=self.sender, sp=sp, receiver=self.address, amt=amount)
        return TransactionWithSigner(txn=txn, signer=self.signer)

    def _boxes(self, item_id: int):
        return [(self.app_id, item_box_name(item_id))]

    def _item_count(self) -> int:
        return self.app_client.get_global_state().get("item_count", 0)

    # ─────────────────────────────────────────
    #  OWNER
    # ─────────────────────────────────────────
    def owner(self) -> str:
        return self._call("get_owner")

    def get_listing_price(self) -> int:
        return self._call("get_listing_price")

    def update_listing_price(self, price: int) -> None:
        self._call("update_listing_price", price=price)
        logger.info("listing_price_updated", app_id=self.app_id, price=price)

    def transfer_ownership(self, new_owner: str) -> None:
        self._call("transfer_ownership", new_owner=new_owner)
        logger.info("ownership_transferred", app_id=self.app_id, new_owner=new_owner)

    def withdraw(self) -> int:
        amount = self._call("withdraw", inner_txns=1)
        logger.info("withdrawn", app_id=self.app_id, owner=self.sender, amount=amount)
        return amount

    def deposit(self, amount: int) -> None:
        self._call("deposit", payment=self._payment(amount))

    # ─────────────────────────────────────────
    #  MARKETPLACE
    # ─────────────────────────────────────────
    def create_item(self, token_uri: str, price: int, paid_value: Optional[int] = None) -> int:
        """List a new item. ``paid_value`` defaults to the current listing price."""
        if paid_value is None:
            paid_value = self.get_listing_price()
        item_id = self._call(
            "create_item",
            token_uri=token_uri,
            price=price,
            payment=self._payment(paid_value),
            boxes=self._boxes(self._item_count() + 1),
        )
        logger.info("item_created", app_id=self.app_id, item_id=item_id, creator=self.sender, price=price)
        return item_id

    def buy_item(self, item_id: int, paid_value: Optional[int] = None) -> Quote:
        """Buy a listed item. ``paid_value`` defaults to the exact asking price."""
        item = self.get_item(item_id)
        quote = self.quote(item_id)
        if paid_value is None:
            paid_value = quote.total
        self._call(
            "buy_item",
            inner_txns=2,
            item_id=item_id,
            payment=self._payment(paid_value),
            accounts=sorted({item.creator, item.seller}),
            boxes=self._boxes(item_id),
        )
        logger.info("item_bought", app_id=self.app_id, item_id=item_id, buyer=self.sender, paid=paid_value)
        return quote

    def resell_item(self, item_id: int, price: int, paid_value: Optional[int] = None) -> None:
        if paid_value is None:
            paid_value = self.get_listing_price()
        self._call(
            "resell_item",
            item_id=item_id,
            price=price,
            payment=self._payment(paid_value),
            boxes=self._boxes(item_id),
        )
        logger.info("item_relisted", app_id=self.app_id, item_id=item_id, seller=self.sender, price=price)

    # ─────────────────────────────────────────
    #  READ-ONLY QUERIES
    # ─────────────────────────────────────────
    def get_item(self, item_id: int) -> Item:
        return Item.from_abi(self._call("get_item", item_id=item_id, boxes=self._boxes(item_id)))

    def get_latest_item(self) -> Item:
        return Item.from_abi(self._call("get_latest_item", boxes=self._boxes(self._item_count())))

    def get_item_price(self, item_id: int) -> int:
        return self._call("get_item_price", item_id=item_id, boxes=self._boxes(item_id))

    def get_royalty_fee_for_item(self, item_id: int) -> int:
        return self._call("get_royalty_fee_for_item", item_id=item_id, boxes=self._boxes(item_id))

    def get_success_fee_for_item(self, item_id: int) -> int:
        return self._call("get_success_fee_for_item", item_id=item_id, boxes=self._boxes(item_id))

    def quote(self, item_id: int) -> Quote:
        return Quote(
            price=self.get_item(item_id).price,
            royalty_fee=self.get_royalty_fee_for_item(item_id),
            success_fee=self.get_success_fee_for_item(item_id),
        )
