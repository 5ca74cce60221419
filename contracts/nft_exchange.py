"""
╔══════════════════════════════════════════════════════════════════╗
║          NFT Exchange on Algorand                               ║
║          Smart Contract: nft_exchange.py                        ║
║                                                                  ║
║  Features:                                                       ║
║  • Item listing against a flat listing fee                      ║
║  • Fixed-price purchase with creator royalty + success fee      ║
║  • Resale by the current holder                                 ║
║  • Owner-only listing price updates and fee withdrawal          ║
╚══════════════════════════════════════════════════════════════════╝

``build_exchange`` assembles one exchange application from a set of
ExchangeTerms; the Indian and World exchanges are two such builds.
"""

from pyteal import *
from beaker import Application, GlobalStateValue

from nft_exchange.terms import (
    ASKING_PRICE_REQUIRED,
    BASIS_POINTS,
    ITEM_NOT_FOUND,
    ITEM_NOT_LISTED,
    MUST_OWN_ITEM,
    PRICE_MUST_EQUAL_LISTING,
    WRONG_RECEIVER,
    ExchangeTerms,
)


# ─────────────────────────────────────────────
#  ITEM RECORD  (stored in Box)
# ─────────────────────────────────────────────
# Box key   = Concat(Bytes("item"), itob(item_id))
# Box value = ABI-encoded Item tuple below.
#
# owner is the application account while the item is listed and the
# buyer once sold; seller is whoever listed it and receives the price.

ITEM_BOX_PREFIX = b"item"


class Item(abi.NamedTuple):
    id: abi.Field[abi.Uint64]
    creator: abi.Field[abi.Address]
    owner: abi.Field[abi.Address]
    seller: abi.Field[abi.Address]
    price: abi.Field[abi.Uint64]
    token_uri: abi.Field[abi.String]
    currently_listed: abi.Field[abi.Bool]


def item_box_name(item_id: int) -> bytes:
    """Box name for ``item_id``, as clients must pass it in box references."""
    return ITEM_BOX_PREFIX + item_id.to_bytes(8, "big")


# ─────────────────────────────────────────────
#  INTERNAL HELPERS
# ─────────────────────────────────────────────
def item_key(item_id: Expr) -> Expr:
    return Concat(Bytes(ITEM_BOX_PREFIX), Itob(item_id))


def load_item(item_id: Expr, item: Item) -> Expr:
    contents = BoxGet(item_key(item_id))
    return Seq(
        contents,
        Assert(contents.hasValue(), comment=ITEM_NOT_FOUND),
        item.decode(contents.value()),
    )


def store_item(item: Item) -> Expr:
    item_id = abi.Uint64()
    return Seq(
        item.id.store_into(item_id),
        BoxPut(item_key(item_id.get()), item.encode()),
    )


def fee(price: Expr, bps: int) -> Expr:
    """``price * bps / 10000`` rounded down, without overflowing uint64."""
    return WideRatio([price, Int(bps)], [Int(BASIS_POINTS)])


def check_payment(payment: abi.PaymentTransaction, amount: Expr, reason: str) -> Expr:
    return Seq(
        Assert(
            payment.get().receiver() == Global.current_application_address(),
            comment=WRONG_RECEIVER,
        ),
        Assert(payment.get().amount() == amount, comment=reason),
    )


@Subroutine(TealType.none)
def pay(receiver: Expr, amount: Expr) -> Expr:
    """Inner payment; its fee is pooled from the outer application call."""
    return Seq(
        InnerTxnBuilder.Begin(),
        InnerTxnBuilder.SetFields({
            TxnField.type_enum: TxnType.Payment,
            TxnField.receiver:  receiver,
            TxnField.amount:    amount,
            TxnField.fee:       Int(0),
        }),
        InnerTxnBuilder.Submit(),
    )


# ══════════════════════════════════════════════
#  APPLICATION
# ══════════════════════════════════════════════
def build_exchange(terms: ExchangeTerms) -> Application:
    class ExchangeState:
        owner               = GlobalStateValue(TealType.bytes,  descr="Exchange owner; collects listing and success fees")
        listing_price       = GlobalStateValue(
            TealType.uint64,
            default=Int(terms.listing_price),
            descr="Flat fee in microAlgos to list or relist an item",
        )
        item_count          = GlobalStateValue(TealType.uint64, descr="Id of the most recently created item")
        accumulated_balance = GlobalStateValue(TealType.uint64, descr="Fees withdrawable by the owner")

    app = Application(
        terms.name,
        descr="Fixed-price NFT exchange with listing fee, creator royalty and success fee",
        state=ExchangeState(),
    )

    def only_owner(reason: str) -> Expr:
        return Assert(Txn.sender() == app.state.owner.get(), comment=reason)

    def credit(amount: Expr) -> Expr:
        return app.state.accumulated_balance.set(app.state.accumulated_balance.get() + amount)

    def read_price(item_id: abi.Uint64, price: abi.Uint64) -> Expr:
        item = Item()
        return Seq(
            load_item(item_id.get(), item),
            item.price.store_into(price),
        )

    # ─────────────────────────────────────────
    #  LIFECYCLE
    # ─────────────────────────────────────────
    @app.create(bare=True)
    def create() -> Expr:
        """Deploy the exchange; the deployer becomes its owner."""
        return Seq(
            app.initialize_global_state(),
            app.state.owner.set(Txn.sender()),
        )

    # ─────────────────────────────────────────
    #  OWNER
    # ─────────────────────────────────────────
    @app.external
    def update_listing_price(price: abi.Uint64) -> Expr:
        return Seq(
            only_owner(terms.update_price_reason),
            app.state.listing_price.set(price.get()),
        )

    @app.external
    def transfer_ownership(new_owner: abi.Address) -> Expr:
        return Seq(
            only_owner(terms.transfer_reason),
            app.state.owner.set(new_owner.get()),
        )

    @app.external
    def withdraw(*, output: abi.Uint64) -> Expr:
        """Pay every collected fee to the owner. Returns the amount paid."""
        return Seq(
            only_owner(terms.withdraw_reason),
            output.set(app.state.accumulated_balance.get()),
            app.state.accumulated_balance.set(Int(0)),
            pay(Txn.sender(), output.get()),
        )

    @app.external
    def deposit(payment: abi.PaymentTransaction) -> Expr:
        """Credit a plain payment to the owner's withdrawable balance."""
        return Seq(
            Assert(
                payment.get().receiver() == Global.current_application_address(),
                comment=WRONG_RECEIVER,
            ),
            credit(payment.get().amount()),
        )

    # ─────────────────────────────────────────
    #  MARKETPLACE: CREATE / BUY / RESELL
    # ─────────────────────────────────────────
    @app.external
    def create_item(
        token_uri: abi.String,
        price: abi.Uint64,
        payment: abi.PaymentTransaction,
        *,
        output: abi.Uint64,
    ) -> Expr:
        """
        List a new item for sale. The attached payment must equal the
        listing price. Returns the new item id.
        """
        item    = Item()
        creator = abi.Address()
        holder  = abi.Address()
        listed  = abi.Bool()

        return Seq(
            check_payment(payment, app.state.listing_price.get(), PRICE_MUST_EQUAL_LISTING),
            credit(payment.get().amount()),

            app.state.item_count.set(app.state.item_count.get() + Int(1)),
            output.set(app.state.item_count.get()),

            creator.set(Txn.sender()),
            holder.set(Global.current_application_address()),
            listed.set(True),
            item.set(output, creator, holder, creator, price, token_uri, listed),
            store_item(item),
        )

    @app.external
    def buy_item(item_id: abi.Uint64, payment: abi.PaymentTransaction) -> Expr:
        """
        Purchase a listed item. The attached payment must equal
        price + royalty fee + success fee.

        The royalty goes to the creator, the price to the seller and the
        success fee to the owner's withdrawable balance.
        """
        item      = Item()
        creator   = abi.Address()
        buyer     = abi.Address()
        seller    = abi.Address()
        price     = abi.Uint64()
        token_uri = abi.String()
        listed    = abi.Bool()
        royalty   = ScratchVar(TealType.uint64)
        success   = ScratchVar(TealType.uint64)

        return Seq(
            load_item(item_id.get(), item),
            item.currently_listed.store_into(listed),
            Assert(listed.get(), comment=ITEM_NOT_LISTED),

            item.creator.store_into(creator),
            item.seller.store_into(seller),
            item.price.store_into(price),
            item.token_uri.store_into(token_uri),

            royalty.store(fee(price.get(), terms.royalty_fee_bps)),
            success.store(fee(price.get(), terms.success_fee_bps)),
            check_payment(
                payment,
                price.get() + royalty.load() + success.load(),
                ASKING_PRICE_REQUIRED,
            ),

            pay(creator.get(), royalty.load()),
            pay(seller.get(), price.get()),
            credit(success.load()),

            buyer.set(Txn.sender()),
            listed.set(False),
            item.set(item_id, creator, buyer, seller, price, token_uri, listed),
            store_item(item),
        )

    @app.external
    def resell_item(
        item_id: abi.Uint64,
        price: abi.Uint64,
        payment: abi.PaymentTransaction,
    ) -> Expr:
        """Relist an item you own at a new price, paying the listing fee again."""
        item      = Item()
        creator   = abi.Address()
        holder    = abi.Address()
        seller    = abi.Address()
        token_uri = abi.String()
        listed    = abi.Bool()

        return Seq(
            check_payment(payment, app.state.listing_price.get(), PRICE_MUST_EQUAL_LISTING),
            load_item(item_id.get(), item),
            item.owner.store_into(holder),
            Assert(holder.get() == Txn.sender(), comment=MUST_OWN_ITEM),
            credit(payment.get().amount()),

            item.creator.store_into(creator),
            item.token_uri.store_into(token_uri),
            seller.set(Txn.sender()),
            holder.set(Global.current_application_address()),
            listed.set(True),
            item.set(item_id, creator, holder, seller, price, token_uri, listed),
            store_item(item),
        )

    # ─────────────────────────────────────────
    #  READ-ONLY
    # ─────────────────────────────────────────
    @app.external(read_only=True)
    def get_owner(*, output: abi.Address) -> Expr:
        return output.set(app.state.owner.get())

    @app.external(read_only=True)
    def get_listing_price(*, output: abi.Uint64) -> Expr:
        return output.set(app.state.listing_price.get())

    @app.external(read_only=True)
    def get_item(item_id: abi.Uint64, *, output: Item) -> Expr:
        return load_item(item_id.get(), output)

    @app.external(read_only=True)
    def get_latest_item(*, output: Item) -> Expr:
        return load_item(app.state.item_count.get(), output)

    @app.external(read_only=True)
    def get_item_price(item_id: abi.Uint64, *, output: abi.Uint64) -> Expr:
        """Exact amount a buyer must attach to ``buy_item``."""
        price = abi.Uint64()
        return Seq(
            read_price(item_id, price),
            output.set(
                price.get()
                + fee(price.get(), terms.royalty_fee_bps)
                + fee(price.get(), terms.success_fee_bps)
            ),
        )

    @app.external(read_only=True)
    def get_royalty_fee_for_item(item_id: abi.Uint64, *, output: abi.Uint64) -> Expr:
        price = abi.Uint64()
        return Seq(
            read_price(item_id, price),
            output.set(fee(price.get(), terms.royalty_fee_bps)),
        )

    @app.external(read_only=True)
    def get_success_fee_for_item(item_id: abi.Uint64, *, output: abi.Uint64) -> Expr:
        price = abi.Uint64()
        return Seq(
            read_price(item_id, price),
            output.set(fee(price.get(), terms.success_fee_bps)),
        )

    return app
