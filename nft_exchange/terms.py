"""
Exchange terms shared by the on-chain programs and the off-chain model.

Both the PyTeal contracts and MarketplaceLedger read their listing price,
fee rates and revert reasons from here.
"""

from dataclasses import dataclass

from algosdk.util import algos_to_microalgos


BASIS_POINTS = 10_000

# Revert reasons common to both exchanges
PRICE_MUST_EQUAL_LISTING = "Price must be equal to listing price"
ASKING_PRICE_REQUIRED    = "Please submit the asking price in order to complete the purchase"
MUST_OWN_ITEM            = "You must own this item in order to list it for sale"
ITEM_NOT_FOUND           = "Item does not exist"
ITEM_NOT_LISTED          = "Item is not listed for sale"
WRONG_RECEIVER           = "Payment must be sent to the exchange"

OWNABLE_REASON = "Ownable: caller is not the owner"


@dataclass(frozen=True)
class ExchangeTerms:
    name: str
    listing_price: int                  # microAlgos
    royalty_fee_bps: int = 500          # 5%
    success_fee_bps: int = 250          # 2.5%
    update_price_reason: str = OWNABLE_REASON
    withdraw_reason: str = OWNABLE_REASON
    transfer_reason: str = OWNABLE_REASON

    def royalty_fee(self, price: int) -> int:
        return price * self.royalty_fee_bps // BASIS_POINTS

    def success_fee(self, price: int) -> int:
        return price * self.success_fee_bps // BASIS_POINTS

    def asking_price(self, price: int) -> int:
        """Exact amount a buyer must send for an item listed at ``price``."""
        return price + self.royalty_fee(price) + self.success_fee(price)


INDIAN_TERMS = ExchangeTerms(
    name="IndianNFTExchange",
    listing_price=algos_to_microalgos(0.025),
    update_price_reason="Only owner can update listing price",
    withdraw_reason="Only owner can withdraw",
    transfer_reason="Only owner can transfer ownership",
)

WORLD_TERMS = ExchangeTerms(
    name="WorldNFTExchange",
    listing_price=0,
)
