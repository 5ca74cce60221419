"""Indian NFT Exchange: 0.025 Algo listing fee, explicit owner-only reasons."""

from nft_exchange.terms import INDIAN_TERMS

from contracts.nft_exchange import build_exchange


app = build_exchange(INDIAN_TERMS)


if __name__ == "__main__":
    spec = app.build()
    spec.export("./artifacts/indian")
    print("✓ IndianNFTExchange compiled → ./artifacts/indian/")
