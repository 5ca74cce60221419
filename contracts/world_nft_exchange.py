"""World NFT Exchange: free listing, Ownable-style owner checks."""

from nft_exchange.terms import WORLD_TERMS

from contracts.nft_exchange import build_exchange


app = build_exchange(WORLD_TERMS)


if __name__ == "__main__":
    spec = app.build()
    spec.export("./artifacts/world")
    print("✓ WorldNFTExchange compiled → ./artifacts/world/")
