import pytest

from nft_exchange import INDIAN_TERMS, WORLD_TERMS, MarketplaceLedger

OWNER = "OWNER"
ACC1 = "ACC1"
ACC2 = "ACC2"
ACC3 = "ACC3"

TOKEN_URI = "https://www.google.com"
PRICE = 50_000          # 0.05 Algo
RESALE_PRICE = 100_000  # 0.1 Algo


@pytest.fixture(params=[INDIAN_TERMS, WORLD_TERMS], ids=["indian", "world"])
def terms(request):
    return request.param


@pytest.fixture
def ledger(terms):
    return MarketplaceLedger(terms, owner=OWNER)


@pytest.fixture
def listed_item(ledger):
    """Item 1, created by ACC1 at PRICE."""
    return ledger.create_item(ACC1, TOKEN_URI, PRICE, paid_value=ledger.listing_price)


@pytest.fixture
def sold_item(ledger, listed_item):
    """Item 1, bought by ACC2."""
    ledger.buy_item(ACC2, listed_item, ledger.get_item_price(listed_item))
    return listed_item


# ─────────────────────────────────────────────
#  LOCALNET
# ─────────────────────────────────────────────
@pytest.fixture(scope="session")
def algod_client():
    from beaker import localnet

    client = localnet.get_algod_client()
    try:
        client.status()
    except Exception as exc:
        pytest.skip(f"no localnet node answering: {exc}")
    return client


@pytest.fixture(scope="session")
def sandbox_accounts(algod_client):
    from beaker import localnet

    accounts = localnet.get_accounts()
    if len(accounts) < 3:
        pytest.skip("localnet needs at least 3 funded accounts")
    return accounts[:3]


@pytest.fixture
def balance(algod_client):
    def _balance(address):
        return algod_client.account_info(address)["amount"]

    return _balance
