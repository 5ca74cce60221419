import os

from algosdk.util import algos_to_microalgos


# ─────────────────────────────────────────────
#  CONFIGURATION
# ─────────────────────────────────────────────

# AlgoKit localnet defaults
ALGOD_ADDRESS = os.environ.get("ALGOD_ADDRESS", "http://localhost:4001")
ALGOD_TOKEN   = os.environ.get("ALGOD_TOKEN", "a" * 64)

# App ID after first deploy
APP_ID = int(os.environ.get("EXCHANGE_APP_ID", "0"))

# Seed balance for the application account: account minimum balance plus
# box storage for item records
APP_FUNDING = int(os.environ.get(
    "EXCHANGE_APP_FUNDING",
    str(algos_to_microalgos(1)),
))
