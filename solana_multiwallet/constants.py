"""Constants shared across the orchestrator."""

# Native SOL
LAMPORTS_PER_SOL = 1_000_000_000
SOL_MINT = "So11111111111111111111111111111111111111112"

# Swap defaults
DEFAULT_SLIPPAGE_BPS = 9900
MAX_BUY_SOL = 100.0
MAX_PERCENTAGE = 100.0

# Default endpoints
DEFAULT_TRADING_SERVER_URL = "http://localhost:8888"
DEFAULT_JITO_BUNDLE_URL = "https://mainnet.block-engine.jito.wtf/api/v1/bundles"
DEFAULT_RPC_URL = "https://api.mainnet-beta.solana.com"

# Trading server routes
TRADE_ENDPOINT = "/api/{protocol}/{direction}"
CUSTOM_BUY_ENDPOINT = "/api/tokens/buy"
BURN_ENDPOINT = "/api/tokens/burn"
TRANSFER_ENDPOINT = "/api/tokens/transfer"
CLEANER_ENDPOINT = "/api/tokens/cleaner"
DISTRIBUTE_ENDPOINT = "/api/sol/distribute"
CONSOLIDATE_ENDPOINT = "/api/sol/consolidate"
DEPLOY_ENDPOINT = "/api/{platform}/create"
GENERATE_MINT_ENDPOINT = "/api/utilities/generate-mint"
SEND_TRANSACTIONS_ENDPOINT = "/api/transactions/send"

# HTTP retry policy
RETRIABLE_STATUS_CODES = frozenset({408, 429, 500, 502, 503, 504})
INITIAL_RETRY_DELAY = 1.0  # seconds
MAX_RETRY_DELAY = 10.0  # seconds

# Base58 shapes
PUBKEY_PATTERN = r"^[1-9A-HJ-NP-Za-km-z]{32,44}$"
PRIVATE_KEY_PATTERN = r"^[1-9A-HJ-NP-Za-km-z]{64,88}$"
