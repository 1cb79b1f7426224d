from shared.config import settings

AGENT_NAME = "pool_rotator"

# Decision loop
CYCLE_INTERVAL = settings.CYCLE_INTERVAL      # Re-evaluate every hour
PROBE_STAGGER = settings.PROBE_STAGGER        # i-th pool probed i * stagger seconds in
PROBE_TIMEOUT = settings.PROBE_TIMEOUT
CYCLE_DEADLINE = settings.CYCLE_DEADLINE
MIN_OBSERVATIONS = settings.MIN_OBSERVATIONS
HYSTERESIS_MARGIN = settings.HYSTERESIS_MARGIN
INITIAL_APY = settings.INITIAL_APY

# Reallocation
STRATEGY_ADDRESS = settings.STRATEGY_ADDRESS
REINVEST_GAS_LIMIT = settings.REINVEST_GAS_LIMIT

# BSC produces a block roughly every 3 seconds
BLOCKS_PER_YEAR = 365 * 24 * 3600 // 3

# Reward tokens
CAKE_TOKEN = "0x0E09FaBB73Bd3Ade0a17ECC321fD13a19e81cE82"
TWT_TOKEN = "0x4B0F1812e5Df2A09796481Ff14017e6005508003"

# Pool registry, in probe order
DEFAULT_POOLS = [
    {
        "name": "cake_pool",
        "address": "0x73feaa1eE314F8c655E354234017bE2193C9E24E",
        "reward": CAKE_TOKEN,
        "symbol": "CAKE",
    },
    {
        "name": "twt_pool",
        "address": "0x9c4EBADa591FFeC4124A7785CAbCfb7068fED2fb",
        "reward": TWT_TOKEN,
        "symbol": "TWT",
    },
]

POOLS = settings.POOLS or DEFAULT_POOLS
