from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Blockchain
    BSC_RPC_URL: str = "https://bsc-dataseed1.binance.org:443"
    CHAIN_ID: int = 56

    # Wallet
    KEYSTORE_PATH: str = "keystore.json"
    KEYSTORE_PASSWORD: str = ""  # Prompted at startup when empty

    # Strategy contract
    STRATEGY_ADDRESS: str = "0x227376fdd8c93EC9d48E1e2E134e9dE005d047c0"
    REINVEST_GAS_LIMIT: int = 100_000
    WAIT_FOR_RECEIPT: bool = False
    RECEIPT_TIMEOUT: int = 120
    DRY_RUN: bool = False

    # Decision loop
    HYSTERESIS_MARGIN: float = 0.05
    INITIAL_APY: float = 0.0
    CYCLE_INTERVAL: int = 3600  # 1 hour
    PROBE_STAGGER: float = 1.0
    PROBE_TIMEOUT: float = 30.0
    CYCLE_DEADLINE: float = 300.0
    MIN_OBSERVATIONS: int = 1

    # Pool registry override, JSON list of {"address", "reward", "symbol"}
    POOLS: list[dict] = []

    # APIs
    COINGECKO_API_URL: str = "https://api.coingecko.com/api/v3"

    # Application
    API_SECRET_KEY: str = "dev-secret-key"
    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: str = "development"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @field_validator("HYSTERESIS_MARGIN", "PROBE_STAGGER")
    @classmethod
    def _non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("must be >= 0")
        return v

    @field_validator("PROBE_TIMEOUT", "CYCLE_DEADLINE", "CYCLE_INTERVAL", "MIN_OBSERVATIONS")
    @classmethod
    def _positive(cls, v):
        if v <= 0:
            raise ValueError("must be > 0")
        return v


settings = Settings()
