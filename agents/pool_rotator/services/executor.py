"""
Reallocation Executor — sends reinvest(symbol) to the strategy contract.

Submission is fire-and-forget unless WAIT_FOR_RECEIPT is set, in which case
the call blocks until the transaction is mined and fails on a revert.
"""
import asyncio
from typing import Optional
from eth_account.signers.local import LocalAccount
from shared.config import settings
from shared.contracts import StrategistContract
from agents.pool_rotator.config import REINVEST_GAS_LIMIT
import structlog

logger = structlog.get_logger()


class ReallocationError(RuntimeError):
    pass


class ReallocationExecutor:
    def __init__(
        self,
        account: Optional[LocalAccount],
        symbols: dict[str, str],
        strategist: StrategistContract = None,
        gas_limit: int = REINVEST_GAS_LIMIT,
        wait_for_receipt: bool = settings.WAIT_FOR_RECEIPT,
        receipt_timeout: int = settings.RECEIPT_TIMEOUT,
        dry_run: bool = settings.DRY_RUN,
    ):
        self.account = account
        self.symbols = symbols
        self.strategist = strategist
        self.gas_limit = gas_limit
        self.wait_for_receipt = wait_for_receipt
        self.receipt_timeout = receipt_timeout
        self.dry_run = dry_run

    def symbol_for(self, pool_address: str) -> str:
        try:
            return self.symbols[pool_address]
        except KeyError:
            raise ReallocationError(f"no reinvest symbol for pool {pool_address}") from None

    async def reinvest(self, pool_address: str) -> Optional[str]:
        """Move the position into ``pool_address``. Returns the tx hash, None on dry run."""
        symbol = self.symbol_for(pool_address)

        if self.dry_run:
            logger.info("reinvest_simulated", pool=pool_address, symbol=symbol)
            return None
        if self.account is None or self.strategist is None:
            raise ReallocationError("no signing account or strategy contract configured")

        try:
            tx_hash = await asyncio.to_thread(
                self.strategist.reinvest, symbol, self.account, self.gas_limit
            )
        except Exception as e:
            raise ReallocationError(f"reinvest({symbol}) submission failed: {e}") from e
        logger.info("reinvest_submitted", pool=pool_address, symbol=symbol, tx_hash=tx_hash)

        if self.wait_for_receipt:
            try:
                receipt = await asyncio.to_thread(
                    self.strategist.wait_for_receipt, tx_hash, self.receipt_timeout
                )
            except Exception as e:
                raise ReallocationError(f"no receipt for {tx_hash}: {e}") from e
            if receipt["status"] != 1:
                raise ReallocationError(f"reinvest({symbol}) reverted in {tx_hash}")
            logger.info("reinvest_confirmed", tx_hash=tx_hash, block=receipt["blockNumber"])

        return tx_hash
