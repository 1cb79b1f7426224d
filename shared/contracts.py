from web3 import Web3
from eth_account.signers.local import LocalAccount
from shared.config import settings
from shared.web3_client import w3 as default_w3

STRATEGIST_ABI = [
    {"inputs": [{"name": "symbol", "type": "string"}], "name": "reinvest", "outputs": [], "stateMutability": "nonpayable", "type": "function"},
]

SMARTCHEF_ABI = [
    {"inputs": [], "name": "rewardPerBlock", "outputs": [{"name": "", "type": "uint256"}], "stateMutability": "view", "type": "function"},
    {"inputs": [], "name": "stakedToken", "outputs": [{"name": "", "type": "address"}], "stateMutability": "view", "type": "function"},
    {"inputs": [], "name": "bonusEndBlock", "outputs": [{"name": "", "type": "uint256"}], "stateMutability": "view", "type": "function"},
]

ERC20_ABI = [
    {"constant": True, "inputs": [{"name": "owner", "type": "address"}], "name": "balanceOf", "outputs": [{"name": "", "type": "uint256"}], "type": "function"},
    {"constant": True, "inputs": [], "name": "decimals", "outputs": [{"name": "", "type": "uint8"}], "type": "function"},
]


class StrategistContract:
    """Strategy contract that moves the managed position between pools."""

    def __init__(self, address: str = None, w3: Web3 = None):
        self.w3 = w3 or default_w3
        self.contract = self.w3.eth.contract(
            address=Web3.to_checksum_address(address or settings.STRATEGY_ADDRESS),
            abi=STRATEGIST_ABI,
        )

    def reinvest(self, symbol: str, account: LocalAccount, gas: int) -> str:
        """Sign and send reinvest(symbol). Returns tx hash without waiting for it to be mined."""
        nonce = self.w3.eth.get_transaction_count(account.address)
        tx = self.contract.functions.reinvest(symbol).build_transaction({
            "from": account.address,
            "nonce": nonce,
            "gas": gas,
            "gasPrice": self.w3.eth.gas_price,
            "chainId": settings.CHAIN_ID,
        })
        signed = account.sign_transaction(tx)
        tx_hash = self.w3.eth.send_raw_transaction(signed.raw_transaction)
        return Web3.to_hex(tx_hash)

    def wait_for_receipt(self, tx_hash: str, timeout: int) -> dict:
        return self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=timeout)


class SmartChefContract:
    """Single-token staking ("syrup") pool paying a fixed reward per block."""

    def __init__(self, address: str, w3: Web3 = None):
        self.w3 = w3 or default_w3
        self.address = Web3.to_checksum_address(address)
        self.contract = self.w3.eth.contract(address=self.address, abi=SMARTCHEF_ABI)

    def reward_per_block(self) -> int:
        return self.contract.functions.rewardPerBlock().call()

    def staked_token(self) -> str:
        return self.contract.functions.stakedToken().call()

    def bonus_end_block(self) -> int:
        return self.contract.functions.bonusEndBlock().call()


def get_erc20_contract(token_address: str, w3: Web3 = None):
    return (w3 or default_w3).eth.contract(
        address=Web3.to_checksum_address(token_address),
        abi=ERC20_ABI,
    )
