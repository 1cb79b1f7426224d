from web3 import Web3
from web3.middleware import ExtraDataToPOAMiddleware
from shared.config import settings


def get_web3() -> Web3:
    # BSC is a POA chain, block headers carry extra validator data
    w3 = Web3(Web3.HTTPProvider(settings.BSC_RPC_URL, request_kwargs={"timeout": 20}))
    w3.middleware_onion.inject(ExtraDataToPOAMiddleware, layer=0)
    return w3


w3 = get_web3()
