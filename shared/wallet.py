"""
Wallet loader — decrypts an encrypted JSON keystore into a signing account.
"""
import json
from getpass import getpass
from pathlib import Path
from eth_account import Account
from eth_account.signers.local import LocalAccount
from shared.config import settings
import structlog

logger = structlog.get_logger()


class WalletError(RuntimeError):
    """Keystore could not be read or decrypted. Fatal at startup."""


def read_keystore(path: str | Path) -> dict:
    try:
        with open(path) as f:
            return json.load(f)
    except FileNotFoundError as e:
        raise WalletError(f"keystore not found: {path}") from e
    except json.JSONDecodeError as e:
        raise WalletError(f"malformed keystore: {path}") from e


def load_account(path: str | Path, password: str) -> LocalAccount:
    keystore = read_keystore(path)
    try:
        private_key = Account.decrypt(keystore, password)
    except ValueError as e:
        # eth_account raises ValueError for a MAC mismatch (wrong password)
        raise WalletError(f"could not decrypt keystore: {e}") from e
    except (KeyError, TypeError) as e:
        raise WalletError(f"malformed keystore: {path}") from e

    account = Account.from_key(private_key)
    logger.info("account_loaded", address=account.address)
    return account


def prompt_password() -> str:
    return getpass("Enter the password: ")


def load_configured_account() -> LocalAccount:
    """Load the account from settings, prompting for the password if unset."""
    password = settings.KEYSTORE_PASSWORD or prompt_password()
    return load_account(settings.KEYSTORE_PATH, password)
