"""
Keystore-backed transaction signer.

Decrypts an Ethereum V3 JSON keystore once at startup and signs transactions
on behalf of its address. The private key never leaves this object and is
never logged.
"""
import json
import logging
from pathlib import Path
from typing import Any, Dict

from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import AsyncWeb3, Web3

from keeper.errors import SigningError, SubmissionError

logger = logging.getLogger(__name__)


class KeystoreSigner:
    """Signs and broadcasts transactions from a single local account."""

    def __init__(self, w3: AsyncWeb3, account: LocalAccount, chain_id: int):
        self.w3 = w3
        self._account = account
        self.chain_id = chain_id

    @classmethod
    def from_keystore(
        cls,
        w3: AsyncWeb3,
        keystore_path: Path,
        passphrase_path: Path,
        chain_id: int,
    ) -> "KeystoreSigner":
        """
        Load and decrypt a JSON keystore.

        Args:
            w3: AsyncWeb3 instance used to broadcast transactions
            keystore_path: Path to the V3 JSON keystore file
            passphrase_path: Path to a file holding the keystore passphrase
            chain_id: Chain ID stamped into every signed transaction

        Raises:
            SigningError: If either file cannot be read or decryption fails
        """
        logger.info(f"Loading passphrase file {passphrase_path}")
        try:
            passphrase = Path(passphrase_path).read_text().rstrip()
        except OSError as e:
            raise SigningError(f"Could not read passphrase file {passphrase_path}: {e}") from e

        logger.info(f"Loading keystore file {keystore_path}")
        try:
            with open(keystore_path, "r") as f:
                keyfile_json = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise SigningError(f"Could not read keystore file {keystore_path}: {e}") from e

        try:
            private_key = Account.decrypt(keyfile_json, passphrase)
        except Exception as e:
            # eth_account raises ValueError on a wrong passphrase, other types on a malformed file
            raise SigningError(
                f"Could not decrypt keystore {keystore_path} with the passphrase provided: {e}"
            ) from e

        account = Account.from_key(private_key)
        logger.info(f"Keystore decrypted for address {account.address}")
        return cls(w3=w3, account=account, chain_id=chain_id)

    @property
    def address(self) -> str:
        return self._account.address

    async def sign_and_send(self, transaction: Dict[str, Any]) -> str:
        """
        Fill sender fields, sign and broadcast a transaction.

        Returns:
            Transaction hash as a 0x-prefixed hex string

        Raises:
            SubmissionError: If nonce lookup, signing or broadcast fails
        """
        tx = dict(transaction)
        tx["from"] = self.address
        tx["chainId"] = self.chain_id
        try:
            if "nonce" not in tx:
                tx["nonce"] = await self.w3.eth.get_transaction_count(self.address, "pending")
            signed = self._account.sign_transaction(tx)
            tx_hash = await self.w3.eth.send_raw_transaction(signed.raw_transaction)
        except Exception as e:
            raise SubmissionError(f"Failed to sign/send transaction: {e}") from e

        tx_hash_hex = Web3.to_hex(tx_hash)
        logger.debug(f"Broadcast tx {tx_hash_hex} nonce={tx['nonce']}")
        return tx_hash_hex

    def __repr__(self):
        return f"KeystoreSigner(address={self.address}, chain_id={self.chain_id})"
