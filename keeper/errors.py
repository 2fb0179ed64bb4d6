"""
Error taxonomy for the funds keeper.

Fatal (startup only): ConfigError, SigningError.
Transient (caught per action or per cycle): ChainReadError, SubmissionError,
ReceiptTimeoutError.
"""


class KeeperError(Exception):
    """Base class for all keeper errors."""


class ConfigError(KeeperError):
    """Missing or invalid configuration."""


class SigningError(KeeperError):
    """Key material could not be loaded or decrypted."""


class ChainReadError(KeeperError):
    """A contract read failed (network, decode or revert)."""


class SubmissionError(KeeperError):
    """A transaction could not be built, signed or broadcast."""


class ReceiptTimeoutError(KeeperError):
    """No receipt arrived for a submitted transaction within the timeout."""

    def __init__(self, tx_hash: str, timeout: float):
        super().__init__(f"No receipt for {tx_hash} after {timeout}s")
        self.tx_hash = tx_hash
        self.timeout = timeout
