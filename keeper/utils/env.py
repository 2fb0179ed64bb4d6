"""
Environment configuration for the funds keeper.

Values are read once at import time (after loading an optional .env file)
and validated later by keeper.models.config.KeeperConfig.
"""
import os

from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


# RPC / chain
RPC_ENDPOINT_URL = os.getenv("RPC_ENDPOINT_URL")
CHAIN_ID = os.getenv("CHAIN_ID")

# Key material
JSON_KEY_FILE = os.getenv("JSON_KEY_FILE")
PASSPHRASE_FILE = os.getenv("PASSPHRASE_FILE")

# Accounts
ORCH_ETH_ADDR = os.getenv("ORCH_ETH_ADDR")
TRANSFER_BOND_RECIPIENT_ETH_ADDR = os.getenv("TRANSFER_BOND_RECIPIENT_ETH_ADDR")
ETH_FEE_RECIPIENT_ETH_ADDR = os.getenv("ETH_FEE_RECIPIENT_ETH_ADDR")

# Livepeer contracts (Arbitrum One deployments)
BONDING_MANAGER_ADDRESS = os.getenv(
    "BONDING_MANAGER_ADDRESS", "0x35Bcf3c30594191d53231E4FF333E8A770453e40"
)
ROUNDS_MANAGER_ADDRESS = os.getenv(
    "ROUNDS_MANAGER_ADDRESS", "0xdd6f56DcC28D3F5f27084381fE8Df634985cc39f"
)

# Policy thresholds (wei)
MIN_RETAINED_STAKE_WEI = os.getenv("MIN_RETAINED_STAKE_WEI", str(10**18))  # 1 LPT
FEE_WITHDRAW_THRESHOLD_WEI = os.getenv(
    "FEE_WITHDRAW_THRESHOLD_WEI", str(3 * 10**16)
)  # 0.03 ETH

# Timing (seconds)
POLL_INTERVAL_SECONDS = os.getenv("POLL_INTERVAL_SECONDS", "1800")
RECEIPT_TIMEOUT_SECONDS = os.getenv("RECEIPT_TIMEOUT_SECONDS", "600")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
DRY_RUN = _env_flag("DRY_RUN")
