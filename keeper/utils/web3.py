import json
import logging
from pathlib import Path
from typing import Dict, Any, List

from web3 import AsyncHTTPProvider, AsyncWeb3, Web3

logger = logging.getLogger(__name__)

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
DEFAULT_ABI_PATH = Path(__file__).parent / "abis"
DEFAULT_REQUEST_TIMEOUT = 30

# One AsyncWeb3 per RPC endpoint; the keeper talks to a single chain
_web3_cache: Dict[str, AsyncWeb3] = {}


class AsyncWeb3Helper:
    """Builds AsyncWeb3 connections and loads bundled contract ABIs"""

    @classmethod
    def make_web3(cls, rpc_url: str, request_timeout: int = DEFAULT_REQUEST_TIMEOUT) -> AsyncWeb3:
        if not rpc_url:
            raise ValueError("RPC endpoint URL is empty")
        if rpc_url in _web3_cache:
            return _web3_cache[rpc_url]
        w3 = AsyncWeb3(
            AsyncHTTPProvider(rpc_url, request_kwargs={"timeout": request_timeout})
        )
        _web3_cache[rpc_url] = w3
        logger.debug("Created AsyncWeb3 for %s", rpc_url)
        return w3

    @staticmethod
    def load_abi(contract_name: str) -> List[Dict[str, Any]]:
        """Load a bundled ABI by contract name, e.g. "BondingManager"."""
        path = DEFAULT_ABI_PATH / f"{contract_name}.json"
        if not path.is_file():
            raise ValueError(f"No bundled ABI for {contract_name} at {path}")

        with open(path, "r") as f:
            abi_data = json.load(f)
        # Accept both bare ABI arrays and build artifacts with an "abi" key
        if isinstance(abi_data, dict):
            return abi_data["abi"]
        return abi_data


def format_wei(amount_wei: int) -> str:
    """Render a wei amount in ether units for log lines. Never used for arithmetic."""
    return f"{Web3.from_wei(amount_wei, 'ether')}"
