"""
Livepeer chain client.

Typed read/write access to the RoundsManager and BondingManager contracts.
Reads raise ChainReadError, writes raise SubmissionError, receipt waits raise
ReceiptTimeoutError. No retries live here: the orchestrator's polling loop
owns backoff.
"""
import logging
from typing import Any, Dict, Tuple

from pydantic import BaseModel, ConfigDict
from web3 import AsyncWeb3, Web3
from web3.contract import AsyncContract
from web3.exceptions import TimeExhausted

from keeper.errors import ChainReadError, ReceiptTimeoutError, SubmissionError
from keeper.services.signer import KeystoreSigner
from keeper.utils.web3 import AsyncWeb3Helper, ZERO_ADDRESS

logger = logging.getLogger(__name__)

# pendingStake/pendingFees take an end round; any round far in the future
# makes the contract compute up to the current round.
PENDING_END_ROUND = 99999

RECEIPT_POLL_LATENCY = 2.0


class TxReceiptSummary(BaseModel):
    """The parts of a transaction receipt the keeper cares about."""

    model_config = ConfigDict(frozen=True)

    tx_hash: str
    status: int
    block_number: int
    gas_used: int


class LivepeerChainClient:
    """Chain client for the Livepeer rounds and bonding contracts."""

    def __init__(
        self,
        w3: AsyncWeb3,
        bonding_manager_address: str,
        rounds_manager_address: str,
    ):
        """
        Initialize the chain client.

        Args:
            w3: AsyncWeb3 instance
            bonding_manager_address: BondingManager proxy address
            rounds_manager_address: RoundsManager proxy address
        """
        self.w3: AsyncWeb3 = w3
        self.bonding_manager: AsyncContract = self.w3.eth.contract(
            address=Web3.to_checksum_address(bonding_manager_address),
            abi=AsyncWeb3Helper.load_abi("BondingManager"),
        )
        self.rounds_manager: AsyncContract = self.w3.eth.contract(
            address=Web3.to_checksum_address(rounds_manager_address),
            abi=AsyncWeb3Helper.load_abi("RoundsManager"),
        )
        logger.info(
            f"Initialized LivepeerChainClient with BondingManager at "
            f"{self.bonding_manager.address}, RoundsManager at {self.rounds_manager.address}"
        )

    async def _call(self, description: str, fn) -> Any:
        try:
            return await fn.call()
        except Exception as e:
            raise ChainReadError(f"Failed to read {description}: {e}") from e

    # ------------------------------------------------------------------ reads

    async def read_round_state(self) -> Tuple[int, bool, bool]:
        """
        Read the current round number and its initialized/locked flags.

        Returns:
            Tuple of (round_number, initialized, locked)
        """
        functions = self.rounds_manager.functions
        round_number = await self._call("currentRound", functions.currentRound())
        initialized = await self._call(
            "currentRoundInitialized", functions.currentRoundInitialized()
        )
        locked = await self._call("currentRoundLocked", functions.currentRoundLocked())
        return int(round_number), bool(initialized), bool(locked)

    async def read_pending_stake(self, address: str) -> int:
        """Pending stake of a delegator/orchestrator, in wei."""
        value = await self._call(
            f"pendingStake({address})",
            self.bonding_manager.functions.pendingStake(
                Web3.to_checksum_address(address), PENDING_END_ROUND
            ),
        )
        return int(value)

    async def read_pending_fees(self, address: str) -> int:
        """Pending fees of a delegator/orchestrator, in wei."""
        value = await self._call(
            f"pendingFees({address})",
            self.bonding_manager.functions.pendingFees(
                Web3.to_checksum_address(address), PENDING_END_ROUND
            ),
        )
        return int(value)

    async def read_reward_called(self, address: str, round_number: int) -> bool:
        """
        Check whether reward() already landed for a round.

        The transcoder's lastRewardRound is the on-chain source of truth for
        reward idempotency.
        """
        transcoder = await self._call(
            f"getTranscoder({address})",
            self.bonding_manager.functions.getTranscoder(
                Web3.to_checksum_address(address)
            ),
        )
        last_reward_round = int(transcoder[0])
        return last_reward_round == round_number

    # ----------------------------------------------------------------- writes

    async def _submit(self, description: str, signer: KeystoreSigner, fn) -> str:
        try:
            tx: Dict[str, Any] = await fn.build_transaction({"from": signer.address})
        except Exception as e:
            # ContractLogicError here means the call would revert
            raise SubmissionError(f"Failed to build {description} transaction: {e}") from e
        return await signer.sign_and_send(tx)

    async def submit_reward(self, signer: KeystoreSigner) -> str:
        return await self._submit("Reward", signer, self.bonding_manager.functions.reward())

    async def submit_transfer_bond(
        self, signer: KeystoreSigner, recipient: str, amount_wei: int
    ) -> str:
        # No sorted-list position hints: the contract walks the pool itself
        fn = self.bonding_manager.functions.transferBond(
            Web3.to_checksum_address(recipient),
            amount_wei,
            ZERO_ADDRESS,
            ZERO_ADDRESS,
            ZERO_ADDRESS,
            ZERO_ADDRESS,
        )
        return await self._submit("Transfer Bond", signer, fn)

    async def submit_withdraw_fees(
        self, signer: KeystoreSigner, recipient: str, amount_wei: int
    ) -> str:
        fn = self.bonding_manager.functions.withdrawFees(
            Web3.to_checksum_address(recipient), amount_wei
        )
        return await self._submit("Withdraw Fees", signer, fn)

    async def await_receipt(self, tx_hash: str, timeout: float) -> TxReceiptSummary:
        """
        Wait for a transaction receipt.

        Raises:
            ReceiptTimeoutError: If no receipt arrives within timeout seconds
            ChainReadError: If the RPC fails while polling
        """
        try:
            receipt = await self.w3.eth.wait_for_transaction_receipt(
                tx_hash, timeout=timeout, poll_latency=RECEIPT_POLL_LATENCY
            )
        except TimeExhausted as e:
            raise ReceiptTimeoutError(tx_hash, timeout) from e
        except Exception as e:
            raise ChainReadError(f"Failed to fetch receipt for {tx_hash}: {e}") from e

        return TxReceiptSummary(
            tx_hash=tx_hash,
            status=int(receipt["status"]),
            block_number=int(receipt["blockNumber"]),
            gas_used=int(receipt["gasUsed"]),
        )
