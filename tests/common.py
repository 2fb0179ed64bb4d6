"""
Shared test helpers and utilities for project-wide use.

Use these from conftest.py fixtures or individual tests.
"""
from __future__ import annotations

import sys
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple

from keeper.errors import ChainReadError, ReceiptTimeoutError, SubmissionError
from keeper.services.chain import TxReceiptSummary

ORCH_ADDRESS = "0x1111111111111111111111111111111111111111"
STAKE_RECIPIENT = "0x2222222222222222222222222222222222222222"
FEE_RECIPIENT = "0x3333333333333333333333333333333333333333"

ONE_LPT = 10**18


def ensure_project_root() -> Path:
    """Add project root to sys.path. Idempotent. Returns root Path."""
    root = Path(__file__).resolve().parent.parent
    if str(root) not in sys.path:
        sys.path.insert(0, str(root))
    return root


class FakeChainClient:
    """
    Scripted in-memory stand-in for LivepeerChainClient.

    Tests mutate the public attributes between cycles to simulate chain state
    changes and failures.
    """

    def __init__(
        self,
        round_state: Tuple[int, bool, bool] = (1000, True, True),
        pending_stake: int = 0,
        pending_fees: int = 0,
        reward_called: bool = False,
    ):
        self.round_state = round_state
        self.pending_stake = pending_stake
        self.pending_fees = pending_fees
        self.reward_called = reward_called

        self.read_error: Optional[Exception] = None
        self.balance_error: Optional[Exception] = None
        self.reward_called_error: Optional[Exception] = None
        self.submit_errors: Dict[str, Exception] = {}
        self.revert_kinds: Set[str] = set()
        self.timeout_kinds: Set[str] = set()

        self.submitted: List[Tuple[str, tuple]] = []
        self.round_reads = 0
        self._hash_to_kind: Dict[str, str] = {}

    async def read_round_state(self):
        self.round_reads += 1
        if self.read_error is not None:
            raise self.read_error
        return self.round_state

    async def read_pending_stake(self, address: str) -> int:
        if self.balance_error is not None:
            raise self.balance_error
        return self.pending_stake

    async def read_pending_fees(self, address: str) -> int:
        if self.balance_error is not None:
            raise self.balance_error
        return self.pending_fees

    async def read_reward_called(self, address: str, round_number: int) -> bool:
        if self.reward_called_error is not None:
            raise self.reward_called_error
        return self.reward_called

    def _submit(self, kind: str, *args) -> str:
        if kind in self.submit_errors:
            raise self.submit_errors[kind]
        self.submitted.append((kind, args))
        tx_hash = "0x" + f"{len(self.submitted):064x}"
        self._hash_to_kind[tx_hash] = kind
        return tx_hash

    async def submit_reward(self, signer) -> str:
        return self._submit("reward")

    async def submit_transfer_bond(self, signer, recipient: str, amount_wei: int) -> str:
        return self._submit("transfer_bond", recipient, amount_wei)

    async def submit_withdraw_fees(self, signer, recipient: str, amount_wei: int) -> str:
        return self._submit("withdraw_fees", recipient, amount_wei)

    async def await_receipt(self, tx_hash: str, timeout: float) -> TxReceiptSummary:
        kind = self._hash_to_kind[tx_hash]
        if kind in self.timeout_kinds:
            raise ReceiptTimeoutError(tx_hash, timeout)
        return TxReceiptSummary(
            tx_hash=tx_hash,
            status=0 if kind in self.revert_kinds else 1,
            block_number=123456,
            gas_used=210000,
        )

    def submitted_kinds(self) -> List[str]:
        return [kind for kind, _ in self.submitted]


def rpc_down() -> ChainReadError:
    return ChainReadError("Failed to read currentRound: connection refused")


def send_failed() -> SubmissionError:
    return SubmissionError("Failed to sign/send transaction: nonce too low")
