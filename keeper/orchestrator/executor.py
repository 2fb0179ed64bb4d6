"""
Submit one intended action on-chain and classify the result.
"""
from __future__ import annotations

import logging
from typing import Callable, Optional

from keeper.errors import ChainReadError, ReceiptTimeoutError, SubmissionError
from keeper.models.actions import (
    Confirmed,
    Failed,
    IntendedAction,
    RewardAction,
    Submitted,
    TransferBondAction,
    TxOutcome,
    WithdrawFeesAction,
)
from keeper.models.config import Thresholds
from keeper.utils.web3 import format_wei

logger = logging.getLogger(__name__)


async def _submit(action: IntendedAction, chain, signer, thresholds: Thresholds) -> str:
    if isinstance(action, RewardAction):
        return await chain.submit_reward(signer)
    if isinstance(action, TransferBondAction):
        logger.info(
            f"Transferring bond {action.amount_wei} WEI ({format_wei(action.amount_wei)} LPT) "
            f"to {thresholds.stake_recipient}"
        )
        return await chain.submit_transfer_bond(
            signer, thresholds.stake_recipient, action.amount_wei
        )
    if isinstance(action, WithdrawFeesAction):
        logger.info(
            f"Withdrawing fees {action.amount_wei} WEI ({format_wei(action.amount_wei)} ETH) "
            f"to {thresholds.fee_recipient}"
        )
        return await chain.submit_withdraw_fees(
            signer, thresholds.fee_recipient, action.amount_wei
        )
    raise TypeError(f"Unknown action {action!r}")


async def execute_action(
    action: IntendedAction,
    chain,
    signer,
    thresholds: Thresholds,
    *,
    receipt_timeout: float,
    on_submitted: Optional[Callable[[Submitted], None]] = None,
) -> TxOutcome:
    """
    Submit an action and wait for its receipt.

    Recoverable errors never escape; they come back as Failed so the caller
    can move on to the next action.
    on_submitted is called with the Submitted outcome as soon as the
    transaction is broadcast, before the receipt wait.

    Returns:
        Confirmed (check .succeeded) or Failed with a reason.
    """
    name = action.describe()
    try:
        tx_hash = await _submit(action, chain, signer, thresholds)
    except SubmissionError as e:
        logger.error(f"{name} submission failed: {e}")
        return Failed(reason=f"submission error: {e}")

    logger.info(f"{name} submitted: {tx_hash}, waiting up to {receipt_timeout}s for receipt")
    if on_submitted is not None:
        on_submitted(Submitted(tx_hash=tx_hash))

    try:
        receipt = await chain.await_receipt(tx_hash, receipt_timeout)
    except ReceiptTimeoutError as e:
        logger.error(f"{name} not confirmed: {e}")
        return Failed(reason="timeout", tx_hash=tx_hash)
    except ChainReadError as e:
        logger.error(f"{name} receipt lookup failed for {tx_hash}: {e}")
        return Failed(reason=f"receipt error: {e}", tx_hash=tx_hash)

    if receipt.status != 1:
        logger.error(
            f"{name} reverted: {tx_hash} (block={receipt.block_number}, gas_used={receipt.gas_used})"
        )
        return Failed(reason="reverted", tx_hash=tx_hash)

    logger.info(
        f"{name} confirmed: {tx_hash} (block={receipt.block_number}, gas_used={receipt.gas_used})"
    )
    return Confirmed(
        tx_hash=tx_hash,
        receipt_status=receipt.status,
        block_number=receipt.block_number,
        gas_used=receipt.gas_used,
    )
