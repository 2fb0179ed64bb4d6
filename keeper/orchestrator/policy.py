"""
Action policy.

Pure decision logic: (round state, balances, ledger, thresholds) -> actions.
No I/O. All amounts are integer wei.
"""
from __future__ import annotations

from typing import List

from keeper.models.actions import (
    IntendedAction,
    RewardAction,
    TransferBondAction,
    WithdrawFeesAction,
)
from keeper.models.config import Thresholds
from keeper.models.round import Balances, RoundActionLedger, RoundState


def decide(
    round_state: RoundState,
    balances: Balances,
    ledger: RoundActionLedger,
    thresholds: Thresholds,
) -> List[IntendedAction]:
    """
    Decide which transactions to submit this cycle.

    Rules are evaluated independently:
    - Reward: round initialized and not yet claimed for this round number.
    - TransferBond: round locked and pending stake above the retained floor;
      transfers only the excess.
    - WithdrawFees: round locked and pending fees at or above the threshold;
      withdraws the whole fee balance. A zero balance is never withdrawn, even
      with a zero threshold, since WithdrawFees needs a positive amount.

    Returns:
        Actions in execution order (Reward, TransferBond, WithdrawFees).
        Empty while the round is not initialized.
    """
    if not round_state.initialized:
        return []

    actions: List[IntendedAction] = []

    if ledger.reward_owed(round_state.round_number):
        actions.append(RewardAction())

    if round_state.locked:
        surplus = balances.pending_stake_wei - thresholds.min_retained_stake_wei
        if surplus > 0:
            actions.append(TransferBondAction(amount_wei=surplus))

        fees = balances.pending_fees_wei
        if fees > 0 and fees >= thresholds.fee_withdraw_threshold_wei:
            actions.append(WithdrawFeesAction(amount_wei=fees))

    return sorted(actions, key=lambda a: a.priority)
