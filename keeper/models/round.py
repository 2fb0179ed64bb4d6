"""
Round and balance models.

RoundState and Balances are snapshots re-read on every poll; the
RoundActionLedger is process-local and lives for one round.
"""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class RoundState(BaseModel):
    """Normalized view of the current Livepeer round."""

    model_config = ConfigDict(frozen=True)

    round_number: int = Field(..., ge=0, description="Protocol round number")
    initialized: bool = Field(..., description="Round initialization tx has landed")
    locked: bool = Field(..., description="Round is inside its lock window")

    @model_validator(mode="after")
    def validate_locked_implies_initialized(self) -> "RoundState":
        if self.locked and not self.initialized:
            raise ValueError(
                f"Round {self.round_number} reported locked but not initialized"
            )
        return self

    def __str__(self):
        return (
            f"Round(number={self.round_number}, initialized={self.initialized}, "
            f"locked={self.locked})"
        )


class Balances(BaseModel):
    """Pending stake and fees of the orchestrator account, in wei."""

    model_config = ConfigDict(frozen=True)

    pending_stake_wei: int = Field(..., ge=0)
    pending_fees_wei: int = Field(..., ge=0)


class RoundActionLedger(BaseModel):
    """
    Tracks round-scoped actions already confirmed in this process.

    Advisory only: it is not persisted, the on-chain lastRewardRound is the
    source of truth across restarts.
    """

    reward_claimed_for_round: Optional[int] = None

    def reward_owed(self, round_number: int) -> bool:
        return self.reward_claimed_for_round != round_number

    def mark_reward_claimed(self, round_number: int) -> None:
        self.reward_claimed_for_round = round_number

    def reset(self) -> None:
        self.reward_claimed_for_round = None
