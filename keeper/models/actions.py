"""
Intended actions, transaction outcomes and per-cycle reports.

IntendedAction is produced by the action policy and consumed by the
transaction orchestrator. TxOutcome describes what happened to one submitted
transaction. Neither is persisted.
"""
from typing import ClassVar, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from keeper.models.round import RoundState


class RewardAction(BaseModel):
    """Claim the reward for the current round."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["reward"] = "reward"
    priority: ClassVar[int] = 0

    def describe(self) -> str:
        return "Reward"


class TransferBondAction(BaseModel):
    """Move stake above the retained floor to the stake recipient."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["transfer_bond"] = "transfer_bond"
    amount_wei: int = Field(..., gt=0)
    priority: ClassVar[int] = 1

    def describe(self) -> str:
        return f"TransferBond({self.amount_wei})"


class WithdrawFeesAction(BaseModel):
    """Withdraw the whole pending fee balance to the fee recipient."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["withdraw_fees"] = "withdraw_fees"
    amount_wei: int = Field(..., gt=0)
    priority: ClassVar[int] = 2

    def describe(self) -> str:
        return f"WithdrawFees({self.amount_wei})"


IntendedAction = Union[RewardAction, TransferBondAction, WithdrawFeesAction]


class Submitted(BaseModel):
    """Transaction broadcast, receipt not yet seen."""

    model_config = ConfigDict(frozen=True)

    status: Literal["submitted"] = "submitted"
    tx_hash: str


class Confirmed(BaseModel):
    """Receipt received. receipt_status 1 means the call succeeded."""

    model_config = ConfigDict(frozen=True)

    status: Literal["confirmed"] = "confirmed"
    tx_hash: str
    receipt_status: int
    block_number: int
    gas_used: int

    @property
    def succeeded(self) -> bool:
        return self.receipt_status == 1


class Failed(BaseModel):
    """Submission error, revert or confirmation timeout."""

    model_config = ConfigDict(frozen=True)

    status: Literal["failed"] = "failed"
    reason: str
    tx_hash: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return False


TxOutcome = Union[Submitted, Confirmed, Failed]


def outcome_succeeded(outcome: TxOutcome) -> bool:
    """True only for a confirmed receipt with status 1."""
    return isinstance(outcome, Confirmed) and outcome.succeeded


class CycleReport(BaseModel):
    """Summary of one polling cycle."""

    round_state: Optional[RoundState] = None
    transitioned: bool = False
    actions: List[IntendedAction] = Field(default_factory=list)
    outcomes: List[Tuple[IntendedAction, TxOutcome]] = Field(default_factory=list)
    error: Optional[str] = None

    @property
    def abandoned(self) -> bool:
        return self.error is not None
