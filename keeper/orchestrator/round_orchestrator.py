"""
Transaction orchestrator for the Livepeer funds keeper.

Owns the polling loop. Each cycle runs strictly in sequence:

1. Reading   - observe the round and read pending stake/fees
2. Deciding  - reset the ledger on a round change, run the action policy
3. Executing - submit each action one at a time (Reward, TransferBond,
               WithdrawFees), wait for its receipt, classify the outcome
4. Sleeping  - wait poll_interval, interruptible by stop()

Nothing is retried inside a cycle; failed actions are re-derived on the next
one from freshly read state.
"""
import asyncio
import logging
from typing import Optional

from pydantic import BaseModel, Field

from keeper.errors import ChainReadError
from keeper.models.actions import (
    CycleReport,
    RewardAction,
    Submitted,
    outcome_succeeded,
)
from keeper.models.config import Thresholds
from keeper.models.round import Balances, RoundActionLedger, RoundState
from keeper.orchestrator.executor import execute_action
from keeper.orchestrator.policy import decide
from keeper.orchestrator.tracker import RoundStateTracker, is_transition
from keeper.utils.web3 import format_wei

logger = logging.getLogger(__name__)


class OrchestratorState(BaseModel):
    """Loop-local state carried from one cycle to the next."""

    last_round_number: Optional[int] = None
    ledger: RoundActionLedger = Field(default_factory=RoundActionLedger)
    in_flight: Optional[Submitted] = None


class TransactionOrchestrator:
    """
    Polls chain state and drives reward, transferBond and withdrawFees
    transactions for a single orchestrator account.
    """

    def __init__(
        self,
        chain,
        signer,
        thresholds: Thresholds,
        *,
        receipt_timeout: float = 600.0,
        dry_run: bool = False,
    ):
        """
        Initialize the orchestrator.

        Args:
            chain: Chain client (see keeper.services.chain.LivepeerChainClient)
            signer: Signer holding the orchestrator's key
            thresholds: Immutable policy thresholds and recipients
            receipt_timeout: Seconds to wait for each transaction receipt
            dry_run: Decide and log only, never submit
        """
        self.chain = chain
        self.signer = signer
        self.thresholds = thresholds
        self.receipt_timeout = receipt_timeout
        self.dry_run = dry_run
        self.tracker = RoundStateTracker(chain)
        self.state = OrchestratorState()
        self._stop_event = asyncio.Event()

    async def _read_balances(self) -> Balances:
        address = self.thresholds.orchestrator_address
        pending_stake = await self.chain.read_pending_stake(address)
        pending_fees = await self.chain.read_pending_fees(address)
        balances = Balances(pending_stake_wei=pending_stake, pending_fees_wei=pending_fees)
        logger.info(
            f"Pending stake [{pending_stake}] WEI ({format_wei(pending_stake)} LPT), "
            f"retained floor [{self.thresholds.min_retained_stake_wei}] WEI"
        )
        logger.info(
            f"Pending fees [{pending_fees}] WEI ({format_wei(pending_fees)} ETH), "
            f"withdraw threshold [{self.thresholds.fee_withdraw_threshold_wei}] WEI"
        )
        return balances

    async def _sync_reward_ledger(self, round_state: RoundState) -> None:
        """Mark the reward as claimed if the chain says it already landed."""
        if not round_state.initialized:
            return
        if not self.state.ledger.reward_owed(round_state.round_number):
            return
        try:
            called = await self.chain.read_reward_called(
                self.thresholds.orchestrator_address, round_state.round_number
            )
        except ChainReadError as e:
            logger.warning(f"Could not check on-chain reward status, using local ledger: {e}")
            return
        if called:
            logger.info(f"Reward already called on-chain for round {round_state.round_number}")
            self.state.ledger.mark_reward_claimed(round_state.round_number)

    def _track_in_flight(self, submitted: Submitted) -> None:
        self.state.in_flight = submitted

    async def run_cycle(self) -> CycleReport:
        """
        Run one Reading -> Deciding -> Executing pass.

        Returns:
            CycleReport; report.abandoned is True when reads failed.
        """
        report = CycleReport()

        # Reading
        try:
            round_state = await self.tracker.observe()
            logger.info(f"Current {round_state}")
            balances = await self._read_balances()
        except ChainReadError as e:
            logger.error(f"Chain read failed, skipping cycle: {e}")
            report.error = str(e)
            return report
        report.round_state = round_state

        # Deciding
        if is_transition(self.state.last_round_number, round_state):
            logger.info(
                f"Round changed {self.state.last_round_number} -> {round_state.round_number}, "
                f"resetting round ledger"
            )
            self.state.ledger.reset()
            report.transitioned = True
        self.state.last_round_number = round_state.round_number

        await self._sync_reward_ledger(round_state)

        actions = decide(round_state, balances, self.state.ledger, self.thresholds)
        report.actions = list(actions)
        if not actions:
            if not round_state.initialized:
                logger.info(
                    f"Round {round_state.round_number} is not initialized. No actions until it is."
                )
            else:
                logger.info("No actions required this cycle")
            return report
        logger.info(f"Decided actions: {[a.describe() for a in actions]}")

        # Executing
        for action in actions:
            if self.dry_run:
                logger.info(f"[DRY RUN] Would submit {action.describe()}")
                continue
            outcome = await execute_action(
                action,
                self.chain,
                self.signer,
                self.thresholds,
                receipt_timeout=self.receipt_timeout,
                on_submitted=self._track_in_flight,
            )
            self.state.in_flight = None
            report.outcomes.append((action, outcome))
            if isinstance(action, RewardAction) and outcome_succeeded(outcome):
                self.state.ledger.mark_reward_claimed(round_state.round_number)

        return report

    async def _sleep(self) -> None:
        try:
            await asyncio.wait_for(
                self._stop_event.wait(), timeout=self.thresholds.poll_interval_seconds
            )
        except asyncio.TimeoutError:
            pass

    async def run_forever(self) -> None:
        """Poll until stop() is called or the task is cancelled."""
        logger.info(
            f"Starting keeper loop for {self.thresholds.orchestrator_address} "
            f"(poll interval {self.thresholds.poll_interval_seconds}s, dry_run={self.dry_run})"
        )
        try:
            while not self._stop_event.is_set():
                try:
                    await self.run_cycle()
                except Exception as e:
                    logger.error(f"Unexpected error in keeper cycle: {e}", exc_info=True)
                if self._stop_event.is_set():
                    break
                logger.debug(f"Sleeping {self.thresholds.poll_interval_seconds}s")
                await self._sleep()
        finally:
            if self.state.in_flight is not None:
                logger.warning(
                    f"Stopped while waiting for {self.state.in_flight.tx_hash}; "
                    f"it will be re-evaluated on the next start"
                )
            logger.info("Keeper loop stopped")

    def stop(self) -> None:
        """Request a graceful stop; interrupts the current sleep."""
        logger.info("Stop requested")
        self._stop_event.set()
