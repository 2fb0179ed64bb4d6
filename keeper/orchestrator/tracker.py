"""
Round state tracker.

Turns raw RoundsManager reads into a RoundState. Transition detection is the
caller's job: the orchestrator keeps the previously observed round number.
"""
from __future__ import annotations

import logging
from typing import Optional

from pydantic import ValidationError

from keeper.errors import ChainReadError
from keeper.models.round import RoundState

logger = logging.getLogger(__name__)


class RoundStateTracker:
    """Observes the current round through a chain client."""

    def __init__(self, chain):
        self.chain = chain

    async def observe(self) -> RoundState:
        """
        Read the current round.

        Raises:
            ChainReadError: If any read fails or the values are out of range
        """
        round_number, initialized, locked = await self.chain.read_round_state()
        # currentRoundLocked() is block-based and can be true before initializeRound()
        if locked and not initialized:
            logger.debug(
                f"Round {round_number} is in its lock window but not initialized, "
                f"treating as unlocked"
            )
        locked = bool(locked) and bool(initialized)
        try:
            state = RoundState(
                round_number=round_number, initialized=initialized, locked=locked
            )
        except ValidationError as e:
            raise ChainReadError(f"Inconsistent round state from chain: {e}") from e
        logger.debug(f"Observed {state}")
        return state


def is_transition(previous_round: Optional[int], current: RoundState) -> bool:
    """True if a round was seen before and the current one differs from it."""
    return previous_round is not None and previous_round != current.round_number
