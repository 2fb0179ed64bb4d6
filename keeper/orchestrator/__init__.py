"""
Orchestrator: round tracking, action policy, transaction execution, polling loop.

- tracker: derive RoundState from chain reads, detect round transitions
- policy: pure mapping of round state + balances to intended actions
- executor: submit one action and classify its receipt
- round_orchestrator: the sequential polling loop
"""
from keeper.orchestrator.executor import execute_action
from keeper.orchestrator.policy import decide
from keeper.orchestrator.round_orchestrator import (
    OrchestratorState,
    TransactionOrchestrator,
)
from keeper.orchestrator.tracker import RoundStateTracker, is_transition

__all__ = [
    "execute_action",
    "decide",
    "OrchestratorState",
    "TransactionOrchestrator",
    "RoundStateTracker",
    "is_transition",
]
