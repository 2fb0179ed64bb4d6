"""
Livepeer Funds Keeper

Unattended agent that calls reward once per round, moves surplus bonded
stake and withdraws pending fees for a single Livepeer orchestrator account.
"""
from keeper.orchestrator.round_orchestrator import TransactionOrchestrator
from keeper.services.chain import LivepeerChainClient
from keeper.services.signer import KeystoreSigner

__all__ = [
    "TransactionOrchestrator",
    "LivepeerChainClient",
    "KeystoreSigner",
]
