"""
Project-wide pytest fixtures.

Use these across test modules. Helpers live in tests.common.
"""
from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from tests.common import (
    FEE_RECIPIENT,
    ONE_LPT,
    ORCH_ADDRESS,
    STAKE_RECIPIENT,
    FakeChainClient,
    ensure_project_root,
)

ensure_project_root()

from keeper.models.config import Thresholds  # noqa: E402
from keeper.models.round import RoundActionLedger  # noqa: E402


@pytest.fixture
def thresholds() -> Thresholds:
    """1 LPT retained floor, 0.03 ETH fee threshold, short poll interval."""
    return Thresholds(
        min_retained_stake_wei=ONE_LPT,
        fee_withdraw_threshold_wei=30_000_000_000_000_000,
        poll_interval_seconds=0.01,
        stake_recipient=STAKE_RECIPIENT,
        fee_recipient=FEE_RECIPIENT,
        orchestrator_address=ORCH_ADDRESS,
    )


@pytest.fixture
def ledger() -> RoundActionLedger:
    return RoundActionLedger()


@pytest.fixture
def fake_chain() -> FakeChainClient:
    """Locked round 1000 with nothing to move."""
    return FakeChainClient(round_state=(1000, True, True))


@pytest.fixture
def signer() -> MagicMock:
    """Signer stand-in; the fake chain client never calls it."""
    s = MagicMock()
    s.address = ORCH_ADDRESS
    return s
