"""
Tests for single-action execution and outcome classification.
"""
import pytest

from keeper.errors import ChainReadError
from keeper.models.actions import (
    Confirmed,
    Failed,
    RewardAction,
    TransferBondAction,
    WithdrawFeesAction,
    outcome_succeeded,
)
from keeper.orchestrator.executor import execute_action
from tests.common import FEE_RECIPIENT, STAKE_RECIPIENT, FakeChainClient, send_failed


class TestExecuteAction:
    """Tests for execute_action()."""

    @pytest.mark.asyncio
    async def test_confirmed_reward(self, thresholds, signer):
        chain = FakeChainClient()
        outcome = await execute_action(
            RewardAction(), chain, signer, thresholds, receipt_timeout=5
        )
        assert isinstance(outcome, Confirmed)
        assert outcome.succeeded is True
        assert outcome.block_number == 123456
        assert outcome.gas_used == 210000
        assert chain.submitted_kinds() == ["reward"]

    @pytest.mark.asyncio
    async def test_transfer_bond_goes_to_stake_recipient(self, thresholds, signer):
        chain = FakeChainClient()
        await execute_action(
            TransferBondAction(amount_wei=42), chain, signer, thresholds, receipt_timeout=5
        )
        assert chain.submitted == [("transfer_bond", (STAKE_RECIPIENT, 42))]

    @pytest.mark.asyncio
    async def test_withdraw_fees_goes_to_fee_recipient(self, thresholds, signer):
        chain = FakeChainClient()
        await execute_action(
            WithdrawFeesAction(amount_wei=99), chain, signer, thresholds, receipt_timeout=5
        )
        assert chain.submitted == [("withdraw_fees", (FEE_RECIPIENT, 99))]

    @pytest.mark.asyncio
    async def test_submission_error_is_failed(self, thresholds, signer):
        chain = FakeChainClient()
        chain.submit_errors["transfer_bond"] = send_failed()
        outcome = await execute_action(
            TransferBondAction(amount_wei=1), chain, signer, thresholds, receipt_timeout=5
        )
        assert isinstance(outcome, Failed)
        assert outcome.reason.startswith("submission error")
        assert outcome.tx_hash is None
        assert outcome_succeeded(outcome) is False

    @pytest.mark.asyncio
    async def test_revert_is_failed(self, thresholds, signer):
        chain = FakeChainClient()
        chain.revert_kinds.add("reward")
        outcome = await execute_action(
            RewardAction(), chain, signer, thresholds, receipt_timeout=5
        )
        assert isinstance(outcome, Failed)
        assert outcome.reason == "reverted"
        assert outcome.tx_hash is not None

    @pytest.mark.asyncio
    async def test_timeout_is_failed(self, thresholds, signer):
        chain = FakeChainClient()
        chain.timeout_kinds.add("withdraw_fees")
        outcome = await execute_action(
            WithdrawFeesAction(amount_wei=5), chain, signer, thresholds, receipt_timeout=5
        )
        assert isinstance(outcome, Failed)
        assert outcome.reason == "timeout"

    @pytest.mark.asyncio
    async def test_receipt_read_error_is_failed(self, thresholds, signer):
        chain = FakeChainClient()

        async def broken_receipt(tx_hash, timeout):
            raise ChainReadError("receipt rpc down")

        chain.await_receipt = broken_receipt
        outcome = await execute_action(
            RewardAction(), chain, signer, thresholds, receipt_timeout=5
        )
        assert isinstance(outcome, Failed)
        assert "receipt error" in outcome.reason

    @pytest.mark.asyncio
    async def test_on_submitted_called_before_receipt(self, thresholds, signer):
        chain = FakeChainClient()
        seen = []
        outcome = await execute_action(
            RewardAction(),
            chain,
            signer,
            thresholds,
            receipt_timeout=5,
            on_submitted=seen.append,
        )
        assert len(seen) == 1
        assert seen[0].tx_hash == outcome.tx_hash

    @pytest.mark.asyncio
    async def test_on_submitted_not_called_on_submission_error(self, thresholds, signer):
        chain = FakeChainClient()
        chain.submit_errors["reward"] = send_failed()
        seen = []
        await execute_action(
            RewardAction(), chain, signer, thresholds, receipt_timeout=5, on_submitted=seen.append
        )
        assert seen == []
