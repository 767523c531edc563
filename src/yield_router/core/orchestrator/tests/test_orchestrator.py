"""
Tests for the workflow orchestrator.

End-to-end runs go through the real components against a fake chain;
the sequencing tests swap components for AsyncMocks.
"""

from decimal import Decimal
from unittest.mock import AsyncMock, Mock

import pytest
from hexbytes import HexBytes

from yield_router.contracts.errors import InvalidArgument, PoolNotFound, TransactionFailure
from yield_router.contracts.types import (
    PoolReference,
    TransactionReceipt,
    TxStatus,
    VenueKind,
)
from yield_router.contracts.uniswap_v3_router import SwapParameterBuilder
from yield_router.contracts.venues import DepositOutcome
from yield_router.core.orchestrator import (
    OutputAccounting,
    StageOutcome,
    WorkflowOrchestrator,
    WorkflowState,
)

USDC = "0x1111111111111111111111111111111111111111"
LINK = "0x2222222222222222222222222222222222222222"
FACTORY = "0x3333333333333333333333333333333333333333"
ROUTER = "0x4444444444444444444444444444444444444444"
LENDING_POOL = "0x5555555555555555555555555555555555555555"
VAULT = "0x6666666666666666666666666666666666666666"
POOL = "0x7777777777777777777777777777777777777777"
SIGNER = "0x8888888888888888888888888888888888888888"
ZERO = "0x0000000000000000000000000000000000000000"

FULL_RUN = [
    WorkflowState.APPROVING,
    WorkflowState.LOCATING,
    WorkflowState.SWAPPING,
    WorkflowState.DEPOSITING_LENDING,
    WorkflowState.DEPOSITING_VAULT,
    WorkflowState.DONE,
]


def _receipt(tx_hash: str) -> TransactionReceipt:
    return TransactionReceipt(tx_hash=tx_hash, status=TxStatus.SUCCESS, block_number=1, gas_used=1)


def _deposit_outcome(kind, address, amount, error=None):
    if error:
        return DepositOutcome(kind, address, amount, approval_receipt=_receipt("0xa1"), error=error)
    return DepositOutcome(
        kind, address, amount, approval_receipt=_receipt("0xa1"), deposit_receipt=_receipt("0xd1")
    )


class TestWorkflowEndToEnd:
    """Full runs through the real components on a fake chain."""

    @pytest.mark.asyncio
    async def test_full_run_for_one_unit(self, chain, addresses):
        orchestrator = WorkflowOrchestrator(chain.web3, SIGNER, addresses)

        result = await orchestrator.run(Decimal("1"))

        assert result.success
        assert result.states == FULL_RUN
        assert result.amount_in == 1_000_000
        assert result.swap_output == 1_000_000
        assert result.pool.address == POOL
        assert chain.sent_functions() == [
            (USDC, "approve"),
            (ROUTER, "exactInputSingle"),
            (LINK, "approve"),
            (LENDING_POOL, "deposit"),
            (LINK, "approve"),
            (VAULT, "supply"),
        ]
        assert chain.sent[0]["args"] == (ROUTER, 1_000_000)
        assert chain.sent[1]["args"] == ((USDC, LINK, 3000, SIGNER, 1_000_000, 0, 0),)
        assert chain.sent[3]["args"] == (LINK, 1_000_000, SIGNER, 0)
        assert chain.sent[5]["args"] == (LINK, 1_000_000)

    @pytest.mark.asyncio
    async def test_trace_records_outcomes_and_hashes(self, chain, addresses):
        result = await WorkflowOrchestrator(chain.web3, SIGNER, addresses).run(1)

        approving = result.stage(WorkflowState.APPROVING)
        locating = result.stage(WorkflowState.LOCATING)
        lending = result.stage(WorkflowState.DEPOSITING_LENDING)

        assert approving.outcome == StageOutcome.SUCCESS
        assert len(approving.tx_hashes) == 1
        assert locating.tx_hashes == []
        assert locating.detail["pool"] == POOL
        assert lending.outcome == StageOutcome.ATTEMPTED
        assert lending.succeeded is True
        assert len(lending.tx_hashes) == 2

    @pytest.mark.asyncio
    async def test_approval_revert_aborts_before_any_other_call(self, chain, addresses):
        chain.reverts.add((USDC, "approve"))

        result = await WorkflowOrchestrator(chain.web3, SIGNER, addresses).run(Decimal("1"))

        assert result.states == [WorkflowState.APPROVING, WorkflowState.ABORTED]
        assert result.failed_stage == WorkflowState.APPROVING
        assert chain.sent_functions() == [(USDC, "approve")]
        assert chain.calls == []
        assert len(result.stage(WorkflowState.APPROVING).tx_hashes) == 1

    @pytest.mark.asyncio
    async def test_missing_pool_aborts_after_approval(self, chain, addresses):
        chain.views[(FACTORY, "getPool")] = ZERO

        result = await WorkflowOrchestrator(chain.web3, SIGNER, addresses).run(Decimal("1"))

        assert result.states == [WorkflowState.APPROVING, WorkflowState.LOCATING, WorkflowState.ABORTED]
        assert "No pool registered" in result.error
        assert chain.sent_functions() == [(USDC, "approve")]

    @pytest.mark.asyncio
    async def test_swap_revert_skips_deposits(self, chain, addresses):
        chain.reverts.add((ROUTER, "exactInputSingle"))

        result = await WorkflowOrchestrator(chain.web3, SIGNER, addresses).run(Decimal("1"))

        assert result.final_state == WorkflowState.ABORTED
        assert result.failed_stage == WorkflowState.SWAPPING
        assert result.swap_output is None
        assert chain.sent_functions() == [(USDC, "approve"), (ROUTER, "exactInputSingle")]
        # The reverted swap's hash is kept for diagnosis
        assert len(result.stage(WorkflowState.SWAPPING).tx_hashes) == 1

    @pytest.mark.asyncio
    async def test_lending_failure_still_tries_vault(self, chain, addresses):
        chain.reverts.add((LENDING_POOL, "deposit"))

        result = await WorkflowOrchestrator(chain.web3, SIGNER, addresses).run(Decimal("1"))

        assert result.states == FULL_RUN
        assert result.stage(WorkflowState.DEPOSITING_LENDING).succeeded is False
        assert result.stage(WorkflowState.DEPOSITING_VAULT).succeeded is True
        assert (VAULT, "supply") in chain.sent_functions()

    @pytest.mark.asyncio
    async def test_both_deposits_failing_still_done(self, chain, addresses):
        chain.reverts.update({(LENDING_POOL, "deposit"), (VAULT, "supply")})

        result = await WorkflowOrchestrator(chain.web3, SIGNER, addresses).run(Decimal("1"))

        assert result.final_state == WorkflowState.DONE
        assert result.failed_stage is None
        assert not result.stage(WorkflowState.DEPOSITING_LENDING).succeeded
        assert not result.stage(WorkflowState.DEPOSITING_VAULT).succeeded

    @pytest.mark.asyncio
    async def test_fractional_amount_truncates(self, chain, addresses):
        result = await WorkflowOrchestrator(chain.web3, SIGNER, addresses).run("0.0000015")

        assert result.amount_in == 1
        assert chain.sent[0]["args"] == (ROUTER, 1)

    @pytest.mark.asyncio
    async def test_zero_amount_runs_through(self, chain, addresses):
        result = await WorkflowOrchestrator(chain.web3, SIGNER, addresses).run(0)

        assert result.success
        assert result.amount_in == 0

    @pytest.mark.asyncio
    async def test_receipt_accounting_uses_transfer_events(self, chain, addresses):
        # The swap is the second transaction sent on the fake chain
        swap_hash = HexBytes((2).to_bytes(32, "big"))
        chain.transfer_events[swap_hash] = [
            {"address": LINK, "args": {"from": POOL, "to": SIGNER, "value": 4 * 10**16}},
        ]

        orchestrator = WorkflowOrchestrator(
            chain.web3, SIGNER, addresses, output_accounting=OutputAccounting.RECEIPT
        )
        result = await orchestrator.run(Decimal("1"))

        assert result.swap_output == 4 * 10**16
        assert chain.sent[3]["args"] == (LINK, 4 * 10**16, SIGNER, 0)
        assert chain.sent[5]["args"] == (LINK, 4 * 10**16)

    @pytest.mark.asyncio
    async def test_configured_minimum_output_reaches_router(self, chain, addresses):
        orchestrator = WorkflowOrchestrator(
            chain.web3, SIGNER, addresses, swap_builder=SwapParameterBuilder(amount_out_minimum=99)
        )

        await orchestrator.run(Decimal("1"))

        assert chain.sent[1]["args"][0][5] == 99


class TestWorkflowSequencing:
    """Stage ordering with component doubles."""

    def setup_method(self):
        self.pool = PoolReference(address=POOL, token0=USDC, token1=LINK, fee_tier=3000)
        self.approver = Mock()
        self.approver.approve_smallest_unit = AsyncMock(return_value=_receipt("0x01"))
        self.locator = Mock()
        self.locator.locate = AsyncMock(return_value=self.pool)
        self.executor = Mock()
        self.executor.execute = AsyncMock(return_value=_receipt("0x02"))
        self.depositor = Mock()
        self.depositor.deposit_to_venue = AsyncMock(
            side_effect=lambda kind, address, token, amount, signer: _deposit_outcome(kind, address, amount)
        )

    def _orchestrator(self, addresses):
        return WorkflowOrchestrator(
            Mock(),
            SIGNER,
            addresses,
            approver=self.approver,
            locator=self.locator,
            executor=self.executor,
            depositor=self.depositor,
        )

    @pytest.mark.asyncio
    async def test_components_called_in_order(self, addresses):
        result = await self._orchestrator(addresses).run(Decimal("2"))

        assert result.success
        self.approver.approve_smallest_unit.assert_awaited_once_with(
            SIGNER, ROUTER, USDC, 2_000_000, label="USDC"
        )
        self.locator.locate.assert_awaited_once_with(
            FACTORY, addresses.source_token, addresses.target_token, 3000
        )
        params = self.executor.execute.await_args.args[1]
        assert params.amount_in == 2_000_000
        assert params.recipient == SIGNER

        kinds = [call.args[0] for call in self.depositor.deposit_to_venue.await_args_list]
        assert kinds == [VenueKind.LENDING, VenueKind.VAULT]
        for call in self.depositor.deposit_to_venue.await_args_list:
            assert call.args[2:4] == (LINK, 2_000_000)

    @pytest.mark.asyncio
    async def test_approval_error_aborts(self, addresses):
        self.approver.approve_smallest_unit.side_effect = TransactionFailure("approve USDC reverted", tx_hash="0xdead")

        result = await self._orchestrator(addresses).run(Decimal("1"))

        assert result.states == [WorkflowState.APPROVING, WorkflowState.ABORTED]
        assert result.stage(WorkflowState.APPROVING).tx_hashes == ["0xdead"]
        self.locator.locate.assert_not_awaited()
        self.executor.execute.assert_not_awaited()
        self.depositor.deposit_to_venue.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_pool_not_found_aborts(self, addresses):
        self.locator.locate.side_effect = PoolNotFound(USDC, LINK, 3000)

        result = await self._orchestrator(addresses).run(Decimal("1"))

        assert result.failed_stage == WorkflowState.LOCATING
        self.executor.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_pool_without_source_token_aborts_swap(self, addresses):
        self.locator.locate.return_value = PoolReference(
            address=POOL, token0=LINK, token1=VAULT, fee_tier=3000
        )

        result = await self._orchestrator(addresses).run(Decimal("1"))

        assert result.failed_stage == WorkflowState.SWAPPING
        assert "do not match pool" in result.error
        self.executor.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_deposit_failure_does_not_abort(self, addresses):
        self.depositor.deposit_to_venue.side_effect = [
            _deposit_outcome(VenueKind.LENDING, LENDING_POOL, 1_000_000, error="lending deposit reverted"),
            _deposit_outcome(VenueKind.VAULT, VAULT, 1_000_000),
        ]

        result = await self._orchestrator(addresses).run(Decimal("1"))

        assert result.final_state == WorkflowState.DONE
        lending = result.stage(WorkflowState.DEPOSITING_LENDING)
        assert lending.outcome == StageOutcome.ATTEMPTED
        assert lending.error == "lending deposit reverted"
        assert lending.tx_hashes == ["0xa1"]

    @pytest.mark.asyncio
    async def test_malformed_amount_raises_before_any_stage(self, addresses):
        with pytest.raises(InvalidArgument):
            await self._orchestrator(addresses).run("lots")

        self.approver.approve_smallest_unit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_negative_amount_aborts_in_approving(self, addresses):
        result = await self._orchestrator(addresses).run(Decimal("-1"))

        assert result.states == [WorkflowState.APPROVING, WorkflowState.ABORTED]
        assert "negative" in result.error
        self.approver.approve_smallest_unit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_approved_amount_is_the_swapped_amount(self, addresses):
        result = await self._orchestrator(addresses).run("1.2345678")

        approved = self.approver.approve_smallest_unit.await_args.args[3]
        swapped = self.executor.execute.await_args.args[1].amount_in
        assert approved == swapped == result.amount_in == 1_234_567

    @pytest.mark.asyncio
    async def test_output_sizing_failure_keeps_swap_hash(self, addresses):
        self.approver.transferred_amount = Mock(side_effect=InvalidArgument("Receipt 0x02 carries no logs"))
        orchestrator = self._orchestrator(addresses)
        orchestrator.output_accounting = OutputAccounting.RECEIPT

        result = await orchestrator.run(Decimal("1"))

        swapping = result.stage(WorkflowState.SWAPPING)
        assert result.failed_stage == WorkflowState.SWAPPING
        assert swapping.outcome == StageOutcome.FAILED
        assert swapping.tx_hashes == ["0x02"]
        self.depositor.deposit_to_venue.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_swap_hash_recorded_once_on_success(self, addresses):
        result = await self._orchestrator(addresses).run(Decimal("1"))

        assert result.stage(WorkflowState.SWAPPING).tx_hashes == ["0x02"]

    @pytest.mark.asyncio
    async def test_runs_are_independent(self, addresses):
        orchestrator = self._orchestrator(addresses)

        first = await orchestrator.run(Decimal("1"))
        second = await orchestrator.run(Decimal("3"))

        assert first.run_id != second.run_id
        assert first.amount_in == 1_000_000
        assert second.amount_in == 3_000_000
        assert first.trace is not second.trace
        assert len(first.trace) == len(second.trace) == 5

    @pytest.mark.asyncio
    async def test_to_dict_is_serialisable_summary(self, addresses):
        result = await self._orchestrator(addresses).run(Decimal("1"))

        summary = result.to_dict()

        assert summary["final_state"] == "done"
        assert summary["pool"] == POOL
        assert [entry["stage"] for entry in summary["trace"]] == [
            "approving", "locating", "swapping", "depositing_lending", "depositing_vault",
        ]
