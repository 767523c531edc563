"""
Workflow orchestrator: approve → locate pool → swap → deposit (lending) → deposit (vault).
"""

import logging
from decimal import Decimal
from typing import Optional, Union

from web3 import Web3

from ...contracts.base import Signer, TxConfig, signer_address
from ...contracts.erc20 import TokenApprover, parse_amount, to_smallest_unit
from ...contracts.types import VenueKind, WorkflowAddresses
from ...contracts.uniswap_v3_pool import PoolLocator
from ...contracts.uniswap_v3_router import SwapExecutor, SwapParameterBuilder
from ...contracts.venues import YieldDepositor
from .base import (
    OutputAccounting,
    StageRecord,
    WorkflowResult,
    WorkflowRunState,
    WorkflowState,
)

logger = logging.getLogger(__name__)


class WorkflowOrchestrator:
    """
    Runs the fixed swap-and-deposit workflow once per ``run`` call.

    Approving, Locating and Swapping must each succeed before the next
    stage starts; a failure in any of them ends the run in ABORTED. Both
    deposit stages are always entered after a successful swap and their
    failures never abort the run.
    """

    def __init__(
        self,
        web3: Web3,
        signer: Signer,
        addresses: WorkflowAddresses,
        tx_config: Optional[TxConfig] = None,
        swap_builder: Optional[SwapParameterBuilder] = None,
        output_accounting: OutputAccounting = OutputAccounting.ASSUMED,
        approver: Optional[TokenApprover] = None,
        locator: Optional[PoolLocator] = None,
        executor: Optional[SwapExecutor] = None,
        depositor: Optional[YieldDepositor] = None,
    ):
        self.web3 = web3
        self.signer = signer
        self.addresses = addresses
        self.tx_config = tx_config or TxConfig()
        self.swap_builder = swap_builder or SwapParameterBuilder()
        self.output_accounting = output_accounting

        self.approver = approver or TokenApprover(web3, self.tx_config)
        self.locator = locator or PoolLocator(web3, self.tx_config)
        self.executor = executor or SwapExecutor(web3, self.tx_config)
        self.depositor = depositor or YieldDepositor(web3, self.tx_config, approver=self.approver)

    async def run(self, human_amount: Union[Decimal, int, str]) -> WorkflowResult:
        """
        Run the workflow for ``human_amount`` of the source token.

        Args:
            human_amount: Human-readable source token amount (e.g. Decimal("1"))

        Returns:
            WorkflowResult with the final state and the ordered stage trace
        """
        run = WorkflowRunState(human_amount=parse_amount(human_amount))
        source = self.addresses.source_token
        target = self.addresses.target_token

        logger.info(
            f"🚀 Starting run {run.run_id}: {run.human_amount} {source.label} → {target.label}"
        )

        # Approving
        record = run.enter(WorkflowState.APPROVING)
        try:
            amount_in = to_smallest_unit(run.human_amount, source.decimals)
            receipt = await self.approver.approve_smallest_unit(
                self.signer, self.addresses.router, source.address, amount_in, label=source.label
            )
            run.amount_in = amount_in
            record.mark_success(receipt, amount_in=run.amount_in)
        except Exception as e:
            return self._abort(run, record, e)

        # Locating
        record = run.enter(WorkflowState.LOCATING)
        try:
            run.pool = await self.locator.locate(
                self.addresses.factory, source, target, self.addresses.fee_tier
            )
            record.mark_success(pool=run.pool.address, fee_tier=run.pool.fee_tier)
        except Exception as e:
            return self._abort(run, record, e)

        # Swapping
        record = run.enter(WorkflowState.SWAPPING)
        try:
            params = self.swap_builder.build(
                run.pool,
                recipient=signer_address(self.signer),
                token_in=source.address,
                token_out=target.address,
                amount_in=run.amount_in,
            )
            run.swap_receipt = await self.executor.execute(self.addresses.router, params, self.signer)
            # Confirmed on chain even if sizing the output fails below
            record.tx_hashes.append(run.swap_receipt.tx_hash)
            run.swap_output = self._swap_output(run)
            record.mark_success(amount_out=run.swap_output)
        except Exception as e:
            return self._abort(run, record, e)

        # Depositing: each venue contains its own failure
        for stage, venue_kind, venue_address in (
            (WorkflowState.DEPOSITING_LENDING, VenueKind.LENDING, self.addresses.lending_pool),
            (WorkflowState.DEPOSITING_VAULT, VenueKind.VAULT, self.addresses.vault),
        ):
            record = run.enter(stage)
            outcome = await self.depositor.deposit_to_venue(
                venue_kind, venue_address, target.address, run.swap_output, self.signer
            )
            run.deposits.append(outcome)
            record.mark_attempted(outcome)
            if outcome.succeeded:
                logger.info(f"✅ {stage.value} succeeded")
            else:
                logger.warning(f"⚠️  {stage.value} failed, continuing: {outcome.error}")

        run.finish()
        logger.info(f"🎉 Run {run.run_id} done")
        return WorkflowResult.from_state(run)

    def _swap_output(self, run: WorkflowRunState) -> int:
        """Size the deposits from the swap."""
        if self.output_accounting == OutputAccounting.ASSUMED:
            return run.amount_in

        amount_out = self.approver.transferred_amount(
            run.swap_receipt, self.addresses.target_token.address, self.signer
        )
        if amount_out == 0:
            logger.warning(f"Swap {run.swap_receipt.tx_hash} transferred no output to the signer")
        return amount_out

    def _abort(self, run: WorkflowRunState, record: StageRecord, error: Exception) -> WorkflowResult:
        run.abort(record, error)
        logger.error(f"❌ Run {run.run_id} aborted during {record.stage.value}: {error}")
        return WorkflowResult.from_state(run)
