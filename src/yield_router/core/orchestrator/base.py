"""
State, stage records and run results for the workflow orchestrator.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from ...contracts.types import PoolReference, TransactionReceipt
from ...contracts.venues import DepositOutcome

logger = logging.getLogger(__name__)


class WorkflowState(Enum):
    """Workflow states, in execution order, plus the two terminal states."""
    APPROVING = "approving"
    LOCATING = "locating"
    SWAPPING = "swapping"
    DEPOSITING_LENDING = "depositing_lending"
    DEPOSITING_VAULT = "depositing_vault"
    DONE = "done"
    ABORTED = "aborted"

    @property
    def is_terminal(self) -> bool:
        return self in (WorkflowState.DONE, WorkflowState.ABORTED)

    @property
    def can_abort(self) -> bool:
        """Only the approve/locate/swap chain aborts the run."""
        return self in (WorkflowState.APPROVING, WorkflowState.LOCATING, WorkflowState.SWAPPING)


class StageOutcome(Enum):
    """How a stage ended."""
    RUNNING = "running"
    SUCCESS = "success"
    FAILED = "failed"
    ATTEMPTED = "attempted"


class OutputAccounting(Enum):
    """How the swap's output amount is sized for the deposits."""
    ASSUMED = "assumed"  # output == input amount
    RECEIPT = "receipt"  # read ERC-20 Transfer events from the swap receipt


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class StageRecord:
    """One entry of a run's stage trace."""
    stage: WorkflowState
    outcome: StageOutcome = StageOutcome.RUNNING
    started_at: datetime = field(default_factory=_utcnow)
    completed_at: Optional[datetime] = None
    tx_hashes: List[str] = field(default_factory=list)
    succeeded: Optional[bool] = None
    error: Optional[str] = None
    detail: Dict[str, Any] = field(default_factory=dict)

    def mark_success(self, receipt: Optional[TransactionReceipt] = None, **detail) -> None:
        self.outcome = StageOutcome.SUCCESS
        self.succeeded = True
        self.completed_at = _utcnow()
        if receipt is not None:
            self.tx_hashes.append(receipt.tx_hash)
        self.detail.update(detail)

    def mark_failed(self, error: Exception) -> None:
        self.outcome = StageOutcome.FAILED
        self.succeeded = False
        self.completed_at = _utcnow()
        self.error = str(error)
        tx_hash = getattr(error, "tx_hash", None)
        if tx_hash:
            self.tx_hashes.append(tx_hash)

    def mark_attempted(self, outcome: DepositOutcome) -> None:
        """Deposit stages always end as attempted; success is reported separately."""
        self.outcome = StageOutcome.ATTEMPTED
        self.succeeded = outcome.succeeded
        self.completed_at = _utcnow()
        self.tx_hashes.extend(outcome.tx_hashes)
        self.error = outcome.error
        self.detail["amount"] = outcome.amount
        self.detail["venue_address"] = outcome.venue_address

    def to_dict(self) -> Dict[str, Any]:
        return {
            'stage': self.stage.value,
            'outcome': self.outcome.value,
            'succeeded': self.succeeded,
            'tx_hashes': list(self.tx_hashes),
            'error': self.error,
            'detail': dict(self.detail),
            'started_at': self.started_at.isoformat(),
            'completed_at': self.completed_at.isoformat() if self.completed_at else None,
        }


@dataclass
class WorkflowRunState:
    """
    Transient state threaded between stages of a single run.

    Created at the start of ``WorkflowOrchestrator.run`` and dropped when
    the run returns. Nothing here is shared between runs.
    """
    human_amount: Decimal
    run_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    state: WorkflowState = WorkflowState.APPROVING
    amount_in: Optional[int] = None
    pool: Optional[PoolReference] = None
    swap_receipt: Optional[TransactionReceipt] = None
    swap_output: Optional[int] = None
    deposits: List[DepositOutcome] = field(default_factory=list)
    trace: List[StageRecord] = field(default_factory=list)

    def enter(self, stage: WorkflowState) -> StageRecord:
        """Move to ``stage`` and open its trace record."""
        if self.state.is_terminal:
            raise RuntimeError(f"Run {self.run_id} already finished in state {self.state.value}")
        self.state = stage
        record = StageRecord(stage=stage)
        self.trace.append(record)
        logger.info(f"[{self.run_id[:8]}] → {stage.value}")
        return record

    def abort(self, record: StageRecord, error: Exception) -> None:
        if not record.stage.can_abort:
            raise RuntimeError(f"Stage {record.stage.value} cannot abort the workflow")
        record.mark_failed(error)
        self.state = WorkflowState.ABORTED

    def finish(self) -> None:
        self.state = WorkflowState.DONE


@dataclass(frozen=True)
class WorkflowResult:
    """Outcome of one orchestrator run."""
    run_id: str
    final_state: WorkflowState
    trace: Tuple[StageRecord, ...]
    human_amount: Decimal
    amount_in: Optional[int] = None
    pool: Optional[PoolReference] = None
    swap_output: Optional[int] = None
    failed_stage: Optional[WorkflowState] = None
    error: Optional[str] = None

    @classmethod
    def from_state(cls, run: WorkflowRunState) -> "WorkflowResult":
        failed = next(
            (record for record in run.trace if record.outcome == StageOutcome.FAILED), None
        )
        return cls(
            run_id=run.run_id,
            final_state=run.state,
            trace=tuple(run.trace),
            human_amount=run.human_amount,
            amount_in=run.amount_in,
            pool=run.pool,
            swap_output=run.swap_output,
            failed_stage=failed.stage if failed else None,
            error=failed.error if failed else None,
        )

    @property
    def success(self) -> bool:
        return self.final_state == WorkflowState.DONE

    @property
    def states(self) -> List[WorkflowState]:
        """Stages entered, in order, followed by the terminal state."""
        return [record.stage for record in self.trace] + [self.final_state]

    def stage(self, stage: WorkflowState) -> Optional[StageRecord]:
        return next((record for record in self.trace if record.stage == stage), None)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'run_id': self.run_id,
            'final_state': self.final_state.value,
            'human_amount': str(self.human_amount),
            'amount_in': self.amount_in,
            'swap_output': self.swap_output,
            'pool': self.pool.address if self.pool else None,
            'failed_stage': self.failed_stage.value if self.failed_stage else None,
            'error': self.error,
            'trace': [record.to_dict() for record in self.trace],
        }
