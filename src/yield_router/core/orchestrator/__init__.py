"""
Workflow orchestrator for the swap-and-deposit sequence.

Usage:
    from yield_router.core.orchestrator import WorkflowOrchestrator

    orchestrator = WorkflowOrchestrator(web3, account, addresses)
    result = await orchestrator.run(Decimal("1"))

    for record in result.trace:
        print(record.stage.value, record.outcome.value, record.tx_hashes)
"""

from .base import (
    OutputAccounting,
    StageOutcome,
    StageRecord,
    WorkflowResult,
    WorkflowRunState,
    WorkflowState,
)
from .orchestrator import WorkflowOrchestrator

__all__ = [
    'WorkflowOrchestrator',
    'WorkflowState',
    'StageOutcome',
    'StageRecord',
    'WorkflowRunState',
    'WorkflowResult',
    'OutputAccounting',
]
