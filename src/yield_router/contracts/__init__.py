"""
Contract clients for the swap-and-deposit workflow.

Each client wraps one external contract surface (ERC-20, pool factory,
swap router, deposit venues) and shares the submit-then-wait transaction
path from ``base``.
"""

from .base import ContractClient, TxConfig, load_abi, signer_address
from .erc20 import TokenApprover, to_smallest_unit, from_smallest_unit
from .errors import InvalidArgument, PoolNotFound, TransactionFailure, WorkflowError
from .types import (
    PoolReference,
    SwapParameters,
    TokenDescriptor,
    TransactionReceipt,
    TxStatus,
    VenueKind,
    WorkflowAddresses,
)
from .uniswap_v3_pool import PoolLocator
from .uniswap_v3_router import SwapExecutor, SwapParameterBuilder
from .venues import DepositOutcome, YieldDepositor

__all__ = [
    'ContractClient',
    'TxConfig',
    'load_abi',
    'signer_address',
    'TokenApprover',
    'to_smallest_unit',
    'from_smallest_unit',
    'WorkflowError',
    'InvalidArgument',
    'PoolNotFound',
    'TransactionFailure',
    'TokenDescriptor',
    'PoolReference',
    'SwapParameters',
    'TransactionReceipt',
    'TxStatus',
    'VenueKind',
    'WorkflowAddresses',
    'PoolLocator',
    'SwapParameterBuilder',
    'SwapExecutor',
    'YieldDepositor',
    'DepositOutcome',
]
