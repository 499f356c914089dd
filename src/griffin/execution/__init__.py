"""Route execution backends."""

from griffin.execution.base import ExecutionAdapter, ExecutionError, TransactionHandle
from griffin.execution.dry_run import DryRunExecutionAdapter

__all__ = [
    "DryRunExecutionAdapter",
    "ExecutionAdapter",
    "ExecutionError",
    "TransactionHandle",
]
