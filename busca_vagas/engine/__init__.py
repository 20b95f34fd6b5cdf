"""Engine Layer - Upstream Call Policy and Result Shaping

This module provides the core engine layer, implementing:
- RequestOrchestrator: timeout / retry / cache policy for upstream calls
- RetryPolicy, OperationTimeouts: policy configuration
- ExecutionStrategy: retry decision logic
- CacheAdapter: async cache adapter
- SearchResult: standardized result format
- assemble: extraction output → SearchResult
"""

from .assembler import assemble, build_summary
from .cache_adapter import CacheAdapter
from .orchestrator import RequestOrchestrator
from .policy import OperationTimeouts, RetryPolicy
from .result import (
    NO_AVAILABILITY_SUMMARY,
    QueryDetails,
    SearchResult,
    SearchStatus,
    WeekendResult,
    WeekendSearchResult,
)
from .strategy import ExecutionStrategy

__all__ = [
    "RequestOrchestrator",
    "RetryPolicy",
    "OperationTimeouts",
    "ExecutionStrategy",
    "CacheAdapter",
    "SearchResult",
    "SearchStatus",
    "QueryDetails",
    "WeekendResult",
    "WeekendSearchResult",
    "NO_AVAILABILITY_SUMMARY",
    "assemble",
    "build_summary",
]
