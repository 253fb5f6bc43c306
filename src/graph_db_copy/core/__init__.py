"""
Core copy orchestration: the transfer pipeline, the source state guard and
progress reporting.
"""

from .progress import ProgressReporter
from .state import GuardMode, GuardState, SourceStateGuard
from .transfer import DataTransfer, batched, transfer

__all__ = [
    "DataTransfer",
    "GuardMode",
    "GuardState",
    "ProgressReporter",
    "SourceStateGuard",
    "batched",
    "transfer",
]
