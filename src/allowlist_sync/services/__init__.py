"""Services for collecting query documents and synchronizing the allowlist."""

from .allowlist_sync import AllowlistSynchronizer, StepStatus, SyncReport
from .document_collector import Document, DocumentCollector, DocumentReadError
from .error_policy import (
    CallSite,
    CollectionOutcome,
    ErrorDecision,
    ErrorDetails,
    classify_error,
    decide,
    policy_flags,
)

__all__ = [
    "AllowlistSynchronizer",
    "StepStatus",
    "SyncReport",
    "Document",
    "DocumentCollector",
    "DocumentReadError",
    "CallSite",
    "CollectionOutcome",
    "ErrorDecision",
    "ErrorDetails",
    "classify_error",
    "decide",
    "policy_flags",
]
