"""Idempotency policy for allowlist metadata calls.

The GraphQL engine has no endpoint to check whether a query collection
exists, so existence is inferred from the error returned when creating it.
This module decides, per call site, which error responses are expected
("already exists") and which must abort the run.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from ..api_clients.base_client import APIClientError, HasuraAPIError

logger = logging.getLogger(__name__)

ALREADY_EXISTS_STATUS = 400
ALREADY_EXISTS_CODE = "already-exists"
DATABASE_ERROR_STATUS = 500
DATABASE_ERROR_MESSAGE = "database query error"


class ErrorDecision(Enum):
    """Outcome of classifying a failed call."""

    IGNORE = "ignore"
    IGNORE_WITH_SIGNAL = "ignore_with_signal"
    FATAL = "fatal"


class CollectionOutcome(Enum):
    """Result of the create-collection step."""

    CREATED = "created"
    ALREADY_EXISTED = "already_existed"

    @property
    def pre_existed(self) -> bool:
        return self is CollectionOutcome.ALREADY_EXISTED


class CallSite(Enum):
    """Remote calls made during a run."""

    CREATE_COLLECTION = "create_query_collection"
    ADD_QUERY = "add_query_to_collection"
    ACTIVATE_COLLECTION = "add_collection_to_allowlist"


@dataclass(frozen=True)
class ErrorDetails:
    """Transport-independent view of a failed call."""

    status_code: Optional[int] = None
    code: Optional[str] = None
    error: Optional[str] = None

    @property
    def has_response(self) -> bool:
        return self.status_code is not None

    @classmethod
    def from_exception(cls, exc: BaseException) -> "ErrorDetails":
        """Extract details from a client exception.

        Exceptions that did not come with an HTTP response (transport
        failures, anything unexpected) yield details without a status code.
        """
        if isinstance(exc, HasuraAPIError):
            return cls(status_code=exc.status_code, code=exc.code, error=exc.error)
        if isinstance(exc, APIClientError):
            return cls(status_code=exc.status_code)
        return cls()


def classify_error(
    details: ErrorDetails,
    ignore_already_exists: bool = False,
    ignore_database_error: bool = False,
) -> ErrorDecision:
    """Decide whether a failed call can be ignored.

    Args:
        details: Status code and engine error fields of the failure
        ignore_already_exists: Tolerate 400 ``already-exists``
        ignore_database_error: Tolerate 500 ``database query error``

    Returns:
        IGNORE_WITH_SIGNAL for a tolerated already-exists conflict, IGNORE for
        a tolerated database error, FATAL otherwise
    """
    if not details.has_response:
        return ErrorDecision.FATAL

    if (
        ignore_already_exists
        and details.status_code == ALREADY_EXISTS_STATUS
        and details.code == ALREADY_EXISTS_CODE
    ):
        return ErrorDecision.IGNORE_WITH_SIGNAL

    if (
        ignore_database_error
        and details.status_code == DATABASE_ERROR_STATUS
        and details.error == DATABASE_ERROR_MESSAGE
    ):
        return ErrorDecision.IGNORE

    return ErrorDecision.FATAL


def policy_flags(
    call_site: CallSite, outcome: Optional[CollectionOutcome] = None
) -> Tuple[bool, bool]:
    """Return ``(ignore_already_exists, ignore_database_error)`` for a call site.

    Activation tolerates a database error only when the collection already
    existed before this run: re-adding an allowlisted collection surfaces as a
    storage-layer error rather than a conflict. The error is not inspected any
    further, so a genuine database fault during activation of a pre-existing
    collection is masked as well.
    """
    if call_site is CallSite.ACTIVATE_COLLECTION:
        return True, outcome is not None and outcome.pre_existed
    return True, False


def decide(
    call_site: CallSite,
    exc: BaseException,
    outcome: Optional[CollectionOutcome] = None,
) -> ErrorDecision:
    """Classify a client exception raised at ``call_site``."""
    ignore_already_exists, ignore_database_error = policy_flags(call_site, outcome)
    decision = classify_error(
        ErrorDetails.from_exception(exc),
        ignore_already_exists=ignore_already_exists,
        ignore_database_error=ignore_database_error,
    )
    if decision is not ErrorDecision.FATAL:
        logger.info(f"Ignored {call_site.value} error ({decision.value}): {exc}")
    return decision
