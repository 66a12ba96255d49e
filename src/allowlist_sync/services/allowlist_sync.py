"""Runs the create/add/activate sequence against the allowlist API."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, Sequence

from ..api_clients.allowlist_client import AllowlistAPIClient
from .document_collector import Document
from .error_policy import CallSite, CollectionOutcome, ErrorDecision, decide

logger = logging.getLogger(__name__)


class StepStatus(Enum):
    """How a remote step ended."""

    APPLIED = "applied"
    ALREADY_APPLIED = "already_applied"
    IGNORED_DATABASE_ERROR = "ignored_database_error"


@dataclass
class SyncReport:
    """Summary of a completed run."""

    collection_name: str
    outcome: CollectionOutcome
    documents_added: int = 0
    documents_already_present: int = 0
    activation: StepStatus = StepStatus.APPLIED

    @property
    def documents_total(self) -> int:
        return self.documents_added + self.documents_already_present


class AllowlistSynchronizer:
    """Publishes query documents to a collection and activates it.

    Steps run strictly in order. A failure the policy marks FATAL is re-raised
    unchanged and nothing after it runs; there are no retries.
    """

    def __init__(self, client: AllowlistAPIClient, collection_name: str):
        self.client = client
        self.collection_name = collection_name

    async def _guarded(
        self,
        call_site: CallSite,
        call: Callable[[], Awaitable[Any]],
        outcome: Optional[CollectionOutcome] = None,
    ) -> StepStatus:
        try:
            await call()
        except Exception as e:
            decision = decide(call_site, e, outcome)
            if decision is ErrorDecision.FATAL:
                logger.debug(f"{call_site.value} failed: {e}")
                raise
            if decision is ErrorDecision.IGNORE_WITH_SIGNAL:
                return StepStatus.ALREADY_APPLIED
            return StepStatus.IGNORED_DATABASE_ERROR
        return StepStatus.APPLIED

    async def create_collection(self) -> CollectionOutcome:
        """Create the collection, inferring whether it already existed."""
        status = await self._guarded(
            CallSite.CREATE_COLLECTION,
            lambda: self.client.create_query_collection(self.collection_name),
        )
        if status is StepStatus.ALREADY_APPLIED:
            logger.info(f"Query collection {self.collection_name} already exists")
            return CollectionOutcome.ALREADY_EXISTED
        logger.info(f"Created query collection {self.collection_name}")
        return CollectionOutcome.CREATED

    async def add_document(self, document: Document) -> StepStatus:
        return await self._guarded(
            CallSite.ADD_QUERY,
            lambda: self.client.add_query_to_collection(
                self.collection_name, document.name, document.query
            ),
        )

    async def activate_collection(self, outcome: CollectionOutcome) -> StepStatus:
        return await self._guarded(
            CallSite.ACTIVATE_COLLECTION,
            lambda: self.client.add_collection_to_allowlist(self.collection_name),
            outcome=outcome,
        )

    async def run(self, documents: Sequence[Document]) -> SyncReport:
        """Run create, add and activate for ``documents``.

        Raises:
            Exception: The first error the policy classifies as fatal
        """
        outcome = await self.create_collection()
        report = SyncReport(collection_name=self.collection_name, outcome=outcome)

        for document in documents:
            status = await self.add_document(document)
            if status is StepStatus.APPLIED:
                report.documents_added += 1
            else:
                report.documents_already_present += 1

        report.activation = await self.activate_collection(outcome)
        logger.info(
            f"Synchronized {report.documents_total} document(s) into "
            f"{self.collection_name}: {report.documents_added} added, "
            f"{report.documents_already_present} already present, "
            f"activation {report.activation.value}"
        )
        return report
