"""Allowlist API Client for the GraphQL engine.

Wraps the three metadata operations used to publish query documents:
creating a query collection, adding a query to it, and adding the
collection to the allowlist.
"""

import logging
from typing import Any, Dict

from .base_client import HasuraMetadataAPIClient

logger = logging.getLogger(__name__)


class AllowlistAPIClient(HasuraMetadataAPIClient):
    """API client for query collection and allowlist operations."""

    async def create_query_collection(self, name: str) -> Dict[str, Any]:
        """Create an empty, comment-less query collection.

        Raises:
            HasuraAPIError: ``already-exists`` (400) when the collection exists
        """
        logger.debug(f"Creating query collection {name}")
        return await self._post_operation(
            "create_query_collection",
            {
                "name": name,
                "comment": "",
                "definition": {"queries": []},
            },
        )

    async def add_query_to_collection(
        self, collection_name: str, query_name: str, query: str
    ) -> Dict[str, Any]:
        """Add a single named query to an existing collection."""
        logger.debug(f"Adding query {query_name} to collection {collection_name}")
        return await self._post_operation(
            "add_query_to_collection",
            {
                "collection_name": collection_name,
                "query_name": query_name,
                "query": query,
            },
        )

    async def add_collection_to_allowlist(self, collection_name: str) -> Dict[str, Any]:
        """Add an existing collection to the enforced allowlist."""
        logger.debug(f"Adding collection {collection_name} to allowlist")
        return await self._post_operation(
            "add_collection_to_allowlist", {"collection": collection_name}
        )
