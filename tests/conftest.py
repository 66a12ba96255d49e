"""
Shared pytest fixtures for Allowlist Sync tests.

Provides a query-document workspace and an in-memory GraphQL engine served
through httpx.MockTransport, so client and synchronizer tests exercise the
real HTTP code path without a network.
"""

import json
from pathlib import Path
from typing import Any, Dict, List

import httpx
import pytest

from allowlist_sync.api_clients.allowlist_client import AllowlistAPIClient

ADMIN_SECRET = "test-admin-secret"
ENGINE_URL = "http://graphql-engine.test"


class FakeGraphQLEngine:
    """Minimal stand-in for the engine's metadata API.

    Mirrors the error shapes of the real engine: creating an existing
    collection or query answers 400 ``already-exists``; adding a collection
    that is already allowlisted answers 500 ``database query error``.
    """

    def __init__(self, admin_secret: str = ADMIN_SECRET):
        self.admin_secret = admin_secret
        self.collections: Dict[str, Dict[str, str]] = {}
        self.allowlist: List[str] = []
        self.requests: List[Dict[str, Any]] = []
        self.fail_next: Dict[str, httpx.Response] = {}

    @staticmethod
    def _error(status_code: int, code: str, error: str) -> httpx.Response:
        return httpx.Response(
            status_code, json={"path": "$.args", "error": error, "code": code}
        )

    def handle(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.requests.append({"headers": dict(request.headers), "body": body})

        if request.url.path != "/v1/query":
            return httpx.Response(404, json={"error": "resource does not exist"})
        if request.headers.get("x-hasura-admin-secret") != self.admin_secret:
            return self._error(401, "access-denied", "invalid x-hasura-admin-secret")

        operation = body["type"]
        args = body["args"]

        if operation in self.fail_next:
            return self.fail_next.pop(operation)

        if operation == "create_query_collection":
            if args["name"] in self.collections:
                return self._error(
                    400,
                    "already-exists",
                    f"query collection with name \"{args['name']}\" already exists",
                )
            self.collections[args["name"]] = {}
            return httpx.Response(200, json={"message": "success"})

        if operation == "add_query_to_collection":
            collection = self.collections.get(args["collection_name"])
            if collection is None:
                return self._error(400, "not-exists", "query collection does not exist")
            if args["query_name"] in collection:
                return self._error(
                    400, "already-exists", f"query \"{args['query_name']}\" already exists"
                )
            collection[args["query_name"]] = args["query"]
            return httpx.Response(200, json={"message": "success"})

        if operation == "add_collection_to_allowlist":
            if args["collection"] not in self.collections:
                return self._error(400, "not-exists", "query collection does not exist")
            if args["collection"] in self.allowlist:
                return self._error(500, "unexpected", "database query error")
            self.allowlist.append(args["collection"])
            return httpx.Response(200, json={"message": "success"})

        return self._error(400, "parse-failed", f"unknown operation {operation}")

    def operations(self) -> List[str]:
        return [r["body"]["type"] for r in self.requests]


@pytest.fixture
def fake_engine() -> FakeGraphQLEngine:
    return FakeGraphQLEngine()


@pytest.fixture
def engine_client(fake_engine) -> AllowlistAPIClient:
    """AllowlistAPIClient wired to the in-memory engine."""
    return AllowlistAPIClient(
        server_url=ENGINE_URL,
        admin_secret=ADMIN_SECRET,
        transport=httpx.MockTransport(fake_engine.handle),
    )


@pytest.fixture
def query_workspace(tmp_path) -> Path:
    """Workspace with a few query documents, one vendored under node_modules."""
    workspace = tmp_path / "repo"
    (workspace / "src" / "queries").mkdir(parents=True)
    (workspace / "src" / "queries" / "users.gql").write_text(
        "query Users { users { id name } }\n"
    )
    (workspace / "src" / "queries" / "posts.gql").write_text(
        "query Posts { posts { id title } }\n"
    )
    (workspace / "node_modules" / "lib").mkdir(parents=True)
    (workspace / "node_modules" / "lib" / "vendored.gql").write_text(
        "query Vendored { x }\n"
    )
    (workspace / "README.md").write_text("not a query\n")
    return workspace
