"""
Allowlist Sync - keeps a GraphQL engine's query allowlist in step with the
query documents checked into a repository.

Collects ``.gql`` documents, registers them in a fixed query collection and
activates that collection as the server allowlist, once per CI run.
"""

__version__ = "1.2.0"
