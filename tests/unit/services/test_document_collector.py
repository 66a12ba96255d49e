"""Unit tests for query document discovery and naming."""

import hashlib
from pathlib import Path

import pytest

from allowlist_sync.config import SyncConfig
from allowlist_sync.services.document_collector import (
    DocumentCollector,
    DocumentReadError,
    build_document_name,
    compute_content_hash,
)


def _config(workspace: Path, **kwargs) -> SyncConfig:
    return SyncConfig(
        host="http://graphql-engine.test",
        admin_secret="secret",
        workspace=workspace,
        **kwargs,
    )


class TestDocumentNames:
    def test_plain_name_without_metadata(self):
        name = build_document_name(Path("a/b/users.gql"), "abc", "org/repo", False)
        assert name == "users.gql"

    def test_name_with_repository_and_hash(self):
        name = build_document_name(Path("a/b/users.gql"), "abc", "org/repo", True)
        assert name == "users.gql_org/repo_abc"

    def test_repository_segment_omitted_when_unknown(self):
        name = build_document_name(Path("users.gql"), "abc", None, True)
        assert name == "users.gql_abc"

    def test_content_hash_is_sha256_hex(self):
        content = "query Q { x }"
        expected = hashlib.sha256(content.encode("utf-8")).hexdigest()
        assert compute_content_hash(content) == expected


class TestDocumentCollector:
    """Test DocumentCollector against a real directory tree."""

    def test_collects_default_pattern_and_skips_node_modules(self, query_workspace):
        collector = DocumentCollector(_config(query_workspace, repository="org/repo"))

        documents = collector.collect()

        paths = [d.path.name for d in documents]
        assert paths == ["posts.gql", "users.gql"]
        for document in documents:
            assert document.name == (
                f"{document.path.name}_org/repo_{document.content_hash}"
            )
            assert document.query == document.path.read_text()

    def test_no_exclusions_includes_node_modules(self, query_workspace):
        collector = DocumentCollector(_config(query_workspace, exclude_patterns=[]))

        names = sorted(d.path.name for d in collector.collect())

        assert names == ["posts.gql", "users.gql", "vendored.gql"]

    def test_custom_pattern(self, query_workspace):
        pattern = str(query_workspace / "src" / "queries" / "users.gql")
        collector = DocumentCollector(_config(query_workspace, path_pattern=pattern))

        documents = collector.collect()

        assert [d.path.name for d in documents] == ["users.gql"]

    def test_no_matches_returns_empty_list(self, tmp_path):
        assert DocumentCollector(_config(tmp_path)).collect() == []

    def test_hidden_directories_are_not_searched(self, tmp_path):
        (tmp_path / ".cache").mkdir()
        (tmp_path / ".cache" / "stale.gql").write_text("query S { s }")
        (tmp_path / "live.gql").write_text("query L { l }")

        documents = DocumentCollector(_config(tmp_path)).collect()

        assert [d.path.name for d in documents] == ["live.gql"]

    def test_same_basename_different_content_get_distinct_names(self, tmp_path):
        (tmp_path / "a").mkdir()
        (tmp_path / "b").mkdir()
        (tmp_path / "a" / "list.gql").write_text("query A { a }")
        (tmp_path / "b" / "list.gql").write_text("query B { b }")

        documents = DocumentCollector(_config(tmp_path, repository="org/repo")).collect()

        assert len(documents) == 2
        assert documents[0].name != documents[1].name

    def test_crlf_content_is_preserved(self, tmp_path):
        (tmp_path / "crlf.gql").write_bytes(b"query C {\r\n  c\r\n}\r\n")

        (document,) = DocumentCollector(_config(tmp_path)).collect()

        assert document.query == "query C {\r\n  c\r\n}\r\n"
        assert document.content_hash == hashlib.sha256(
            b"query C {\r\n  c\r\n}\r\n"
        ).hexdigest()

    def test_undecodable_file_raises(self, tmp_path):
        (tmp_path / "binary.gql").write_bytes(b"\xff\xfe\x00bad")

        with pytest.raises(DocumentReadError) as exc_info:
            DocumentCollector(_config(tmp_path)).collect()

        assert "binary.gql" in str(exc_info.value)

    def test_directories_matching_pattern_are_skipped(self, tmp_path):
        (tmp_path / "odd.gql").mkdir()
        (tmp_path / "real.gql").write_text("query R { r }")

        documents = DocumentCollector(_config(tmp_path)).collect()

        assert [d.path.name for d in documents] == ["real.gql"]

    def test_workspace_with_glob_characters_is_matched_literally(self, tmp_path):
        workspace = tmp_path / "repo[1]"
        workspace.mkdir()
        (workspace / "q.gql").write_text("query Q { q }")

        documents = DocumentCollector(_config(workspace)).collect()

        assert [d.path.name for d in documents] == ["q.gql"]

    def test_user_pattern_keeps_glob_syntax(self, tmp_path):
        (tmp_path / "q1.gql").write_text("query A { a }")
        (tmp_path / "q2.gql").write_text("query B { b }")
        pattern = str(tmp_path / "q[1].gql")

        documents = DocumentCollector(_config(tmp_path, path_pattern=pattern)).collect()

        assert [d.path.name for d in documents] == ["q1.gql"]
