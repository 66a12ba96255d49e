"""Query document discovery and fingerprinting."""

import glob
import hashlib
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import pathspec

from ..config import SyncConfig

logger = logging.getLogger(__name__)


class DocumentReadError(Exception):
    """Raised when a matched query document cannot be read."""

    def __init__(self, path: Path, reason: str):
        super().__init__(f"Cannot read query document {path}: {reason}")
        self.path = path


@dataclass(frozen=True)
class Document:
    """A query document ready to be added to a collection."""

    name: str
    query: str
    path: Path
    content_hash: str


def compute_content_hash(content: str) -> str:
    """Return the sha256 hex digest of the UTF-8 encoded content."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def build_document_name(
    path: Path,
    content_hash: str,
    repository: Optional[str] = None,
    append_metadata: bool = True,
) -> str:
    """Build the query name registered in the collection.

    With metadata the name is ``<basename>_<repository>_<sha256>``, which keeps
    names distinct across repositories and across revisions of the same file.
    """
    if not append_metadata:
        return path.name
    if repository:
        return f"{path.name}_{repository}_{content_hash}"
    return f"{path.name}_{content_hash}"


class DocumentCollector:
    """Finds query documents matching the configured glob."""

    def __init__(self, config: SyncConfig):
        self.config = config
        self.exclude_spec = pathspec.PathSpec.from_lines(
            "gitwildmatch", config.exclude_patterns
        )

    def find_files(self) -> List[Path]:
        """Expand the glob into a sorted list of regular files."""
        pattern = self.config.resolved_pattern()
        matches = glob.glob(pattern, recursive=True)

        files = []
        for match in sorted(set(matches)):
            file_path = Path(match)
            if not file_path.is_file():
                continue
            if self._is_excluded(file_path):
                logger.debug(f"Excluded {file_path}")
                continue
            files.append(file_path)

        logger.info(f"Found {len(files)} query document(s) matching {pattern}")
        return files

    def _is_excluded(self, file_path: Path) -> bool:
        workspace = self.config.workspace.resolve()
        try:
            relative_path = file_path.resolve().relative_to(workspace)
        except ValueError:
            # Outside the workspace; exclude patterns do not apply
            return False
        return self.exclude_spec.match_file(str(relative_path))

    def read_document(self, file_path: Path) -> Document:
        """Read and fingerprint a single query document.

        Raises:
            DocumentReadError: If the file cannot be read as UTF-8 text
        """
        try:
            # newline="" keeps CRLF intact so the hash covers the exact bytes
            with open(file_path, "r", encoding="utf-8", newline="") as f:
                content = f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise DocumentReadError(file_path, str(e)) from e

        content_hash = compute_content_hash(content)
        name = build_document_name(
            file_path,
            content_hash,
            repository=self.config.repository,
            append_metadata=self.config.append_metadata,
        )
        return Document(
            name=name, query=content, path=file_path, content_hash=content_hash
        )

    def collect(self) -> List[Document]:
        """Collect every matching query document."""
        return [self.read_document(path) for path in self.find_files()]
