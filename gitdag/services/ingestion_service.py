"""
Object ingestion service for gitdag.

Turns the flat object listing produced by
`git rev-list --objects --all | git cat-file --batch-check` into records
in the four object stores.
"""

import time
from pathlib import Path
from typing import Dict, Optional, Union
import logging

from ..domain.objects import ObjectKind, RECORD_TYPES
from ..exit_codes import ObjectParseError
from ..infra.git_client import GitClient
from ..object_store import ObjectContainer
from ..progress import ProgressObserver

logger = logging.getLogger(__name__)

UINT32_MAX = 0xFFFFFFFF

KINDS_BY_NAME = {kind.value: kind for kind in ObjectKind}


def parse_u32(value: str, field_name: str, line: str) -> int:
    """Parse an unsigned 32-bit decimal field, rejecting anything else."""
    if not (value.isascii() and value.isdigit()):
        raise ObjectParseError(f"Invalid {field_name} {value!r} in object line {line!r}", line=line)
    number = int(value)
    if number > UINT32_MAX:
        raise ObjectParseError(f"{field_name} {value} out of range in object line {line!r}", line=line)
    return number


class IngestionService:
    """
    Populates an ObjectContainer from an object listing.

    Each meaningful line is `kind hash size size_on_disk`, possibly wrapped
    in apostrophes. Lines that do not split into exactly four fields are
    skipped; unknown kinds are reported and skipped; malformed sizes raise
    ObjectParseError.

    Example:
        container = ObjectContainer()
        service = IngestionService(container)
        service.ingest_text("commit h1 120 80\\nblob h2 50 40\\n")
    """

    def __init__(
        self,
        container: ObjectContainer,
        git_client: Optional[GitClient] = None,
        observer: Optional[ProgressObserver] = None,
    ):
        self.container = container
        self.git = git_client or GitClient()
        self.observer = observer or ProgressObserver()

    def ingest_repository(self, repo_path: Union[str, Path]) -> Dict[str, int]:
        """
        List every reachable object of a repository and ingest it.

        Raises:
            GitCommandError: if the object listing cannot be produced
            ObjectParseError: if a size field is malformed
        """
        listing = self.git.list_objects(repo_path)
        counts = self.ingest_text(listing)

        self.observer.on_status(f"Added {counts['commits']} Commits.")
        self.observer.on_status(f"Added {counts['trees']} Trees.")
        self.observer.on_status(f"Added {counts['blobs']} Blobs.")
        self.observer.on_status(f"Added {counts['tags']} Tags.")
        return counts

    def ingest_text(self, listing: str) -> Dict[str, int]:
        """
        Ingest an object listing.

        Returns:
            Number of records added per store
        """
        self.observer.on_status("Processing objects...")
        start = time.monotonic()
        before = self.container.counts()

        for line in listing.splitlines():
            self.ingest_line(line)

        after = self.container.counts()
        logger.debug(f"Processed object listing in {time.monotonic() - start:.2f}s")
        return {name: after[name] - before[name] for name in after}

    def ingest_line(self, line: str) -> Optional[int]:
        """Ingest one listing line. Returns the new index, or None if skipped."""
        fields = line.replace("'", "").split(" ")
        # a trailing blank line or anything else that is not a record
        if len(fields) != 4:
            return None

        kind_name, object_hash, size_field, disk_field = fields
        kind = KINDS_BY_NAME.get(kind_name)
        if kind is None:
            self.observer.on_diagnostic(f"Unknown: {kind_name}")
            return None

        size = parse_u32(size_field, "size", line)
        size_on_disk = parse_u32(disk_field, "size on disk", line)

        store = self.container.store_for(kind)
        record = RECORD_TYPES[kind](index=store.count(), size=size, size_on_disk=size_on_disk)
        return store.insert(object_hash, record)


def process_objects(listing: str, container: ObjectContainer,
                    observer: Optional[ProgressObserver] = None) -> Dict[str, int]:
    """Ingest an object listing into a container."""
    return IngestionService(container, observer=observer).ingest_text(listing)
