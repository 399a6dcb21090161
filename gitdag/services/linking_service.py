"""
Graph linking service for gitdag.

Turns each commit's raw dependency listing into edges between records:
commit -> tree and commit -> blob, plus the path and back-reference of
every tree and blob touched. Commits are linked in parallel.
"""

import time
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Optional, Tuple
import logging

from ..object_store import ObjectContainer
from ..progress import ProgressObserver, format_duration

logger = logging.getLogger(__name__)

HASH_LENGTH = 40


def parse_dependency_line(line: str) -> Optional[Tuple[str, str]]:
    """
    Split a dependency line into (object id, path).

    Returns None for lines too short to hold an object id. A line of
    exactly 40 or 41 characters has no path (the root tree).
    """
    if len(line) < HASH_LENGTH:
        return None
    object_hash = line[:HASH_LENGTH]
    path = line[HASH_LENGTH + 1:] if len(line) > HASH_LENGTH + 1 else ""
    return object_hash, path


class GraphLinker:
    """
    Adds dependency edges to a populated ObjectContainer.

    Locking: a commit's write lock is held while its listing is applied,
    and at most one tree or blob write lock is taken at a time underneath
    it. Tree and blob locks are never held while waiting for a commit
    lock, so linkers cannot deadlock each other.

    Two commits can introduce the same tree or blob. Both append to its
    back-references and both overwrite its path with the value from their
    own listing; the edge sets do not depend on scheduling, only the
    order inside back-reference lists does.

    Example:
        linker = GraphLinker(container)
        linker.link_all(commit_deps)
    """

    def __init__(
        self,
        container: ObjectContainer,
        observer: Optional[ProgressObserver] = None,
        max_workers: Optional[int] = None,
    ):
        """
        Initialize GraphLinker.

        Args:
            container: Stores populated by ingestion
            observer: Receives status lines and diagnostics
            max_workers: Thread count; None or 0 uses the executor default
        """
        self.container = container
        self.observer = observer or ProgressObserver()
        self.max_workers = max_workers or None

    def link_all(self, commit_deps: Dict[str, str]) -> None:
        """Apply every commit's dependency listing."""
        self.observer.on_status("Processing commit deps...")
        start = time.monotonic()

        with ThreadPoolExecutor(
            max_workers=self.max_workers, thread_name_prefix="gitdag-link"
        ) as executor:
            # list() surfaces any exception raised by a worker
            list(executor.map(lambda item: self.link_commit(*item), commit_deps.items()))

        self.observer.on_status(
            f"processed all commit deps in: {format_duration(time.monotonic() - start)}"
        )

    def link_commit(self, commit_hash: str, deps: str) -> bool:
        """
        Apply one commit's dependency listing.

        Returns:
            False if the commit is not in the store (nothing is linked)
        """
        commit_handle = self.container.commits.get(commit_hash)
        if commit_handle is None:
            self.observer.on_diagnostic(f"Unable to find commit: {commit_hash}")
            return False

        trees = self.container.trees
        blobs = self.container.blobs

        with commit_handle.write() as commit:
            for line in deps.split("\n"):
                parsed = parse_dependency_line(line)
                if parsed is None:
                    continue
                object_hash, path = parsed

                tree_index = trees.lookup_index(object_hash)
                if tree_index is not None:
                    with trees.get_by_index(tree_index).write() as tree:
                        tree.set_path(path)
                        tree.add_commit(commit.index)
                    commit.add_tree_dep(tree_index)
                    continue

                blob_index = blobs.lookup_index(object_hash)
                if blob_index is not None:
                    with blobs.get_by_index(blob_index).write() as blob:
                        blob.set_path(path)
                        blob.add_commit(commit.index)
                    commit.add_blob_dep(blob_index)
                    continue

                # Neither tree nor blob: a commit from the range; not modeled.

        return True


def process_commit_deps(commit_deps: Dict[str, str], container: ObjectContainer,
                        observer: Optional[ProgressObserver] = None,
                        max_workers: Optional[int] = None) -> None:
    """Link every commit's dependencies into the container."""
    GraphLinker(container, observer=observer, max_workers=max_workers).link_all(commit_deps)
