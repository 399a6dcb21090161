"""
Report service for gitdag.

Read-only traversals of a finished object graph. Nothing writes to the
stores any more by the time reports run; read locks are still taken so
the service stays correct if someone calls it early.
"""

import bisect
import time
from typing import Dict, List, Optional, Tuple
import logging

from ..domain.objects import Commit
from ..domain.report import (
    ObjectSize,
    PathVersions,
    BlobReport,
    CommitReport,
    TreeReport,
    FullReport,
)
from ..object_store import ObjectContainer, ObjectStore
from ..progress import ProgressObserver, format_duration

logger = logging.getLogger(__name__)

DEFAULT_TOP_BLOBS = 10


class TopN:
    """
    The `capacity` largest sizes seen so far, kept in ascending order.

    Once full, a candidate is only accepted if it is strictly larger than
    the smallest entry kept, so among equal sizes the earliest offered
    wins.
    """

    def __init__(self, capacity: int):
        self.capacity = capacity
        self._seen = 0
        # (size, -arrival, index): ties sort the later arrival lower
        self._items: List[Tuple[int, int, int]] = []

    def offer(self, size: int, index: int) -> bool:
        arrival = self._seen
        self._seen += 1
        if self.capacity <= 0:
            return False
        if len(self._items) >= self.capacity and size <= self._items[0][0]:
            return False

        bisect.insort(self._items, (size, -arrival, index))
        if len(self._items) > self.capacity:
            self._items.pop(0)
        return True

    def descending(self) -> List[Tuple[int, int]]:
        """(size, index) pairs, largest first."""
        return [(size, index) for size, _, index in reversed(self._items)]


def contributing_size(commit: Commit, container: ObjectContainer) -> int:
    """
    On-disk size of everything a commit directly depends on.

    Sum over the commit's trees, blobs and tags. Not recursive: trees and
    blobs carry no further dependency edges.
    """
    total = 0
    for store, indices in (
        (container.trees, commit.tree_deps),
        (container.blobs, commit.blob_deps),
        (container.tags, commit.tag_deps),
    ):
        for index in indices:
            with store.get_by_index(index).read() as record:
                total += record.size_on_disk
    return total


def _object_size(store: ObjectStore, index: int, size_on_disk: int,
                 path: Optional[str] = None) -> ObjectSize:
    return ObjectSize(
        index=index,
        hash=store.reverse_lookup(index),
        size_on_disk=size_on_disk,
        path=path,
    )


class ReportService:
    """
    Builds size and structure reports.

    Example:
        reports = ReportService(container)
        blobs = reports.blob_report()
        for blob in blobs.largest:
            print(blob.hash, blob.size_on_disk)
    """

    def __init__(
        self,
        container: ObjectContainer,
        observer: Optional[ProgressObserver] = None,
        top_blobs: int = DEFAULT_TOP_BLOBS,
    ):
        self.container = container
        self.observer = observer or ProgressObserver()
        self.top_blobs = top_blobs

    def blob_report(self) -> BlobReport:
        self.observer.on_status("Building blob report...")
        start = time.monotonic()
        blobs = self.container.blobs

        total_size = 0
        top = TopN(self.top_blobs)
        paths: Dict[int, str] = {}
        for handle in blobs:
            with handle.read() as blob:
                total_size += blob.size_on_disk
                if top.offer(blob.size_on_disk, blob.index):
                    paths[blob.index] = blob.path

        largest = tuple(
            _object_size(blobs, index, size, paths.get(index))
            for size, index in top.descending()
        )

        logger.debug(f"Blob report created in: {format_duration(time.monotonic() - start)}")
        return BlobReport(total_count=len(blobs), total_size=total_size, largest=largest)

    def commit_report(self) -> CommitReport:
        self.observer.on_status("Building commit report...")
        start = time.monotonic()
        commits = self.container.commits

        total_size = 0
        largest: Optional[Tuple[int, int]] = None
        contributing: Optional[Tuple[int, int]] = None
        for handle in commits:
            with handle.read() as commit:
                total_size += commit.size_on_disk
                if largest is None or commit.size_on_disk > largest[0]:
                    largest = (commit.size_on_disk, commit.index)

                size = contributing_size(commit, self.container)
                if contributing is None or size > contributing[0]:
                    contributing = (size, commit.index)

        logger.debug(f"Commit report created in: {format_duration(time.monotonic() - start)}")
        return CommitReport(
            total_count=len(commits),
            total_size=total_size,
            largest_commit=_object_size(commits, largest[1], largest[0]) if largest else None,
            largest_contributing=(
                _object_size(commits, contributing[1], contributing[0]) if contributing else None
            ),
        )

    def tree_report(self) -> TreeReport:
        self.observer.on_status("Building tree report...")
        start = time.monotonic()
        trees = self.container.trees

        total_size = 0
        largest: Optional[Tuple[int, int, str]] = None
        # path -> [version count, total size], in first-seen order
        by_path: Dict[str, List[int]] = {}
        for handle in trees:
            with handle.read() as tree:
                total_size += tree.size_on_disk
                if largest is None or tree.size_on_disk > largest[0]:
                    largest = (tree.size_on_disk, tree.index, tree.path)

                versions = by_path.setdefault(tree.path, [0, 0])
                versions[0] += 1
                versions[1] += tree.size_on_disk

        most_versions: Optional[PathVersions] = None
        for path, (count, size) in by_path.items():
            if most_versions is None or count > most_versions.count:
                most_versions = PathVersions(path=path, count=count, total_size=size)

        logger.debug(f"Tree report created in: {format_duration(time.monotonic() - start)}")
        return TreeReport(
            total_count=len(trees),
            total_size=total_size,
            largest_tree=(
                _object_size(trees, largest[1], largest[0], largest[2]) if largest else None
            ),
            most_versions=most_versions,
        )

    def full_report(self) -> FullReport:
        return FullReport(
            commits=self.commit_report(),
            trees=self.tree_report(),
            blobs=self.blob_report(),
        )
