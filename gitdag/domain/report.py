"""
Report results for gitdag.

Plain, immutable values produced by the report service and consumed by
the renderers. Sizes are on-disk sizes in bytes.
"""

from dataclasses import dataclass
from typing import Optional, Tuple, Dict, Any


@dataclass(frozen=True)
class ObjectSize:
    """One object singled out by a report."""
    index: int
    hash: Optional[str]
    size_on_disk: int
    path: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {
            'index': self.index,
            'hash': self.hash,
            'size_on_disk': self.size_on_disk,
        }
        if self.path is not None:
            result['path'] = self.path
        return result


@dataclass(frozen=True)
class BlobReport:
    total_count: int = 0
    total_size: int = 0
    largest: Tuple[ObjectSize, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'report': 'blobs',
            'total_count': self.total_count,
            'total_size': self.total_size,
            'largest': [blob.to_dict() for blob in self.largest],
        }


@dataclass(frozen=True)
class CommitReport:
    total_count: int = 0
    total_size: int = 0
    largest_commit: Optional[ObjectSize] = None
    largest_contributing: Optional[ObjectSize] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'report': 'commits',
            'total_count': self.total_count,
            'total_size': self.total_size,
            'largest_commit': self.largest_commit.to_dict() if self.largest_commit else None,
            'largest_contributing': (
                self.largest_contributing.to_dict() if self.largest_contributing else None
            ),
        }


@dataclass(frozen=True)
class PathVersions:
    """All tree versions recorded at one path."""
    path: str
    count: int
    total_size: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            'path': self.path,
            'count': self.count,
            'total_size': self.total_size,
        }


@dataclass(frozen=True)
class TreeReport:
    total_count: int = 0
    total_size: int = 0
    largest_tree: Optional[ObjectSize] = None
    most_versions: Optional[PathVersions] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'report': 'trees',
            'total_count': self.total_count,
            'total_size': self.total_size,
            'largest_tree': self.largest_tree.to_dict() if self.largest_tree else None,
            'most_versions': self.most_versions.to_dict() if self.most_versions else None,
        }


@dataclass(frozen=True)
class FullReport:
    commits: CommitReport
    trees: TreeReport
    blobs: BlobReport

    def sections(self):
        return (self.commits, self.trees, self.blobs)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'commits': self.commits.to_dict(),
            'trees': self.trees.to_dict(),
            'blobs': self.blobs.to_dict(),
        }
