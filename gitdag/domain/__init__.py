"""
Domain layer for gitdag.

Contains the object records and report values, with no I/O:
- Commit, Tree, Blob, Tag: git objects and their relationships
- BlobReport, CommitReport, TreeReport, FullReport: report results

Report values are immutable and provide to_dict() for structured output.
"""

from .objects import ObjectKind, GitObject, Commit, Tree, Blob, Tag, RECORD_TYPES
from .report import (
    ObjectSize,
    PathVersions,
    BlobReport,
    CommitReport,
    TreeReport,
    FullReport,
)

__all__ = [
    'ObjectKind',
    'GitObject',
    'Commit',
    'Tree',
    'Blob',
    'Tag',
    'RECORD_TYPES',
    'ObjectSize',
    'PathVersions',
    'BlobReport',
    'CommitReport',
    'TreeReport',
    'FullReport',
]
