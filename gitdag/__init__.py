"""
gitdag - Object graph and size reports for git repositories.

gitdag inventories every commit, tree, blob and tag in a repository, links
each commit to the trees and blobs it introduced, and reports where the
repository's on-disk size went.

Quick Start:
    import gitdag

    dag = gitdag.GitDag("~/src/bigrepo")

    # Build the graph and get every report
    report = dag.analyze()
    print(report.commits.total_count)

    # Reuse per-commit dependency listings between runs
    report = dag.analyze(cache_path="/tmp/bigrepo.deps")

    # Ten largest blobs, largest first
    for blob in report.blobs.largest:
        print(blob.size_on_disk, blob.hash, blob.path)

Domain Objects:
    Commit, Tree, Blob, Tag - git objects and their relationships
    CommitReport, TreeReport, BlobReport - report results

Services:
    IngestionService - object listing into stores
    DependencyResolver - per-commit dependency listings
    GraphLinker - dependency listings into edges
    TagResolver - tag names and links
    ReportService - size reports
"""

__version__ = "0.3.0"

# High-level API
from .api import GitDag

# Domain objects
from .domain import (
    ObjectKind,
    Commit,
    Tree,
    Blob,
    Tag,
    ObjectSize,
    PathVersions,
    BlobReport,
    CommitReport,
    TreeReport,
    FullReport,
)

# Object stores
from .object_store import ObjectStore, ObjectContainer

# Services (for advanced use)
from .services import (
    IngestionService,
    DependencyResolver,
    GraphLinker,
    TagResolver,
    ReportService,
)

# Configuration
from .config import load_config, save_config

__all__ = [
    # Version
    "__version__",
    # High-level API
    "GitDag",
    # Domain objects
    "ObjectKind",
    "Commit",
    "Tree",
    "Blob",
    "Tag",
    "ObjectSize",
    "PathVersions",
    "BlobReport",
    "CommitReport",
    "TreeReport",
    "FullReport",
    # Stores
    "ObjectStore",
    "ObjectContainer",
    # Services
    "IngestionService",
    "DependencyResolver",
    "GraphLinker",
    "TagResolver",
    "ReportService",
    # Configuration
    "load_config",
    "save_config",
]
