"""
Git object records for gitdag.

One record type per object kind. Records are created by ingestion with
empty relationship fields; linking and tag resolution fill those in
afterwards. Unlike most domain objects these are mutable, and every
mutation happens while the owning record's write lock is held
(see gitdag.object_store).
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List, Dict, Any


class ObjectKind(Enum):
    """The four git object types tracked."""
    COMMIT = "commit"
    TREE = "tree"
    BLOB = "blob"
    TAG = "tag"


@dataclass
class GitObject:
    """Fields shared by every object kind."""
    index: int = 0
    size: int = 0
    size_on_disk: int = 0

    kind = None  # set by subclasses

    def to_dict(self) -> Dict[str, Any]:
        return {
            'kind': self.kind.value if self.kind else None,
            'index': self.index,
            'size': self.size,
            'size_on_disk': self.size_on_disk,
        }


@dataclass
class Commit(GitObject):
    """A commit and the objects it introduces."""
    tree_deps: List[int] = field(default_factory=list)
    blob_deps: List[int] = field(default_factory=list)
    tag_deps: List[int] = field(default_factory=list)
    lightweight_tags: List[str] = field(default_factory=list)

    kind = ObjectKind.COMMIT

    def add_tree_dep(self, tree_index: int) -> None:
        self.tree_deps.append(tree_index)

    def add_blob_dep(self, blob_index: int) -> None:
        self.blob_deps.append(blob_index)

    def add_tag_dep(self, tag_index: int) -> None:
        self.tag_deps.append(tag_index)

    def add_lightweight_tag(self, label: str) -> None:
        self.lightweight_tags.append(label)

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result.update({
            'tree_deps': list(self.tree_deps),
            'blob_deps': list(self.blob_deps),
            'tag_deps': list(self.tag_deps),
            'lightweight_tags': list(self.lightweight_tags),
        })
        return result


@dataclass
class PathObject(GitObject):
    """
    Base for trees and blobs.

    Both carry the path they were last seen at and the indices of every
    commit that introduced them. The back-reference list is a multiset:
    concurrent linkers append in no particular order.
    """
    path: str = ""
    commits: List[int] = field(default_factory=list)

    def set_path(self, path: str) -> None:
        self.path = path

    def add_commit(self, commit_index: int) -> None:
        self.commits.append(commit_index)

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result.update({
            'path': self.path,
            'commits': list(self.commits),
        })
        return result


@dataclass
class Tree(PathObject):
    kind = ObjectKind.TREE


@dataclass
class Blob(PathObject):
    kind = ObjectKind.BLOB


@dataclass
class Tag(GitObject):
    """An annotated tag object. `name` holds the full reference label."""
    name: str = ""
    commit: Optional[int] = None

    kind = ObjectKind.TAG

    def set_name(self, name: str) -> None:
        self.name = name

    def link_commit(self, commit_index: int) -> None:
        self.commit = commit_index

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result.update({
            'name': self.name,
            'commit': self.commit,
        })
        return result


RECORD_TYPES = {
    ObjectKind.COMMIT: Commit,
    ObjectKind.TREE: Tree,
    ObjectKind.BLOB: Blob,
    ObjectKind.TAG: Tag,
}
