"""
Tag resolution service for gitdag.

Walks `git show-ref --tags -d` output and attaches tag information to the
graph. An annotated tag shows up as two consecutive lines, the tag object
and then its dereferenced commit:

    <tag hash> refs/tags/v1.0
    <commit hash> refs/tags/v1.0^{}

A lightweight tag is a single line naming a commit directly.
"""

import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union, Dict, Any
import logging

from ..domain.objects import Tag
from ..exit_codes import GitCommandError
from ..infra.git_client import GitClient
from ..object_store import ObjectContainer, RecordHandle
from ..progress import ProgressObserver, format_duration

logger = logging.getLogger(__name__)

DEREF_SUFFIX = "^{}"


@dataclass
class TagResolution:
    """Counts of what one pass did."""
    annotated: int = 0
    lightweight: int = 0
    unmatched: int = 0
    unresolved: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'annotated': self.annotated,
            'lightweight': self.lightweight,
            'unmatched': self.unmatched,
            'unresolved': self.unresolved,
        }


class TagResolver:
    """
    Sequential state machine over tag reference lines.

    The only state is the tag object seen on the previous line, waiting
    for its `^{}` commit line. The pass cannot be parallelized.

    Example:
        resolver = TagResolver(container)
        resolver.resolve_repository("/path/to/repo")
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

    def resolve_repository(self, repo_path: Union[str, Path]) -> Optional[TagResolution]:
        """
        Fetch the tag references of a repository and resolve them.

        git exits non-zero when there are no tags at all, so a failed
        listing is reported and skipped rather than raised.

        Returns:
            TagResolution, or None if the listing could not be obtained
        """
        self.observer.on_status("Processing tags...")
        start = time.monotonic()

        try:
            references = self.git.tag_references(repo_path)
        except GitCommandError as e:
            self.observer.on_diagnostic(f"Unable to get tag deps. Error: {e.stderr or e}")
            return None

        result = self.resolve_text(references)
        self.observer.on_status(
            f"Done processing tags in: {format_duration(time.monotonic() - start)}"
        )
        return result

    def resolve_text(self, references: str) -> TagResolution:
        """Run the state machine over a reference listing."""
        result = TagResolution()
        pending_tag: Optional[RecordHandle[Tag]] = None

        for line in references.split("\n"):
            if not line.strip():
                continue

            fields = line.split(" ", 1)
            if len(fields) != 2:
                self.observer.on_diagnostic(f"Skipping malformed tag reference: {line}")
                continue
            object_hash, label = fields

            commit_handle = self.container.commits.get(object_hash)
            if commit_handle is not None:
                with commit_handle.write() as commit:
                    if pending_tag is not None:
                        # The previous line was a tag object waiting for its commit
                        with pending_tag.write() as tag:
                            if line.endswith(DEREF_SUFFIX):
                                commit.add_tag_dep(tag.index)
                                tag.link_commit(commit.index)
                                result.annotated += 1
                            else:
                                self._report_unmatched(tag)
                                result.unmatched += 1
                        pending_tag = None
                    else:
                        # No tag object: a lightweight tag
                        commit.add_lightweight_tag(label)
                        result.lightweight += 1
                continue

            tag_handle = self.container.tags.get(object_hash)
            if tag_handle is not None:
                with tag_handle.write() as tag:
                    tag.set_name(label)
                pending_tag = tag_handle
            else:
                self.observer.on_diagnostic(f"Unable to find tag: {object_hash}")
                result.unresolved += 1

        return result

    def _report_unmatched(self, tag: Tag) -> None:
        tag_hash = self.container.tags.reverse_lookup(tag.index)
        if tag_hash is not None:
            self.observer.on_diagnostic(f"Tag found with no related commit: {tag_hash}")
        else:
            self.observer.on_diagnostic("Tag found with no related commit, tag hash not found")


def process_tags(references: str, container: ObjectContainer,
                 observer: Optional[ProgressObserver] = None) -> TagResolution:
    """Resolve a tag reference listing into the container."""
    return TagResolver(container, observer=observer).resolve_text(references)
