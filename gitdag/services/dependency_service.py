"""
Dependency resolution service for gitdag.

For every commit, asks git which objects that commit introduces
(`git rev-list --objects <hash>~1..<hash>`). That is one git process per
commit, so the calls are spread over a bounded thread pool and progress
is reported as they complete. The resulting mapping can be cached on
disk and reused by later runs.
"""

import queue
import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Dict, Iterable, Optional, Union
import logging

from ..config import resolve_worker_count
from ..exit_codes import GitCommandError
from ..infra.deps_cache import DependencyCache
from ..infra.git_client import GitClient
from ..progress import PercentTracker, ProgressObserver, format_duration

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

# Sentinel closing the progress channel
_DONE = object()


def strip_commit_line(output: str) -> str:
    """Drop the first line of a range listing, which names the commit itself."""
    _, newline, rest = output.partition("\n")
    return rest if newline else ""


class DependencyResolver:
    """
    Builds the commit hash -> dependency text mapping.

    Each unit of work is independent: one git call for one commit. A
    failing call (a root commit has no `~1`, for instance) leaves that
    commit with empty dependency text and never affects the others.

    Example:
        resolver = DependencyResolver(max_workers=4)
        deps = resolver.resolve("/path/to/repo", commit_hashes, cache_path="deps.txt")
    """

    def __init__(
        self,
        git_client: Optional[GitClient] = None,
        observer: Optional[ProgressObserver] = None,
        max_workers: Optional[int] = None,
    ):
        """
        Initialize DependencyResolver.

        Args:
            git_client: GitClient instance (creates new if None)
            observer: Receives progress updates and diagnostics
            max_workers: Pool size; None or 0 means half of the CPUs, at least 1
        """
        self.git = git_client or GitClient()
        self.observer = observer or ProgressObserver()
        self.max_workers = resolve_worker_count(max_workers)

    def resolve(
        self,
        repo_path: PathLike,
        commit_hashes: Iterable[str],
        cache_path: Optional[PathLike] = None,
    ) -> Dict[str, str]:
        """
        Dependency text for every commit, from the cache when one exists.

        When cache_path is given but no file exists yet, the freshly built
        mapping is saved there before returning.

        Raises:
            DependencyCacheError: if the cache cannot be read or written
        """
        cache = DependencyCache(cache_path) if cache_path else None

        if cache is not None and cache.exists():
            self.observer.on_status(f"Loading commit deps from file: {cache.path}")
            start = time.monotonic()
            commit_deps = cache.load()
            self.observer.on_status(
                f"Done loading deps in {format_duration(time.monotonic() - start)}"
            )
            return commit_deps

        commit_deps = self.build(repo_path, commit_hashes)

        if cache is not None:
            cache.save(commit_deps)
            self.observer.on_status(f"Saved commit deps to file: {cache.path}")

        return commit_deps

    def build(self, repo_path: PathLike, commit_hashes: Iterable[str]) -> Dict[str, str]:
        """Query git for every commit; blocks until all calls have finished."""
        commit_hashes = list(commit_hashes)
        total = len(commit_hashes)
        start = time.monotonic()
        self.observer.on_status(
            "Getting commit deps. Runs a git command for every commit (This could take a while)..."
        )

        channel: "queue.Queue" = queue.Queue()
        reporter = threading.Thread(
            target=self._report_progress,
            args=(channel, total),
            name="gitdag-progress",
            daemon=True,
        )
        reporter.start()

        results = []
        try:
            with ThreadPoolExecutor(
                max_workers=self.max_workers, thread_name_prefix="gitdag-deps"
            ) as executor:
                futures = [
                    executor.submit(self._resolve_one, repo_path, commit_hash, channel)
                    for commit_hash in commit_hashes
                ]
                for future in as_completed(futures):
                    results.append(future.result())
        finally:
            channel.put(_DONE)
            reporter.join()

        self.observer.on_status(f"Merging results of {len(results)} tasks...")
        commit_deps: Dict[str, str] = {}
        for result in results:
            commit_deps.update(result)

        self.observer.on_status(
            f"Done getting deps in {format_duration(time.monotonic() - start)}"
        )
        return commit_deps

    def _resolve_one(self, repo_path: PathLike, commit_hash: str,
                     channel: "queue.Queue") -> Dict[str, str]:
        """Resolve one commit and post its duration on the progress channel."""
        start = time.monotonic()
        try:
            try:
                output = self.git.commit_dependencies(repo_path, commit_hash)
            except GitCommandError as e:
                self.observer.on_diagnostic(
                    f"Unable to get deps for commit {commit_hash}: {e.stderr or e}"
                )
                output = ""
            return {commit_hash: strip_commit_line(output)}
        finally:
            channel.put(time.monotonic() - start)

    def _report_progress(self, channel: "queue.Queue", total: int) -> None:
        """Sole consumer of the progress channel."""
        tracker = PercentTracker(total)
        while True:
            item = channel.get()
            if item is _DONE:
                break
            update = tracker.record(item)
            if update is not None:
                self.observer.on_progress(update)
