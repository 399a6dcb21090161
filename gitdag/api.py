"""
High-level Python API for gitdag.

Example:
    import gitdag

    dag = gitdag.GitDag("~/src/bigrepo")

    # Build the whole graph and report on it
    report = dag.analyze(cache_path="~/tmp/bigrepo.deps")
    for blob in report.blobs.largest:
        print(blob.hash, blob.size_on_disk, blob.path)

    # Or step by step
    dag.ingest()
    dag.process_commits()
    dag.resolve_tags()
    print(dag.reports().commit_report().to_dict())

    # Low-level access
    dag.container
"""

from pathlib import Path
from typing import Any, Dict, Optional, Union
import logging

from .config import load_config
from .domain.report import FullReport
from .infra.git_client import GitClient
from .object_store import ObjectContainer
from .progress import ProgressObserver
from .services import (
    IngestionService,
    DependencyResolver,
    GraphLinker,
    TagResolver,
    TagResolution,
    ReportService,
)
from .services.report_service import DEFAULT_TOP_BLOBS

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class GitDag:
    """
    Object graph of one git repository.

    The stages run in this order: ingest() fills the stores,
    process_commits() resolves and links per-commit dependencies,
    resolve_tags() attaches tags (it only needs ingest() to have run),
    and reports() reads the finished graph.
    """

    def __init__(
        self,
        repo_path: PathLike,
        config: Optional[Dict[str, Any]] = None,
        config_path: Optional[str] = None,
        git_client: Optional[GitClient] = None,
        observer: Optional[ProgressObserver] = None,
        max_workers: Optional[int] = None,
        link_workers: Optional[int] = None,
    ):
        """
        Initialize GitDag.

        Args:
            repo_path: Repository to analyze
            config: Full config dict (overrides file if provided)
            config_path: Path to config file (default: ~/.gitdag/config.json)
            git_client: GitClient instance (created from config if None)
            observer: Receives progress and diagnostics
            max_workers: Dependency worker count (overrides config)
            link_workers: Linking thread count (overrides config)
        """
        self._config = config if config is not None else load_config(config_path)
        general = self._config.get('general', {})

        self.repo_path = Path(repo_path).expanduser()
        self.container = ObjectContainer()
        self.git = git_client or GitClient(
            binary=self._config.get('git', {}).get('binary', 'git')
        )
        self.observer = observer or ProgressObserver()
        self.max_workers = max_workers or general.get('max_workers') or None
        self.link_workers = link_workers or general.get('link_workers') or None
        self.top_blobs = self._config.get('reports', {}).get('top_blobs', DEFAULT_TOP_BLOBS)
        self.default_cache_path = general.get('deps_cache') or None

    @property
    def config(self) -> Dict[str, Any]:
        return self._config

    def ingest(self) -> Dict[str, int]:
        """Load every reachable object into the stores."""
        service = IngestionService(self.container, git_client=self.git, observer=self.observer)
        return service.ingest_repository(self.repo_path)

    def resolve_dependencies(self, cache_path: Optional[PathLike] = None) -> Dict[str, str]:
        """Dependency text for every ingested commit."""
        resolver = DependencyResolver(
            git_client=self.git,
            observer=self.observer,
            max_workers=self.max_workers,
        )
        return resolver.resolve(
            self.repo_path,
            self.container.commits.hashes(),
            cache_path=cache_path or self.default_cache_path,
        )

    def link(self, commit_deps: Dict[str, str]) -> None:
        """Turn dependency text into graph edges."""
        linker = GraphLinker(self.container, observer=self.observer, max_workers=self.link_workers)
        linker.link_all(commit_deps)

    def process_commits(self, cache_path: Optional[PathLike] = None) -> Dict[str, str]:
        """Resolve and link the dependencies of every commit."""
        commit_deps = self.resolve_dependencies(cache_path)
        self.link(commit_deps)
        return commit_deps

    def resolve_tags(self) -> Optional[TagResolution]:
        """Attach tag names, tag/commit links and lightweight tags."""
        resolver = TagResolver(self.container, git_client=self.git, observer=self.observer)
        return resolver.resolve_repository(self.repo_path)

    def reports(self) -> ReportService:
        return ReportService(self.container, observer=self.observer, top_blobs=self.top_blobs)

    def analyze(self, cache_path: Optional[PathLike] = None, tags: bool = True) -> FullReport:
        """Run the whole pipeline and return all reports."""
        self.ingest()
        self.process_commits(cache_path)
        if tags:
            self.resolve_tags()
        return self.reports().full_report()
