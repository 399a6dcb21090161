"""
Service layer for gitdag.

Contains the pipeline stages that operate on an ObjectContainer:
- IngestionService: object listing -> records
- DependencyResolver: per-commit dependency listings (thread pool, cache)
- GraphLinker: dependency listings -> edges
- TagResolver: tag references -> tag names and links
- ReportService: size and structure reports

The GitDag API in gitdag.api wires these together.
"""

from .ingestion_service import IngestionService
from .dependency_service import DependencyResolver
from .linking_service import GraphLinker
from .tag_service import TagResolver, TagResolution
from .report_service import ReportService, contributing_size

__all__ = [
    'IngestionService',
    'DependencyResolver',
    'GraphLinker',
    'TagResolver',
    'TagResolution',
    'ReportService',
    'contributing_size',
]
