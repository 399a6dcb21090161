"""
Infrastructure layer for gitdag.

Contains abstractions for external systems:
- GitClient: git command execution
- DependencyCache: dependency cache file persistence

These provide clean interfaces that can be mocked for testing.
"""

from .git_client import GitClient
from .deps_cache import DependencyCache

__all__ = [
    'GitClient',
    'DependencyCache',
]
