"""
Shared fixtures for gitdag tests.
"""

import pytest
from unittest.mock import MagicMock

from gitdag.infra.git_client import GitClient
from gitdag.object_store import ObjectContainer
from helpers import RecordingObserver


@pytest.fixture
def container():
    return ObjectContainer()


@pytest.fixture
def observer():
    return RecordingObserver()


@pytest.fixture
def git_client():
    """A GitClient double; no test runs a real git binary."""
    return MagicMock(spec=GitClient)
