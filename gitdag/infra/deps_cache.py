"""
Dependency cache persistence for gitdag.

Resolving the dependencies of every commit runs one git command per
commit, which can take a long time on a large repository. The result can
be saved to a plain-text cache file and loaded on later runs instead.

File format:

    ;
    <commit hash>
    <dependency line>
    <dependency line>
    ;
    <commit hash>
    ;

A line holding exactly ";" delimits records. The first delimiter comes
before the first block; every block is closed by one. On load, a
dependency line ending in a space loses that one space (root trees are
listed as "<hash> " by git), so a path that really ends in a single space
does not survive a round trip.

Writes are atomic (temp file, then rename).
"""

import os
import tempfile
from pathlib import Path
from typing import Dict, Union
import logging

from ..exit_codes import DependencyCacheError

logger = logging.getLogger(__name__)

DELIMITER = ";"


class DependencyCache:
    """
    Load and save a commit hash -> dependency text mapping.

    Example:
        cache = DependencyCache("~/tmp/myrepo.deps")
        if cache.exists():
            deps = cache.load()
        else:
            deps = build()
            cache.save(deps)
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path).expanduser()

    def exists(self) -> bool:
        return self.path.is_file()

    def load(self) -> Dict[str, str]:
        """
        Read the cache file.

        Raises:
            DependencyCacheError: if the file cannot be opened, read or decoded
        """
        try:
            with open(self.path, 'r', encoding='utf-8', newline='\n') as f:
                return parse_cache(f)
        except (OSError, UnicodeDecodeError) as e:
            raise DependencyCacheError(
                f"Unable to load dependency cache {self.path}: {e}", path=str(self.path)
            ) from e

    def save(self, commit_deps: Dict[str, str]) -> None:
        """
        Write the cache file atomically.

        Raises:
            DependencyCacheError: if the file cannot be created or written
        """
        try:
            if not self.path.parent.exists():
                self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, temp_path = tempfile.mkstemp(
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix=".tmp"
            )
        except OSError as e:
            raise DependencyCacheError(
                f"Unable to create dependency cache {self.path}: {e}", path=str(self.path)
            ) from e

        try:
            with os.fdopen(fd, 'w', encoding='utf-8', newline='') as f:
                write_cache(commit_deps, f)

            # Atomic rename
            os.replace(temp_path, self.path)

        except OSError as e:
            # Clean up temp file on error
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise DependencyCacheError(
                f"Unable to write dependency cache {self.path}: {e}", path=str(self.path)
            ) from e

        logger.debug(f"Saved dependencies of {len(commit_deps)} commits to {self.path}")


def write_cache(commit_deps: Dict[str, str], stream) -> None:
    """Serialize a dependency mapping to an open text stream."""
    stream.write(f"{DELIMITER}\n")
    for commit_hash, deps in commit_deps.items():
        stream.write(f"{commit_hash}\n")
        # dependency text already carries its own newlines
        stream.write(deps)
        if deps and not deps.endswith("\n"):
            stream.write("\n")
        stream.write(f"{DELIMITER}\n")


def parse_cache(lines) -> Dict[str, str]:
    """
    Parse cache content from any iterable of lines.

    Lines end at a newline only; a carriage return inside a path is kept.
    One carriage return right before the newline is dropped so files saved
    with CRLF still load.

    A block that is never closed by a delimiter is dropped.
    """
    deps: Dict[str, str] = {}
    expecting_hash = False
    commit_hash = None
    dep_lines = []

    for raw_line in lines:
        line = raw_line[:-1] if raw_line.endswith("\n") else raw_line
        if line.endswith("\r"):
            line = line[:-1]
        if line == DELIMITER:
            if commit_hash is not None:
                deps[commit_hash] = "".join(dep_lines)
            commit_hash = None
            dep_lines = []
            expecting_hash = True
        elif expecting_hash:
            commit_hash = line
            expecting_hash = False
        elif commit_hash is not None:
            if line.endswith(" "):
                line = line[:-1]
            dep_lines.append(line + "\n")

    return deps
