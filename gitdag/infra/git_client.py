"""
Git client infrastructure for gitdag.

Provides a clean abstraction over git command execution.
All git operations go through this client, making them:
- Easy to mock for testing
- Consistent in error handling
- Isolated from business logic
"""

import subprocess
import tempfile
from pathlib import Path
from typing import Sequence, Union
import logging

from ..exit_codes import GitCommandError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

# Passed as a single argument without a shell, so git echoes the
# apostrophes back around every line; ingestion strips them.
BATCH_CHECK_FORMAT = "--batch-check='%(objecttype) %(objectname) %(objectsize) %(objectsize:disk)'"


def _decode(data) -> str:
    if data is None:
        return ""
    if isinstance(data, bytes):
        return data.decode('utf-8', errors='replace')
    return data


class GitClient:
    """
    Command execution service.

    `run` and `pipe` are generic: they take a working directory, a program
    and its arguments, and either return captured stdout or raise
    GitCommandError carrying captured stderr. The remaining methods are
    the git queries gitdag depends on.

    Example:
        client = GitClient()
        listing = client.list_objects("/path/to/repo")
        deps = client.commit_dependencies("/path/to/repo", commit_hash)
    """

    def __init__(self, binary: str = "git"):
        """
        Initialize GitClient.

        Args:
            binary: git executable to invoke (default: "git")
        """
        self.binary = binary

    def run(self, cwd: PathLike, program: str, args: Sequence[str]) -> str:
        """
        Run a program and capture its output.

        Args:
            cwd: Working directory
            program: Executable name
            args: Argument list

        Returns:
            Standard output with surrounding whitespace trimmed

        Raises:
            GitCommandError: if the program cannot be launched or exits non-zero
        """
        command = [program, *args]
        logger.debug(f"Running command in '{cwd}': {' '.join(command)}")
        try:
            result = subprocess.run(
                command,
                cwd=str(cwd),
                capture_output=True,
                text=True,
                encoding='utf-8',
                errors='replace',
            )
        except OSError as e:
            raise GitCommandError(
                f"Failed to execute command: {e}", command=command, stderr=str(e)
            ) from e

        if result.returncode != 0:
            stderr = (result.stderr or "").strip()
            raise GitCommandError(
                f"Command failed to execute: {' '.join(command)}\nError:\n{stderr}",
                command=command,
                stderr=stderr,
                returncode=result.returncode,
            )

        return result.stdout.strip() if result.stdout else ""

    def pipe(
        self,
        cwd: PathLike,
        program1: str,
        args1: Sequence[str],
        program2: str,
        args2: Sequence[str],
    ) -> str:
        """
        Run `program1 args1 | program2 args2` and capture the second's output.

        Raises:
            GitCommandError: if either program cannot be launched or exits non-zero
        """
        first_cmd = [program1, *args1]
        second_cmd = [program2, *args2]
        logger.debug(f"Running pipe in '{cwd}': {' '.join(first_cmd)} | {' '.join(second_cmd)}")

        # Spooled to a file: nothing reads it until the second stage is done
        first_err = tempfile.TemporaryFile()
        try:
            first = subprocess.Popen(
                first_cmd,
                cwd=str(cwd),
                stdout=subprocess.PIPE,
                stderr=first_err,
            )
        except OSError as e:
            first_err.close()
            raise GitCommandError(
                f"Failed to execute command: {e}", command=first_cmd, stderr=str(e)
            ) from e

        try:
            second = subprocess.Popen(
                second_cmd,
                cwd=str(cwd),
                stdin=first.stdout,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except OSError as e:
            first.kill()
            first.wait()
            first_err.close()
            raise GitCommandError(
                f"Failed to execute command: {e}", command=second_cmd, stderr=str(e)
            ) from e

        # Let the first process see SIGPIPE if the second exits early
        if first.stdout is not None:
            first.stdout.close()

        stdout, stderr = second.communicate()
        first.wait()
        with first_err:
            first_err.seek(0)
            first_stderr = first_err.read()

        for command, returncode, err in (
            (first_cmd, first.returncode, first_stderr),
            (second_cmd, second.returncode, stderr),
        ):
            if returncode != 0:
                err_text = _decode(err).strip()
                raise GitCommandError(
                    f"Command failed to execute: {' '.join(command)}\nError:\n{err_text}",
                    command=command,
                    stderr=err_text,
                    returncode=returncode,
                )

        return _decode(stdout)

    def list_objects(self, repo_path: PathLike) -> str:
        """
        Type, id, size and on-disk size of every reachable object.

        One `'type hash size disk_size'` line per object.
        """
        return self.pipe(
            repo_path,
            self.binary, ["rev-list", "--objects", "--all", "--no-object-names"],
            self.binary, ["cat-file", BATCH_CHECK_FORMAT],
        )

    def commit_dependencies(self, repo_path: PathLike, commit_hash: str) -> str:
        """
        Objects introduced by a commit, with their paths.

        The first line of the output is the commit itself.
        """
        commit_range = f"{commit_hash}~1..{commit_hash}"
        return self.run(repo_path, self.binary, ["rev-list", "--objects", commit_range])

    def tag_references(self, repo_path: PathLike) -> str:
        """All tag references, with annotated tags dereferenced (`^{}` lines)."""
        return self.run(repo_path, self.binary, ["show-ref", "--tags", "-d"])

    def is_git_repo(self, path: PathLike) -> bool:
        """Check if path looks like a git working tree or bare repository."""
        path = Path(path)
        return (path / ".git").exists() or (path / "HEAD").is_file()
