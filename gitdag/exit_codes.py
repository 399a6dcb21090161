"""
Standard exit codes and error types for gitdag.

Following Unix/POSIX conventions for command-line tools.
"""
from typing import Optional, Sequence

# Standard POSIX exit codes
SUCCESS = 0              # Successful termination
GENERAL_ERROR = 1        # General errors
USAGE_ERROR = 2          # Misuse of shell command (wrong arguments, etc.)

# Application-specific exit codes (64-113 are typically available)
GIT_ERROR = 65           # External git command failed
CONFIG_ERROR = 66        # Configuration file error
PERMISSION_ERROR = 67    # Insufficient permissions
DATA_ERROR = 70          # Object listing could not be parsed
CACHE_ERROR = 74         # Dependency cache could not be read or written
INTERRUPTED = 130        # Terminated by Ctrl+C (SIGINT)

# Exit code mappings for common exceptions
EXCEPTION_EXIT_CODES = {
    'FileNotFoundError': GENERAL_ERROR,
    'PermissionError': PERMISSION_ERROR,
    'ValueError': DATA_ERROR,
    'KeyError': DATA_ERROR,
    'UnicodeDecodeError': DATA_ERROR,
    'KeyboardInterrupt': INTERRUPTED,
}


def get_exit_code_for_exception(exc: Exception) -> int:
    """
    Get the appropriate exit code for an exception.

    Args:
        exc: The exception that occurred

    Returns:
        Appropriate exit code
    """
    if isinstance(exc, CommandError):
        return exc.exit_code
    exc_name = exc.__class__.__name__
    return EXCEPTION_EXIT_CODES.get(exc_name, GENERAL_ERROR)


class CommandError(Exception):
    """
    Exception that carries the exit code the CLI should terminate with.
    """
    def __init__(self, message: str, exit_code: int = GENERAL_ERROR):
        super().__init__(message)
        self.exit_code = exit_code


class GitCommandError(CommandError):
    """Raised when an external command cannot be launched or exits non-zero."""
    def __init__(self, message: str, command: Optional[Sequence[str]] = None,
                 stderr: str = "", returncode: Optional[int] = None):
        super().__init__(message, GIT_ERROR)
        self.command = list(command) if command else []
        self.stderr = stderr
        self.returncode = returncode


class ObjectParseError(CommandError):
    """Raised when a line of the object listing has a malformed numeric field."""
    def __init__(self, message: str, line: str = ""):
        super().__init__(message, DATA_ERROR)
        self.line = line


class DependencyCacheError(CommandError):
    """Raised when the dependency cache file cannot be created, opened, read or written."""
    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message, CACHE_ERROR)
        self.path = path


class ConfigError(CommandError):
    """Raised when there's a configuration error."""
    def __init__(self, message: str):
        super().__init__(message, CONFIG_ERROR)
