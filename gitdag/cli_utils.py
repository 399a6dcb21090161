"""
Shared plumbing for the gitdag commands: context object, error handling
and reusable options.
"""

import sys
import click
from dataclasses import dataclass
from functools import wraps
from pathlib import Path
from typing import Any, Dict

from .progress import ConsoleProgress
from .exit_codes import (
    INTERRUPTED,
    get_exit_code_for_exception, CommandError
)
from .format_utils import FORMATS


@dataclass
class CliContext:
    """State shared by the group callback and its commands."""
    repo: Path
    config: Dict[str, Any]
    verbose: bool = False

    def make_progress(self) -> ConsoleProgress:
        enabled = self.config.get('progress', {}).get('enabled')
        return ConsoleProgress(enabled=True if self.verbose else enabled)


def standard_command(func):
    """
    Run a command with a ConsoleProgress injected as `progress`, turning
    exceptions into an error line on stderr and the matching exit code.

    Expects the command to receive a CliContext as its first argument
    (use @click.pass_obj above this decorator).
    """
    @wraps(func)
    def wrapper(ctx: CliContext, *args, **kwargs):
        progress = ctx.make_progress()
        kwargs['progress'] = progress

        try:
            return func(ctx, *args, **kwargs)
        except KeyboardInterrupt:
            progress.error("Interrupted by user")
            sys.exit(INTERRUPTED)
        except click.ClickException:
            raise
        except CommandError as e:
            progress.error(str(e))
            sys.exit(e.exit_code)
        except Exception as e:
            progress.error(f"Command failed: {e}")
            sys.exit(get_exit_code_for_exception(e))

    return wrapper


# Standard options that the commands share
common_options = {
    'save_deps': click.option(
        '-s', '--save-deps', type=click.Path(dir_okay=False, path_type=Path), default=None,
        help='Dependency cache file: loaded if present, otherwise created after processing'),
    'workers': click.option(
        '-w', '--workers', type=click.IntRange(min=1), default=None,
        help='Concurrent git processes for dependency resolution (default: half the CPUs)'),
    'format': click.option(
        '-f', '--format', 'output_format', type=click.Choice(FORMATS), default=None,
        help='Output format (default: table, or from GITDAG_FORMAT env)'),
}


def add_common_options(*option_names):
    """
    Decorator to add common options to a command.

    Example:
        @add_common_options('save_deps', 'workers')
        def my_command(save_deps, workers):
            ...
    """
    def decorator(func):
        for name in reversed(option_names):
            func = common_options[name](func)
        return func
    return decorator
