#!/usr/bin/env python3

import click
from pathlib import Path

from gitdag import __version__
from gitdag.api import GitDag
from gitdag.cli_utils import CliContext, standard_command, add_common_options
from gitdag.config import load_config, configure_logging, validate_config
from gitdag.exit_codes import ConfigError
from gitdag.format_utils import format_output, get_format_from_env
from gitdag.infra.git_client import GitClient
from gitdag.render import render_reports


@click.group()
@click.version_option(version=__version__, prog_name='gitdag')
@click.option('-r', '--repo', required=True,
              type=click.Path(exists=True, file_okay=False, path_type=Path),
              help='The git repository to work against')
@click.option('--config', 'config_path', default=None,
              type=click.Path(dir_okay=False),
              help='Config file (default: ~/.gitdag/config.json or GITDAG_CONFIG)')
@click.option('-v', '--verbose', is_flag=True,
              help='Force progress output and debug logging')
@click.pass_context
def cli(ctx, repo, config_path, verbose):
    """gitdag - Object graph and size reports for git repositories.

    Inventories every commit, tree, blob and tag, links each commit to the
    objects it introduced, and reports where the repository's size went.
    """
    config = load_config(config_path)
    try:
        validate_config(config)
    except ConfigError as e:
        click.echo(f"ERROR: {e}", err=True)
        ctx.exit(e.exit_code)
    if verbose:
        config.setdefault('logging', {})['level'] = 'DEBUG'
    configure_logging(config)

    git = GitClient(binary=config.get('git', {}).get('binary', 'git'))
    if not git.is_git_repo(repo):
        raise click.BadParameter(f"{repo} is not a git repository", param_hint='--repo')

    ctx.obj = CliContext(repo=repo, config=config, verbose=verbose)


@cli.command('reports')
@click.option('-a', '--all', 'all_reports', is_flag=True,
              help='Resolve tags and show the commit, tree and blob reports')
@click.option('-c', '--commits', is_flag=True, help='Show the commit report')
@click.option('-t', '--trees', is_flag=True, help='Show the tree report')
@click.option('-b', '--blobs', is_flag=True, help='Show the blob report')
@add_common_options('save_deps', 'workers', 'format')
@click.pass_obj
@standard_command
def reports_cmd(ctx, all_reports, commits, trees, blobs, save_deps, workers, output_format, progress):
    """Output a report of repository size information.

    Without a report flag, behaves like --all.

    Examples:

    \b
        gitdag -r ~/src/big reports --all
        gitdag -r ~/src/big reports --blobs --save-deps /tmp/big.deps
        gitdag -r ~/src/big reports --commits --format json
    """
    if not (commits or trees or blobs):
        all_reports = True

    dag = GitDag(ctx.repo, config=ctx.config, observer=progress, max_workers=workers)
    dag.ingest()
    dag.process_commits(save_deps)
    if all_reports:
        dag.resolve_tags()

    service = dag.reports()
    reports = []
    if all_reports or commits:
        reports.append(service.commit_report())
    if all_reports or trees:
        reports.append(service.tree_report())
    if all_reports or blobs:
        reports.append(service.blob_report())

    output_format = output_format or get_format_from_env('table')
    if output_format == 'table':
        render_reports(reports)
    else:
        for line in format_output((report.to_dict() for report in reports), output_format):
            click.echo(line)


@cli.command('process-only')
@click.option('-a', '--all', 'process_all', is_flag=True,
              help='Process commit dependencies and tags')
@click.option('-c', '--commits', is_flag=True, help='Process commit dependencies')
@click.option('-l', '--labels', is_flag=True, help='Process tags')
@add_common_options('save_deps', 'workers')
@click.pass_obj
@standard_command
def process_only_cmd(ctx, process_all, commits, labels, save_deps, workers, progress):
    """Only process the data, without reporting.

    Useful to build a dependency cache with --save-deps. Without a flag,
    behaves like --all.
    """
    if not (commits or labels):
        process_all = True

    dag = GitDag(ctx.repo, config=ctx.config, observer=progress, max_workers=workers)
    dag.ingest()
    if process_all or commits:
        dag.process_commits(save_deps)
    if process_all or labels:
        dag.resolve_tags()

    progress.success("Processing complete")


def main():
    cli()

if __name__ == "__main__":
    main()
