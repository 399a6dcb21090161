"""
Tests for the gitdag command line.
"""

import json
import logging
import os

import pytest
import yaml
from click.testing import CliRunner
from unittest.mock import patch

from gitdag.cli import cli
from gitdag.exit_codes import GitCommandError, GIT_ERROR, CACHE_ERROR, CONFIG_ERROR
from helpers import sha

C0, C1 = sha("c0"), sha("c1")
T0, B0, B1 = sha("t0"), sha("b0"), sha("b1")
V1 = sha("v1")

LISTING = "\n".join([
    f"'commit {C0} 230 160'",
    f"'commit {C1} 240 170'",
    f"'tree {T0} 66 60'",
    f"'blob {B0} 12 12'",
    f"'blob {B1} 2048 2048'",
    f"'tag {V1} 150 140'",
])


class TestCLI:
    """Tests for the reports and process-only commands."""

    @pytest.fixture(autouse=True)
    def isolated_env(self, tmp_path, monkeypatch):
        """No user config, no GITDAG_* overrides, logger level restored."""
        monkeypatch.setenv('HOME', str(tmp_path / 'home'))
        for key in [k for k in os.environ if k.startswith('GITDAG_')]:
            monkeypatch.delenv(key)
        logger = logging.getLogger('gitdag')
        level = logger.level
        yield
        logger.setLevel(level)

    @pytest.fixture
    def repo(self, tmp_path):
        repo_path = tmp_path / 'repo'
        (repo_path / '.git').mkdir(parents=True)
        return repo_path

    @pytest.fixture
    def fake_git(self, git_client):
        git_client.list_objects.return_value = LISTING
        git_client.commit_dependencies.side_effect = lambda repo, commit_hash: {
            C0: f"{C0}\n{T0} \n{B0} README.md",
            C1: f"{C1}\n{B1} data/big.bin",
        }[commit_hash]
        git_client.tag_references.return_value = f"{V1} refs/tags/v1.0\n{C1} refs/tags/v1.0^{{}}"
        with patch('gitdag.api.GitClient', return_value=git_client):
            yield git_client

    def invoke(self, *args):
        return CliRunner().invoke(cli, list(args))

    def test_reports_json(self, repo, fake_git):
        result = self.invoke('-r', str(repo), 'reports', '--format', 'json')

        assert result.exit_code == 0, result.output
        reports = json.loads(result.stdout)
        assert [r['report'] for r in reports] == ['commits', 'trees', 'blobs']
        commits = reports[0]
        assert commits['total_count'] == 2
        assert commits['largest_contributing']['hash'] == C1
        assert commits['largest_contributing']['size_on_disk'] == 2048 + 140
        blobs = reports[2]
        assert blobs['largest'][0] == {
            'index': 1, 'hash': B1, 'size_on_disk': 2048, 'path': 'data/big.bin'
        }
        fake_git.tag_references.assert_called_once()

    def test_reports_single_section(self, repo, fake_git):
        """A selector flag limits output and skips tag resolution."""
        result = self.invoke('-r', str(repo), 'reports', '--blobs', '--format', 'jsonl')

        assert result.exit_code == 0, result.output
        lines = result.stdout.strip().splitlines()
        assert len(lines) == 1
        assert json.loads(lines[0])['report'] == 'blobs'
        fake_git.tag_references.assert_not_called()

    def test_reports_commits_and_trees(self, repo, fake_git):
        result = self.invoke('-r', str(repo), 'reports', '-c', '-t', '--format', 'yaml')

        assert result.exit_code == 0, result.output
        reports = yaml.safe_load(result.stdout)
        assert [r['report'] for r in reports] == ['commits', 'trees']

    def test_reports_table(self, repo, fake_git):
        result = self.invoke('-r', str(repo), 'reports', '--all')

        assert result.exit_code == 0, result.output
        assert "Commit Report" in result.output
        assert "Tree Report" in result.output
        assert "Blob Report" in result.output
        assert "data/big.bin" in result.output

    def test_format_from_env(self, repo, fake_git, monkeypatch):
        monkeypatch.setenv('GITDAG_FORMAT', 'jsonl')
        result = self.invoke('-r', str(repo), 'reports', '--trees')

        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)['report'] == 'trees'

    def test_save_deps(self, repo, fake_git, tmp_path):
        cache_path = tmp_path / 'deps.txt'

        result = self.invoke('-r', str(repo), 'reports', '-b', '-f', 'json',
                             '--save-deps', str(cache_path))
        assert result.exit_code == 0, result.output
        assert cache_path.is_file()
        assert fake_git.commit_dependencies.call_count == 2

        result = self.invoke('-r', str(repo), 'reports', '-b', '-f', 'json',
                             '--save-deps', str(cache_path))
        assert result.exit_code == 0, result.output
        assert fake_git.commit_dependencies.call_count == 2

    def test_process_only_defaults_to_all(self, repo, fake_git):
        result = self.invoke('-r', str(repo), 'process-only')

        assert result.exit_code == 0, result.output
        assert fake_git.commit_dependencies.call_count == 2
        fake_git.tag_references.assert_called_once()
        assert result.stdout == ""

    def test_process_only_labels(self, repo, fake_git):
        result = self.invoke('-r', str(repo), 'process-only', '--labels')

        assert result.exit_code == 0, result.output
        fake_git.commit_dependencies.assert_not_called()
        fake_git.tag_references.assert_called_once()

    def test_process_only_commits(self, repo, fake_git, tmp_path):
        cache_path = tmp_path / 'deps.txt'
        result = self.invoke('-r', str(repo), 'process-only', '--commits',
                             '--save-deps', str(cache_path), '--workers', '2')

        assert result.exit_code == 0, result.output
        fake_git.tag_references.assert_not_called()
        assert cache_path.is_file()

    def test_verbose_shows_progress(self, repo, fake_git):
        result = self.invoke('-r', str(repo), '-v', 'process-only', '-c')

        assert result.exit_code == 0
        assert "Processing objects..." in result.output
        assert "Progress: 100% (2 of 2)" in result.output
        assert logging.getLogger('gitdag').level == logging.DEBUG

    def test_git_failure_exit_code(self, repo, fake_git):
        fake_git.list_objects.side_effect = GitCommandError("listing failed", stderr="fatal")

        result = self.invoke('-r', str(repo), 'reports')

        assert result.exit_code == GIT_ERROR

    def test_unreadable_cache_exit_code(self, repo, fake_git, tmp_path):
        cache_path = tmp_path / 'deps.txt'
        cache_path.write_bytes(b";\n\xff\n;\n")

        result = self.invoke('-r', str(repo), 'process-only', '-s', str(cache_path))

        assert result.exit_code == CACHE_ERROR

    def test_keyboard_interrupt_exit_code(self, repo, fake_git):
        fake_git.list_objects.side_effect = KeyboardInterrupt

        result = self.invoke('-r', str(repo), 'process-only')

        assert result.exit_code == 130

    def test_invalid_config_exit_code(self, repo, tmp_path):
        config_path = tmp_path / 'bad.json'
        config_path.write_text(json.dumps({'reports': {'top_blobs': -1}}))

        result = self.invoke('-r', str(repo), '--config', str(config_path), 'reports')

        assert result.exit_code == CONFIG_ERROR

    def test_not_a_git_repository(self, tmp_path):
        plain = tmp_path / 'plain'
        plain.mkdir()

        result = self.invoke('-r', str(plain), 'reports')

        assert result.exit_code == 2
        assert "not a git repository" in result.output

    def test_missing_repo_option(self):
        result = self.invoke('reports')
        assert result.exit_code == 2

    def test_workers_must_be_positive(self, repo):
        result = self.invoke('-r', str(repo), 'reports', '--workers', '0')
        assert result.exit_code == 2

    def test_version(self):
        result = self.invoke('--version')
        assert result.exit_code == 0
        assert "gitdag" in result.output
