"""Integration tests for the CLI."""

import json
import os
import subprocess
import sys


def run_cli(*args, home=None, cwd=None):
    env = {k: v for k, v in os.environ.items() if not k.startswith("GITLAB_SEARCH_")}
    if home is not None:
        env["HOME"] = str(home)
    return subprocess.run(
        [sys.executable, "-m", "gitlab_search.cli", *args],
        capture_output=True,
        text=True,
        env=env,
        cwd=cwd,
    )


def test_cli_help():
    """Test that --help works."""
    result = run_cli("--help")
    assert result.returncode == 0
    assert "search" in result.stdout
    assert "setup" in result.stdout


def test_cli_version():
    """Test that --version works."""
    result = run_cli("--version")
    assert result.returncode == 0
    assert "gitlab-search" in result.stdout


def test_search_help_lists_options():
    result = run_cli("search", "--help")
    assert result.returncode == 0
    for option in ("--groups", "--filename", "--extension", "--path", "--archive", "--concurrency", "--protocol"):
        assert option in result.stdout


def test_search_without_token_fails_before_any_request(tmp_path):
    """Missing token is a fatal precondition."""
    result = run_cli("search", "TODO", "--domain", "gitlab.invalid", home=tmp_path, cwd=tmp_path)
    assert result.returncode == 1
    assert "access token is required" in result.stderr


def test_search_rejects_blank_term(tmp_path):
    result = run_cli("search", "   ", home=tmp_path, cwd=tmp_path)
    assert result.returncode == 1
    assert "Search term required" in result.stderr


def test_search_rejects_unknown_archive_mode(tmp_path):
    result = run_cli("search", "TODO", "--archive", "sometimes", home=tmp_path, cwd=tmp_path)
    assert result.returncode != 0


def test_setup_writes_config(tmp_path):
    """Test that setup persists settings to the rc file."""
    target = tmp_path / "conf"
    result = run_cli(
        "setup",
        "--token", "s3cret",
        "--domain", "git.example.com",
        "--protocol", "http",
        "--concurrency", "4",
        "--ignore-ssl",
        "--dir", str(target),
        home=tmp_path,
    )
    assert result.returncode == 0
    data = json.loads((target / ".gitlab-searchrc").read_text())
    assert data == {
        "domain": "git.example.com",
        "token": "s3cret",
        "ignoreSSL": True,
        "protocol": "http",
        "concurrency": 4,
    }
