"""Tests for the git and mercurial fetchers at the subprocess boundary."""

import subprocess
from pathlib import Path
from typing import List, Optional

import pytest

from gopack.core.errors import ResolutionCancelled, RetrievalError
from gopack.scm import GitFetcher, HgFetcher
from gopack.scm import base as scm_base


class _FakePopen:
    """Stand-in for subprocess.Popen recording every command."""

    calls: List[List[str]] = []
    returncode_for_next = 0
    hang = False

    def __init__(self, cmd, cwd=None, stdout=None, stderr=None, text=None) -> None:
        type(self).calls.append(list(cmd))
        self.cmd = cmd
        self.returncode: Optional[int] = None
        self.killed = False

    def communicate(self, timeout=None):
        if type(self).hang and timeout is not None and not self.killed:
            raise subprocess.TimeoutExpired(self.cmd, timeout)
        self.returncode = -9 if self.killed else type(self).returncode_for_next
        stderr = "fatal: boom" if self.returncode else ""
        return "ok\n", stderr

    def kill(self) -> None:
        self.killed = True


@pytest.fixture
def fake_popen(monkeypatch: pytest.MonkeyPatch):
    _FakePopen.calls = []
    _FakePopen.returncode_for_next = 0
    _FakePopen.hang = False
    monkeypatch.setattr(scm_base.subprocess, "Popen", _FakePopen)
    return _FakePopen


def test_git_clone_command(fake_popen, tmp_path: Path) -> None:
    target = tmp_path / "src" / "example.org" / "foo"

    GitFetcher().retrieve("https://example.org/foo", target, update=False)

    assert fake_popen.calls == [
        ["git", "clone", "-q", "--", "https://example.org/foo", str(target)]
    ]
    assert target.parent.is_dir()


def test_git_update_fetches_existing_copy(fake_popen, tmp_path: Path) -> None:
    GitFetcher().retrieve("https://example.org/foo", tmp_path, update=True)

    assert fake_popen.calls == [
        ["git", "-C", str(tmp_path), "fetch", "--all", "--tags", "-q"]
    ]


def test_git_branch_checkout_fast_forwards(fake_popen, tmp_path: Path) -> None:
    GitFetcher().checkout(tmp_path, "branch", "dev")

    assert fake_popen.calls == [
        ["git", "-C", str(tmp_path), "checkout", "-q", "dev"],
        ["git", "-C", str(tmp_path), "merge", "-q", "--ff-only", "origin/dev"],
    ]


def test_git_tag_checkout(fake_popen, tmp_path: Path) -> None:
    GitFetcher().checkout(tmp_path, "tag", "v1.2.0")

    assert fake_popen.calls == [["git", "-C", str(tmp_path), "checkout", "-q", "v1.2.0"]]


def test_hg_commands(fake_popen, tmp_path: Path) -> None:
    fetcher = HgFetcher()
    fetcher.retrieve("https://hg.example.org/repo", tmp_path / "repo", update=False)
    fetcher.retrieve("https://hg.example.org/repo", tmp_path / "repo", update=True)
    fetcher.checkout(tmp_path / "repo", "commit", "abc")

    repo = str(tmp_path / "repo")
    assert fake_popen.calls == [
        ["hg", "clone", "-q", "--", "https://hg.example.org/repo", repo],
        ["hg", "pull", "-q", "-R", repo],
        ["hg", "update", "-q", "-R", repo, "-r", "abc"],
    ]


def test_failure_raises_retrieval_error(fake_popen, tmp_path: Path) -> None:
    fake_popen.returncode_for_next = 128

    with pytest.raises(RetrievalError, match="exit code 128"):
        GitFetcher().retrieve("https://example.org/foo", tmp_path / "foo", update=False)


def test_missing_client_raises_retrieval_error(monkeypatch, tmp_path: Path) -> None:
    def _missing(*args, **kwargs):
        raise FileNotFoundError("git")

    monkeypatch.setattr(scm_base.subprocess, "Popen", _missing)

    with pytest.raises(RetrievalError, match="Could not run git"):
        GitFetcher().checkout(tmp_path, "commit", "abc")


def test_timeout_kills_command(fake_popen, tmp_path: Path) -> None:
    fake_popen.hang = True

    with pytest.raises(RetrievalError, match="timed out"):
        GitFetcher(timeout=0).retrieve("https://example.org/foo", tmp_path / "foo", update=False)


def test_cancel_before_start_skips_command(fake_popen, tmp_path: Path) -> None:
    fetcher = GitFetcher()
    fetcher.cancel_event.set()

    with pytest.raises(ResolutionCancelled):
        fetcher.checkout(tmp_path, "tag", "v1")
    assert fake_popen.calls == []


def test_cancel_aborts_running_command(fake_popen, tmp_path: Path) -> None:
    fake_popen.hang = True
    fetcher = GitFetcher(timeout=60)

    real_communicate = _FakePopen.communicate

    def _communicate(self, timeout=None):
        fetcher.cancel_event.set()
        return real_communicate(self, timeout)

    fake_popen.communicate = _communicate
    try:
        with pytest.raises(ResolutionCancelled):
            fetcher.retrieve("https://example.org/foo", tmp_path / "foo", update=False)
    finally:
        fake_popen.communicate = real_communicate
