"""Tests for FakeGitTransport test infrastructure."""

import pytest

from stew.core.errors import GitBuildError
from stew.core.git.abc import Credentials, push_refspecs
from stew.core.git.fake import FakeGitTransport
from stew.core.git.memory import MemoryRepository, Signature

CREDENTIALS = Credentials(username="stew", password="hunter22")


def _repo_with_commit() -> tuple[MemoryRepository, str]:
    repo = MemoryRepository()
    repo.add_remote("origin", "http://forge.test/stew/demo.git")
    repo.write_file("a.txt", b"a")
    repo.stage_all()
    return repo, repo.commit("init", Signature(name="stew", email="stew@example.com"))


def test_push_records_commit_and_files() -> None:
    """Test that a push snapshots the pushed ref."""
    repo, commit = _repo_with_commit()
    transport = FakeGitTransport()

    transport.push(repo, "origin", push_refspecs("main"), CREDENTIALS)

    record = transport.pushes[0]
    assert record.remote_url == "http://forge.test/stew/demo.git"
    assert record.commits == {"refs/heads/main": commit}
    assert record.files == {"refs/heads/main": {"a.txt": b"a"}}
    assert transport.remote_refs == {"refs/heads/main": commit}


def test_push_unknown_branch_fails() -> None:
    """Test that pushing a branch without commits fails like git does."""
    repo, _ = _repo_with_commit()
    transport = FakeGitTransport()

    with pytest.raises(GitBuildError, match="does not match any ref"):
        transport.push(repo, "origin", push_refspecs("nope"), CREDENTIALS)

    assert transport.pushes == []


def test_push_configured_failure() -> None:
    """Test configured push rejection."""
    repo, _ = _repo_with_commit()
    transport = FakeGitTransport(fail_branches={"main"})

    with pytest.raises(GitBuildError, match="rejected"):
        transport.push(repo, "origin", push_refspecs("main"), CREDENTIALS)


def test_push_refspecs_short_and_qualified() -> None:
    """Test that both source forms map to the same remote branch."""
    assert push_refspecs("feature") == [
        "feature:refs/heads/feature",
        "refs/heads/feature:refs/heads/feature",
    ]
