"""Tests for the in-memory git repository."""

import pytest

from stew.core.errors import GitBuildError
from stew.core.git.memory import MemoryRepository, Signature, normalize_path

SIGNATURE = Signature(name="stew", email="stew@example.com")


def test_new_repository_has_unborn_default_branch() -> None:
    """Test that a fresh repository has main checked out and no commits."""
    repo = MemoryRepository(default_branch="main")

    assert repo.current_branch == "main"
    assert repo.branch_head("main") is None
    assert repo.list_branches() == []
    assert repo.files() == {}


def test_add_remote_registers_url() -> None:
    """Test that remotes are stored in the repository config."""
    repo = MemoryRepository()

    repo.add_remote("origin", "http://forge/stew/demo.git")

    assert repo.remote_url("origin") == "http://forge/stew/demo.git"
    assert repo.remote_url("upstream") is None


def test_first_commit_has_no_parent() -> None:
    """Test committing onto an unborn branch creates a root commit."""
    repo = MemoryRepository()
    repo.write_file("README.md", b"hello\n")
    repo.stage_all()

    commit = repo.commit("init", SIGNATURE)

    assert repo.branch_head("main") == commit
    assert repo.commit_parents(commit) == []
    assert repo.commit_message(commit) == "init"
    assert repo.commit_author(commit) == "stew <stew@example.com>"
    assert repo.commit_files(commit) == {"README.md": b"hello\n"}


def test_second_commit_chains_onto_branch_tip() -> None:
    """Test that commits extend the checked-out branch."""
    repo = MemoryRepository()
    repo.write_file("a.txt", b"a")
    repo.stage_all()
    first = repo.commit("first", SIGNATURE)

    repo.write_file("nested/dir/b.txt", b"b")
    repo.stage_all()
    second = repo.commit("second", SIGNATURE)

    assert repo.commit_parents(second) == [first]
    assert repo.commit_files(second) == {"a.txt": b"a", "nested/dir/b.txt": b"b"}


def test_commit_without_changes_still_creates_commit() -> None:
    """Test that no empty-commit guard is applied."""
    repo = MemoryRepository()
    repo.write_file("a.txt", b"a")
    repo.stage_all()
    first = repo.commit("first", SIGNATURE)

    repo.stage_all()
    second = repo.commit("again", SIGNATURE)

    assert second != first
    assert repo.commit_parents(second) == [first]
    assert repo.commit_files(second) == repo.commit_files(first)


def test_unstaged_changes_are_not_committed() -> None:
    """Test that commit records the index, not the working tree."""
    repo = MemoryRepository()
    repo.write_file("a.txt", b"a")
    repo.stage_all()
    repo.write_file("b.txt", b"b")

    commit = repo.commit("only a", SIGNATURE)

    assert repo.commit_files(commit) == {"a.txt": b"a"}
    assert repo.has_uncommitted_changes()


def test_stage_all_includes_deletions() -> None:
    """Test that removing a file and staging drops it from the next commit."""
    repo = MemoryRepository()
    repo.write_file("a.txt", b"a")
    repo.write_file("b.txt", b"b")
    repo.stage_all()
    repo.commit("both", SIGNATURE)

    repo.remove_file("b.txt")
    repo.stage_all()
    commit = repo.commit("drop b", SIGNATURE)

    assert repo.commit_files(commit) == {"a.txt": b"a"}


def test_executable_mode_is_recorded() -> None:
    """Test that executable files keep their mode through checkout."""
    repo = MemoryRepository()
    repo.write_file("run.sh", b"#!/bin/sh\n", executable=True)
    repo.stage_all()
    commit = repo.commit("script", SIGNATURE)

    repo.create_branch("copy", commit, force=False)
    repo.checkout("copy", force=True)

    assert not repo.has_uncommitted_changes()
    repo.write_file("run.sh", b"#!/bin/sh\n")
    assert repo.has_uncommitted_changes()


def test_checkout_replaces_working_tree_with_branch_tip() -> None:
    """Test that checkout loads exactly the files of the target commit."""
    repo = MemoryRepository()
    repo.write_file("a.txt", b"a")
    repo.stage_all()
    base = repo.commit("base", SIGNATURE)
    repo.write_file("later.txt", b"later")
    repo.stage_all()
    repo.commit("later", SIGNATURE)

    repo.create_branch("feature", base, force=False)
    repo.checkout("feature", force=True)

    assert repo.current_branch == "feature"
    assert repo.files() == {"a.txt": b"a"}


def test_checkout_without_force_refuses_dirty_tree() -> None:
    """Test that uncommitted changes block a non-forced checkout."""
    repo = MemoryRepository()
    repo.write_file("a.txt", b"a")
    repo.stage_all()
    base = repo.commit("base", SIGNATURE)
    repo.create_branch("feature", base, force=False)
    repo.write_file("dirty.txt", b"x")

    with pytest.raises(GitBuildError, match="uncommitted changes"):
        repo.checkout("feature", force=False)

    repo.checkout("feature", force=True)
    assert repo.files() == {"a.txt": b"a"}


def test_checkout_unborn_branch_has_empty_tree() -> None:
    """Test that checking out a branch without commits empties the tree."""
    repo = MemoryRepository()
    repo.write_file("a.txt", b"a")
    repo.stage_all()
    repo.commit("base", SIGNATURE)

    repo.checkout("orphan", force=True)
    repo.write_file("o.txt", b"o")
    repo.stage_all()
    commit = repo.commit("orphan root", SIGNATURE)

    assert repo.commit_parents(commit) == []
    assert repo.commit_files(commit) == {"o.txt": b"o"}
    assert repo.list_branches() == ["main", "orphan"]


def test_create_branch_requires_force_to_reset() -> None:
    """Test that an existing branch is only moved with force."""
    repo = MemoryRepository()
    repo.write_file("a.txt", b"a")
    repo.stage_all()
    first = repo.commit("first", SIGNATURE)
    repo.stage_all()
    second = repo.commit("second", SIGNATURE)
    repo.create_branch("feature", second, force=False)

    with pytest.raises(GitBuildError, match="already exists"):
        repo.create_branch("feature", first, force=False)

    repo.create_branch("feature", first, force=True)
    assert repo.branch_head("feature") == first


def test_create_branch_rejects_unknown_commit() -> None:
    """Test that branches cannot point at commits that do not exist."""
    repo = MemoryRepository()

    with pytest.raises(GitBuildError, match="unknown commit"):
        repo.create_branch("feature", "1" * 40, force=True)


def test_delete_branch() -> None:
    """Test deleting a branch ref."""
    repo = MemoryRepository()
    repo.write_file("a.txt", b"a")
    repo.stage_all()
    commit = repo.commit("first", SIGNATURE)
    repo.create_branch("feature", commit, force=False)

    repo.delete_branch("feature")

    assert repo.branch_head("feature") is None
    with pytest.raises(GitBuildError, match="does not exist"):
        repo.delete_branch("feature")


def test_mkdir_all_records_parents() -> None:
    """Test that directory creation includes intermediate directories."""
    repo = MemoryRepository()

    repo.mkdir_all("a/b/c")

    assert repo.directories() == {"a", "a/b", "a/b/c"}


def test_read_file_missing() -> None:
    """Test reading a path that is not in the working tree."""
    repo = MemoryRepository()

    with pytest.raises(GitBuildError, match="No such file"):
        repo.read_file("missing.txt")


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        ("a.txt", "a.txt"),
        ("./a/b.txt", "a/b.txt"),
        ("a//b/../c.txt", "a/c.txt"),
        ("a\\b.txt", "a/b.txt"),
    ],
)
def test_normalize_path(path: str, expected: str) -> None:
    """Test working tree path normalization."""
    assert normalize_path(path) == expected


@pytest.mark.parametrize("path", ["", ".", "..", "../outside.txt", "a/../../b"])
def test_normalize_path_rejects_escapes(path: str) -> None:
    """Test that paths outside the working tree are rejected."""
    with pytest.raises(GitBuildError, match="Invalid working tree path"):
        normalize_path(path)


def test_list_branches_returns_full_names() -> None:
    """Test that branch names are listed without the refs/heads prefix."""
    repo = MemoryRepository()
    repo.write_file("a.txt", b"a")
    repo.stage_all()
    commit = repo.commit("first", SIGNATURE)
    repo.create_branch("feature", commit, force=False)
    repo.create_branch("topic/foo", commit, force=False)

    assert repo.list_branches() == ["feature", "main", "topic/foo"]
