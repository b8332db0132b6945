"""In-memory git repository with a working tree.

dulwich's MemoryRepo keeps objects and refs in memory but is always bare.
MemoryRepository adds the pieces a commit pipeline needs on top of it: a
checked-out branch, a dict-backed working tree, an index built by staging,
and remotes registered in the repository config.
"""

import posixpath
import stat
import time
from collections.abc import Iterator
from dataclasses import dataclass

from dulwich.index import commit_tree
from dulwich.objects import Blob, Commit
from dulwich.repo import MemoryRepo

from stew.core.errors import GitBuildError

EMPTY_CURSOR = "0" * 40

FILE_MODE = 0o100644
EXECUTABLE_MODE = 0o100755


def branch_ref(branch: str) -> bytes:
    """Fully-qualified ref name for a local branch."""
    return f"refs/heads/{branch}".encode()


def normalize_path(path: str) -> str:
    """Normalize a working-tree path to a relative posix path.

    Raises:
        GitBuildError: If the path is empty or escapes the working tree
    """
    normalized = posixpath.normpath(path.replace("\\", "/")).lstrip("/")
    if normalized in ("", ".") or normalized == ".." or normalized.startswith("../"):
        msg = f"Invalid working tree path: {path!r}"
        raise GitBuildError(msg)
    return normalized


@dataclass(frozen=True)
class WorktreeFile:
    """A file in the working tree."""

    data: bytes
    mode: int = FILE_MODE


@dataclass(frozen=True)
class Signature:
    """Identity recorded as author and committer of a commit."""

    name: str
    email: str

    def to_bytes(self) -> bytes:
        return f"{self.name} <{self.email}>".encode()


class MemoryRepository:
    """A git repository whose objects, refs and working tree live in memory.

    The repository starts with ``default_branch`` checked out and unborn.
    Nothing is ever written to disk.
    """

    def __init__(self, default_branch: str = "main") -> None:
        self._repo = MemoryRepo()
        self._repo.refs.set_symbolic_ref(b"HEAD", branch_ref(default_branch))
        self._default_branch = default_branch
        self._current_branch = default_branch
        self._worktree: dict[str, WorktreeFile] = {}
        self._directories: set[str] = set()
        self._index: dict[str, tuple[bytes, int]] = {}

    @property
    def repo(self) -> MemoryRepo:
        """Underlying dulwich repository (used by the push transport)."""
        return self._repo

    @property
    def default_branch(self) -> str:
        return self._default_branch

    @property
    def current_branch(self) -> str:
        return self._current_branch

    # ------------------------------------------------------------------
    # Remotes
    # ------------------------------------------------------------------

    def add_remote(self, name: str, url: str) -> None:
        """Register a remote in the repository config."""
        config = self._repo.get_config()
        section = (b"remote", name.encode())
        config.set(section, b"url", url.encode())
        config.set(section, b"fetch", f"+refs/heads/*:refs/remotes/{name}/*".encode())

    def remote_url(self, name: str) -> str | None:
        config = self._repo.get_config()
        try:
            return config.get((b"remote", name.encode()), b"url").decode()
        except KeyError:
            return None

    # ------------------------------------------------------------------
    # Branches
    # ------------------------------------------------------------------

    def branch_head(self, branch: str) -> str | None:
        """Commit a branch points at, or None if the branch is unborn or missing."""
        ref = branch_ref(branch)
        if ref not in self._repo.refs:
            return None
        return self._repo.refs[ref].decode("ascii")

    def list_branches(self) -> list[str]:
        return sorted(name.decode() for name in self._repo.refs.keys(base=b"refs/heads"))

    def create_branch(self, branch: str, commit: str, *, force: bool) -> None:
        """Point ``branch`` at ``commit``.

        Args:
            branch: Branch name
            commit: Commit id the branch should point at
            force: Reset the branch if it already exists

        Raises:
            GitBuildError: If the commit is unknown, or the branch exists and
                force is False
        """
        commit_id = commit.encode("ascii")
        if commit_id not in self._repo.object_store:
            msg = f"Cannot create branch {branch!r}: unknown commit {commit}"
            raise GitBuildError(msg)
        if self.branch_head(branch) is not None and not force:
            msg = f"Branch {branch!r} already exists"
            raise GitBuildError(msg)
        self._repo.refs[branch_ref(branch)] = commit_id

    def delete_branch(self, branch: str) -> None:
        """Remove a branch ref. Deleting the checked-out branch leaves it unborn."""
        if self.branch_head(branch) is None:
            msg = f"Branch {branch!r} does not exist"
            raise GitBuildError(msg)
        del self._repo.refs[branch_ref(branch)]

    def checkout(self, branch: str, *, force: bool) -> None:
        """Check out ``branch``, replacing the working tree with its tip.

        An unborn branch checks out as an empty working tree.

        Raises:
            GitBuildError: If the working tree has uncommitted changes and
                force is False
        """
        if not force and self.has_uncommitted_changes():
            msg = f"Cannot check out {branch!r}: working tree has uncommitted changes"
            raise GitBuildError(msg)
        self._repo.refs.set_symbolic_ref(b"HEAD", branch_ref(branch))
        self._current_branch = branch
        head = self.branch_head(branch)
        self._worktree = {}
        self._directories = set()
        if head is not None:
            for path, data, mode in self._iter_commit_files(head):
                self._worktree[path] = WorktreeFile(data=data, mode=mode)
        self._index = self._snapshot(self._worktree)

    # ------------------------------------------------------------------
    # Working tree
    # ------------------------------------------------------------------

    def mkdir_all(self, path: str) -> None:
        """Ensure a directory and its parents exist in the working tree."""
        normalized = normalize_path(path)
        parts = normalized.split("/")
        for i in range(1, len(parts) + 1):
            self._directories.add("/".join(parts[:i]))

    def write_file(self, path: str, data: bytes, *, executable: bool = False) -> None:
        """Create or overwrite a working tree file."""
        normalized = normalize_path(path)
        parent = posixpath.dirname(normalized)
        if parent:
            self.mkdir_all(parent)
        mode = EXECUTABLE_MODE if executable else FILE_MODE
        self._worktree[normalized] = WorktreeFile(data=data, mode=mode)

    def remove_file(self, path: str) -> None:
        normalized = normalize_path(path)
        if normalized not in self._worktree:
            msg = f"No such file in working tree: {path}"
            raise GitBuildError(msg)
        del self._worktree[normalized]

    def read_file(self, path: str) -> bytes:
        normalized = normalize_path(path)
        if normalized not in self._worktree:
            msg = f"No such file in working tree: {path}"
            raise GitBuildError(msg)
        return self._worktree[normalized].data

    def files(self) -> dict[str, bytes]:
        """Working tree contents keyed by relative path."""
        return {path: f.data for path, f in sorted(self._worktree.items())}

    def directories(self) -> set[str]:
        return set(self._directories)

    def has_uncommitted_changes(self) -> bool:
        head = self.branch_head(self._current_branch)
        committed: dict[str, tuple[bytes, int]] = {}
        if head is not None:
            committed = {
                path: (Blob.from_string(data).id, mode)
                for path, data, mode in self._iter_commit_files(head)
            }
        return self._snapshot(self._worktree) != committed

    # ------------------------------------------------------------------
    # Staging and committing
    # ------------------------------------------------------------------

    def stage_all(self) -> None:
        """Stage every working tree change, including deletions."""
        for f in self._worktree.values():
            self._repo.object_store.add_object(Blob.from_string(f.data))
        self._index = self._snapshot(self._worktree)

    def commit(self, message: str, signature: Signature, *, timestamp: int | None = None) -> str:
        """Commit the index onto the current branch.

        The commit is created even when the index matches the parent tree.

        Returns:
            The new commit id
        """
        blobs = [(path.encode(), sha, mode) for path, (sha, mode) in sorted(self._index.items())]
        tree_id = commit_tree(self._repo.object_store, blobs)

        ref = branch_ref(self._current_branch)
        parent = self.branch_head(self._current_branch)
        when = int(time.time()) if timestamp is None else timestamp
        identity = signature.to_bytes()

        commit = Commit()
        commit.tree = tree_id
        commit.parents = [parent.encode("ascii")] if parent is not None else []
        commit.author = commit.committer = identity
        commit.author_time = commit.commit_time = when
        commit.author_timezone = commit.commit_timezone = 0
        commit.encoding = b"UTF-8"
        commit.message = message.encode("utf-8")
        self._repo.object_store.add_object(commit)
        self._repo.refs[ref] = commit.id
        return commit.id.decode("ascii")

    # ------------------------------------------------------------------
    # History inspection
    # ------------------------------------------------------------------

    def commit_parents(self, commit: str) -> list[str]:
        return [p.decode("ascii") for p in self._get_commit(commit).parents]

    def commit_message(self, commit: str) -> str:
        return self._get_commit(commit).message.decode("utf-8")

    def commit_author(self, commit: str) -> str:
        return self._get_commit(commit).author.decode("utf-8")

    def commit_files(self, commit: str) -> dict[str, bytes]:
        """Full file contents of the tree recorded by ``commit``."""
        return {path: data for path, data, _ in sorted(self._iter_commit_files(commit))}

    def _get_commit(self, commit: str) -> Commit:
        try:
            obj = self._repo.object_store[commit.encode("ascii")]
        except KeyError:
            raise GitBuildError(f"Unknown commit {commit}") from None
        if not isinstance(obj, Commit):
            msg = f"{commit} is not a commit"
            raise GitBuildError(msg)
        return obj

    def _iter_commit_files(self, commit: str) -> Iterator[tuple[str, bytes, int]]:
        yield from self._iter_tree(self._get_commit(commit).tree, "")

    def _iter_tree(self, tree_id: bytes, prefix: str) -> Iterator[tuple[str, bytes, int]]:
        tree = self._repo.object_store[tree_id]
        for entry in tree.items():
            name = entry.path.decode("utf-8")
            path = f"{prefix}/{name}" if prefix else name
            if stat.S_ISDIR(entry.mode):
                yield from self._iter_tree(entry.sha, path)
            else:
                yield path, self._repo.object_store[entry.sha].data, entry.mode

    @staticmethod
    def _snapshot(worktree: dict[str, WorktreeFile]) -> dict[str, tuple[bytes, int]]:
        return {path: (Blob.from_string(f.data).id, f.mode) for path, f in worktree.items()}
