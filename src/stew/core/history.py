"""Building commit histories and pushing them.

The builder turns one content batch into one commit on a branch of an
in-memory repository, then pushes that branch. Callers thread the returned
commit id (the cursor) into later batches; every forked branch starts from
the cursor it is given, never from whatever happens to be checked out.
"""

import logging
import os
from pathlib import Path

from stew.core.errors import GitBuildError
from stew.core.git.abc import Credentials, GitTransport, push_refspecs
from stew.core.git.memory import EMPTY_CURSOR, MemoryRepository, Signature

REMOTE_NAME = "origin"


def init_repository(remote_url: str, *, main_branch: str) -> MemoryRepository:
    """Create an empty in-memory repository with ``origin`` pointing at ``remote_url``."""
    repo = MemoryRepository(default_branch=main_branch)
    repo.add_remote(REMOTE_NAME, remote_url)
    return repo


def copy_tree(source: Path, repo: MemoryRepository) -> list[str]:
    """Copy every file under ``source`` into the working tree of ``repo``.

    Existing files at the same paths are overwritten; other files are left
    alone.

    Returns:
        Relative paths of the copied files, in walk order

    Raises:
        GitBuildError: If ``source`` is not a directory or cannot be read
    """
    if not source.is_dir():
        msg = f"Source path {source} is not a directory"
        raise GitBuildError(msg)

    def on_error(e: OSError) -> None:
        raise GitBuildError(f"Failed to walk {source}: {e}") from e

    copied: list[str] = []
    for dirpath, dirnames, filenames in os.walk(source, onerror=on_error):
        dirnames.sort()
        current = Path(dirpath)
        rel_dir = current.relative_to(source).as_posix()
        if rel_dir != ".":
            repo.mkdir_all(rel_dir)
        for filename in sorted(filenames):
            file_path = current / filename
            rel_path = file_path.relative_to(source).as_posix()
            try:
                data = file_path.read_bytes()
            except OSError as e:
                raise GitBuildError(f"Failed to read {file_path}: {e}") from e
            repo.write_file(rel_path, data, executable=os.access(file_path, os.X_OK))
            copied.append(rel_path)
    return copied


class CommitHistoryBuilder:
    """Applies content batches to one in-memory repository and pushes them."""

    def __init__(
        self,
        repo: MemoryRepository,
        transport: GitTransport,
        *,
        signature: Signature,
        credentials: Credentials,
        logger: logging.Logger,
    ) -> None:
        self._repo = repo
        self._transport = transport
        self._signature = signature
        self._credentials = credentials
        self._logger = logger

    @property
    def repo(self) -> MemoryRepository:
        return self._repo

    def apply_batch(self, from_commit: str, branch: str, source: Path, message: str) -> str:
        """Commit the files under ``source`` onto ``branch`` and push it.

        Args:
            from_commit: Commit to fork ``branch`` from, or EMPTY_CURSOR
            branch: Target branch; the main branch is extended in place
            source: Directory whose files are layered onto the branch
            message: Commit message

        Returns:
            Id of the new commit
        """
        self._select_branch(from_commit, branch)
        copied = copy_tree(source, self._repo)
        self._logger.debug("Copied files branch=%s count=%d source=%s", branch, len(copied), source)

        self._repo.stage_all()
        commit = self._repo.commit(message, self._signature)
        self._logger.info("Pushing branch=%s commit=%s", branch, commit)
        self._transport.push(self._repo, REMOTE_NAME, push_refspecs(branch), self._credentials)
        return commit

    def _select_branch(self, from_commit: str, branch: str) -> None:
        repo = self._repo
        if branch == repo.default_branch:
            if repo.current_branch != branch:
                repo.checkout(branch, force=True)
            return

        if from_commit == EMPTY_CURSOR:
            # Nothing to fork from: start the branch unborn on an empty tree.
            if repo.branch_head(branch) is not None:
                repo.delete_branch(branch)
            repo.checkout(branch, force=True)
            return

        repo.create_branch(branch, from_commit, force=True)
        repo.checkout(branch, force=True)
