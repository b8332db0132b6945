"""Fake git transport for testing.

FakeGitTransport records every push together with a snapshot of the files
each pushed ref pointed at, so tests can assert on what the remote received.
"""

from dataclasses import dataclass

from stew.core.errors import GitBuildError
from stew.core.git.abc import Credentials, GitTransport
from stew.core.git.memory import MemoryRepository


@dataclass(frozen=True)
class PushRecord:
    """A single recorded push."""

    remote_url: str | None
    refspecs: list[str]
    credentials: Credentials
    commits: dict[str, str]  # destination ref -> commit id
    files: dict[str, dict[str, bytes]]  # destination ref -> tree contents


class FakeGitTransport(GitTransport):
    """In-memory fake implementation of the git transport.

    This class has NO public setup methods. All state is provided via
    constructor or captured during execution.
    """

    def __init__(self, *, fail_branches: set[str] | None = None) -> None:
        """Create FakeGitTransport.

        Args:
            fail_branches: Branch names whose push raises GitBuildError
        """
        self._fail_branches = fail_branches or set()
        self._pushes: list[PushRecord] = []

    @property
    def pushes(self) -> list[PushRecord]:
        """Read-only access to recorded pushes for test assertions."""
        return self._pushes

    @property
    def remote_refs(self) -> dict[str, str]:
        """Latest commit received for each destination ref."""
        refs: dict[str, str] = {}
        for record in self._pushes:
            refs.update(record.commits)
        return refs

    def push(
        self,
        repo: MemoryRepository,
        remote: str,
        refspecs: list[str],
        credentials: Credentials,
    ) -> None:
        commits: dict[str, str] = {}
        files: dict[str, dict[str, bytes]] = {}
        for spec in refspecs:
            src, dst = spec.split(":", 1)
            branch = src.removeprefix("refs/heads/")
            if branch in self._fail_branches:
                msg = f"Push of {spec} rejected"
                raise GitBuildError(msg)
            head = repo.branch_head(branch)
            if head is None:
                msg = f"src refspec {src} does not match any ref"
                raise GitBuildError(msg)
            commits[dst] = head
            files[dst] = repo.commit_files(head)

        self._pushes.append(
            PushRecord(
                remote_url=repo.remote_url(remote),
                refspecs=list(refspecs),
                credentials=credentials,
                commits=commits,
                files=files,
            )
        )
