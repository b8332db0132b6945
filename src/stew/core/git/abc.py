"""Git push transport interface.

Architecture:
- GitTransport: Abstract base class defining the interface
- RealGitTransport: Production implementation pushing over smart HTTP via dulwich
- FakeGitTransport: In-memory implementation recording pushes for tests
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from stew.core.git.memory import MemoryRepository


@dataclass(frozen=True)
class Credentials:
    """HTTP basic auth credentials for the git transport."""

    username: str
    password: str


def push_refspecs(branch: str) -> list[str]:
    """Refspecs used to push a branch to its same-named remote branch.

    The short and fully-qualified source forms are both sent because forges
    differ in how they resolve the short form.
    """
    return [
        f"{branch}:refs/heads/{branch}",
        f"refs/heads/{branch}:refs/heads/{branch}",
    ]


class GitTransport(ABC):
    """Abstract interface for pushing an in-memory repository to a remote.

    All implementations (real and fake) must implement this interface.
    """

    @abstractmethod
    def push(
        self,
        repo: MemoryRepository,
        remote: str,
        refspecs: list[str],
        credentials: Credentials,
    ) -> None:
        """Push refs of ``repo`` to a configured remote.

        Args:
            repo: Repository holding the objects and refs to push
            remote: Name of a remote registered on ``repo`` (e.g. "origin")
            refspecs: ``src:dst`` refspecs to push
            credentials: Basic auth credentials for the remote

        Raises:
            GitBuildError: If the push fails or is rejected
        """
        ...
