"""Abstract base class for forge (Gitea) operations."""

from abc import ABC, abstractmethod

from stew.core.forge.types import ForgeRepository, PullRequest


class Forge(ABC):
    """Abstract interface for the forge REST API.

    All implementations (real and fake) must implement this interface.
    """

    @abstractmethod
    def probe(self) -> None:
        """Check that the forge accepts connections.

        Any HTTP response counts as reachable; the status is not inspected.

        Raises:
            ForgeUnavailableError: If no connection could be made
        """
        ...

    @abstractmethod
    def submit_setup_form(self, form: dict[str, str]) -> None:
        """Submit the one-time initial setup form to ``POST /``.

        Args:
            form: URL-encoded form fields

        Raises:
            ForgeApiError: If the forge does not answer 200
            ForgeUnavailableError: If no connection could be made
        """
        ...

    @abstractmethod
    def authenticate(self) -> str:
        """Connect to the API and verify the admin credentials.

        Returns:
            The forge's reported version

        Raises:
            ForgeAuthError: If the credentials are rejected
            ForgeUnavailableError: If no connection could be made
            ForgeApiError: On any other unexpected status
        """
        ...

    @abstractmethod
    def create_repository(self, name: str, *, default_branch: str) -> ForgeRepository:
        """Create a repository owned by the authenticated user.

        Raises:
            ForgeApiError: If the forge rejects the request (including when
                the repository already exists)
        """
        ...

    @abstractmethod
    def create_pull_request(
        self,
        owner: str,
        repo: str,
        *,
        head: str,
        base: str,
        title: str,
        body: str,
    ) -> PullRequest:
        """Open a pull request merging ``head`` into ``base``.

        Raises:
            ForgeApiError: If the forge rejects the request
        """
        ...

    def close(self) -> None:
        """Release any held connections."""
